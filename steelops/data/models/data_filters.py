from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field


class InventoryFilters(BaseModel):
    """Filters for the inventory data."""
    category: Optional[str | list[str]] = Field(default=None, description="Category filter (single category or list of categories)")
    status: Optional[str | list[str]] = Field(default=None, description="Status filter (single status or list of statuses)")
    search: Optional[str] = Field(default=None, description="Case-insensitive match on item id or name")


class ProductionFilters(BaseModel):
    """Filters for the production data."""
    start_date: Optional[date] = Field(default=None, description="First production date (inclusive)")
    end_date: Optional[date] = Field(default=None, description="Last production date (inclusive)")
    shift: Optional[str | list[str]] = Field(default=None, description="Shift filter (single shift or list of shifts)")
    limit: int = Field(default=30, ge=1, description="Maximum number of rows, newest first")


class MaterialRequestFilters(BaseModel):
    """Filters for the material request data."""
    user_id: Optional[str] = Field(default=None, description="Only requests raised by this user")
    status: Optional[str | list[str]] = Field(default=None, description="Status filter (single status or list of statuses)")
    request_id: Optional[str] = Field(default=None, description="Exact request id")


class VendorOrderFilters(BaseModel):
    """Filters for the vendor order data."""
    user_id: Optional[str] = Field(default=None, description="Only orders placed by this user")
    order_by: Literal["created_at_desc", "created_at_asc"] = Field(default="created_at_desc", description="Sort order")
