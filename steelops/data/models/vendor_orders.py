from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class VendorOrder(BaseModel):
    """Response model for vendor order lines."""
    id: str = Field(description="Row identifier")
    order_id: str = Field(description="Order identifier, one per cart line")
    product: str = Field(description="Product name")
    quantity: int = Field(description="Ordered quantity")
    unit: str = Field(description="Unit of measure")
    unit_price: float = Field(description="Price per unit at time of order")
    total_amount: float = Field(description="Line total (quantity * unit_price)")
    specifications: Optional[str] = Field(default=None, description="Buyer specifications")
    delivery_date: Optional[date] = Field(default=None, description="Requested delivery date")
    status: str = Field(description="Fulfilment status")
    payment_status: str = Field(description="Payment status")
    user_id: Optional[str] = Field(default=None, description="Ordering user")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")


class VendorOrderCreate(BaseModel):
    """One order row written after a confirmed payment."""
    order_id: str
    product: str
    quantity: int = Field(gt=0)
    unit: str = "tons"
    unit_price: float = Field(ge=0)
    total_amount: float = Field(ge=0)
    specifications: Optional[str] = None
    delivery_date: Optional[date] = None
    status: str = "Processing"
    payment_status: str = "Paid"
    user_id: str
