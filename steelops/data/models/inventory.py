from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

InventoryStatus = Literal["In Stock", "Low Stock", "Critical"]
InventoryCategory = Literal["Raw Materials", "Finished Products", "Tools & Equipment", "Spare Parts"]
InventoryUnit = Literal["tons", "kg", "pieces", "meters"]

INVENTORY_STATUSES = ["In Stock", "Low Stock", "Critical"]
INVENTORY_CATEGORIES = ["Raw Materials", "Finished Products", "Tools & Equipment", "Spare Parts"]
INVENTORY_UNITS = ["tons", "kg", "pieces", "meters"]


class InventoryItem(BaseModel):
    """Response model for inventory data."""
    id: str = Field(description="Row identifier")
    item_id: str = Field(description="Unique business item code, e.g. STL001")
    name: str = Field(description="Item name")
    category: str = Field(description="Item category")
    quantity: int = Field(description="Quantity on hand")
    unit: str = Field(description="Unit of measure")
    status: InventoryStatus = Field(description="Stock status")
    min_threshold: int = Field(default=100, description="Low stock threshold")
    max_threshold: int = Field(default=10000, description="Maximum stock level")
    location: Optional[str] = Field(default=None, description="Storage location")
    supplier: Optional[str] = Field(default=None, description="Supplier name")
    cost_per_unit: Optional[float] = Field(default=None, description="Cost per unit")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")


class InventoryItemCreate(BaseModel):
    """Payload for the add-item form."""
    item_id: str = Field(min_length=1, description="Unique business item code")
    name: str = Field(min_length=1, description="Item name")
    category: InventoryCategory = Field(description="Item category")
    quantity: int = Field(ge=0, description="Quantity on hand")
    unit: InventoryUnit = Field(default="tons", description="Unit of measure")
    status: InventoryStatus = Field(default="In Stock", description="Stock status")
    min_threshold: int = Field(default=100, ge=0, description="Low stock threshold")
    max_threshold: int = Field(default=10000, ge=0, description="Maximum stock level")
    location: Optional[str] = Field(default=None, description="Storage location")
    supplier: Optional[str] = Field(default=None, description="Supplier name")
    cost_per_unit: Optional[float] = Field(default=None, ge=0, description="Cost per unit")

    @model_validator(mode="after")
    def _thresholds_ordered(self) -> "InventoryItemCreate":
        if self.min_threshold > self.max_threshold:
            raise ValueError("Minimum threshold cannot exceed maximum threshold")
        return self


class InventoryItemUpdate(BaseModel):
    """Fields editable in place from the inventory table."""
    quantity: int = Field(ge=0, description="Quantity on hand")
    status: InventoryStatus = Field(description="Stock status")
