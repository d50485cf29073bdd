from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

Priority = Literal["Low", "Medium", "High", "Critical"]
RequestStatus = Literal["Pending", "Approved", "In Transit", "Delivered", "Rejected"]
RequestUnit = Literal["tons", "kg", "pieces"]

MATERIALS = ["Iron Ore", "Coal", "Limestone", "Dolomite", "Scrap Metal", "Alloy Elements"]
PRIORITIES = ["Low", "Medium", "High", "Critical"]
REQUEST_STATUSES = ["Pending", "Approved", "In Transit", "Delivered", "Rejected"]
REQUEST_UNITS = ["tons", "kg", "pieces"]


class MaterialRequest(BaseModel):
    """Response model for material procurement requests."""
    id: str = Field(description="Row identifier")
    request_id: str = Field(description="Human readable request id, e.g. REQ123456")
    material: str = Field(description="Requested material")
    quantity: int = Field(description="Requested quantity")
    unit: str = Field(description="Unit of measure")
    priority: Priority = Field(description="Request priority")
    status: RequestStatus = Field(description="Fulfilment status")
    request_date: date = Field(description="Date the request was raised")
    required_date: Optional[date] = Field(default=None, description="Date the material is needed by")
    estimated_delivery: Optional[date] = Field(default=None, description="Estimated delivery date")
    notes: Optional[str] = Field(default=None, description="Requester notes")
    user_id: Optional[str] = Field(default=None, description="Requesting user")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")


class MaterialRequestCreate(BaseModel):
    """Payload for the new-request form."""
    material: str = Field(min_length=1, description="Requested material")
    quantity: int = Field(gt=0, description="Requested quantity")
    unit: RequestUnit = Field(default="tons", description="Unit of measure")
    priority: Priority = Field(default="Medium", description="Request priority")
    required_date: Optional[date] = Field(default=None, description="Date the material is needed by")
    notes: Optional[str] = Field(default=None, description="Requester notes")


class MaterialRequestInsert(MaterialRequestCreate):
    """Full row written to the material_requests table."""
    request_id: str = Field(description="Human readable request id")
    status: RequestStatus = Field(default="Pending", description="Fulfilment status")
    request_date: date = Field(description="Date the request was raised")
    estimated_delivery: Optional[date] = Field(default=None, description="Estimated delivery date")
    user_id: str = Field(description="Requesting user")
