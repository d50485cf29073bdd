from __future__ import annotations

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, Field

Shift = Literal["Day", "Evening", "Night"]

SHIFTS = ["Day", "Evening", "Night"]


class ProductionRecord(BaseModel):
    """Response model for one shift of production data."""
    id: str = Field(description="Row identifier")
    date: dt.date = Field(description="Production date")
    shift: Shift = Field(description="Shift name")
    steel_production: float = Field(description="Steel produced (tons)")
    molten_iron: float = Field(description="Molten iron produced (tons)")
    efficiency: float = Field(description="Line efficiency (%)")
    quality_rate: float = Field(description="Quality rate (%)")
    uptime_hours: float = Field(description="Uptime (hours)")
    downtime_hours: float = Field(default=0.0, description="Downtime (hours)")
    downtime_reason: Optional[str] = Field(default=None, description="Reason for downtime")
    energy_consumption: Optional[float] = Field(default=None, description="Energy consumed (kWh)")
    notes: Optional[str] = Field(default=None, description="Free-form shift notes")
    operator_id: Optional[str] = Field(default=None, description="User who logged the record")
    created_at: Optional[dt.datetime] = Field(default=None, description="Creation timestamp")


class ProductionRecordCreate(BaseModel):
    """Payload for the daily production form. (date, shift) is unique."""
    date: dt.date = Field(description="Production date")
    shift: Shift = Field(default="Day", description="Shift name")
    steel_production: float = Field(ge=0, description="Steel produced (tons)")
    molten_iron: float = Field(ge=0, description="Molten iron produced (tons)")
    efficiency: float = Field(ge=0, le=100, description="Line efficiency (%)")
    quality_rate: float = Field(ge=0, le=100, description="Quality rate (%)")
    uptime_hours: float = Field(ge=0, le=24, description="Uptime (hours)")
    downtime_hours: float = Field(default=0.0, ge=0, le=24, description="Downtime (hours)")
    downtime_reason: Optional[str] = Field(default=None, description="Reason for downtime")
    energy_consumption: Optional[float] = Field(default=None, ge=0, description="Energy consumed (kWh)")
    notes: Optional[str] = Field(default=None, description="Free-form shift notes")
    operator_id: Optional[str] = Field(default=None, description="User who logged the record")
