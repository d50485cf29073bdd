from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

Role = Literal["admin", "supervisor", "vendor"]


class UserProfile(BaseModel):
    """Response model for a row of the users table."""
    id: str = Field(description="Auth user identifier")
    employee_id: str = Field(description="Plant employee identifier")
    email: str = Field(description="Login email address")
    role: Role = Field(description="Dashboard role")
    created_at: Optional[datetime] = Field(default=None, description="Profile creation timestamp")


class UserProfileCreate(BaseModel):
    """Payload inserted into the users table at signup."""
    id: str = Field(description="Auth user identifier returned by sign up")
    employee_id: str = Field(min_length=1, description="Plant employee identifier")
    email: str = Field(min_length=3, description="Login email address")
    role: Role = Field(description="Dashboard role")
