"""
User data model (cached, read-only in the offline path).
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"
    CUSTOMER = "customer"


class User(BaseModel):
    """A staff member or customer mirrored from the backend."""

    id: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=254)
    phone_number: Optional[str] = Field(None, max_length=50)
    role: UserRole = Field(default=UserRole.STAFF)
    is_active: bool = True
    is_email_verified: bool = False
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    class Config:
        """Pydantic configuration."""
        extra = "allow"
