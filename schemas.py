"""
RentEasy Schemas (MongoDB via Pydantic)
Each model = one collection (lowercased name)
- Owner -> owner
- User -> user
- Property -> property

Passwords are stored as given; there is no hashing.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _Body(BaseModel):
    """Request bodies: every field optional so presence is checked by the handler."""

    @field_validator("*", mode="before")
    @classmethod
    def _scalar_to_str(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class Credentials(_Body):
    phone: Optional[str] = None
    password: Optional[str] = None


class UserSignup(_Body):
    name: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None


class Owner(BaseModel):
    phone: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class User(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class Property(BaseModel):
    type: str = Field(..., min_length=1)
    ownerName: Optional[str] = None
    mobile: Optional[str] = None
    location: Optional[str] = None
    floor: Optional[str] = None
    kitchen: Optional[str] = None
    bedroom: Optional[str] = None
    hall: Optional[str] = None
    garden: Optional[str] = None
    waterSupply: Optional[str] = None
    price: Optional[float] = None
    rent: Optional[float] = None
    description: Optional[str] = None
    imageUrl: List[str] = Field(default_factory=list)
    mapLink: str = ""
    date: datetime = Field(default_factory=_now)
