"""
User schemas for request/response models
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from ..enums.user import UserRole
from ..enums.item import ItemCategory, ItemSize


class UserCreate(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = None
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    """Profile fields only; points, ratings and role are never writable here"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    avatar_url: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = None
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None
    preferred_sizes: Optional[List[ItemSize]] = None
    preferred_categories: Optional[List[ItemCategory]] = None
    preferred_brands: Optional[List[str]] = None


class UserPublicResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    location_city: Optional[str] = None
    location_country: Optional[str] = None
    rating_average: float
    rating_count: int
    created_at: datetime

    class Config:
        from_attributes = True


class UserResponse(UserPublicResponse):
    email: str
    phone: Optional[str] = None
    location_state: Optional[str] = None
    role: UserRole
    is_active: bool
    points: int
    preferred_sizes: List[str]
    preferred_categories: List[str]
    preferred_brands: List[str]
    updated_at: Optional[datetime]


class PointsLedgerEntryResponse(BaseModel):
    id: int
    delta_points: int
    reason: str
    ref_type: Optional[str]
    ref_id: Optional[int]
    balance_after: int
    created_at: datetime

    class Config:
        from_attributes = True


class PointsBalanceResponse(BaseModel):
    user_id: int
    points: int
    entries: List[PointsLedgerEntryResponse]
