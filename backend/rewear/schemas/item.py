"""
Item schemas for request/response models
"""

from pydantic import AfterValidator, BaseModel, Field
from typing import Annotated, Optional, List
from datetime import datetime
from ..enums.item import ItemCondition, ItemStatus, ItemCategory, ItemSize


def _clean_tags(tags: List[str]) -> List[str]:
    cleaned = []
    for tag in tags:
        tag = tag.strip().lower()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


TagList = Annotated[List[str], AfterValidator(_clean_tags)]


class ItemCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: ItemCategory
    condition: ItemCondition
    size: ItemSize
    tags: TagList = []
    image_urls: List[str] = Field(..., min_length=1)
    points_value: int = Field(0, ge=0, description="Points needed to redeem this item (0 = swap only)")


class ItemUpdate(BaseModel):
    """Listing attributes an owner may edit. Status is never editable here."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[ItemCategory] = None
    condition: Optional[ItemCondition] = None
    size: Optional[ItemSize] = None
    tags: Optional[TagList] = None
    image_urls: Optional[List[str]] = Field(None, min_length=1)
    points_value: Optional[int] = Field(None, ge=0)


class ItemResponse(BaseModel):
    id: int
    title: str
    description: str
    category: ItemCategory
    condition: ItemCondition
    size: ItemSize
    tags: List[str]
    image_urls: List[str]
    status: ItemStatus
    points_value: int
    owner_id: int
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class ItemFilter(BaseModel):
    """Filter parameters for browsing available items"""
    category: Optional[ItemCategory] = None
    size: Optional[ItemSize] = None
    condition: Optional[ItemCondition] = None
    search: Optional[str] = None  # Substring match over title, description and tags
    exclude_owner_id: Optional[int] = None
