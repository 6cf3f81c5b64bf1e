"""
Schemas for AI-assisted listing features
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from ..enums.item import ItemCategory, ItemCondition, ItemSize


class DescriptionRequest(BaseModel):
    title: str = Field(..., min_length=1)
    category: ItemCategory
    condition: ItemCondition
    size: ItemSize
    tags: List[str] = []
    notes: Optional[str] = None


class DescriptionResponse(BaseModel):
    description: str


class AutoTagRequest(BaseModel):
    text_input: Optional[str] = None
    image_url: Optional[str] = None

    @model_validator(mode='after')
    def require_input(self):
        if not self.text_input and not self.image_url:
            raise ValueError("Either text_input or image_url is required")
        return self


class ItemSuggestion(BaseModel):
    item_id: int
    reason: str


class SustainabilityImpactResponse(BaseModel):
    completed_swaps: int
    completed_redemptions: int
    total_transactions: int
    impact_message: str
