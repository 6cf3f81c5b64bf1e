"""
Rating schemas
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime
from ..enums.transaction import TransactionType


class RatingCreate(BaseModel):
    rated_user_id: int
    # Range is enforced by the rating service so the error carries its own code
    rating: int = Field(..., description="Rating must be between 1 and 5")
    comment: Optional[str] = Field(None, max_length=1000)
    transaction_type: Optional[TransactionType] = None
    transaction_id: Optional[int] = None

    @model_validator(mode='after')
    def check_transaction_link(self):
        """A transaction link needs both its type and its id"""
        if (self.transaction_type is None) != (self.transaction_id is None):
            raise ValueError("transaction_type and transaction_id must be provided together")
        return self


class RatingResponse(BaseModel):
    id: int
    rater_id: int
    rated_user_id: int
    rating: int
    comment: Optional[str]
    transaction_type: Optional[TransactionType]
    transaction_id: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True


class RatingAggregate(BaseModel):
    average: float
    count: int


class RatingCreatedResponse(BaseModel):
    rating: RatingResponse
    updated_user_rating: RatingAggregate


class RatingSummaryResponse(BaseModel):
    user_id: int
    average_rating: float
    rating_count: int
    viewer_rating: Optional[int] = None
