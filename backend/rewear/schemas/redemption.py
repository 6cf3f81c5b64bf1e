"""
Redemption schemas
"""

from pydantic import BaseModel, Field
from datetime import datetime
from ..enums.transaction import RedemptionStatus


class RedemptionCreate(BaseModel):
    item_id: int
    points_used: int = Field(..., gt=0, description="Must equal the item's points value")


class RedemptionResponse(BaseModel):
    id: int
    user_id: int
    item_id: int
    points_used: int
    status: RedemptionStatus
    created_at: datetime

    class Config:
        from_attributes = True


class RedemptionReceipt(BaseModel):
    redemption: RedemptionResponse
    user_points: int
