"""
Swap schemas
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from ..enums.swap import SwapStatus


class SwapCreate(BaseModel):
    receiver_id: int
    initiator_item_id: int
    receiver_item_id: int
    message: Optional[str] = Field(None, max_length=500)


class SwapStatusUpdate(BaseModel):
    status: SwapStatus


class SwapResponse(BaseModel):
    id: int
    initiator_id: int
    receiver_id: int
    initiator_item_id: int
    receiver_item_id: int
    status: SwapStatus
    message: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
