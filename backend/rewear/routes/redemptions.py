"""
Points redemption routes
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ..database import get_db
from ..models.user import User
from ..schemas.redemption import RedemptionCreate, RedemptionReceipt, RedemptionResponse
from ..auth.dependencies import get_current_active_user
from ..services import redemptions as redemption_service

router = APIRouter()


@router.post("/", response_model=RedemptionReceipt, status_code=status.HTTP_201_CREATED)
def create_redemption(
    data: RedemptionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    Redeem an available item with points. ``points_used`` must equal the
    item's points value.
    """
    redemption, balance = redemption_service.redeem(db, current_user.id, data.item_id, data.points_used)
    return RedemptionReceipt(
        redemption=RedemptionResponse.model_validate(redemption),
        user_points=balance,
    )


@router.get("/user/{user_id}", response_model=List[RedemptionResponse])
def get_user_redemptions(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return redemption_service.list_user_redemptions(db, user_id, current_user)


@router.get("/{redemption_id}", response_model=RedemptionResponse)
def get_redemption(
    redemption_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return redemption_service.get_redemption(db, redemption_id, current_user)
