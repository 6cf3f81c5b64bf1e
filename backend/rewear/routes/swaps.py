"""
Swap request routes
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ..database import get_db
from ..models.user import User
from ..schemas.swap import SwapCreate, SwapStatusUpdate, SwapResponse
from ..auth.dependencies import get_current_active_user
from ..core.exceptions import ForbiddenError
from ..enums.swap import SwapStatus
from ..services import swaps as swap_service

router = APIRouter()


def _require_self(user_id: int, current_user: User) -> None:
    if user_id != current_user.id:
        raise ForbiddenError("Not authorized to view these swap requests")


@router.post("/", response_model=SwapResponse, status_code=status.HTTP_201_CREATED)
def create_swap(
    swap_data: SwapCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Propose swapping one of your items for another user's item"""
    return swap_service.create_swap(db, current_user.id, swap_data)


@router.get("/user/{user_id}", response_model=List[SwapResponse])
def get_user_swaps(
    user_id: int,
    status: Optional[SwapStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    _require_self(user_id, current_user)
    return swap_service.list_user_swaps(db, user_id, status)


@router.get("/user/{user_id}/pending", response_model=List[SwapResponse])
def get_pending_swaps(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Pending requests waiting on this user's answer"""
    _require_self(user_id, current_user)
    return swap_service.list_pending_for_user(db, user_id)


@router.get("/{swap_id}", response_model=SwapResponse)
def get_swap(
    swap_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return swap_service.get_swap(db, swap_id, current_user.id)


@router.put("/{swap_id}", response_model=SwapResponse)
def update_swap_status(
    swap_id: int,
    update: SwapStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    Accept, reject, complete or cancel a swap request.

    Only the receiver may accept or reject; either side may complete an
    accepted swap or cancel an open one.
    """
    return swap_service.transition(db, swap_id, current_user.id, update.status)
