"""
User profile and points routes
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from ..schemas.user import (
    PointsBalanceResponse,
    PointsLedgerEntryResponse,
    UserPublicResponse,
    UserResponse,
    UserUpdate,
)
from ..auth.dependencies import get_current_active_user, require_admin
from ..services import points as points_service
from ..services import users as user_service

router = APIRouter()


@router.get("/me", response_model=UserResponse)
def read_current_user(current_user: User = Depends(get_current_active_user)):
    return current_user


@router.put("/me", response_model=UserResponse)
def update_current_user(
    changes: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Update your profile and swap preferences"""
    return user_service.update_profile(db, current_user.id, changes)


def _points_statement(db: Session, user_id: int) -> PointsBalanceResponse:
    return PointsBalanceResponse(
        user_id=user_id,
        points=points_service.get_balance(db, user_id),
        entries=[
            PointsLedgerEntryResponse.model_validate(entry)
            for entry in points_service.list_entries(db, user_id)
        ],
    )


@router.get("/me/points", response_model=PointsBalanceResponse)
def read_points(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Current balance and the ledger entries behind it, newest first"""
    return _points_statement(db, current_user.id)


@router.get("/{user_id}/points", response_model=PointsBalanceResponse)
def read_user_points(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Any user's balance and ledger (admin only)"""
    return _points_statement(db, user_id)


@router.get("/{user_id}", response_model=UserPublicResponse)
def read_user(user_id: int, db: Session = Depends(get_db)):
    """Public profile"""
    return user_service.get_user(db, user_id)
