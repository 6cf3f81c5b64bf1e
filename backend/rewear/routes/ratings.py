"""
User rating routes
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ..database import get_db
from ..models.user import User
from ..schemas.rating import (
    RatingAggregate,
    RatingCreate,
    RatingCreatedResponse,
    RatingResponse,
    RatingSummaryResponse,
)
from ..auth.dependencies import get_current_active_user, get_optional_user
from ..services import ratings as rating_service

router = APIRouter()


@router.post("/", response_model=RatingCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_rating(
    data: RatingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    Rate another user, optionally for a specific swap or redemption.
    Returns the rating and the rated user's refreshed average.
    """
    rating, rated_user = rating_service.rate(db, current_user.id, data)
    return RatingCreatedResponse(
        rating=RatingResponse.model_validate(rating),
        updated_user_rating=RatingAggregate(
            average=rated_user.rating_average,
            count=rated_user.rating_count,
        ),
    )


@router.get("/user/{user_id}/given", response_model=List[RatingResponse])
def get_ratings_given(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return rating_service.list_given(db, user_id, current_user)


@router.get("/user/{user_id}/received", response_model=List[RatingResponse])
def get_ratings_received(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return rating_service.list_received(db, user_id, current_user)


@router.get("/user/{user_id}/summary", response_model=RatingSummaryResponse)
def get_rating_summary(
    user_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user)
):
    """Average and count for a user; includes the caller's own rating when signed in"""
    return rating_service.rating_summary(db, user_id, viewer.id if viewer else None)


@router.get("/{rating_id}", response_model=RatingResponse)
def get_rating(
    rating_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return rating_service.get_rating(db, rating_id, current_user)
