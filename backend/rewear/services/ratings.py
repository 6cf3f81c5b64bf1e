"""
Rating aggregator: user-to-user ratings and the rated user's running
average and count.
"""

from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import (
    DuplicateRatingError,
    ForbiddenError,
    InvalidRatingError,
    NotFoundError,
    SelfRatingError,
)
from ..core.logging import get_logger
from ..database import atomic
from ..enums.transaction import TransactionType
from ..enums.user import UserRole
from ..models.rating import Rating
from ..models.user import User
from ..schemas.rating import RatingCreate

logger = get_logger(__name__)

MIN_SCORE = 1
MAX_SCORE = 5


def _validate_score(score) -> int:
    if isinstance(score, bool) or not isinstance(score, int) or not MIN_SCORE <= score <= MAX_SCORE:
        raise InvalidRatingError(
            f"Rating must be an integer between {MIN_SCORE} and {MAX_SCORE}", rating=score
        )
    return score


def _find_existing(
    db: Session,
    rater_id: int,
    rated_user_id: int,
    transaction_type: TransactionType,
    transaction_id: int,
) -> Optional[Rating]:
    return (
        db.query(Rating)
        .filter(
            Rating.rater_id == rater_id,
            Rating.rated_user_id == rated_user_id,
            Rating.transaction_type == transaction_type,
            Rating.transaction_id == transaction_id,
        )
        .first()
    )


def recompute_aggregate(db: Session, user_id: int) -> None:
    """
    Rewrite a user's rating count and average from the ratings table.

    Runs as one UPDATE whose subqueries read the ratings visible to the
    current transaction, including a rating inserted just before it.
    """
    received = Rating.rated_user_id == user_id
    count_query = select(func.count(Rating.id)).where(received).scalar_subquery()
    average_query = select(func.coalesce(func.avg(Rating.rating), 0.0)).where(received).scalar_subquery()
    db.query(User).filter(User.id == user_id).update(
        {User.rating_count: count_query, User.rating_average: average_query},
        synchronize_session=False,
    )


def rate(db: Session, rater_id: int, data: RatingCreate) -> Tuple[Rating, User]:
    """
    Record a rating and refresh the rated user's aggregate in one unit.

    Returns the new rating and the rated user with the updated aggregate.
    """
    score = _validate_score(data.rating)

    if rater_id == data.rated_user_id:
        raise SelfRatingError()

    rater = db.get(User, rater_id)
    if rater is None:
        raise NotFoundError("Rater not found", user_id=rater_id)
    rated_user = db.get(User, data.rated_user_id)
    if rated_user is None:
        raise NotFoundError("User being rated not found", user_id=data.rated_user_id)

    linked = data.transaction_type is not None and data.transaction_id is not None
    if linked and _find_existing(db, rater_id, rated_user.id, data.transaction_type, data.transaction_id):
        raise DuplicateRatingError()

    with atomic(db):
        # Serialize aggregate updates per rated user (no-op on SQLite, which
        # already serializes writers)
        db.query(User.id).filter(User.id == rated_user.id).with_for_update().one()

        rating = Rating(
            rater_id=rater_id,
            rated_user_id=rated_user.id,
            rating=score,
            comment=data.comment.strip() if data.comment else None,
            transaction_type=data.transaction_type,
            transaction_id=data.transaction_id,
            created_by=rater.email,
        )
        db.add(rating)
        try:
            db.flush()
        except IntegrityError:
            logger.warning(
                "Concurrent duplicate rating rejected",
                extra={"event": "conflict", "user_id": rater_id, "rated_user_id": rated_user.id},
            )
            raise DuplicateRatingError()

        recompute_aggregate(db, rated_user.id)

    db.refresh(rating)
    db.refresh(rated_user)
    logger.info(
        f"User {rater_id} rated user {rated_user.id} {score}/5; "
        f"average now {rated_user.rating_average:.2f} over {rated_user.rating_count}",
        extra={"event": "rating_created", "rating_id": rating.id, "user_id": rater_id, "rated_user_id": rated_user.id},
    )
    return rating, rated_user


def _is_admin(actor: User) -> bool:
    return actor.role == UserRole.ADMIN


def get_rating(db: Session, rating_id: int, actor: User) -> Rating:
    rating = db.get(Rating, rating_id)
    if rating is None:
        raise NotFoundError("Rating not found", rating_id=rating_id)
    if actor.id not in (rating.rater_id, rating.rated_user_id) and not _is_admin(actor):
        raise ForbiddenError("Not authorized to view this rating")
    return rating


def list_given(db: Session, user_id: int, actor: User) -> List[Rating]:
    if actor.id != user_id and not _is_admin(actor):
        raise ForbiddenError("Not authorized to view these ratings")
    return (
        db.query(Rating)
        .filter(Rating.rater_id == user_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
        .all()
    )


def list_received(db: Session, user_id: int, actor: User) -> List[Rating]:
    if actor.id != user_id and not _is_admin(actor):
        raise ForbiddenError("Not authorized to view these ratings")
    return (
        db.query(Rating)
        .filter(Rating.rated_user_id == user_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
        .all()
    )


def rating_summary(db: Session, user_id: int, viewer_id: Optional[int] = None) -> dict:
    """Stored aggregate for a user, plus the viewer's latest rating of them."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found", user_id=user_id)

    viewer_rating = None
    if viewer_id is not None:
        viewer_rating = (
            db.query(Rating.rating)
            .filter(Rating.rated_user_id == user_id, Rating.rater_id == viewer_id)
            .order_by(Rating.created_at.desc(), Rating.id.desc())
            .limit(1)
            .scalar()
        )

    return {
        "user_id": user.id,
        "average_rating": user.rating_average,
        "rating_count": user.rating_count,
        "viewer_rating": viewer_rating,
    }
