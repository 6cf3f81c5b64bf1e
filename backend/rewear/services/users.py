"""
User profiles. Credentials live with the auth collaborator; this module only
owns profile data and the signup grant.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..core.exceptions import ConflictError, NotFoundError
from ..core.logging import get_logger
from ..database import atomic
from ..models.user import User
from ..schemas.user import UserCreate, UserUpdate
from . import points

logger = get_logger(__name__)


def create_user(db: Session, data: UserCreate) -> User:
    """Create a profile and credit the signup grant in the same unit."""
    email = data.email.lower()
    if db.query(User.id).filter(User.email == email).first() is not None:
        raise ConflictError("A user with that email already exists")

    try:
        with atomic(db):
            user = User(
                **data.model_dump(exclude={"email"}),
                email=email,
                points=0,
                rating_average=0.0,
                rating_count=0,
                created_by=email,
            )
            db.add(user)
            db.flush()
            if settings.initial_points > 0:
                points.credit(db, user.id, settings.initial_points, reason="signup_bonus", ref_type="user", ref_id=user.id)
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        logger.warning("Concurrent signup for an existing email rejected", extra={"event": "conflict"})
        raise ConflictError("A user with that email already exists")

    db.refresh(user)
    logger.info(f"User {user.id} created", extra={"event": "user_created", "user_id": user.id})
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found", user_id=user_id)
    return user


def update_profile(db: Session, user_id: int, changes: UserUpdate) -> User:
    user = get_user(db, user_id)
    with atomic(db):
        for field, value in changes.model_dump(exclude_unset=True).items():
            if field.startswith("preferred_") and value is not None:
                value = [getattr(v, "value", v) for v in value]
            setattr(user, field, value)
        user.updated_by = user.email
    db.refresh(user)
    return user
