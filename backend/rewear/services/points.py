"""
Points ledger: per-user balances.

``debit`` and ``credit`` never commit. They join the caller's atomic unit
so the balance change lands or rolls back together with whatever it pays
for (an item status flip, a redemption record, a new account).
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import InsufficientFundsError, NotFoundError
from ..core.logging import get_logger
from ..models.points import PointsLedgerEntry
from ..models.user import User

logger = get_logger(__name__)


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValueError(f"Point amounts must be positive integers, got {amount!r}")


def _load_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found", user_id=user_id)
    return user


def _record(
    db: Session,
    user: User,
    delta: int,
    reason: str,
    ref_type: Optional[str],
    ref_id: Optional[int],
) -> None:
    db.add(
        PointsLedgerEntry(
            user_id=user.id,
            delta_points=delta,
            reason=reason,
            ref_type=ref_type,
            ref_id=ref_id,
            balance_after=user.points,
            created_by=user.email,
        )
    )


def get_balance(db: Session, user_id: int) -> int:
    return _load_user(db, user_id).points


def debit(
    db: Session,
    user_id: int,
    amount: int,
    reason: str = "redemption",
    ref_type: Optional[str] = None,
    ref_id: Optional[int] = None,
) -> int:
    """
    Take ``amount`` points from a user and return the new balance.

    The decrement is a single guarded UPDATE (``points >= amount``), so two
    concurrent debits can never drive the balance below zero or overwrite
    each other.
    """
    _check_amount(amount)
    user = _load_user(db, user_id)
    if amount > user.points:
        raise InsufficientFundsError(
            f"Insufficient points: balance {user.points}, required {amount}",
            balance=user.points,
            required=amount,
        )

    updated = (
        db.query(User)
        .filter(User.id == user_id, User.points >= amount)
        .update({User.points: User.points - amount}, synchronize_session=False)
    )
    db.refresh(user, attribute_names=["points"])
    if updated == 0:
        # Another request spent the points between our read and the update
        raise InsufficientFundsError(
            f"Insufficient points: balance {user.points}, required {amount}",
            balance=user.points,
            required=amount,
        )

    _record(db, user, -amount, reason, ref_type, ref_id)
    logger.info(
        f"Debited {amount} points from user {user_id}, balance now {user.points}",
        extra={"event": "points_debited", "user_id": user_id, "amount": amount, "balance": user.points},
    )
    return user.points


def credit(
    db: Session,
    user_id: int,
    amount: int,
    reason: str = "signup_bonus",
    ref_type: Optional[str] = None,
    ref_id: Optional[int] = None,
) -> int:
    """Add ``amount`` points to a user and return the new balance."""
    _check_amount(amount)
    user = _load_user(db, user_id)

    db.query(User).filter(User.id == user_id).update(
        {User.points: User.points + amount}, synchronize_session=False
    )
    db.refresh(user, attribute_names=["points"])

    _record(db, user, amount, reason, ref_type, ref_id)
    logger.info(
        f"Credited {amount} points to user {user_id}, balance now {user.points}",
        extra={"event": "points_credited", "user_id": user_id, "amount": amount, "balance": user.points},
    )
    return user.points


def list_entries(db: Session, user_id: int) -> List[PointsLedgerEntry]:
    _load_user(db, user_id)
    return (
        db.query(PointsLedgerEntry)
        .filter(PointsLedgerEntry.user_id == user_id)
        .order_by(PointsLedgerEntry.created_at.desc(), PointsLedgerEntry.id.desc())
        .all()
    )
