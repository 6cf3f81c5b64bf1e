"""
Redemption processor: exchange points for an item.
"""

from typing import List, Tuple

from sqlalchemy.orm import Session

from ..core.exceptions import (
    ConflictError,
    ForbiddenError,
    InsufficientFundsError,
    ItemUnavailableError,
    NotFoundError,
    PointsMismatchError,
)
from ..core.logging import get_logger
from ..database import atomic
from ..enums.item import ItemStatus
from ..enums.transaction import RedemptionStatus
from ..enums.user import UserRole
from ..models.item import Item
from ..models.redemption import Redemption
from ..models.user import User
from . import items as item_registry
from . import points

logger = get_logger(__name__)


def redeem(db: Session, user_id: int, item_id: int, points_used: int) -> Tuple[Redemption, int]:
    """
    Redeem ``item_id`` for ``points_used`` points.

    Returns the completed redemption and the user's new balance. The item
    flip, the redemption record and the debit commit together or not at
    all. If another request redeems the same item first, the losing call
    fails with ``ConflictError`` and nothing is charged.
    """
    user = db.get(User, user_id)
    item = db.get(Item, item_id)
    if user is None or item is None:
        raise NotFoundError("User or item not found")

    if item.status != ItemStatus.AVAILABLE:
        raise ItemUnavailableError("Item is not available for redemption", item_id=item_id)

    if points_used <= 0 or points_used != item.points_value:
        raise PointsMismatchError(
            f"Points used ({points_used}) do not match the item's points value ({item.points_value})",
            points_used=points_used,
            points_value=item.points_value,
        )

    if user.points < points_used:
        logger.warning(
            f"User {user_id} cannot afford item {item_id}",
            extra={"event": "insufficient_funds", "user_id": user_id, "item_id": item_id},
        )
        raise InsufficientFundsError(
            f"Insufficient points: balance {user.points}, required {points_used}",
            balance=user.points,
            required=points_used,
        )

    with atomic(db):
        flipped = item_registry.update_status(
            db,
            [item_id],
            ItemStatus.REDEEMED,
            Item.points_value == points_used,
            expected_status=ItemStatus.AVAILABLE,
        )
        if flipped != 1:
            current = db.query(Item.status, Item.points_value).filter(Item.id == item_id).one()
            if current.status == ItemStatus.AVAILABLE and current.points_value != points_used:
                logger.warning(
                    f"Item {item_id} was repriced before it could be redeemed",
                    extra={"event": "conflict", "user_id": user_id, "item_id": item_id},
                )
                raise PointsMismatchError(
                    f"Points used ({points_used}) do not match the item's points value ({current.points_value})",
                    points_used=points_used,
                    points_value=current.points_value,
                )
            logger.warning(
                f"Item {item_id} was taken by a concurrent request",
                extra={"event": "conflict", "user_id": user_id, "item_id": item_id},
            )
            raise ConflictError("Item was redeemed or reserved by another request", item_id=item_id)

        redemption = Redemption(
            user_id=user_id,
            item_id=item_id,
            points_used=points_used,
            status=RedemptionStatus.COMPLETED,
            created_by=user.email,
        )
        db.add(redemption)
        db.flush()

        new_balance = points.debit(
            db, user_id, points_used, reason="redemption", ref_type="redemption", ref_id=redemption.id
        )

    db.refresh(redemption)
    logger.info(
        f"User {user_id} redeemed item {item_id} for {points_used} points",
        extra={
            "event": "item_redeemed",
            "user_id": user_id,
            "item_id": item_id,
            "redemption_id": redemption.id,
            "balance": new_balance,
        },
    )
    return redemption, new_balance


def _can_view(actor: User, user_id: int) -> bool:
    return actor.id == user_id or actor.role == UserRole.ADMIN


def get_redemption(db: Session, redemption_id: int, actor: User) -> Redemption:
    redemption = db.get(Redemption, redemption_id)
    if redemption is None:
        raise NotFoundError("Redemption not found", redemption_id=redemption_id)
    if not _can_view(actor, redemption.user_id):
        raise ForbiddenError("Not authorized to view this redemption")
    return redemption


def list_user_redemptions(db: Session, user_id: int, actor: User) -> List[Redemption]:
    if not _can_view(actor, user_id):
        raise ForbiddenError("Not authorized to view these redemptions")
    return (
        db.query(Redemption)
        .filter(Redemption.user_id == user_id)
        .order_by(Redemption.created_at.desc(), Redemption.id.desc())
        .all()
    )
