"""
Per-user exchange activity
"""

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundError
from ..enums.swap import SwapStatus
from ..enums.transaction import RedemptionStatus
from ..models.redemption import Redemption
from ..models.swap import Swap
from ..models.user import User


def sustainability_stats(db: Session, user_id: int) -> dict:
    """Completed swaps (either side) and completed redemptions for a user."""
    if db.get(User, user_id) is None:
        raise NotFoundError("User not found", user_id=user_id)

    completed_swaps = (
        db.query(Swap)
        .filter(
            or_(Swap.initiator_id == user_id, Swap.receiver_id == user_id),
            Swap.status == SwapStatus.COMPLETED,
        )
        .count()
    )
    completed_redemptions = (
        db.query(Redemption)
        .filter(Redemption.user_id == user_id, Redemption.status == RedemptionStatus.COMPLETED)
        .count()
    )
    return {
        "completed_swaps": completed_swaps,
        "completed_redemptions": completed_redemptions,
        "total_transactions": completed_swaps + completed_redemptions,
    }
