"""
Swap state machine.

Lifecycle::

    pending  -> accepted | rejected | cancelled
    accepted -> completed | cancelled

rejected, completed and cancelled are terminal. Every legal move is listed
in ``TRANSITIONS`` together with who may make it and what happens to the two
items; anything not in the table is an ``InvalidTransitionError``.
"""

import enum
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    ItemUnavailableError,
    NotFoundError,
)
from ..core.logging import get_logger
from ..database import atomic
from ..enums.item import ItemStatus
from ..enums.swap import SwapRole, SwapStatus
from ..models.item import Item
from ..models.swap import Swap
from ..models.user import User
from ..schemas.swap import SwapCreate
from . import items as item_registry

logger = get_logger(__name__)


class ItemEffect(str, enum.Enum):
    HOLD = "hold"  # available -> pending
    RELEASE = "release"  # pending -> available
    SETTLE = "settle"  # pending -> swapped


class Transition(NamedTuple):
    roles: FrozenSet[SwapRole]
    effect: ItemEffect


_RECEIVER = frozenset({SwapRole.RECEIVER})
_EITHER = frozenset({SwapRole.INITIATOR, SwapRole.RECEIVER})

TRANSITIONS: Dict[Tuple[SwapStatus, SwapStatus], Transition] = {
    (SwapStatus.PENDING, SwapStatus.ACCEPTED): Transition(_RECEIVER, ItemEffect.HOLD),
    (SwapStatus.PENDING, SwapStatus.REJECTED): Transition(_RECEIVER, ItemEffect.RELEASE),
    (SwapStatus.PENDING, SwapStatus.CANCELLED): Transition(_EITHER, ItemEffect.RELEASE),
    (SwapStatus.ACCEPTED, SwapStatus.COMPLETED): Transition(_EITHER, ItemEffect.SETTLE),
    (SwapStatus.ACCEPTED, SwapStatus.CANCELLED): Transition(_EITHER, ItemEffect.RELEASE),
}


def role_of(swap: Swap, user_id: int) -> SwapRole:
    if user_id == swap.initiator_id:
        return SwapRole.INITIATOR
    if user_id == swap.receiver_id:
        return SwapRole.RECEIVER
    return SwapRole.OUTSIDER


def _find_pending_duplicate(db: Session, data: SwapCreate, initiator_id: int) -> Optional[Swap]:
    """A pending swap over the same items, proposed from either side."""
    return (
        db.query(Swap)
        .filter(
            Swap.status == SwapStatus.PENDING,
            or_(
                (Swap.initiator_id == initiator_id)
                & (Swap.receiver_id == data.receiver_id)
                & (Swap.initiator_item_id == data.initiator_item_id)
                & (Swap.receiver_item_id == data.receiver_item_id),
                (Swap.initiator_id == data.receiver_id)
                & (Swap.receiver_id == initiator_id)
                & (Swap.initiator_item_id == data.receiver_item_id)
                & (Swap.receiver_item_id == data.initiator_item_id),
            ),
        )
        .first()
    )


def create_swap(db: Session, initiator_id: int, data: SwapCreate) -> Swap:
    """
    Propose a swap of ``data.initiator_item_id`` for ``data.receiver_item_id``.

    Item statuses are left untouched until the receiver accepts.
    """
    if initiator_id == data.receiver_id:
        raise ForbiddenError("Cannot swap with yourself")

    initiator = db.get(User, initiator_id)
    receiver = db.get(User, data.receiver_id)
    if initiator is None or receiver is None:
        raise NotFoundError("User not found")

    initiator_item = db.get(Item, data.initiator_item_id)
    receiver_item = db.get(Item, data.receiver_item_id)
    if initiator_item is None or receiver_item is None:
        raise NotFoundError("One or both items not found")

    if initiator_item.status != ItemStatus.AVAILABLE or receiver_item.status != ItemStatus.AVAILABLE:
        raise ItemUnavailableError("One or both items are not available for swap")

    if initiator_item.owner_id != initiator_id:
        raise ForbiddenError("You do not own the item you are offering", item_id=initiator_item.id)
    if receiver_item.owner_id != data.receiver_id:
        raise ForbiddenError(
            "The requested item does not belong to the specified receiver", item_id=receiver_item.id
        )

    if _find_pending_duplicate(db, data, initiator_id) is not None:
        raise ConflictError("A pending swap request already exists for these items")

    try:
        with atomic(db):
            swap = Swap(
                initiator_id=initiator_id,
                receiver_id=data.receiver_id,
                initiator_item_id=initiator_item.id,
                receiver_item_id=receiver_item.id,
                item_pair_key=Swap.pair_key(initiator_item.id, receiver_item.id),
                message=data.message.strip() if data.message else None,
                status=SwapStatus.PENDING,
                created_by=initiator.email,
            )
            db.add(swap)
    except IntegrityError:
        # The pending-pair unique index caught a concurrent duplicate
        logger.warning(
            "Concurrent duplicate swap request rejected",
            extra={"event": "conflict", "user_id": initiator_id},
        )
        raise ConflictError("A pending swap request already exists for these items")

    db.refresh(swap)
    logger.info(
        f"Swap {swap.id} proposed by user {initiator_id} to user {data.receiver_id}",
        extra={"event": "swap_created", "swap_id": swap.id, "user_id": initiator_id},
    )
    return swap


def get_swap(db: Session, swap_id: int, actor_id: int) -> Swap:
    swap = db.get(Swap, swap_id)
    if swap is None:
        raise NotFoundError("Swap request not found", swap_id=swap_id)
    if role_of(swap, actor_id) is SwapRole.OUTSIDER:
        raise ForbiddenError("Not authorized to view this swap request")
    return swap


def _held_by_other_accepted_swap(swap: Swap):
    """SQL criterion: the item is promised to some other accepted swap."""
    others = (Swap.status == SwapStatus.ACCEPTED) & (Swap.id != swap.id)
    return or_(
        Item.id.in_(select(Swap.initiator_item_id).where(others)),
        Item.id.in_(select(Swap.receiver_item_id).where(others)),
    )


def _apply_item_effect(db: Session, swap: Swap, effect: ItemEffect) -> None:
    if effect is ItemEffect.HOLD:
        held = item_registry.update_status(
            db, swap.item_ids, ItemStatus.PENDING, expected_status=ItemStatus.AVAILABLE
        )
        if held != 2:
            raise ItemUnavailableError(
                "One or both items are no longer available", swap_id=swap.id
            )
    elif effect is ItemEffect.SETTLE:
        settled = item_registry.update_status(
            db, swap.item_ids, ItemStatus.SWAPPED, expected_status=ItemStatus.PENDING
        )
        if settled != 2:
            raise ConflictError("Swap items changed state before completion", swap_id=swap.id)
    else:
        # Creation never touches the items, so releasing a pending swap is a
        # no-op unless they were held by this swap's acceptance
        item_registry.update_status(
            db,
            swap.item_ids,
            ItemStatus.AVAILABLE,
            ~_held_by_other_accepted_swap(swap),
            expected_status=ItemStatus.PENDING,
        )


def transition(db: Session, swap_id: int, actor_id: int, target) -> Swap:
    """
    Move a swap to ``target`` on behalf of ``actor_id``.

    Raises ``ForbiddenError`` for non-participants, ``InvalidTransitionError``
    for moves outside ``TRANSITIONS`` (or made by the wrong side) and
    ``ConflictError`` when a concurrent transition on the same swap won.
    """
    target = SwapStatus(target)
    swap = db.get(Swap, swap_id)
    if swap is None:
        raise NotFoundError("Swap request not found", swap_id=swap_id)

    role = role_of(swap, actor_id)
    if role is SwapRole.OUTSIDER:
        raise ForbiddenError("Not authorized to update this swap request")

    current = swap.status
    rule = TRANSITIONS.get((current, target))
    if rule is None or role not in rule.roles:
        logger.warning(
            f"Rejected swap transition {current.value} -> {target.value} by {role.value}",
            extra={"event": "invalid_transition", "swap_id": swap_id, "user_id": actor_id},
        )
        detail = f"Swap is already {current.value}" if current.is_terminal else None
        raise InvalidTransitionError(current.value, target.value, role.value, detail)

    actor = db.get(User, actor_id)
    with atomic(db):
        swap.status = target
        swap.updated_by = actor.email if actor else None
        try:
            db.flush()
        except StaleDataError:
            logger.warning(
                f"Swap {swap_id} was updated concurrently",
                extra={"event": "conflict", "swap_id": swap_id, "user_id": actor_id},
            )
            raise ConflictError("Swap was updated by another request", swap_id=swap_id)
        _apply_item_effect(db, swap, rule.effect)

    db.refresh(swap)
    logger.info(
        f"Swap {swap_id} moved {current.value} -> {target.value} by {role.value} {actor_id}",
        extra={"event": "swap_transitioned", "swap_id": swap_id, "user_id": actor_id, "status": target.value},
    )
    return swap


def list_user_swaps(db: Session, user_id: int, status: Optional[SwapStatus] = None) -> List[Swap]:
    """Swaps the user initiated or received, newest first."""
    query = db.query(Swap).filter(or_(Swap.initiator_id == user_id, Swap.receiver_id == user_id))
    if status is not None:
        query = query.filter(Swap.status == status)
    return query.order_by(Swap.created_at.desc(), Swap.id.desc()).all()


def list_pending_for_user(db: Session, user_id: int) -> List[Swap]:
    """Pending swaps waiting on this user's answer."""
    return (
        db.query(Swap)
        .filter(Swap.receiver_id == user_id, Swap.status == SwapStatus.PENDING)
        .order_by(Swap.created_at.desc(), Swap.id.desc())
        .all()
    )
