"""
Item registry: listings and their availability state.

Owners create and edit listings. Status changes go through
``update_status``, which only the swap and redemption services call.
"""

from typing import Iterable, List, Optional

from sqlalchemy import exists, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from ..core.exceptions import ForbiddenError, InvalidStateError, ItemUnavailableError, NotFoundError
from ..core.logging import get_logger
from ..database import atomic
from ..enums.item import ItemStatus
from ..enums.swap import SwapStatus
from ..models.item import Item
from ..models.swap import Swap
from ..models.user import User
from ..schemas.item import ItemCreate, ItemFilter, ItemUpdate

logger = get_logger(__name__)

# Swap states that still hold a claim on their items
OPEN_SWAP_STATUSES = (SwapStatus.PENDING, SwapStatus.ACCEPTED)


def create_item(db: Session, owner_id: int, data: ItemCreate) -> Item:
    """Create a listing owned by ``owner_id``; it starts out available."""
    owner = db.get(User, owner_id)
    if owner is None:
        raise NotFoundError("User not found")

    with atomic(db):
        item = Item(
            **data.model_dump(),
            owner_id=owner.id,
            status=ItemStatus.AVAILABLE,
            created_by=owner.email,
        )
        db.add(item)
    db.refresh(item)

    logger.info(
        f"Item {item.id} listed by user {owner.id}",
        extra={"event": "item_created", "item_id": item.id, "user_id": owner.id},
    )
    return item


def get_item(db: Session, item_id: int) -> Item:
    item = db.get(Item, item_id)
    if item is None:
        raise NotFoundError("Item not found", item_id=item_id)
    return item


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _tag_matches(db: Session, pattern: str):
    """True when any single tag of the item matches ``pattern``."""
    if db.get_bind().dialect.name == "postgresql":
        tag = func.json_array_elements_text(Item.tags).table_valued("value")
    else:
        tag = func.json_each(Item.tags).table_valued("value")
    return exists(
        select(1).select_from(tag).where(tag.c.value.ilike(pattern, escape="\\"))
    )


def list_available(
    db: Session,
    filters: Optional[ItemFilter] = None,
    skip: int = 0,
    limit: int = 50,
) -> List[Item]:
    """
    Browse available listings, newest first.

    ``filters.search`` is a case-insensitive substring match over title,
    description and tags.
    """
    filters = filters or ItemFilter()
    query = db.query(Item).filter(Item.status == ItemStatus.AVAILABLE)

    if filters.category:
        query = query.filter(Item.category == filters.category)
    if filters.size:
        query = query.filter(Item.size == filters.size)
    if filters.condition:
        query = query.filter(Item.condition == filters.condition)
    if filters.exclude_owner_id is not None:
        query = query.filter(Item.owner_id != filters.exclude_owner_id)
    if filters.search:
        search_term = f"%{_escape_like(filters.search.strip())}%"
        query = query.filter(
            or_(
                Item.title.ilike(search_term, escape="\\"),
                Item.description.ilike(search_term, escape="\\"),
                _tag_matches(db, search_term),
            )
        )

    return query.order_by(Item.created_at.desc(), Item.id.desc()).offset(skip).limit(limit).all()


def list_user_items(db: Session, owner_id: int) -> List[Item]:
    if db.get(User, owner_id) is None:
        raise NotFoundError("User not found")
    return (
        db.query(Item)
        .filter(Item.owner_id == owner_id)
        .order_by(Item.created_at.desc(), Item.id.desc())
        .all()
    )


def assert_owned_by(db: Session, item_id: int, user_id: int) -> Item:
    """Load an item and fail with ``ForbiddenError`` unless ``user_id`` owns it."""
    item = get_item(db, item_id)
    if item.owner_id != user_id:
        raise ForbiddenError("You do not own this item", item_id=item_id)
    return item


def update_status(
    db: Session,
    item_ids: Iterable[int],
    new_status: ItemStatus,
    *criteria,
    expected_status: Optional[ItemStatus] = None,
) -> int:
    """
    Set the status of several items in one statement and return how many
    rows changed.

    ``expected_status`` and any extra SQL ``criteria`` guard the update, so a
    caller can detect items that moved underneath it by comparing the row
    count. Must run inside the caller's atomic unit.
    """
    query = db.query(Item).filter(Item.id.in_(list(item_ids)), *criteria)
    if expected_status is not None:
        query = query.filter(Item.status == expected_status)
    return query.update(
        {Item.status: new_status, Item.updated_at: func.now()},
        synchronize_session="fetch",
    )


def _assert_editable(db: Session, item: Item) -> None:
    if item.status != ItemStatus.AVAILABLE:
        raise ItemUnavailableError(
            f"Item is {item.status.value} and can no longer be changed", item_id=item.id
        )
    open_swap = (
        db.query(Swap.id)
        .filter(
            Swap.status.in_(OPEN_SWAP_STATUSES),
            or_(Swap.initiator_item_id == item.id, Swap.receiver_item_id == item.id),
        )
        .first()
    )
    if open_swap is not None:
        raise ItemUnavailableError(
            "Item is part of an open swap and can no longer be changed", item_id=item.id
        )


def update_item(db: Session, item_id: int, actor_id: int, changes: ItemUpdate) -> Item:
    """Owner edit of listing attributes while no transaction references the item."""
    item = assert_owned_by(db, item_id, actor_id)
    _assert_editable(db, item)

    actor = db.get(User, actor_id)
    values = {getattr(Item, field): value for field, value in changes.model_dump(exclude_unset=True).items()}
    values.update({Item.updated_by: actor.email if actor else None, Item.updated_at: func.now()})

    # Re-check editability in the UPDATE itself; a swap or redemption may
    # have claimed the item since it was read
    open_swap = exists().where(
        Swap.status.in_(OPEN_SWAP_STATUSES),
        or_(Swap.initiator_item_id == item_id, Swap.receiver_item_id == item_id),
    )
    with atomic(db):
        updated = (
            db.query(Item)
            .filter(Item.id == item_id, Item.status == ItemStatus.AVAILABLE, ~open_swap)
            .update(values, synchronize_session="fetch")
        )
        if updated != 1:
            logger.warning(
                f"Edit of item {item_id} lost a race with a swap or redemption",
                extra={"event": "conflict", "item_id": item_id, "user_id": actor_id},
            )
            raise ItemUnavailableError("Item is no longer available and can no longer be changed", item_id=item_id)
    db.refresh(item)
    return item


def delete_item(db: Session, item_id: int, actor_id: int) -> None:
    item = assert_owned_by(db, item_id, actor_id)
    _assert_editable(db, item)
    has_history = (
        db.query(Swap.id)
        .filter(or_(Swap.initiator_item_id == item.id, Swap.receiver_item_id == item.id))
        .first()
    )
    if has_history is not None:
        raise InvalidStateError("Item has swap history and cannot be deleted", item_id=item.id)

    with atomic(db):
        db.delete(item)
    logger.info(
        f"Item {item_id} removed by owner {actor_id}",
        extra={"event": "item_deleted", "item_id": item_id, "user_id": actor_id},
    )
