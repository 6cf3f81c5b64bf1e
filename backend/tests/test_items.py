import pytest

from rewear.core.exceptions import ForbiddenError, InvalidStateError, ItemUnavailableError, NotFoundError
from rewear.enums.item import ItemCategory, ItemStatus
from rewear.models.item import Item
from rewear.schemas.item import ItemCreate, ItemFilter, ItemUpdate
from rewear.schemas.swap import SwapCreate
from rewear.services import items as item_service
from rewear.services import swaps as swap_service


def test_new_item_is_available_and_owned(db, make_user, make_item):
    owner = make_user()
    item = make_item(owner, tags=["  Denim ", "denim", "Vintage"])

    assert item.status == ItemStatus.AVAILABLE
    assert item.owner_id == owner.id
    assert item.tags == ["denim", "vintage"]


def test_create_item_for_missing_owner(db):
    data = ItemCreate(
        title="Scarf",
        description="Wool scarf",
        category="accessories",
        condition="new",
        size="one size",
        image_urls=["https://img.example.com/s.jpg"],
    )
    with pytest.raises(NotFoundError):
        item_service.create_item(db, 999, data)


def test_item_requires_an_image():
    with pytest.raises(ValueError):
        ItemCreate(
            title="Scarf",
            description="Wool scarf",
            category="accessories",
            condition="new",
            size="one size",
            image_urls=[],
        )


def test_list_available_filters(db, make_user, make_item):
    alice = make_user()
    bob = make_user()
    jacket = make_item(alice, title="Rain jacket", category="outerwear", size="L")
    make_item(alice, title="Silk blouse", category="tops", size="S", tags=["silk"])
    dress = make_item(bob, title="Summer dress", category="dresses", size="S", tags=["floral"])

    outerwear = item_service.list_available(db, ItemFilter(category=ItemCategory.OUTERWEAR))
    assert [i.id for i in outerwear] == [jacket.id]

    small_not_mine = item_service.list_available(db, ItemFilter(size="S", exclude_owner_id=alice.id))
    assert [i.id for i in small_not_mine] == [dress.id]

    by_tag = item_service.list_available(db, ItemFilter(search="FLORAL"))
    assert [i.id for i in by_tag] == [dress.id]


def test_list_available_hides_unavailable_items(db, make_user, make_item):
    owner = make_user()
    shown = make_item(owner)
    hidden = make_item(owner)
    item_service.update_status(db, [hidden.id], ItemStatus.REDEEMED)
    db.commit()

    assert [i.id for i in item_service.list_available(db)] == [shown.id]
    assert {i.id for i in item_service.list_user_items(db, owner.id)} == {shown.id, hidden.id}


def test_list_available_pagination(db, make_user, make_item):
    owner = make_user()
    created = [make_item(owner) for _ in range(5)]

    page = item_service.list_available(db, skip=1, limit=2)
    newest_first = [i.id for i in reversed(created)]
    assert [i.id for i in page] == newest_first[1:3]


def test_update_status_guard_counts_rows(db, make_user, make_item):
    owner = make_user()
    first = make_item(owner)
    second = make_item(owner)
    item_service.update_status(db, [second.id], ItemStatus.PENDING)
    db.commit()

    changed = item_service.update_status(
        db, [first.id, second.id], ItemStatus.PENDING, expected_status=ItemStatus.AVAILABLE
    )
    db.commit()

    assert changed == 1
    assert db.get(Item, first.id).status == ItemStatus.PENDING


def test_owner_can_edit_available_item(db, make_user, make_item):
    owner = make_user()
    item = make_item(owner)

    updated = item_service.update_item(db, item.id, owner.id, ItemUpdate(title="Cropped denim jacket", points_value=45))

    assert updated.title == "Cropped denim jacket"
    assert updated.points_value == 45
    assert updated.status == ItemStatus.AVAILABLE


def test_only_owner_can_edit(db, make_user, make_item):
    owner = make_user()
    stranger = make_user()
    item = make_item(owner)

    with pytest.raises(ForbiddenError):
        item_service.update_item(db, item.id, stranger.id, ItemUpdate(title="Mine now"))


def test_item_in_open_swap_is_locked(db, make_user, make_item):
    alice = make_user()
    bob = make_user()
    offered = make_item(alice)
    wanted = make_item(bob)
    swap_service.create_swap(
        db, alice.id, SwapCreate(receiver_id=bob.id, initiator_item_id=offered.id, receiver_item_id=wanted.id)
    )

    with pytest.raises(ItemUnavailableError):
        item_service.update_item(db, offered.id, alice.id, ItemUpdate(points_value=1))
    with pytest.raises(ItemUnavailableError):
        item_service.delete_item(db, wanted.id, bob.id)


def test_delete_item(db, make_user, make_item):
    owner = make_user()
    item = make_item(owner)

    item_service.delete_item(db, item.id, owner.id)

    with pytest.raises(NotFoundError):
        item_service.get_item(db, item.id)


def test_item_with_swap_history_cannot_be_deleted(db, make_user, make_item):
    alice = make_user()
    bob = make_user()
    offered = make_item(alice)
    wanted = make_item(bob)
    swap = swap_service.create_swap(
        db, alice.id, SwapCreate(receiver_id=bob.id, initiator_item_id=offered.id, receiver_item_id=wanted.id)
    )
    swap_service.transition(db, swap.id, alice.id, "cancelled")

    with pytest.raises(InvalidStateError):
        item_service.delete_item(db, offered.id, alice.id)


def test_search_matches_individual_tags(db, make_user, make_item):
    owner = make_user()
    sweater = make_item(owner, title="Knit sweater", tags=["café", "wool"])
    make_item(owner, title="Blazer", tags=["wool", "formal"])

    assert [i.id for i in item_service.list_available(db, ItemFilter(search="café"))] == [sweater.id]
    assert item_service.list_available(db, ItemFilter(search='", "')) == []
    assert item_service.list_available(db, ItemFilter(search="[")) == []


def test_search_treats_wildcards_literally(db, make_user, make_item):
    owner = make_user()
    tee = make_item(owner, title="100% cotton tee", tags=[])
    make_item(owner, title="1000 thread sheets", tags=[])
    make_item(owner, title="Slim fit chinos", tags=["slim-fit"])

    assert [i.id for i in item_service.list_available(db, ItemFilter(search="100%"))] == [tee.id]
    assert item_service.list_available(db, ItemFilter(search="slim_fit")) == []


def test_edit_after_concurrent_status_change(db, other_db, make_user, make_item):
    owner = make_user()
    item = make_item(owner, points_value=30)
    # The edit request has already read the item as available
    assert other_db.get(Item, item.id).status == ItemStatus.AVAILABLE

    item_service.update_status(db, [item.id], ItemStatus.REDEEMED, expected_status=ItemStatus.AVAILABLE)
    db.commit()

    with pytest.raises(ItemUnavailableError):
        item_service.update_item(other_db, item.id, owner.id, ItemUpdate(points_value=80))

    db.expire_all()
    stored = db.get(Item, item.id)
    assert (stored.status, stored.points_value) == (ItemStatus.REDEEMED, 30)
