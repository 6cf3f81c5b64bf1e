import pytest

from rewear.core.exceptions import ConflictError, InsufficientFundsError, NotFoundError
from rewear.database import atomic
from rewear.models.points import PointsLedgerEntry
from rewear.models.user import User
from rewear.schemas.user import UserCreate
from rewear.services import points
from rewear.services import users as user_service


def test_signup_grant_is_credited_and_recorded(db):
    user = user_service.create_user(
        db, UserCreate(email="Maya@Example.com", first_name="Maya", last_name="Ortiz")
    )

    assert user.email == "maya@example.com"
    assert user.points == 100
    entries = points.list_entries(db, user.id)
    assert [(e.delta_points, e.reason, e.balance_after) for e in entries] == [(100, "signup_bonus", 100)]


def test_duplicate_email_is_rejected(db, make_user):
    make_user(email="dup@example.com")
    with pytest.raises(ConflictError):
        user_service.create_user(db, UserCreate(email="DUP@example.com", first_name="A", last_name="B"))


def test_debit_and_credit_update_balance(db, make_user):
    user = make_user(points=50)

    with atomic(db):
        assert points.debit(db, user.id, 20, ref_type="redemption", ref_id=1) == 30
    with atomic(db):
        assert points.credit(db, user.id, 5, reason="adjustment") == 35

    assert points.get_balance(db, user.id) == 35
    deltas = [e.delta_points for e in points.list_entries(db, user.id)]
    assert deltas[:2] == [5, -20]


def test_debit_exact_balance_reaches_zero(db, make_user):
    user = make_user(points=40)
    with atomic(db):
        assert points.debit(db, user.id, 40) == 0


def test_debit_more_than_balance_changes_nothing(db, make_user):
    user = make_user(points=10)

    with pytest.raises(InsufficientFundsError) as exc_info:
        with atomic(db):
            points.debit(db, user.id, 11)

    assert exc_info.value.context == {"balance": 10, "required": 11}
    assert points.get_balance(db, user.id) == 10


@pytest.mark.parametrize("amount", [0, -5])
def test_non_positive_amounts_are_rejected(db, make_user, amount):
    user = make_user(points=10)
    with pytest.raises(ValueError):
        points.debit(db, user.id, amount)
    with pytest.raises(ValueError):
        points.credit(db, user.id, amount)


def test_unknown_user(db):
    with pytest.raises(NotFoundError):
        points.get_balance(db, 12345)


def test_concurrent_debit_cannot_overdraw(db, other_db, make_user):
    user = make_user(points=30)
    # The second request has already read the balance of 30
    assert other_db.get(User, user.id).points == 30

    with atomic(db):
        points.debit(db, user.id, 20)

    with pytest.raises(InsufficientFundsError):
        with atomic(other_db):
            points.debit(other_db, user.id, 20)

    db.expire_all()
    assert points.get_balance(db, user.id) == 10
    assert db.query(PointsLedgerEntry).filter(PointsLedgerEntry.delta_points == -20).count() == 1
