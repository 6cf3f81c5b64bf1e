import logging

import pytest
from sqlalchemy.exc import IntegrityError

from rewear.core.exceptions import (
    DuplicateRatingError,
    InvalidRatingError,
    NotFoundError,
    SelfRatingError,
)
from rewear.database import atomic
from rewear.enums.transaction import TransactionType
from rewear.models.rating import Rating
from rewear.models.user import User
from rewear.schemas.rating import RatingCreate
from rewear.services import ratings as rating_service


def rate(db, rater, rated, score, **link):
    return rating_service.rate(db, rater.id, RatingCreate(rated_user_id=rated.id, rating=score, **link))


def test_aggregate_is_mean_of_received_ratings(db, make_user):
    seller = make_user()
    raters = [make_user() for _ in range(3)]

    for rater, score in zip(raters, [5, 4, 2]):
        rating, rated_user = rate(db, rater, seller, score)

    assert rated_user.rating_count == 3
    assert rated_user.rating_average == pytest.approx(11 / 3)
    assert rating.rating == 2


def test_unlinked_ratings_are_not_deduplicated(db, make_user):
    seller = make_user()
    buyer = make_user()

    rate(db, buyer, seller, 5)
    _, rated_user = rate(db, buyer, seller, 3)

    assert rated_user.rating_count == 2
    assert rated_user.rating_average == pytest.approx(4.0)


def test_duplicate_rating_for_same_transaction(db, make_user):
    seller = make_user()
    buyer = make_user()
    link = {"transaction_type": TransactionType.SWAP, "transaction_id": 7}
    rate(db, buyer, seller, 4, **link)

    with pytest.raises(DuplicateRatingError):
        rate(db, buyer, seller, 1, **link)

    db.expire_all()
    user = db.get(User, seller.id)
    assert (user.rating_count, user.rating_average) == (1, pytest.approx(4.0))


def test_same_transaction_other_type_is_a_different_rating(db, make_user):
    seller = make_user()
    buyer = make_user()
    rate(db, buyer, seller, 4, transaction_type="swap", transaction_id=7)
    _, rated_user = rate(db, buyer, seller, 2, transaction_type="redemption", transaction_id=7)

    assert rated_user.rating_count == 2


def test_concurrent_duplicate_hits_unique_constraint(db, other_db, make_user):
    seller = make_user()
    buyer = make_user()
    link = {"transaction_type": TransactionType.REDEMPTION, "transaction_id": 3}
    rate(db, buyer, seller, 5, **link)

    # Skip the pre-check, as a request that read before the first commit would
    other_db.add(Rating(rater_id=buyer.id, rated_user_id=seller.id, rating=1, **link))
    with pytest.raises(IntegrityError):
        other_db.commit()
    other_db.rollback()

    assert db.query(Rating).count() == 1


def test_lost_duplicate_race_rolls_back_without_error_log(db, other_db, make_user, caplog):
    seller = make_user()
    buyer = make_user()
    link = {"transaction_type": TransactionType.SWAP, "transaction_id": 9}
    rate(db, buyer, seller, 5, **link)

    with caplog.at_level(logging.WARNING):
        with pytest.raises(IntegrityError):
            with atomic(other_db):
                other_db.add(Rating(rater_id=buyer.id, rated_user_id=seller.id, rating=1, **link))

    assert [r for r in caplog.records if r.levelno >= logging.ERROR] == []
    assert other_db.query(Rating).count() == 1


def test_concurrent_raters_both_count(db, other_db, make_user):
    seller = make_user()
    first = make_user()
    second = make_user()
    # The second request loaded the seller before the first rating committed
    assert other_db.get(User, seller.id).rating_count == 0

    rate(db, first, seller, 5)
    _, rated_user = rate(other_db, second, seller, 2)

    assert rated_user.rating_count == 2
    assert rated_user.rating_average == pytest.approx(3.5)
    db.expire_all()
    stored = db.get(User, seller.id)
    assert (stored.rating_count, stored.rating_average) == (2, pytest.approx(3.5))


def test_self_rating(db, make_user):
    user = make_user()
    with pytest.raises(SelfRatingError):
        rate(db, user, user, 5)


@pytest.mark.parametrize("score", [0, 6, -1])
def test_score_out_of_range(db, make_user, score):
    seller = make_user()
    buyer = make_user()
    with pytest.raises(InvalidRatingError):
        rate(db, buyer, seller, score)
    assert db.query(Rating).count() == 0


def test_rated_user_must_exist(db, make_user):
    buyer = make_user()
    with pytest.raises(NotFoundError):
        rating_service.rate(db, buyer.id, RatingCreate(rated_user_id=4242, rating=5))


def test_transaction_link_needs_type_and_id():
    with pytest.raises(ValueError):
        RatingCreate(rated_user_id=1, rating=5, transaction_id=3)


def test_rating_summary_includes_viewer_rating(db, make_user):
    seller = make_user()
    buyer = make_user()
    other = make_user()
    rate(db, buyer, seller, 2)
    rate(db, other, seller, 4)

    summary = rating_service.rating_summary(db, seller.id, viewer_id=buyer.id)
    assert summary["rating_count"] == 2
    assert summary["average_rating"] == pytest.approx(3.0)
    assert summary["viewer_rating"] == 2

    assert rating_service.rating_summary(db, seller.id)["viewer_rating"] is None


def test_given_and_received_lists(db, make_user):
    seller = make_user()
    buyer = make_user()
    rating, _ = rate(db, buyer, seller, 5)

    assert [r.id for r in rating_service.list_given(db, buyer.id, buyer)] == [rating.id]
    assert [r.id for r in rating_service.list_received(db, seller.id, seller)] == [rating.id]
    assert rating_service.get_rating(db, rating.id, seller).id == rating.id
