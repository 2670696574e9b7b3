import itertools
from statistics import mean

import pytest
from sqlalchemy import select

from caffio.core.exceptions import NotFoundError
from caffio.models import Cafe, Review
from caffio.schemas import ReviewCreate
from caffio.services import reviews


async def post_review(client, cafe_id, rating, **extra):
    return await client.post("/reviews", json={"cafeId": cafe_id, "rating": rating, **extra})


async def test_rating_aggregate_tracks_reviews(client, cafe_with_menu):
    for rating in (5, 4, 2):
        response = await post_review(client, cafe_with_menu.cafe_id, rating, text="Nice")
        assert response.status_code == 201

    cafe = (await client.get(f"/cafes/{cafe_with_menu.cafe_id}")).json()

    assert cafe["ratingCount"] == 3
    assert cafe["ratingAvg"] == pytest.approx(11 / 3)
    assert len(cafe["reviews"]) == 3


async def test_reviews_listed_newest_first(client, cafe_with_menu):
    ids = []
    for rating in (3, 4, 5):
        ids.append((await post_review(client, cafe_with_menu.cafe_id, rating)).json()["id"])

    listed = await client.get(f"/reviews/{cafe_with_menu.cafe_id}")

    assert [r["id"] for r in listed.json()] == list(reversed(ids))


async def test_review_takes_customer_name(client, cafe_with_menu, customer):
    response = await post_review(
        client, cafe_with_menu.cafe_id, 5, customerId=customer["id"]
    )

    assert response.json()["customerId"] == customer["id"]
    assert response.json()["customerName"] == "Alex"


@pytest.mark.parametrize("rating", [0, 6])
async def test_rating_out_of_range(client, cafe_with_menu, rating):
    response = await post_review(client, cafe_with_menu.cafe_id, rating)

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidArgument"


async def test_review_for_unknown_cafe(client):
    response = await post_review(client, 9999, 5)

    assert response.status_code == 404


@pytest.mark.parametrize("ratings", sorted(set(itertools.permutations([1, 3, 5, 5]))))
async def test_aggregate_is_independent_of_insertion_order(db, cafe_with_menu, ratings):
    for rating in ratings:
        await reviews.add_review(db, ReviewCreate(cafe_id=cafe_with_menu.cafe_id, rating=rating))

    cafe = (
        await db.execute(
            select(Cafe)
            .where(Cafe.id == cafe_with_menu.cafe_id)
            .execution_options(populate_existing=True)
        )
    ).scalar_one()
    stored = (
        await db.execute(select(Review.rating).where(Review.cafe_id == cafe.id))
    ).scalars().all()

    assert cafe.rating_count == len(stored) == 4
    assert cafe.rating_avg == pytest.approx(mean(stored))
    assert cafe.rating_avg == pytest.approx(3.5)


async def test_add_review_unknown_customer(db, cafe_with_menu):
    with pytest.raises(NotFoundError):
        await reviews.add_review(
            db, ReviewCreate(cafe_id=cafe_with_menu.cafe_id, rating=4, customer_id=9999)
        )
