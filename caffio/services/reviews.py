"""
Rating Aggregator

Stores reviews and keeps the cafe's (rating_avg, rating_count) pair equal
to the mean and count of its reviews.

The cafe row is locked (SELECT ... FOR UPDATE) before the review is
inserted and the aggregate is recomputed by the database in the same
transaction, so concurrent reviews for one cafe are applied one after
the other instead of overwriting each other's result.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from caffio.core.exceptions import NotFoundError
from caffio.models import Cafe, Customer, Review
from caffio.schemas import ReviewCreate

logger = logging.getLogger(__name__)


async def add_review(db: AsyncSession, data: ReviewCreate) -> Review:
    """
    Create a review and recompute the cafe's rating aggregate.

    Raises:
        NotFoundError: Unknown cafe or customer
    """
    result = await db.execute(
        select(Cafe).where(Cafe.id == data.cafe_id).with_for_update()
    )
    cafe = result.scalar_one_or_none()
    if cafe is None:
        raise NotFoundError(f"Cafe {data.cafe_id} not found")

    customer_name = data.customer_name
    if data.customer_id is not None:
        customer = await db.get(Customer, data.customer_id)
        if customer is None:
            raise NotFoundError(f"Customer {data.customer_id} not found")
        customer_name = customer_name or customer.name

    review = Review(
        cafe_id=cafe.id,
        customer_id=data.customer_id,
        customer_name=customer_name,
        rating=data.rating,
        text=data.text,
    )
    db.add(review)
    await db.flush()

    aggregate = await db.execute(
        select(func.avg(Review.rating), func.count(Review.id))
        .where(Review.cafe_id == cafe.id)
    )
    rating_avg, rating_count = aggregate.one()

    cafe.rating_avg = float(rating_avg)
    cafe.rating_count = rating_count
    await db.commit()
    await db.refresh(review)

    logger.info(
        f"Review #{review.id} for cafe #{cafe.id} ({data.rating}★) - "
        f"rating now {cafe.rating_avg:.2f} over {cafe.rating_count} review(s)"
    )
    return review


async def list_reviews(db: AsyncSession, cafe_id: int) -> list[Review]:
    """Reviews for a cafe, newest first."""
    result = await db.execute(
        select(Review)
        .where(Review.cafe_id == cafe_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(result.scalars().all())
