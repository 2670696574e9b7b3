"""
Customer accounts and favorites.

Adding a favorite twice and removing one that is not there are both
no-ops, so the apps never have to show an "already a favorite" error.
Every call returns the full profile after the change.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from caffio.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from caffio.core.security import hash_password, verify_password
from caffio.models import (
    Cafe,
    Customer,
    CustomerFavoriteCafe,
    CustomerFavoriteMenuItem,
    MenuItem,
)
from caffio.schemas import CustomerSignup, LoginRequest

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


async def _load_customer(db: AsyncSession, customer_id: int) -> Customer:
    result = await db.execute(
        select(Customer)
        .where(Customer.id == customer_id)
        .options(
            selectinload(Customer.favorite_cafe_links).selectinload(CustomerFavoriteCafe.cafe),
            selectinload(Customer.favorite_menu_item_links).selectinload(CustomerFavoriteMenuItem.menu_item),
        )
        .execution_options(populate_existing=True)
    )
    customer = result.scalar_one_or_none()
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer


async def _ensure_customer_exists(db: AsyncSession, customer_id: int) -> None:
    if await db.get(Customer, customer_id) is None:
        raise NotFoundError("Customer not found")


async def _commit_ignoring_duplicate(db: AsyncSession) -> None:
    """Commit an upsert; losing a race to an identical insert is fine."""
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.debug("Favorite already present, nothing to add")


# =============================================================================
# ACCOUNT
# =============================================================================

async def signup_customer(db: AsyncSession, data: CustomerSignup) -> Customer:
    """
    Raises:
        ConflictError: Email already registered
    """
    existing = await db.execute(select(Customer.id).where(Customer.email == data.email))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Email already registered")

    customer = Customer(
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
    )
    db.add(customer)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email already registered")

    logger.info(f"Customer #{customer.id} signed up")
    return await _load_customer(db, customer.id)


async def login_customer(db: AsyncSession, data: LoginRequest) -> Customer:
    """
    Raises:
        UnauthorizedError: Unknown email or wrong password
    """
    result = await db.execute(select(Customer).where(Customer.email == data.email))
    customer = result.scalar_one_or_none()

    if customer is None or not verify_password(data.password, customer.password_hash):
        raise UnauthorizedError(INVALID_CREDENTIALS)

    return await _load_customer(db, customer.id)


async def get_customer_profile(db: AsyncSession, customer_id: int) -> Customer:
    return await _load_customer(db, customer_id)


# =============================================================================
# FAVORITES
# =============================================================================

async def add_favorite_cafe(db: AsyncSession, customer_id: int, cafe_id: int) -> Customer:
    await _ensure_customer_exists(db, customer_id)
    if await db.get(Cafe, cafe_id) is None:
        raise NotFoundError(f"Cafe {cafe_id} not found")

    if await db.get(CustomerFavoriteCafe, (customer_id, cafe_id)) is None:
        db.add(CustomerFavoriteCafe(customer_id=customer_id, cafe_id=cafe_id))
        await _commit_ignoring_duplicate(db)

    return await _load_customer(db, customer_id)


async def remove_favorite_cafe(db: AsyncSession, customer_id: int, cafe_id: int) -> Customer:
    await _ensure_customer_exists(db, customer_id)

    await db.execute(
        delete(CustomerFavoriteCafe).where(
            CustomerFavoriteCafe.customer_id == customer_id,
            CustomerFavoriteCafe.cafe_id == cafe_id,
        )
    )
    await db.commit()

    return await _load_customer(db, customer_id)


async def add_favorite_menu_item(db: AsyncSession, customer_id: int, menu_item_id: int) -> Customer:
    await _ensure_customer_exists(db, customer_id)
    if await db.get(MenuItem, menu_item_id) is None:
        raise NotFoundError(f"Menu item {menu_item_id} not found")

    if await db.get(CustomerFavoriteMenuItem, (customer_id, menu_item_id)) is None:
        db.add(CustomerFavoriteMenuItem(customer_id=customer_id, menu_item_id=menu_item_id))
        await _commit_ignoring_duplicate(db)

    return await _load_customer(db, customer_id)


async def remove_favorite_menu_item(db: AsyncSession, customer_id: int, menu_item_id: int) -> Customer:
    await _ensure_customer_exists(db, customer_id)

    await db.execute(
        delete(CustomerFavoriteMenuItem).where(
            CustomerFavoriteMenuItem.customer_id == customer_id,
            CustomerFavoriteMenuItem.menu_item_id == menu_item_id,
        )
    )
    await db.commit()

    return await _load_customer(db, customer_id)
