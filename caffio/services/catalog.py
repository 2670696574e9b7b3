"""
Catalog Store

Cafes, menus and menu items: listing, location search and owner edits.
"""

import logging
import math
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from caffio.core.config import get_settings
from caffio.core.exceptions import NotFoundError
from caffio.models import (
    Cafe,
    CustomerFavoriteMenuItem,
    Menu,
    MenuItem,
    OrderItem,
)
from caffio.schemas import CafeUpdate, MenuCreate, MenuItemCreate, MenuItemUpdate

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


# =============================================================================
# CAFES
# =============================================================================

async def list_cafes_by_rating(db: AsyncSession) -> list[Cafe]:
    result = await db.execute(
        select(Cafe).order_by(Cafe.rating_avg.desc(), Cafe.id)
    )
    return list(result.scalars().all())


async def list_nearest_cafes(
    db: AsyncSession,
    lat: float,
    lon: float,
    limit: Optional[int] = None,
) -> list[tuple[Cafe, float]]:
    """
    Cafes sorted by distance from (lat, lon), nearest first.

    Returns:
        (cafe, distance_km) pairs, at most ``limit`` of them
    """
    if limit is None:
        limit = get_settings().nearest_cafes_limit

    result = await db.execute(select(Cafe))
    with_distance = [
        (cafe, haversine_km(lat, lon, cafe.lat, cafe.lon))
        for cafe in result.scalars()
    ]
    with_distance.sort(key=lambda pair: pair[1])
    return with_distance[:limit]


async def get_cafe(db: AsyncSession, cafe_id: int, with_details: bool = False) -> Cafe:
    """
    Load a cafe, optionally with its menus (and items) and reviews.

    Raises:
        NotFoundError: If the cafe does not exist
    """
    query = select(Cafe).where(Cafe.id == cafe_id)
    if with_details:
        query = query.options(
            selectinload(Cafe.menus).selectinload(Menu.items),
            selectinload(Cafe.reviews),
        )

    result = await db.execute(query)
    cafe = result.scalar_one_or_none()
    if cafe is None:
        raise NotFoundError(f"Cafe {cafe_id} not found")
    return cafe


async def update_cafe(db: AsyncSession, cafe_id: int, data: CafeUpdate) -> Cafe:
    """Apply the fields present in ``data``; an empty name is ignored."""
    cafe = await get_cafe(db, cafe_id)

    changes = data.model_dump(exclude_unset=True)
    if not changes.get("name"):
        changes.pop("name", None)

    for field, value in changes.items():
        setattr(cafe, field, value)

    await db.commit()
    await db.refresh(cafe)

    logger.info(f"Cafe #{cafe.id} updated: {sorted(changes)}")
    return cafe


# =============================================================================
# MENUS
# =============================================================================

async def _load_menu(db: AsyncSession, menu_id: int) -> Menu:
    result = await db.execute(
        select(Menu)
        .where(Menu.id == menu_id)
        .options(selectinload(Menu.items))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def list_active_menus(db: AsyncSession, cafe_id: int) -> list[Menu]:
    result = await db.execute(
        select(Menu)
        .where(Menu.cafe_id == cafe_id, Menu.is_active.is_(True))
        .options(selectinload(Menu.items))
        .order_by(Menu.id)
    )
    return list(result.scalars().all())


async def create_menu(db: AsyncSession, data: MenuCreate) -> Menu:
    await get_cafe(db, data.cafe_id)

    menu = Menu(cafe_id=data.cafe_id, name=data.name or "Main", is_active=True)
    db.add(menu)
    await db.commit()

    logger.info(f"Menu #{menu.id} '{menu.name}' created for cafe #{data.cafe_id}")
    return await _load_menu(db, menu.id)


async def get_menu_item(db: AsyncSession, item_id: int) -> MenuItem:
    item = await db.get(MenuItem, item_id)
    if item is None:
        raise NotFoundError(f"Menu item {item_id} not found")
    return item


async def create_menu_item(db: AsyncSession, data: MenuItemCreate) -> MenuItem:
    menu = await db.get(Menu, data.menu_id)
    if menu is None:
        raise NotFoundError(f"Menu {data.menu_id} not found")

    fields = data.model_dump()
    fields["currency"] = (data.currency or get_settings().default_currency).upper()

    item = MenuItem(**fields)
    db.add(item)
    await db.commit()
    await db.refresh(item)

    logger.info(f"Menu item #{item.id} '{item.name}' added to menu #{menu.id}")
    return item


async def update_menu_item(db: AsyncSession, item_id: int, data: MenuItemUpdate) -> MenuItem:
    """
    Partial update. Orders already placed keep their own price snapshot,
    so a price change only affects future orders.
    """
    item = await get_menu_item(db, item_id)

    changes = data.model_dump(exclude_unset=True)
    for field in ("name", "price", "currency"):
        if changes.get(field) is None:
            changes.pop(field, None)
    if "currency" in changes:
        changes["currency"] = changes["currency"].upper()

    for field, value in changes.items():
        setattr(item, field, value)

    await db.commit()
    await db.refresh(item)

    logger.info(f"Menu item #{item.id} updated: {sorted(changes)}")
    return item


async def delete_menu_item(db: AsyncSession, item_id: int) -> MenuItem:
    """
    Delete a menu item.

    Favorites pointing at it go away with it; order lines keep their
    snapshot and only lose the reference.
    """
    item = await get_menu_item(db, item_id)

    await db.execute(
        delete(CustomerFavoriteMenuItem).where(CustomerFavoriteMenuItem.menu_item_id == item_id)
    )
    await db.execute(
        update(OrderItem).where(OrderItem.menu_item_id == item_id).values(menu_item_id=None)
    )
    await db.delete(item)
    await db.commit()

    logger.info(f"Menu item #{item_id} deleted")
    return item
