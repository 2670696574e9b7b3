"""
Admin (cafe owner) accounts.

Signing up creates the owner account and its cafe together; a cafe
without an owner, or an owner without a cafe, is never persisted.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from caffio.core.config import get_settings
from caffio.core.exceptions import ConflictError, UnauthorizedError
from caffio.core.security import hash_password, verify_password
from caffio.models import Cafe, User
from caffio.schemas import AdminSignup, LoginRequest
from caffio.services.availability import default_business_hours
from caffio.services.geo import BaseGeoService

logger = logging.getLogger(__name__)


async def _resolve_coordinates(
    data: AdminSignup,
    geo_service: BaseGeoService,
) -> tuple[float, float]:
    """
    Coordinates for the new cafe.

    Explicit lat/lon win. Otherwise the address is geocoded; when that
    fails the cafe is created at (0, 0) and can be fixed later.
    """
    if data.lat is not None and data.lon is not None:
        return data.lat, data.lon

    if data.address:
        result = await geo_service.geocode(data.address)
        if result.success:
            logger.info(
                f"Geocoded '{data.address}' -> ({result.latitude}, {result.longitude}) "
                f"via {geo_service.provider_name}"
            )
            return result.latitude, result.longitude

        logger.warning(
            f"Geocoding failed for '{data.address}': "
            f"{result.error_code} - {result.error_message}"
        )

    return 0.0, 0.0


async def signup_admin(
    db: AsyncSession,
    data: AdminSignup,
    geo_service: BaseGeoService,
) -> tuple[User, Cafe]:
    """
    Create a cafe and its owner account in one transaction.

    Raises:
        ConflictError: Email already registered
    """
    existing = await db.execute(select(User.id).where(User.email == data.email))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Email already registered")

    settings = get_settings()
    lat, lon = await _resolve_coordinates(data, geo_service)

    cafe = Cafe(
        name=data.cafe_name,
        address=data.address,
        lat=lat,
        lon=lon,
        rating_avg=0.0,
        rating_count=0,
        primary_color=data.primary_color,
        secondary_color=data.secondary_color,
        accent_color=data.accent_color,
        logo_url=data.logo_url,
        theme=data.theme,
        business_hours=default_business_hours(
            settings.default_open_time,
            settings.default_close_time,
        ),
    )
    user = User(
        email=data.email,
        password_hash=hash_password(data.password),
        cafe=cafe,
    )
    db.add_all([cafe, user])

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email already registered")

    await db.refresh(cafe)
    await db.refresh(user)

    logger.info(f"Admin #{user.id} signed up with cafe #{cafe.id} '{cafe.name}'")
    return user, cafe


async def login_admin(db: AsyncSession, data: LoginRequest) -> tuple[User, Cafe]:
    """
    Raises:
        UnauthorizedError: Unknown email or wrong password
    """
    result = await db.execute(
        select(User)
        .where(User.email == data.email)
        .options(selectinload(User.cafe))
    )
    user = result.scalar_one_or_none()

    if user is None or not verify_password(data.password, user.password_hash):
        raise UnauthorizedError("Invalid email or password")

    return user, user.cafe
