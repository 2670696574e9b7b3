"""
Caffio HTTP API.

One FastAPI app serves the customer app and the cafe-owner dashboard.
Provider-backed endpoints (payments, geocoding on signup) go through the
service factories, so ENV_MODE=development runs entirely on mocks.

Routes:
    /cafes       discovery by rating or distance, profile edits
    /menus       active menus, menu item CRUD
    /reviews     reviews and the cafe rating aggregate
    /customers   accounts and favorites
    /orders      placement, lookup, status updates
    /payments    payment intents
    /auth        cafe-owner signup and login
    /health      database and provider status
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

from fastapi import FastAPI, Depends, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text

from caffio.core.config import get_settings, setup_logging
from caffio.core.exceptions import CaffioError, InvalidArgumentError, UpstreamFailureError
from caffio.database import get_db, init_db, engine
from caffio.schemas import (
    AdminSignup,
    AuthResponse,
    CafeDetailResponse,
    CafeResponse,
    CafeUpdate,
    CustomerProfileResponse,
    CustomerSignup,
    ErrorResponse,
    FavoriteCafeRequest,
    FavoriteMenuItemRequest,
    HealthResponse,
    LoginRequest,
    MenuCreate,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    MenuResponse,
    OrderCreate,
    OrderResponse,
    OrderStatusUpdate,
    PaymentIntentCreate,
    PaymentIntentResponse,
    PaymentIntentStatusResponse,
    ReviewCreate,
    ReviewResponse,
    UserResponse,
)
from caffio.services import auth, catalog, customers, orders, reviews
from caffio.services.payment import BasePaymentService, PaymentResult, get_payment_service
from caffio.services.geo import BaseGeoService, get_geo_service

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


def error_responses(*status_codes: int) -> dict[int, dict[str, Any]]:
    """OpenAPI entries for an endpoint: request validation (400) plus its CaffioError statuses."""
    return {code: {"model": ErrorResponse} for code in (400, *status_codes)}


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, report provider wiring, dispose the pool on exit."""
    logger.info("=" * 60)
    logger.info(f"☕ {settings.app_name} v{settings.app_version}")
    logger.info(f"   Mode: {settings.env_mode.value} │ Debug: {settings.debug}")
    logger.info(f"   Database: {engine.url.get_backend_name()}")
    logger.info("=" * 60)

    await init_db()
    logger.info("✅ Schema ready")

    logger.info(f"✅ Payments via {get_payment_service().provider_name}")
    logger.info(f"✅ Geocoding via {get_geo_service().provider_name}")

    missing = settings.validate_production_config()
    if missing:
        logger.warning(f"⚠️ {settings.env_mode.value} mode without: {', '.join(missing)}")

    logger.info("✅ Accepting requests")

    yield

    await engine.dispose()
    logger.info("Connection pool closed")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Multi-tenant cafe ordering API: discovery, menus, orders, reviews, "
        "favorites and payments for the Caffio customer app and cafe dashboard."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Both client apps call the API cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def raise_for_payment_failure(result: PaymentResult) -> None:
    """Translate a failed provider call into an API error."""
    if result.success:
        return
    if result.error_code == "invalid_amount":
        raise InvalidArgumentError(result.error_message or "Invalid amount")
    raise UpstreamFailureError(result.error_message or "Payment provider error")


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    return {
        "message": f"☕ {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Database and Provider Status",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    payment_service: BasePaymentService = Depends(get_payment_service),
    geo_service: BaseGeoService = Depends(get_geo_service),
) -> HealthResponse:
    """Report each dependency; any failure makes the overall status degraded."""
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        logger.error(f"Database ping failed: {e}")
        db_status = f"unhealthy: {e}"

    checks = {
        "database": db_status,
        "payment_service": "healthy" if await payment_service.health_check() else "unhealthy",
        "geo_service": "healthy" if await geo_service.health_check() else "unhealthy",
    }
    degraded = any(value != "healthy" for value in checks.values())

    return HealthResponse(
        status="degraded" if degraded else "operational",
        timestamp=datetime.now(),
        **checks,
    )


# =============================================================================
# CAFE ENDPOINTS
# =============================================================================

@app.get(
    "/cafes",
    response_model=list[CafeResponse],
    responses=error_responses(),
    tags=["Cafes"],
    summary="List Cafes",
)
async def list_cafes(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
    db: AsyncSession = Depends(get_db),
) -> list[CafeResponse]:
    """
    All cafes by rating (best first), or the nearest ones when both
    ``lat`` and ``lon`` are given.
    """
    if lat is not None and lon is not None:
        nearest = await catalog.list_nearest_cafes(db, lat, lon)
        return [
            CafeResponse.model_validate(cafe).model_copy(
                update={"distance_km": round(distance, 3)}
            )
            for cafe, distance in nearest
        ]

    cafes = await catalog.list_cafes_by_rating(db)
    return [CafeResponse.model_validate(cafe) for cafe in cafes]


@app.get(
    "/cafes/{cafe_id}",
    response_model=CafeDetailResponse,
    responses=error_responses(404),
    tags=["Cafes"],
)
async def get_cafe(
    cafe_id: int,
    db: AsyncSession = Depends(get_db),
) -> CafeDetailResponse:
    """Cafe with its menus and reviews."""
    cafe = await catalog.get_cafe(db, cafe_id, with_details=True)
    return CafeDetailResponse.model_validate(cafe)


@app.put(
    "/cafes/{cafe_id}",
    response_model=CafeResponse,
    responses=error_responses(404),
    tags=["Cafes"],
)
async def update_cafe(
    cafe_id: int,
    data: CafeUpdate,
    db: AsyncSession = Depends(get_db),
) -> CafeResponse:
    cafe = await catalog.update_cafe(db, cafe_id, data)
    return CafeResponse.model_validate(cafe)


# =============================================================================
# MENU ENDPOINTS
# =============================================================================

@app.get(
    "/menus/{cafe_id}",
    response_model=list[MenuResponse],
    responses=error_responses(),
    tags=["Menus"],
)
async def list_menus(
    cafe_id: int,
    db: AsyncSession = Depends(get_db),
) -> list[MenuResponse]:
    """Active menus of a cafe, with their items."""
    menus = await catalog.list_active_menus(db, cafe_id)
    return [MenuResponse.model_validate(menu) for menu in menus]


@app.post(
    "/menus",
    response_model=MenuResponse,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(404),
    tags=["Menus"],
)
async def create_menu(
    data: MenuCreate,
    db: AsyncSession = Depends(get_db),
) -> MenuResponse:
    menu = await catalog.create_menu(db, data)
    return MenuResponse.model_validate(menu)


@app.post(
    "/menus/items",
    response_model=MenuItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(404),
    tags=["Menus"],
)
async def create_menu_item(
    data: MenuItemCreate,
    db: AsyncSession = Depends(get_db),
) -> MenuItemResponse:
    item = await catalog.create_menu_item(db, data)
    return MenuItemResponse.model_validate(item)


@app.put(
    "/menus/items/{item_id}",
    response_model=MenuItemResponse,
    responses=error_responses(404),
    tags=["Menus"],
)
async def update_menu_item(
    item_id: int,
    data: MenuItemUpdate,
    db: AsyncSession = Depends(get_db),
) -> MenuItemResponse:
    """Edit a menu item. Existing orders keep the price they were placed at."""
    item = await catalog.update_menu_item(db, item_id, data)
    return MenuItemResponse.model_validate(item)


@app.delete(
    "/menus/items/{item_id}",
    response_model=MenuItemResponse,
    responses=error_responses(404),
    tags=["Menus"],
)
async def delete_menu_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
) -> MenuItemResponse:
    item = await catalog.delete_menu_item(db, item_id)
    return MenuItemResponse.model_validate(item)


# =============================================================================
# REVIEW ENDPOINTS
# =============================================================================

@app.get(
    "/reviews/{cafe_id}",
    response_model=list[ReviewResponse],
    responses=error_responses(),
    tags=["Reviews"],
)
async def list_reviews(
    cafe_id: int,
    db: AsyncSession = Depends(get_db),
) -> list[ReviewResponse]:
    found = await reviews.list_reviews(db, cafe_id)
    return [ReviewResponse.model_validate(review) for review in found]


@app.post(
    "/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(404),
    tags=["Reviews"],
)
async def create_review(
    data: ReviewCreate,
    db: AsyncSession = Depends(get_db),
) -> ReviewResponse:
    """Add a review and update the cafe's rating aggregate."""
    review = await reviews.add_review(db, data)
    return ReviewResponse.model_validate(review)


# =============================================================================
# CUSTOMER ENDPOINTS
# =============================================================================

@app.post(
    "/customers/signup",
    response_model=CustomerProfileResponse,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(409),
    tags=["Customers"],
)
async def customer_signup(
    data: CustomerSignup,
    db: AsyncSession = Depends(get_db),
) -> CustomerProfileResponse:
    customer = await customers.signup_customer(db, data)
    return CustomerProfileResponse.model_validate(customer)


@app.post(
    "/customers/login",
    response_model=CustomerProfileResponse,
    responses=error_responses(401),
    tags=["Customers"],
)
async def customer_login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> CustomerProfileResponse:
    customer = await customers.login_customer(db, data)
    return CustomerProfileResponse.model_validate(customer)


@app.get(
    "/customers/{customer_id}",
    response_model=CustomerProfileResponse,
    responses=error_responses(404),
    tags=["Customers"],
)
async def get_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
) -> CustomerProfileResponse:
    customer = await customers.get_customer_profile(db, customer_id)
    return CustomerProfileResponse.model_validate(customer)


@app.post(
    "/customers/{customer_id}/favorites/cafes",
    response_model=CustomerProfileResponse,
    responses=error_responses(404),
    tags=["Customers"],
)
async def add_favorite_cafe(
    customer_id: int,
    data: FavoriteCafeRequest,
    db: AsyncSession = Depends(get_db),
) -> CustomerProfileResponse:
    customer = await customers.add_favorite_cafe(db, customer_id, data.cafe_id)
    return CustomerProfileResponse.model_validate(customer)


@app.delete(
    "/customers/{customer_id}/favorites/cafes/{cafe_id}",
    response_model=CustomerProfileResponse,
    responses=error_responses(404),
    tags=["Customers"],
)
async def remove_favorite_cafe(
    customer_id: int,
    cafe_id: int,
    db: AsyncSession = Depends(get_db),
) -> CustomerProfileResponse:
    customer = await customers.remove_favorite_cafe(db, customer_id, cafe_id)
    return CustomerProfileResponse.model_validate(customer)


@app.post(
    "/customers/{customer_id}/favorites/menu-items",
    response_model=CustomerProfileResponse,
    responses=error_responses(404),
    tags=["Customers"],
)
async def add_favorite_menu_item(
    customer_id: int,
    data: FavoriteMenuItemRequest,
    db: AsyncSession = Depends(get_db),
) -> CustomerProfileResponse:
    customer = await customers.add_favorite_menu_item(db, customer_id, data.menu_item_id)
    return CustomerProfileResponse.model_validate(customer)


@app.delete(
    "/customers/{customer_id}/favorites/menu-items/{menu_item_id}",
    response_model=CustomerProfileResponse,
    responses=error_responses(404),
    tags=["Customers"],
)
async def remove_favorite_menu_item(
    customer_id: int,
    menu_item_id: int,
    db: AsyncSession = Depends(get_db),
) -> CustomerProfileResponse:
    customer = await customers.remove_favorite_menu_item(db, customer_id, menu_item_id)
    return CustomerProfileResponse.model_validate(customer)


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(404),
    tags=["Orders"],
    summary="Create Order",
)
async def create_order(
    data: OrderCreate,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    """
    Place an order. Each line is priced from the menu at this moment and
    the total is fixed from then on.
    """
    logger.info(f"Creating order for customer #{data.customer_id} at cafe #{data.cafe_id}")
    order = await orders.create_order(db, data)
    return OrderResponse.model_validate(order)


@app.get(
    "/orders",
    response_model=list[OrderResponse],
    responses=error_responses(),
    tags=["Orders"],
    summary="List Orders",
)
async def list_orders(
    cafe_id: Optional[int] = Query(None, alias="cafeId"),
    customer_id: Optional[int] = Query(None, alias="customerId"),
    db: AsyncSession = Depends(get_db),
) -> list[OrderResponse]:
    """Orders of one cafe or one customer, newest first; nothing without a filter."""
    if cafe_id is not None:
        found = await orders.list_orders_for_cafe(db, cafe_id)
    elif customer_id is not None:
        found = await orders.list_orders_for_customer(db, customer_id)
    else:
        found = []

    return [OrderResponse.model_validate(order) for order in found]


@app.get(
    "/orders/{order_id}",
    response_model=OrderResponse,
    responses=error_responses(404),
    tags=["Orders"],
)
async def get_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    """Get a specific order by ID."""
    order = await orders.get_order(db, order_id)
    return OrderResponse.model_validate(order)


@app.put(
    "/orders/{order_id}/status",
    response_model=OrderResponse,
    responses=error_responses(404),
    tags=["Orders"],
)
async def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    order = await orders.update_order_status(db, order_id, data.status)
    return OrderResponse.model_validate(order)


# =============================================================================
# PAYMENT ENDPOINTS
# =============================================================================

@app.post(
    "/payments/create-intent",
    response_model=PaymentIntentResponse,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(502),
    tags=["Payments"],
)
async def create_payment_intent(
    data: PaymentIntentCreate,
    payment_service: BasePaymentService = Depends(get_payment_service),
) -> PaymentIntentResponse:
    """
    Create a payment intent. The app confirms it with the client secret;
    the order itself is not touched.
    """
    metadata = {}
    if data.order_id is not None:
        metadata["orderId"] = str(data.order_id)
    if data.customer_id is not None:
        metadata["customerId"] = str(data.customer_id)

    result = await payment_service.create_payment_intent(
        amount=data.amount,
        currency=data.currency,
        metadata=metadata,
    )
    raise_for_payment_failure(result)

    return PaymentIntentResponse(
        client_secret=result.client_secret,
        payment_intent_id=result.payment_intent_id,
    )


@app.get(
    "/payments/intent/{payment_intent_id}",
    response_model=PaymentIntentStatusResponse,
    responses=error_responses(502),
    tags=["Payments"],
)
async def get_payment_intent(
    payment_intent_id: str,
    payment_service: BasePaymentService = Depends(get_payment_service),
) -> PaymentIntentStatusResponse:
    result = await payment_service.retrieve_payment_intent(payment_intent_id)
    raise_for_payment_failure(result)

    return PaymentIntentStatusResponse(
        id=result.payment_intent_id,
        status=result.status,
        amount=result.amount,
        currency=result.currency,
    )


@app.post(
    "/payments/intent/{payment_intent_id}/cancel",
    response_model=PaymentIntentStatusResponse,
    responses=error_responses(502),
    tags=["Payments"],
)
async def cancel_payment_intent(
    payment_intent_id: str,
    payment_service: BasePaymentService = Depends(get_payment_service),
) -> PaymentIntentStatusResponse:
    result = await payment_service.cancel_payment_intent(payment_intent_id)
    raise_for_payment_failure(result)

    return PaymentIntentStatusResponse(
        id=result.payment_intent_id,
        status=result.status,
        amount=result.amount,
        currency=result.currency,
    )


# =============================================================================
# ADMIN AUTH ENDPOINTS
# =============================================================================

@app.post(
    "/auth/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(409),
    tags=["Admin Auth"],
)
async def admin_signup(
    data: AdminSignup,
    db: AsyncSession = Depends(get_db),
    geo_service: BaseGeoService = Depends(get_geo_service),
) -> AuthResponse:
    """Create a cafe together with its owner account."""
    user, cafe = await auth.signup_admin(db, data, geo_service)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        cafe=CafeResponse.model_validate(cafe),
    )


@app.post(
    "/auth/login",
    response_model=AuthResponse,
    responses=error_responses(401),
    tags=["Admin Auth"],
)
async def admin_login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    user, cafe = await auth.login_admin(db, data)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        cafe=CafeResponse.model_validate(cafe),
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(CaffioError)
async def caffio_exception_handler(request: Request, exc: CaffioError) -> JSONResponse:
    """Domain errors carry their own HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{exc.error} on {request.method} {request.url.path}: {exc}")
    else:
        logger.info(f"{exc.error} on {request.method} {request.url.path}: {exc}")

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Malformed input is reported as InvalidArgument (400)."""
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))

    return JSONResponse(
        status_code=400,
        content=InvalidArgumentError("; ".join(problems)).to_dict(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    content: dict[str, Any] = {
        "success": False,
        "error": "Internal Server Error",
        "detail": str(exc) if settings.debug else "An unexpected error occurred",
    }
    return JSONResponse(status_code=500, content=content)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "caffio.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
