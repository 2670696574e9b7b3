"""
Pydantic Schemas for Request/Response Validation

Field names are snake_case in Python and camelCase on the wire
(``ratingAvg``, ``menuItemId``, ``isOpen``); both spellings are accepted
on input.
"""

import re
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from caffio.models import OrderStatus, OrderType
from caffio.services.availability import WEEKDAYS, parse_time


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, readable from ORM objects."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _validate_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().lower()
    if not re.match(r'^[\w\.\+-]+@[\w\.-]+\.\w+$', v):
        raise ValueError('Invalid email format')
    return v


# bcrypt only hashes the first 72 bytes and newer releases reject longer input
PASSWORD_MAX_BYTES = 72


def _validate_password(v: str) -> str:
    if len(v.encode('utf-8')) > PASSWORD_MAX_BYTES:
        raise ValueError(f'Password must be at most {PASSWORD_MAX_BYTES} bytes')
    return v


# =============================================================================
# CAFES
# =============================================================================

class BusinessDayHours(CamelModel):
    """One day's opening window."""
    open: str = Field(..., examples=["08:00"])
    close: str = Field(..., examples=["20:00"])
    enabled: bool = True

    @field_validator('open', 'close')
    @classmethod
    def validate_time(cls, v: str) -> str:
        parse_time(v)
        return v


class CafeUpdate(CamelModel):
    """Partial update of a cafe profile. Only fields sent are applied."""
    name: Optional[str] = Field(None, max_length=120)
    address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = None
    description: Optional[str] = None
    primary_color: Optional[str] = Field(None, max_length=20)
    secondary_color: Optional[str] = Field(None, max_length=20)
    accent_color: Optional[str] = Field(None, max_length=20)
    logo_url: Optional[str] = Field(None, max_length=500)
    theme: Optional[str] = Field(None, max_length=50)
    profile_image_url: Optional[str] = Field(None, max_length=500)
    business_hours: Optional[dict[str, BusinessDayHours]] = None

    @field_validator('business_hours')
    @classmethod
    def validate_weekdays(
        cls, v: Optional[dict[str, BusinessDayHours]]
    ) -> Optional[dict[str, BusinessDayHours]]:
        if v is None:
            return v
        unknown = sorted(set(v) - set(WEEKDAYS))
        if unknown:
            raise ValueError(f'Unknown weekday(s): {unknown}')
        return v


class ReviewResponse(CamelModel):
    id: int
    cafe_id: int
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    rating: int
    text: Optional[str] = None
    created_at: Optional[datetime] = None


class MenuItemResponse(CamelModel):
    id: int
    menu_id: int
    name: str
    description: Optional[str] = None
    price: float
    currency: str
    image_url: Optional[str] = None
    category: Optional[str] = None
    customizations: Optional[dict[str, Any]] = None


class MenuResponse(CamelModel):
    id: int
    cafe_id: int
    name: str
    is_active: bool
    items: List[MenuItemResponse] = []


class CafeResponse(CamelModel):
    """Cafe profile with its live open/closed status."""
    id: int
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    lat: float
    lon: float
    rating_avg: float
    rating_count: int
    is_certified: bool = False
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    accent_color: Optional[str] = None
    logo_url: Optional[str] = None
    theme: Optional[str] = None
    profile_image_url: Optional[str] = None
    business_hours: Optional[dict[str, Any]] = None
    is_open: bool
    distance_km: Optional[float] = None


class CafeDetailResponse(CafeResponse):
    menus: List[MenuResponse] = []
    reviews: List[ReviewResponse] = []


# =============================================================================
# MENUS
# =============================================================================

class CustomizationGroup(CamelModel):
    """Options for one customization group (size, milk, ...)."""
    options: List[str] = Field(..., min_length=1)
    default: Optional[str] = None

    @model_validator(mode='after')
    def default_is_an_option(self) -> 'CustomizationGroup':
        if self.default is not None and self.default not in self.options:
            raise ValueError(f'Default {self.default!r} is not one of the options')
        return self


class MenuCreate(CamelModel):
    cafe_id: int
    name: Optional[str] = Field(None, max_length=100)


class MenuItemCreate(CamelModel):
    menu_id: int
    name: str = Field(..., min_length=1, max_length=120, examples=["Flat White"])
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, examples=["5.30"])
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    image_url: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=50)
    customizations: Optional[dict[str, CustomizationGroup]] = None


class MenuItemUpdate(CamelModel):
    name: Optional[str] = Field(None, max_length=120)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    image_url: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=50)
    customizations: Optional[dict[str, CustomizationGroup]] = None


# =============================================================================
# REVIEWS
# =============================================================================

class ReviewCreate(CamelModel):
    cafe_id: int
    rating: int = Field(..., ge=1, le=5)
    text: Optional[str] = Field(None, max_length=2000)
    customer_id: Optional[int] = None
    customer_name: Optional[str] = Field(None, max_length=100)


# =============================================================================
# CUSTOMERS
# =============================================================================

class CustomerSignup(CamelModel):
    name: Optional[str] = Field(None, max_length=100)
    email: str = Field(..., examples=["user@example.com"])
    password: str = Field(..., min_length=1)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _validate_email(v)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password(v)


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class FavoriteCafeRequest(CamelModel):
    cafe_id: int


class FavoriteMenuItemRequest(CamelModel):
    menu_item_id: int


class CustomerBrief(CamelModel):
    id: int
    name: Optional[str] = None
    email: str


class CustomerProfileResponse(CustomerBrief):
    """Customer profile. The password hash is never part of it."""
    created_at: Optional[datetime] = None
    favorite_cafes: List[CafeResponse] = []
    favorite_menu_items: List[MenuItemResponse] = []


# =============================================================================
# ORDERS
# =============================================================================

class OrderItemCreate(CamelModel):
    menu_item_id: int
    quantity: int = Field(..., ge=1, examples=[2])


class OrderCreate(CamelModel):
    customer_id: int
    cafe_id: int
    items: List[OrderItemCreate] = Field(..., min_length=1)
    order_type: OrderType = OrderType.DELIVERY
    delivery_address: Optional[str] = Field(None, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=30)
    customer_name: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)


class OrderStatusUpdate(CamelModel):
    # Checked against OrderStatus by the order engine
    status: str


class OrderItemResponse(CamelModel):
    id: int
    menu_item_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    price: float
    quantity: int


class OrderResponse(CamelModel):
    id: int
    customer_id: int
    cafe_id: int
    status: OrderStatus
    order_type: OrderType
    total: float
    delivery_address: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemResponse] = []
    cafe: Optional[CafeResponse] = None
    customer: Optional[CustomerBrief] = None


# =============================================================================
# PAYMENTS
# =============================================================================

class PaymentIntentCreate(CamelModel):
    amount: float = Field(..., gt=0, examples=[17.40])
    currency: str = Field(default="usd", min_length=3, max_length=3)
    order_id: Optional[int] = None
    customer_id: Optional[int] = None


class PaymentIntentResponse(CamelModel):
    client_secret: Optional[str]
    payment_intent_id: str


class PaymentIntentStatusResponse(CamelModel):
    id: str
    status: str
    amount: float
    currency: str


# =============================================================================
# ADMIN AUTH
# =============================================================================

class AdminSignup(CamelModel):
    email: str
    password: str = Field(..., min_length=1)
    cafe_name: str = Field(..., min_length=1, max_length=120)
    address: Optional[str] = Field(None, max_length=255)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lon: Optional[float] = Field(None, ge=-180, le=180)
    primary_color: Optional[str] = Field(None, max_length=20)
    secondary_color: Optional[str] = Field(None, max_length=20)
    accent_color: Optional[str] = Field(None, max_length=20)
    logo_url: Optional[str] = Field(None, max_length=500)
    theme: Optional[str] = Field(None, max_length=50)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _validate_email(v)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password(v)


class UserResponse(CamelModel):
    """Cafe owner account, without the password hash."""
    id: int
    email: str
    cafe_id: int
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    user: UserResponse
    cafe: CafeResponse


# =============================================================================
# COMMON
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    payment_service: str
    geo_service: str
    timestamp: datetime
