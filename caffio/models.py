"""
SQLAlchemy Database Models

Cafes own menus, reviews and business hours; customers own favorites and
orders. Order lines are independent snapshots of the menu item at order
time, so later menu edits or deletions never rewrite order history.
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Numeric,
    DateTime,
    Text,
    Enum,
    Boolean,
    JSON,
    ForeignKey,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from caffio.database import Base
from caffio.services.availability import is_open


class OrderStatus(str, enum.Enum):
    """
    Order status values.

    pending -> preparing -> ready -> on_the_way (delivery only) -> delivered,
    or cancelled from anywhere. Transitions are not enforced.
    """
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    ON_THE_WAY = "on_the_way"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderType(str, enum.Enum):
    DINE_IN = "DINE_IN"
    TAKE_AWAY = "TAKE_AWAY"
    DELIVERY = "DELIVERY"


# =============================================================================
# CATALOG
# =============================================================================

class Cafe(Base):
    """A tenant business: profile, theme, business hours and rating aggregate."""
    __tablename__ = "cafes"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    address = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    lat = Column(Float, nullable=False, default=0.0)
    lon = Column(Float, nullable=False, default=0.0)

    # Derived from reviews; written only by the rating aggregator
    rating_avg = Column(Float, nullable=False, default=0.0)
    rating_count = Column(Integer, nullable=False, default=0)
    is_certified = Column(Boolean, nullable=False, default=False)

    # Theme
    primary_color = Column(String(20), nullable=True)
    secondary_color = Column(String(20), nullable=True)
    accent_color = Column(String(20), nullable=True)
    logo_url = Column(String(500), nullable=True)
    theme = Column(String(50), nullable=True)
    profile_image_url = Column(String(500), nullable=True)

    # {"monday": {"open": "08:00", "close": "20:00", "enabled": true}, ...}
    business_hours = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    menus = relationship(
        "Menu",
        back_populates="cafe",
        cascade="all, delete-orphan",
        order_by="Menu.id",
    )
    reviews = relationship(
        "Review",
        back_populates="cafe",
        cascade="all, delete-orphan",
        order_by=lambda: [Review.created_at.desc(), Review.id.desc()],
    )

    @property
    def is_open(self) -> bool:
        """Open/closed right now, by the process-local clock."""
        return is_open(self.business_hours, datetime.now())

    def __repr__(self):
        return f"<Cafe #{self.id} - {self.name}>"


class Menu(Base):
    __tablename__ = "menus"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    cafe_id = Column(Integer, ForeignKey("cafes.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False, default="Main")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    cafe = relationship("Cafe", back_populates="menus")
    items = relationship(
        "MenuItem",
        back_populates="menu",
        cascade="all, delete-orphan",
        order_by="MenuItem.id",
    )


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    menu_id = Column(Integer, ForeignKey("menus.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="AUD")
    image_url = Column(String(500), nullable=True)
    category = Column(String(50), nullable=True)
    # {"size": {"options": ["small", "medium", "large"], "default": "medium"}}
    customizations = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    menu = relationship("Menu", back_populates="items")

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.name} - {self.price} {self.currency}>"


# =============================================================================
# ACCOUNTS
# =============================================================================

class User(Base):
    """Cafe owner account used by the admin dashboard."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    cafe_id = Column(Integer, ForeignKey("cafes.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    cafe = relationship("Cafe")


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    favorite_cafe_links = relationship(
        "CustomerFavoriteCafe",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="CustomerFavoriteCafe.created_at",
    )
    favorite_menu_item_links = relationship(
        "CustomerFavoriteMenuItem",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="CustomerFavoriteMenuItem.created_at",
    )

    @property
    def favorite_cafes(self) -> list["Cafe"]:
        return [link.cafe for link in self.favorite_cafe_links if link.cafe is not None]

    @property
    def favorite_menu_items(self) -> list["MenuItem"]:
        return [
            link.menu_item
            for link in self.favorite_menu_item_links
            if link.menu_item is not None
        ]


class CustomerFavoriteCafe(Base):
    """Join row; the composite key makes each (customer, cafe) pair unique."""
    __tablename__ = "customer_favorite_cafes"

    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), primary_key=True)
    cafe_id = Column(Integer, ForeignKey("cafes.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer", back_populates="favorite_cafe_links")
    cafe = relationship("Cafe")


class CustomerFavoriteMenuItem(Base):
    __tablename__ = "customer_favorite_menu_items"

    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), primary_key=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer", back_populates="favorite_menu_item_links")
    menu_item = relationship("MenuItem")


# =============================================================================
# ORDERS
# =============================================================================

class Order(Base):
    """
    Customer order placed at one cafe.

    ``total`` is computed once at creation from the prices of that moment
    and never recomputed.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    cafe_id = Column(Integer, ForeignKey("cafes.id"), nullable=False, index=True)

    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )
    order_type = Column(
        Enum(OrderType),
        default=OrderType.DELIVERY,
        nullable=False,
    )
    total = Column(Numeric(10, 2), nullable=False)

    delivery_address = Column(String(255), nullable=True)
    customer_phone = Column(String(30), nullable=True)
    customer_name = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    customer = relationship("Customer")
    cafe = relationship("Cafe")

    def __repr__(self):
        return f"<Order #{self.id} - {self.order_type.value} - {self.status.value}>"


class OrderItem(Base):
    """Immutable snapshot of a menu item at order time."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")


# =============================================================================
# REVIEWS
# =============================================================================

class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    cafe_id = Column(Integer, ForeignKey("cafes.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)
    customer_name = Column(String(100), nullable=True)
    rating = Column(Integer, nullable=False)
    text = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    cafe = relationship("Cafe", back_populates="reviews")

    def __repr__(self):
        return f"<Review #{self.id} - cafe {self.cafe_id} - {self.rating}>"
