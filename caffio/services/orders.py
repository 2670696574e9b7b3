"""
Order Engine

Creates orders from menu item references, snapshots each line at the
price of the moment, and records status changes.

Status updates accept any OrderStatus value from any current status;
there is no transition table. Clients learn about changes by polling
(see ``caffio.client.watcher``), so nothing is pushed from here.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from caffio.core.exceptions import InvalidArgumentError, NotFoundError
from caffio.models import Cafe, Customer, MenuItem, Order, OrderItem, OrderStatus
from caffio.schemas import OrderCreate

logger = logging.getLogger(__name__)

ORDER_LOAD_OPTIONS = (
    selectinload(Order.items),
    selectinload(Order.customer),
    selectinload(Order.cafe),
)

NEWEST_FIRST = (Order.created_at.desc(), Order.id.desc())


async def _load_order(db: AsyncSession, order_id: int) -> Order:
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(*ORDER_LOAD_OPTIONS)
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return order


async def create_order(db: AsyncSession, data: OrderCreate) -> Order:
    """
    Create an order with one snapshot line per requested item.

    Every reference is resolved before anything is added to the session,
    so a single unknown menu item aborts the whole order. The order and
    its lines are committed together.

    Raises:
        NotFoundError: Unknown customer, cafe or menu item
    """
    if await db.get(Customer, data.customer_id) is None:
        raise NotFoundError(f"Customer {data.customer_id} not found")
    if await db.get(Cafe, data.cafe_id) is None:
        raise NotFoundError(f"Cafe {data.cafe_id} not found")

    requested_ids = {item.menu_item_id for item in data.items}
    result = await db.execute(select(MenuItem).where(MenuItem.id.in_(requested_ids)))
    menu_items = {menu_item.id: menu_item for menu_item in result.scalars()}

    total = Decimal("0.00")
    lines = []
    for item in data.items:
        menu_item = menu_items.get(item.menu_item_id)
        if menu_item is None:
            raise NotFoundError(f"Menu item {item.menu_item_id} not found")

        total += menu_item.price * item.quantity
        lines.append(
            OrderItem(
                menu_item_id=menu_item.id,
                name=menu_item.name,
                description=menu_item.description,
                price=menu_item.price,
                quantity=item.quantity,
            )
        )

    order = Order(
        customer_id=data.customer_id,
        cafe_id=data.cafe_id,
        status=OrderStatus.PENDING,
        order_type=data.order_type,
        total=total,
        delivery_address=data.delivery_address,
        customer_phone=data.customer_phone,
        customer_name=data.customer_name,
        notes=data.notes,
        items=lines,
    )
    db.add(order)
    await db.commit()

    logger.info(
        f"Order #{order.id} created for customer #{data.customer_id} "
        f"at cafe #{data.cafe_id} - {len(lines)} line(s), total {total}"
    )
    return await _load_order(db, order.id)


async def update_order_status(db: AsyncSession, order_id: int, status: str) -> Order:
    """
    Set an order's status.

    Any valid status is accepted regardless of the current one
    (``delivered -> pending`` included).

    Raises:
        InvalidArgumentError: ``status`` is not an OrderStatus value
        NotFoundError: Unknown order
    """
    try:
        new_status = OrderStatus(status)
    except ValueError:
        raise InvalidArgumentError(f"Invalid status: {status}")

    order = await db.get(Order, order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")

    previous = order.status
    order.status = new_status
    await db.commit()

    logger.info(f"Order #{order_id} status: {previous.value} -> {new_status.value}")
    return await _load_order(db, order_id)


async def get_order(db: AsyncSession, order_id: int) -> Order:
    return await _load_order(db, order_id)


async def list_orders_for_cafe(db: AsyncSession, cafe_id: int) -> list[Order]:
    result = await db.execute(
        select(Order)
        .where(Order.cafe_id == cafe_id)
        .options(*ORDER_LOAD_OPTIONS)
        .order_by(*NEWEST_FIRST)
    )
    return list(result.scalars().all())


async def list_orders_for_customer(db: AsyncSession, customer_id: int) -> list[Order]:
    result = await db.execute(
        select(Order)
        .where(Order.customer_id == customer_id)
        .options(*ORDER_LOAD_OPTIONS)
        .order_by(*NEWEST_FIRST)
    )
    return list(result.scalars().all())
