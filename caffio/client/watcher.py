"""
Order Status Watcher

Polls a customer's orders and raises one notification per observed
status change. There is no push channel; the API is polled every
``interval`` seconds while the app is in the foreground, and once
immediately when it comes back to the foreground.

The first successful poll only records a baseline. Orders that appear
for the first time are recorded without a notification.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import httpx

from caffio.client.api import CaffioAPIError, CaffioClient
from caffio.core.config import get_settings
from caffio.services.notifications import BaseNotificationService

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    "preparing": "Your order is being prepared!",
    "ready": "Your order is ready for pickup!",
    "on_the_way": "Your order is on the way!",
    "delivered": "Your order has been delivered!",
    "cancelled": "Your order has been cancelled.",
}


def status_message(status: str) -> str:
    return STATUS_MESSAGES.get(status, f"Your order status changed to {status}")


@dataclass(frozen=True)
class StatusChange:
    order_id: int
    previous_status: str
    status: str

    @property
    def title(self) -> str:
        return f"Order #{self.order_id} Update"

    @property
    def body(self) -> str:
        return status_message(self.status)


def diff_order_statuses(
    previous: dict[int, str],
    orders: Iterable[dict[str, Any]],
) -> list[StatusChange]:
    """Changes between a snapshot and a fresh order list; new orders are skipped."""
    changes = []
    for order in orders:
        order_id, status = order["id"], order["status"]
        before = previous.get(order_id)
        if before is not None and before != status:
            changes.append(StatusChange(order_id, before, status))
    return changes


class OrderStatusWatcher:
    """
    Poll loop for one customer's orders.

    Args:
        client: API client
        customer_id: Whose orders to watch
        notifier: Where notifications go (mock locally, SMS in production)
        interval: Seconds between polls; defaults to ORDER_POLL_INTERVAL_SECONDS

    Example:
        >>> watcher = OrderStatusWatcher(client, 42, get_notification_service())
        >>> task = asyncio.create_task(watcher.run())
        >>> watcher.set_foreground(False)   # app backgrounded, polling pauses
        >>> watcher.set_foreground(True)    # polls right away, then resumes
        >>> watcher.stop()
    """

    def __init__(
        self,
        client: CaffioClient,
        customer_id: int,
        notifier: BaseNotificationService,
        interval: Optional[float] = None,
    ):
        self.client = client
        self.customer_id = customer_id
        self.notifier = notifier
        self.interval = interval if interval is not None else get_settings().order_poll_interval_seconds

        self._snapshot: Optional[dict[int, str]] = None
        self._foreground = True
        self._poll_lock = asyncio.Lock()
        self._wake = asyncio.Event()
        self._stopped = asyncio.Event()

    @property
    def snapshot(self) -> dict[int, str]:
        """Last known status per order id (empty before the first poll)."""
        return dict(self._snapshot or {})

    @property
    def is_foreground(self) -> bool:
        return self._foreground

    async def poll(self) -> list[StatusChange]:
        """
        Fetch the orders once, notify about changes and replace the snapshot.

        A failed fetch is logged and leaves the snapshot untouched.
        """
        async with self._poll_lock:
            try:
                orders = await self.client.list_orders_for_customer(self.customer_id)
            except (httpx.HTTPError, CaffioAPIError) as e:
                logger.error(f"Order poll failed for customer #{self.customer_id}: {e}")
                return []

            if self._snapshot is None:
                changes = []
                logger.debug(f"Baseline recorded for {len(orders)} order(s)")
            else:
                changes = diff_order_statuses(self._snapshot, orders)

            self._snapshot = {order["id"]: order["status"] for order in orders}

            for change in changes:
                await self._notify(change)
            return changes

    async def _notify(self, change: StatusChange) -> None:
        logger.info(
            f"Order #{change.order_id}: {change.previous_status} -> {change.status}"
        )
        try:
            result = await self.notifier.send_notification(
                title=change.title,
                body=change.body,
                data={"orderId": change.order_id},
            )
        except Exception as e:
            logger.warning(f"Notification for order #{change.order_id} raised: {e}")
            return

        if not result.success:
            logger.warning(
                f"Notification for order #{change.order_id} not delivered: {result.error_message}"
            )

    async def run(self) -> None:
        """Poll until stop() is called; paused while in the background."""
        self._stopped.clear()
        logger.info(
            f"Watching orders of customer #{self.customer_id} every {self.interval:g}s"
        )

        while not self._stopped.is_set():
            self._wake.clear()
            if self._foreground:
                await self.poll()
            if self._stopped.is_set():
                break

            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass

        logger.info(f"Stopped watching orders of customer #{self.customer_id}")

    def set_foreground(self, active: bool) -> None:
        """Foreground/background transition; returning triggers an immediate poll."""
        came_back = active and not self._foreground
        self._foreground = active
        if came_back:
            self._wake.set()

    def stop(self) -> None:
        self._stopped.set()
        self._wake.set()
