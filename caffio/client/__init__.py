"""
Python client for the Caffio API: HTTP wrapper, order status watcher
and the cafe owner's dashboard store.
"""

from caffio.client.api import CaffioAPIError, CaffioClient
from caffio.client.store import DashboardStore
from caffio.client.watcher import (
    STATUS_MESSAGES,
    OrderStatusWatcher,
    StatusChange,
    diff_order_statuses,
    status_message,
)

__all__ = [
    "CaffioAPIError",
    "CaffioClient",
    "DashboardStore",
    "OrderStatusWatcher",
    "StatusChange",
    "STATUS_MESSAGES",
    "diff_order_statuses",
    "status_message",
]
