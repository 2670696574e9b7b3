"""
Order Status Watcher CLI

Polls one customer's orders and prints a notification for every status
change, the way the customer app does.
Run from project root: python scripts/watch_orders.py --customer-id 1
"""

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from caffio.client import CaffioClient, OrderStatusWatcher
from caffio.core.config import get_settings, setup_logging
from caffio.services.notifications import get_notification_service


async def watch(customer_id: int, base_url: str, interval: float) -> None:
    async with CaffioClient(base_url) as client:
        watcher = OrderStatusWatcher(
            client,
            customer_id,
            get_notification_service(),
            interval=interval,
        )
        try:
            await watcher.run()
        finally:
            watcher.stop()


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Watch a customer's order statuses")
    parser.add_argument("--customer-id", type=int, required=True, help="Customer to watch")
    parser.add_argument("--base-url", default=settings.api_base_url, help="API root URL")
    parser.add_argument(
        "--interval",
        type=float,
        default=settings.order_poll_interval_seconds,
        help="Seconds between polls",
    )
    args = parser.parse_args()

    setup_logging()
    try:
        asyncio.run(watch(args.customer_id, args.base_url, args.interval))
    except KeyboardInterrupt:
        print("\n👋 Stopped")


if __name__ == "__main__":
    main()
