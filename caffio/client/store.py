"""
Dashboard state for a cafe owner.

Holds the signed-in owner's cafe, orders, menus and reviews, and routes
edits through the API so the local copy matches what the server stored.
"""

import asyncio
import logging
from typing import Any, Optional

from caffio.client.api import CaffioClient

logger = logging.getLogger(__name__)


class DashboardStore:
    def __init__(self, client: CaffioClient, cafe_id: int, user: Optional[dict[str, Any]] = None):
        self.client = client
        self.cafe_id = cafe_id
        self.user = user
        self.cafe: Optional[dict[str, Any]] = None
        self.orders: list[dict[str, Any]] = []
        self.menus: list[dict[str, Any]] = []
        self.reviews: list[dict[str, Any]] = []

    @classmethod
    async def login(cls, client: CaffioClient, email: str, password: str) -> "DashboardStore":
        """Sign the owner in and load everything the dashboard shows."""
        auth = await client.admin_login(email, password)
        store = cls(client, auth["cafe"]["id"], user=auth["user"])
        store.cafe = auth["cafe"]
        await store.refresh_all()
        return store

    @property
    def menu_items(self) -> list[dict[str, Any]]:
        return [item for menu in self.menus for item in menu.get("items", [])]

    def orders_by_status(self, status: str) -> list[dict[str, Any]]:
        return [order for order in self.orders if order["status"] == status]

    # =========================================================================
    # LOADING
    # =========================================================================

    async def refresh_cafe(self) -> None:
        self.cafe = await self.client.get_cafe(self.cafe_id)

    async def refresh_orders(self) -> None:
        self.orders = await self.client.list_orders_for_cafe(self.cafe_id)

    async def refresh_menus(self) -> None:
        self.menus = await self.client.list_menus(self.cafe_id)

    async def refresh_reviews(self) -> None:
        self.reviews = await self.client.list_reviews(self.cafe_id)

    async def refresh_all(self) -> None:
        await asyncio.gather(
            self.refresh_cafe(),
            self.refresh_orders(),
            self.refresh_menus(),
            self.refresh_reviews(),
        )
        logger.debug(
            f"Dashboard for cafe #{self.cafe_id}: {len(self.orders)} order(s), "
            f"{len(self.menu_items)} menu item(s), {len(self.reviews)} review(s)"
        )

    # =========================================================================
    # EDITS
    # =========================================================================

    async def update_order_status(self, order_id: int, status: str) -> dict[str, Any]:
        updated = await self.client.update_order_status(order_id, status)
        self.orders = [updated if o["id"] == order_id else o for o in self.orders]
        return updated

    async def update_cafe(self, **fields: Any) -> dict[str, Any]:
        updated = await self.client.update_cafe(self.cafe_id, **fields)
        self.cafe = {**(self.cafe or {}), **updated}
        return updated

    async def add_menu_item(self, menu_id: int, name: str, price: float, **fields: Any) -> dict[str, Any]:
        item = await self.client.create_menu_item(menu_id, name, price, **fields)
        await self.refresh_menus()
        return item

    async def update_menu_item(self, item_id: int, **fields: Any) -> dict[str, Any]:
        item = await self.client.update_menu_item(item_id, **fields)
        await self.refresh_menus()
        return item

    async def delete_menu_item(self, item_id: int) -> dict[str, Any]:
        item = await self.client.delete_menu_item(item_id)
        await self.refresh_menus()
        return item
