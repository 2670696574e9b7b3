"""
Caffio HTTP Client

Thin async wrapper over the REST API, used by the order status watcher,
the admin dashboard store and the scripts. Responses are returned as the
decoded camelCase JSON the API sends.

Usage:
    async with CaffioClient("http://localhost:3001") as client:
        cafes = await client.list_cafes(lat=-33.8688, lon=151.2093)
"""

import logging
from typing import Any, Optional

import httpx

from caffio.core.config import get_settings

logger = logging.getLogger(__name__)


class CaffioAPIError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, error: str, detail: Optional[str] = None):
        self.status_code = status_code
        self.error = error
        self.detail = detail
        super().__init__(f"{status_code} {error}: {detail}")


class CaffioClient:
    """
    Async client for the Caffio API.

    Args:
        base_url: API root; defaults to the API_BASE_URL setting
        http_client: Pre-built httpx client (tests pass one bound to the app)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        if http_client is None:
            http_client = httpx.AsyncClient(
                base_url=base_url or get_settings().api_base_url,
                timeout=timeout,
            )
            self._owns_client = True
        else:
            self._owns_client = False
        self._http = http_client

    async def close(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "CaffioClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._http.request(method, path, **kwargs)

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            logger.debug(f"{method} {path} failed: {response.status_code} {body}")
            raise CaffioAPIError(
                response.status_code,
                body.get("error", response.reason_phrase),
                body.get("detail") or response.text,
            )

        return response.json()

    # =========================================================================
    # CAFES
    # =========================================================================

    async def list_cafes(
        self,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
    ) -> list[dict[str, Any]]:
        params = {}
        if lat is not None and lon is not None:
            params = {"lat": lat, "lon": lon}
        return await self._request("GET", "/cafes", params=params)

    async def get_cafe(self, cafe_id: int) -> dict[str, Any]:
        return await self._request("GET", f"/cafes/{cafe_id}")

    async def update_cafe(self, cafe_id: int, **fields: Any) -> dict[str, Any]:
        return await self._request("PUT", f"/cafes/{cafe_id}", json=fields)

    # =========================================================================
    # MENUS
    # =========================================================================

    async def list_menus(self, cafe_id: int) -> list[dict[str, Any]]:
        return await self._request("GET", f"/menus/{cafe_id}")

    async def create_menu(self, cafe_id: int, name: Optional[str] = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"cafeId": cafe_id}
        if name:
            payload["name"] = name
        return await self._request("POST", "/menus", json=payload)

    async def create_menu_item(
        self,
        menu_id: int,
        name: str,
        price: float,
        **fields: Any,
    ) -> dict[str, Any]:
        payload = {"menuId": menu_id, "name": name, "price": price, **fields}
        return await self._request("POST", "/menus/items", json=payload)

    async def update_menu_item(self, item_id: int, **fields: Any) -> dict[str, Any]:
        return await self._request("PUT", f"/menus/items/{item_id}", json=fields)

    async def delete_menu_item(self, item_id: int) -> dict[str, Any]:
        return await self._request("DELETE", f"/menus/items/{item_id}")

    # =========================================================================
    # REVIEWS
    # =========================================================================

    async def list_reviews(self, cafe_id: int) -> list[dict[str, Any]]:
        return await self._request("GET", f"/reviews/{cafe_id}")

    async def create_review(
        self,
        cafe_id: int,
        rating: int,
        text: Optional[str] = None,
        customer_id: Optional[int] = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"cafeId": cafe_id, "rating": rating}
        if text is not None:
            payload["text"] = text
        if customer_id is not None:
            payload["customerId"] = customer_id
        return await self._request("POST", "/reviews", json=payload)

    # =========================================================================
    # CUSTOMERS
    # =========================================================================

    async def customer_signup(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
    ) -> dict[str, Any]:
        payload = {"email": email, "password": password, "name": name}
        return await self._request("POST", "/customers/signup", json=payload)

    async def customer_login(self, email: str, password: str) -> dict[str, Any]:
        payload = {"email": email, "password": password}
        return await self._request("POST", "/customers/login", json=payload)

    async def get_customer(self, customer_id: int) -> dict[str, Any]:
        return await self._request("GET", f"/customers/{customer_id}")

    async def add_favorite_cafe(self, customer_id: int, cafe_id: int) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/customers/{customer_id}/favorites/cafes",
            json={"cafeId": cafe_id},
        )

    async def remove_favorite_cafe(self, customer_id: int, cafe_id: int) -> dict[str, Any]:
        return await self._request(
            "DELETE", f"/customers/{customer_id}/favorites/cafes/{cafe_id}"
        )

    async def add_favorite_menu_item(self, customer_id: int, menu_item_id: int) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/customers/{customer_id}/favorites/menu-items",
            json={"menuItemId": menu_item_id},
        )

    async def remove_favorite_menu_item(self, customer_id: int, menu_item_id: int) -> dict[str, Any]:
        return await self._request(
            "DELETE", f"/customers/{customer_id}/favorites/menu-items/{menu_item_id}"
        )

    # =========================================================================
    # ORDERS
    # =========================================================================

    async def create_order(
        self,
        customer_id: int,
        cafe_id: int,
        items: list[dict[str, int]],
        order_type: str = "DELIVERY",
        **fields: Any,
    ) -> dict[str, Any]:
        """
        Args:
            items: ``[{"menuItemId": 1, "quantity": 2}, ...]``
        """
        payload = {
            "customerId": customer_id,
            "cafeId": cafe_id,
            "items": items,
            "orderType": order_type,
            **fields,
        }
        return await self._request("POST", "/orders", json=payload)

    async def get_order(self, order_id: int) -> dict[str, Any]:
        return await self._request("GET", f"/orders/{order_id}")

    async def list_orders_for_cafe(self, cafe_id: int) -> list[dict[str, Any]]:
        return await self._request("GET", "/orders", params={"cafeId": cafe_id})

    async def list_orders_for_customer(self, customer_id: int) -> list[dict[str, Any]]:
        return await self._request("GET", "/orders", params={"customerId": customer_id})

    async def update_order_status(self, order_id: int, status: str) -> dict[str, Any]:
        return await self._request(
            "PUT", f"/orders/{order_id}/status", json={"status": status}
        )

    # =========================================================================
    # PAYMENTS
    # =========================================================================

    async def create_payment_intent(
        self,
        amount: float,
        currency: str = "usd",
        order_id: Optional[int] = None,
        customer_id: Optional[int] = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"amount": amount, "currency": currency}
        if order_id is not None:
            payload["orderId"] = order_id
        if customer_id is not None:
            payload["customerId"] = customer_id
        return await self._request("POST", "/payments/create-intent", json=payload)

    async def get_payment_intent(self, payment_intent_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/payments/intent/{payment_intent_id}")

    # =========================================================================
    # ADMIN AUTH
    # =========================================================================

    async def admin_signup(
        self,
        email: str,
        password: str,
        cafe_name: str,
        **fields: Any,
    ) -> dict[str, Any]:
        payload = {"email": email, "password": password, "cafeName": cafe_name, **fields}
        return await self._request("POST", "/auth/signup", json=payload)

    async def admin_login(self, email: str, password: str) -> dict[str, Any]:
        payload = {"email": email, "password": password}
        return await self._request("POST", "/auth/login", json=payload)
