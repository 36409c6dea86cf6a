from __future__ import annotations

import logging
from typing import Any

import httpx

from tumana.core.config import Settings, get_settings
from tumana.core.session import SessionContext
from tumana.domain.accounts.status import (
    DASHBOARD_PATHS,
    RegistrationState,
    RegistrationStatus,
    state_for_status_code,
)

logger = logging.getLogger(__name__)


class BackendError(RuntimeError):
    def __init__(self, status_code: int | None, detail: str, payload: dict[str, Any] | None = None):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.payload = payload or {}


class BackendUnavailableError(BackendError):
    def __init__(self, detail: str):
        super().__init__(None, detail)


def _error_detail(response: httpx.Response) -> tuple[str, dict[str, Any]]:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase, {}
    if isinstance(payload, dict):
        return str(payload.get("message") or response.reason_phrase), payload
    return response.reason_phrase, {}


class TumanaBackendClient:
    """REST client for the Digital Tumana backend.

    Every call carries the session's bearer token and raises ``BackendError``
    for non-2xx answers, so callers branch on exceptions rather than codes.
    """

    def __init__(
        self,
        session: SessionContext,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.base_url = self.settings.backend_base_url.rstrip("/")
        self.timeout = max(1, self.settings.backend_timeout_seconds)
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        headers.update(self.session.auth_headers())
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.request(method, url, headers=self._headers(), json=json_body, params=params)
        except httpx.HTTPError as exc:
            logger.error("backend request failed: %s %s: %s", method, path, exc)
            raise BackendUnavailableError(f"backend unreachable: {exc}") from exc

        if response.is_error:
            detail, payload = _error_detail(response)
            logger.warning("backend answered %s for %s %s: %s", response.status_code, method, path, detail)
            raise BackendError(response.status_code, detail, payload)

        if not response.content:
            return {}
        payload = response.json()
        if isinstance(payload, dict):
            return payload
        return {"result": payload}

    def login(self, email: str, password: str) -> dict[str, Any]:
        payload = self._request("POST", "/api/users/login", json_body={"email": email, "password": password})
        token = payload.get("token")
        if not token:
            raise BackendError(None, f"login response missing token: {payload}")
        self.session.remember(str(token), payload.get("user"))
        return payload

    def logout(self) -> None:
        self.session.forget()

    def account(self) -> dict[str, Any]:
        return self._request("GET", "/api/users/account")

    def list_products(self) -> list[dict[str, Any]]:
        payload = self._request("GET", "/api/products")
        products = payload.get("products")
        return products if isinstance(products, list) else []

    def get_product(self, product_id: str) -> dict[str, Any]:
        payload = self._request("GET", f"/api/products/{product_id}")
        return payload.get("product") or {}

    def registration_status(self, role: str) -> RegistrationStatus:
        path = DASHBOARD_PATHS.get(role)
        if path is None:
            raise ValueError(f"unsupported role={role}")
        try:
            payload = self._request("GET", path)
        except BackendError as exc:
            state = state_for_status_code(exc.status_code) if exc.status_code is not None else None
            if state is None:
                raise
            return RegistrationStatus(role=role, state=state, profile=exc.payload.get(role))
        return RegistrationStatus(role=role, state=RegistrationState.VERIFIED, profile=payload.get(role))

    def cart_items(self) -> list[dict[str, Any]]:
        payload = self._request("GET", "/api/carts/items")
        cart = payload.get("cart") or {}
        items = cart.get("items") if isinstance(cart, dict) else None
        return items if isinstance(items, list) else []

    def add_to_cart(self, product_id: str, quantity: int, stock_limit: int | None = None) -> dict[str, Any]:
        body: dict[str, Any] = {"productId": product_id, "quantity": quantity}
        if stock_limit is not None:
            body["stockLimit"] = stock_limit
        return self._request("POST", "/api/carts/add", json_body=body)

    def remove_cart_item(self, item_id: str) -> dict[str, Any]:
        return self._request("DELETE", f"/api/carts/items/{item_id}")

    def preview_cart(self) -> dict[str, Any]:
        return self._request("GET", "/api/orders/preview/cart")

    def checkout_cart(self) -> dict[str, Any]:
        return self._request("POST", "/api/orders/checkout", json_body={})

    def preview_product(self, product_id: str, quantity: int) -> dict[str, Any]:
        return self._request(
            "GET",
            f"/api/orders/preview/product/{product_id}",
            params={"quantity": quantity},
        )

    def place_direct_order(self, product_id: str, quantity: int) -> dict[str, Any]:
        return self._request(
            "POST",
            "/api/orders/direct",
            json_body={"productId": product_id, "quantity": quantity},
        )
