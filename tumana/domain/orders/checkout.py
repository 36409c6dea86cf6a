"""Checkout pages: fetch a preview, show derived totals, submit behind consent."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from tumana.client.backend import BackendError, TumanaBackendClient
from tumana.domain.orders.aggregation import AggregatedTotals, aggregate_totals
from tumana.domain.orders.consent import CheckoutConsent
from tumana.domain.orders.models import OrderPreview, ProductPreview

logger = logging.getLogger(__name__)

ORDERS_REDIRECT = "/customer-orders"
CART_REDIRECT = "/my-cart"


class PreviewUnavailableError(ValueError):
    pass


class CheckoutFailedError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class CheckoutResult:
    message: str
    redirect_to: str
    orders: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "redirect_to": self.redirect_to, "orders": self.orders}


def _parse_preview(model, payload: Any, required: tuple[str, ...]):
    if not isinstance(payload, dict):
        raise PreviewUnavailableError("preview payload is not an object")
    missing = [key for key in required if payload.get(key) is None]
    if missing:
        raise PreviewUnavailableError(f"preview payload missing: {', '.join(missing)}")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise PreviewUnavailableError(f"malformed preview payload: {exc.error_count()} invalid field(s)") from exc


class CartCheckout:
    """Whole-cart checkout.

    ``place_order`` is only reachable once ``load`` has produced a preview, and
    each instance owns a fresh, unconfirmed consent gate.
    """

    success_message = "Orders placed successfully!"
    failure_message = "Something went wrong during checkout."

    def __init__(self, client: TumanaBackendClient, shipping_fee_per_seller: float | None = None):
        self.client = client
        self.shipping_fee_per_seller = (
            client.settings.shipping_fee_per_seller if shipping_fee_per_seller is None else shipping_fee_per_seller
        )
        self.consent = CheckoutConsent()
        self.preview: OrderPreview | None = None

    def load(self) -> OrderPreview:
        try:
            payload = self.client.preview_cart()
        except BackendError as exc:
            logger.error("cart preview failed: %s", exc.detail)
            raise
        self.preview = _parse_preview(OrderPreview, payload, ("items", "deliveryTo"))
        self._log_total_mismatch()
        return self.preview

    def _require_preview(self) -> OrderPreview:
        if self.preview is None:
            raise PreviewUnavailableError("preview has not been loaded")
        return self.preview

    @property
    def totals(self) -> AggregatedTotals:
        return aggregate_totals(self._require_preview().items, self.shipping_fee_per_seller)

    def _log_total_mismatch(self) -> None:
        preview = self._require_preview()
        if preview.grand_total is None:
            return
        local = self.totals.grand_total
        if local != preview.grand_total:
            logger.info("cart preview total differs: server=%s local=%s", preview.grand_total, local)

    def _submit(self) -> dict[str, Any]:
        return self.client.checkout_cart()

    def place_order(self) -> CheckoutResult:
        self._require_preview()
        try:
            payload = self.consent.attempt_checkout(self._submit)
        except BackendError as exc:
            logger.error("checkout failed: status=%s detail=%s", exc.status_code, exc.detail)
            raise CheckoutFailedError(self.failure_message, status_code=exc.status_code) from exc

        orders = payload.get("orders")
        if not isinstance(orders, list):
            order = payload.get("order")
            orders = [order] if isinstance(order, dict) else []
        logger.info("checkout placed %s order(s)", len(orders))
        return CheckoutResult(message=self.success_message, redirect_to=ORDERS_REDIRECT, orders=orders)

    def view(self) -> dict[str, Any]:
        preview = self._require_preview()
        return {
            "items": [item.model_dump() for item in preview.items],
            "delivery_to": preview.delivery_to.model_dump(),
            "totals": self.totals.to_dict(),
            "shipping_fee_per_seller": self.shipping_fee_per_seller,
            "cancel_to": CART_REDIRECT,
        }


class DirectOrderCheckout(CartCheckout):
    """Single-product "buy now" checkout."""

    success_message = "Order placed successfully!"
    failure_message = "Something went wrong."

    def __init__(
        self,
        client: TumanaBackendClient,
        product_id: str,
        quantity: int = 1,
        shipping_fee_per_seller: float | None = None,
    ):
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        super().__init__(client, shipping_fee_per_seller)
        self.product_id = product_id
        self.quantity = quantity
        self.product_preview: ProductPreview | None = None

    def load(self) -> OrderPreview:
        try:
            payload = self.client.preview_product(self.product_id, self.quantity)
        except BackendError as exc:
            logger.error("product preview failed: product_id=%s detail=%s", self.product_id, exc.detail)
            raise
        self.product_preview = _parse_preview(ProductPreview, payload, ("product", "deliveryTo", "summary"))
        self.preview = OrderPreview(
            items=[self.product_preview.as_line_item()],
            delivery_to=self.product_preview.delivery_to,
        )
        return self.preview

    def _submit(self) -> dict[str, Any]:
        return self.client.place_direct_order(self.product_id, self.quantity)
