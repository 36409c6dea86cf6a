"""Order cost aggregation.

Shipping is a flat fee charged once per distinct seller in an order, no matter
how many lines that seller contributes. Totals are a projection of the line
items and are recomputed on every call.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from tumana.domain.orders.models import CartItem, LineItem, Seller


@dataclass(frozen=True)
class AggregatedTotals:
    product_total: float
    shipping_total: float
    grand_total: float
    seller_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_total": self.product_total,
            "shipping_total": self.shipping_total,
            "grand_total": self.grand_total,
            "seller_count": self.seller_count,
        }


EMPTY_TOTALS = AggregatedTotals(product_total=0.0, shipping_total=0.0, grand_total=0.0, seller_count=0)


def seller_key(seller: Seller) -> str:
    """Grouping identity of a seller.

    Preview payloads carry no seller id, so the store name and telephone stand
    in for one. Two sellers sharing both fields are merged. When the backend
    does send an id it takes precedence.
    """
    if seller.id:
        return f"id:{seller.id}"
    return f"{seller.store_name}{seller.telephone}"


def _aggregate(entries: Iterable[tuple[str, float]], shipping_fee_per_seller: float) -> AggregatedTotals:
    seen: set[str] = set()
    product_total = 0.0
    shipping_total = 0.0

    for key, subtotal in entries:
        product_total += subtotal
        if key not in seen:
            shipping_total += shipping_fee_per_seller
            seen.add(key)

    return AggregatedTotals(
        product_total=product_total,
        shipping_total=shipping_total,
        grand_total=product_total + shipping_total,
        seller_count=len(seen),
    )


def aggregate_totals(items: Iterable[LineItem], shipping_fee_per_seller: float) -> AggregatedTotals:
    return _aggregate(
        ((seller_key(item.seller), item.summary.subtotal) for item in items),
        shipping_fee_per_seller,
    )


def cart_totals(cart_items: Iterable[CartItem], shipping_fee_per_seller: float) -> AggregatedTotals:
    """Totals for raw cart contents, grouped by the product's seller id."""
    return _aggregate(
        ((f"id:{item.product.seller_id}", item.subtotal) for item in cart_items),
        shipping_fee_per_seller,
    )
