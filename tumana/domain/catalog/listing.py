from __future__ import annotations

import random
from typing import Any, Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tumana.domain.orders.models import CartItem


class CatalogProduct(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    name: str = Field(alias="productName")
    type: str | None = None
    unit_type: str | None = Field(default=None, alias="unitType")
    price_per_unit: float = Field(default=0.0, ge=0, alias="pricePerUnit")
    stock: int = 0
    image: str | None = Field(default=None, alias="productImage")
    seller_id: str | None = Field(default=None, alias="sellerId")
    store_name: str | None = None

    @field_validator("seller_id", mode="before")
    @classmethod
    def _flatten_seller(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("_id")
        return value

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CatalogProduct":
        product = cls.model_validate(payload)
        seller = payload.get("sellerId")
        if isinstance(seller, dict) and seller.get("storeName"):
            product.store_name = str(seller["storeName"])
        return product


def search_products(
    products: Iterable[CatalogProduct],
    query: str | None = None,
    product_type: str | None = None,
) -> list[CatalogProduct]:
    needle = (query or "").strip().lower()
    wanted_type = (product_type or "").strip().lower()

    matches: list[CatalogProduct] = []
    for product in products:
        if wanted_type and (product.type or "").lower() != wanted_type:
            continue
        if needle:
            haystack = " ".join(part for part in (product.name, product.type, product.store_name) if part).lower()
            if needle not in haystack:
                continue
        matches.append(product)
    return matches


def shuffle_products(products: Sequence[CatalogProduct], rng: random.Random | None = None) -> list[CatalogProduct]:
    """Uniformly shuffled copy of ``products`` (Fisher-Yates via ``Random.shuffle``)."""
    shuffled = list(products)
    (rng or random.Random()).shuffle(shuffled)
    return shuffled


def quantity_delta(cart_items: Iterable[CartItem], product_id: str, new_quantity: int, stock: int) -> int:
    """Change to send to ``/api/carts/add`` so the line ends at ``new_quantity``."""
    if new_quantity < 1:
        raise ValueError("quantity must be at least 1")
    if new_quantity > stock:
        raise ValueError(f"quantity {new_quantity} exceeds available stock {stock}")
    current = next((item.quantity for item in cart_items if item.product.id == product_id), 0)
    return new_quantity - current
