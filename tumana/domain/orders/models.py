from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Product(_WireModel):
    id: str | None = Field(default=None, alias="_id")
    name: str
    type: str | None = None
    unit: str | None = None
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    stock: int | None = None
    image: str | None = None


class Seller(_WireModel):
    id: str | None = Field(default=None, alias="_id")
    store_name: str | None = Field(default=None, alias="storeName")
    telephone: str | None = None
    region: str | None = None
    email: str | None = None


class LineSummary(_WireModel):
    subtotal: float = Field(ge=0)
    shipping_fee: float | None = Field(default=None, alias="shippingFee")
    total: float | None = None


class LineItem(_WireModel):
    product: Product
    seller: Seller = Field(default_factory=Seller)
    summary: LineSummary

    @field_validator("seller", mode="before")
    @classmethod
    def _tolerate_missing_seller(cls, value: Any) -> Any:
        return {} if value is None else value


class Address(_WireModel):
    full_name: str | None = Field(default=None, alias="fullName")
    region: str | None = None
    province: str | None = None
    city_or_municipality: str | None = Field(default=None, alias="cityOrMunicipality")
    barangay: str | None = None
    street: str | None = None
    telephone: str | None = None
    email: str | None = None

    def one_line(self) -> str:
        parts = [self.street, self.barangay, self.city_or_municipality, self.province, self.region]
        return ", ".join(part for part in parts if part)


class OrderPreview(_WireModel):
    items: list[LineItem]
    delivery_to: Address = Field(alias="deliveryTo")
    # Server-side figure; charges shipping per line, so it is display-only.
    grand_total: float | None = Field(default=None, alias="grandTotal")


class ProductPreview(_WireModel):
    product: Product
    seller: Seller = Field(default_factory=Seller)
    delivery_to: Address = Field(alias="deliveryTo")
    summary: LineSummary

    def as_line_item(self) -> LineItem:
        return LineItem(product=self.product, seller=self.seller, summary=self.summary)


class CartProduct(_WireModel):
    id: str = Field(alias="_id")
    name: str | None = Field(default=None, alias="productName")
    price_per_unit: float = Field(default=0.0, ge=0, alias="pricePerUnit")
    unit_type: str | None = Field(default=None, alias="unitType")
    stock: int = 0
    seller_id: str | None = Field(default=None, alias="sellerId")

    @field_validator("seller_id", mode="before")
    @classmethod
    def _flatten_seller(cls, value: Any) -> Any:
        # populated sellers arrive as {"_id": ..., "storeName": ...}
        if isinstance(value, dict):
            return value.get("_id")
        return value


class CartItem(_WireModel):
    id: str = Field(alias="_id")
    product: CartProduct = Field(alias="productId")
    quantity: int = Field(ge=1)

    @property
    def subtotal(self) -> float:
        return self.product.price_per_unit * self.quantity


def parse_cart_items(rows: Iterable[Any]) -> list[CartItem]:
    """Valid cart lines; rows whose product was removed (``productId: null``) are dropped."""
    items: list[CartItem] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        if not isinstance(row.get("productId"), dict):
            logger.warning("skipping cart row without product: id=%s", row.get("_id"))
            continue
        try:
            items.append(CartItem.model_validate(row))
        except ValidationError as exc:
            logger.warning("skipping malformed cart row: id=%s errors=%s", row.get("_id"), exc.error_count())
    return items
