from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from tumana.api.deps import get_backend_client
from tumana.client.backend import TumanaBackendClient
from tumana.domain.catalog.listing import quantity_delta
from tumana.domain.orders.aggregation import cart_totals
from tumana.domain.orders.models import parse_cart_items

router = APIRouter(tags=["cart"])


class CartQuantityRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, description="Desired quantity of the cart line")
    stock: int = Field(ge=0, description="Stock shown to the buyer when editing")


@router.get("/cart")
def get_cart(client: TumanaBackendClient = Depends(get_backend_client)):
    items = parse_cart_items(client.cart_items())
    totals = cart_totals(items, client.settings.shipping_fee_per_seller)
    return {
        "count": len(items),
        "items": [{**item.model_dump(), "subtotal": item.subtotal} for item in items],
        "totals": totals.to_dict(),
    }


@router.post("/cart/items")
def set_cart_quantity(request: CartQuantityRequest, client: TumanaBackendClient = Depends(get_backend_client)):
    items = parse_cart_items(client.cart_items())
    try:
        delta = quantity_delta(items, request.product_id, request.quantity, request.stock)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if delta == 0:
        return {"message": "Quantity unchanged", "delta": 0}
    result = client.add_to_cart(request.product_id, delta, stock_limit=request.stock)
    return {"message": result.get("message", "Cart updated"), "delta": delta}


@router.delete("/cart/items/{item_id}")
def remove_cart_item(item_id: str, client: TumanaBackendClient = Depends(get_backend_client)):
    result = client.remove_cart_item(item_id)
    return {"message": result.get("message", "Item removed from cart"), "item_id": item_id}
