from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from tumana.api.deps import get_backend_client
from tumana.client.backend import TumanaBackendClient
from tumana.domain.orders.checkout import CartCheckout, DirectOrderCheckout
from tumana.domain.orders.consent import CHECKOUT_TERMS, render_terms

router = APIRouter(tags=["orders"])


class CheckoutRequest(BaseModel):
    accept_terms: bool = Field(default=False, description="Buyer has read and accepted the checkout terms")


class DirectOrderRequest(CheckoutRequest):
    product_id: str
    quantity: int = Field(default=1, ge=1)


@router.get("/orders/terms")
def get_terms():
    return {
        "sections": [{"title": title, "body": body} for title, body in CHECKOUT_TERMS],
        "text": render_terms(),
    }


@router.get("/orders/preview/cart")
def preview_cart(client: TumanaBackendClient = Depends(get_backend_client)):
    page = CartCheckout(client)
    page.load()
    return page.view()


@router.post("/orders/checkout")
def checkout_cart(request: CheckoutRequest, client: TumanaBackendClient = Depends(get_backend_client)):
    page = CartCheckout(client)
    page.consent.set_consent(request.accept_terms)
    # refuse before any backend call; the preview must still precede the submit
    page.consent.require()
    page.load()
    result = page.place_order()
    return {**result.to_dict(), "totals": page.totals.to_dict()}


@router.get("/orders/preview/product/{product_id}")
def preview_product(
    product_id: str,
    quantity: int = Query(default=1, ge=1),
    client: TumanaBackendClient = Depends(get_backend_client),
):
    page = DirectOrderCheckout(client, product_id, quantity)
    page.load()
    return page.view()


@router.post("/orders/direct")
def place_direct_order(request: DirectOrderRequest, client: TumanaBackendClient = Depends(get_backend_client)):
    page = DirectOrderCheckout(client, request.product_id, request.quantity)
    page.consent.set_consent(request.accept_terms)
    page.consent.require()
    page.load()
    result = page.place_order()
    return {**result.to_dict(), "totals": page.totals.to_dict()}
