from __future__ import annotations

import json

import pytest
from payloads import DELIVERY_TO, line_item

from tumana.client.backend import BackendError
from tumana.domain.orders.checkout import (
    ORDERS_REDIRECT,
    CartCheckout,
    CheckoutFailedError,
    DirectOrderCheckout,
    PreviewUnavailableError,
)
from tumana.domain.orders.consent import ConsentRequiredError

PREVIEW = {
    "items": [
        line_item("GreenFarm", "0912345678", 100),
        line_item("GreenFarm", "0912345678", 200, name="Corn"),
        line_item("Bukid", "0998765432", 50, name="Eggplant"),
    ],
    "deliveryTo": DELIVERY_TO,
    "grandTotal": 500,
}


def test_cart_preview_totals_are_rederived_locally(backend, make_client):
    backend.on("GET", "/api/orders/preview/cart", json=PREVIEW)
    page = CartCheckout(make_client())

    preview = page.load()

    assert len(preview.items) == 3
    assert preview.delivery_to.full_name == "Juan Dela Cruz"
    assert page.totals.product_total == 350
    assert page.totals.shipping_total == 100
    assert page.totals.grand_total == 450
    assert backend.calls("GET", "/api/orders/preview/cart")[0].headers["Authorization"] == "Bearer tok-123"


def test_checkout_without_consent_issues_no_request(backend, make_client):
    backend.on("GET", "/api/orders/preview/cart", json=PREVIEW)
    page = CartCheckout(make_client())
    page.load()

    with pytest.raises(ConsentRequiredError):
        page.place_order()

    assert backend.calls("POST", "/api/orders/checkout") == []


def test_failed_checkout_keeps_consent_and_preview(backend, make_client):
    backend.on("GET", "/api/orders/preview/cart", json=PREVIEW)
    backend.on("POST", "/api/orders/checkout", status_code=500, json={"message": "Cart checkout failed"})
    page = CartCheckout(make_client())
    page.load()
    page.consent.set_consent(True)
    before = page.totals

    with pytest.raises(CheckoutFailedError) as excinfo:
        page.place_order()

    assert excinfo.value.status_code == 500
    assert str(excinfo.value) == "Something went wrong during checkout."
    assert page.consent.consent_given is True
    assert page.totals == before

    backend.on("POST", "/api/orders/checkout", status_code=201, json={"message": "Cart checked out", "orders": [{"_id": "o1"}, {"_id": "o2"}]})
    result = page.place_order()

    assert result.redirect_to == ORDERS_REDIRECT
    assert result.message == "Orders placed successfully!"
    assert [o["_id"] for o in result.orders] == ["o1", "o2"]
    assert len(backend.calls("POST", "/api/orders/checkout")) == 2


def test_place_order_requires_loaded_preview(backend, make_client):
    page = CartCheckout(make_client())
    page.consent.set_consent(True)

    with pytest.raises(PreviewUnavailableError):
        page.place_order()
    assert backend.requests == []


@pytest.mark.parametrize(
    "payload",
    [
        {"deliveryTo": DELIVERY_TO},
        {"items": []},
        {"items": [{"seller": {}, "summary": {"subtotal": 10}}], "deliveryTo": DELIVERY_TO},
    ],
)
def test_malformed_preview_is_reported_not_crashed(backend, make_client, payload):
    backend.on("GET", "/api/orders/preview/cart", json=payload)
    page = CartCheckout(make_client())

    with pytest.raises(PreviewUnavailableError):
        page.load()
    assert page.preview is None


def test_preview_error_status_propagates(backend, make_client):
    backend.on("GET", "/api/orders/preview/cart", status_code=404, json={"message": "Cart is empty"})
    page = CartCheckout(make_client())

    with pytest.raises(BackendError) as excinfo:
        page.load()
    assert excinfo.value.status_code == 404
    assert excinfo.value.detail == "Cart is empty"


def test_direct_order_checkout(backend, make_client):
    backend.on(
        "GET",
        "/api/orders/preview/product/p-1",
        json={
            "product": {"name": "Tomato", "type": "vegetable", "unit": "kg", "price": 60, "quantity": 3},
            "seller": {"storeName": "GreenFarm", "telephone": "0912345678"},
            "deliveryTo": DELIVERY_TO,
            "summary": {"subtotal": 180, "shippingFee": 50, "total": 230},
        },
    )
    backend.on("POST", "/api/orders/direct", status_code=201, json={"message": "Order placed", "order": {"_id": "o9"}})
    page = DirectOrderCheckout(make_client(), "p-1", quantity=3)

    page.load()
    assert backend.calls("GET", "/api/orders/preview/product/p-1")[0].url.params["quantity"] == "3"
    assert page.totals.grand_total == 230

    page.consent.set_consent(True)
    result = page.place_order()

    assert result.orders == [{"_id": "o9"}]
    sent = backend.calls("POST", "/api/orders/direct")[0]
    assert json.loads(sent.content) == {"productId": "p-1", "quantity": 3}


def test_direct_order_rejects_zero_quantity(make_client):
    with pytest.raises(ValueError):
        DirectOrderCheckout(make_client(), "p-1", quantity=0)
