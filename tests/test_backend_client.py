from __future__ import annotations

import httpx
import pytest

from tumana.client.backend import BackendError, BackendUnavailableError
from tumana.domain.accounts.status import RegistrationState, state_for_status_code


@pytest.mark.parametrize(
    ("status_code", "state"),
    [
        (200, RegistrationState.VERIFIED),
        (403, RegistrationState.PENDING),
        (404, RegistrationState.UNREGISTERED),
        (410, RegistrationState.DECLINED),
    ],
)
def test_dashboard_status_codes_become_registration_states(backend, make_client, status_code, state):
    body = {"seller": {"storeName": "GreenFarm"}} if status_code == 200 else {"message": "nope"}
    backend.on("GET", "/api/sellers/dashboard", status_code=status_code, json=body)

    status = make_client().registration_status("seller")

    assert status.state is state
    assert status.can_access_dashboard is (state is RegistrationState.VERIFIED)
    assert "seller" in status.message


def test_pending_customer_profile_is_kept(backend, make_client):
    backend.on(
        "GET",
        "/api/customers/dashboard",
        status_code=403,
        json={"message": "Customer is not verified yet", "customer": {"fullName": "Juan"}},
    )
    status = make_client().registration_status("customer")
    assert status.state is RegistrationState.PENDING
    assert status.profile == {"fullName": "Juan"}


def test_unexpected_status_is_an_error_not_a_state(backend, make_client):
    backend.on("GET", "/api/workers/dashboard", status_code=500, json={"message": "Server error"})

    with pytest.raises(BackendError) as excinfo:
        make_client().registration_status("worker")
    assert excinfo.value.status_code == 500
    assert state_for_status_code(500) is None


def test_unknown_role_is_rejected(make_client):
    with pytest.raises(ValueError):
        make_client().registration_status("rider")


def test_login_remembers_token_for_later_calls(backend, make_client):
    backend.on("POST", "/api/users/login", json={"message": "Login successful", "token": "fresh", "user": {"id": "u1"}})
    backend.on("GET", "/api/users/account", json={"email": "juan@example.com"})
    client = make_client(token=None)

    client.login("juan@example.com", "secret")
    client.account()

    assert client.session.token == "fresh"
    assert client.session.user == {"id": "u1"}
    assert "authorization" not in backend.calls("POST", "/api/users/login")[0].headers
    assert backend.calls("GET", "/api/users/account")[0].headers["authorization"] == "Bearer fresh"


def test_transport_failure_raises_unavailable(make_client):
    client = make_client()

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client.transport = httpx.MockTransport(refuse)
    with pytest.raises(BackendUnavailableError) as excinfo:
        client.preview_cart()
    assert excinfo.value.status_code is None


def test_cart_items_unwraps_cart_payload(backend, make_client):
    backend.on("GET", "/api/carts/items", json={"cart": {"items": [{"_id": "c1"}]}})
    backend.on("DELETE", "/api/carts/items/c1", json={"message": "Item removed from cart"})
    client = make_client()

    assert client.cart_items() == [{"_id": "c1"}]
    assert client.remove_cart_item("c1")["message"] == "Item removed from cart"
