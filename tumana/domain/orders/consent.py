from __future__ import annotations

import logging
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONSENT_REQUIRED_MESSAGE = "Please read and accept the terms and conditions before placing your order."

CHECKOUT_TERMS: tuple[tuple[str, str], ...] = (
    (
        "Order confirmation",
        "Placing an order sends a request to each seller in your cart. A seller may accept or "
        "cancel the request; you will be notified either way.",
    ),
    (
        "Shipping fee",
        "A flat shipping fee is charged once per seller, regardless of how many items you buy "
        "from that seller.",
    ),
    (
        "Payment",
        "Orders are paid on delivery. Prepare the exact amount shown in the order total.",
    ),
    (
        "Cancellation",
        "Orders can no longer be cancelled once the seller has handed them to a rider.",
    ),
)


class ConsentRequiredError(PermissionError):
    pass


def render_terms() -> str:
    blocks = [f"{idx}. {title}\n   {body}" for idx, (title, body) in enumerate(CHECKOUT_TERMS, start=1)]
    return "\n\n".join(blocks)


class CheckoutConsent:
    """Explicit terms acknowledgement required before an order is submitted.

    Consent only changes through ``set_consent``. A failed submission leaves it
    in place so the buyer can retry without confirming again; a fresh instance
    always starts unconfirmed.
    """

    def __init__(self) -> None:
        self.consent_given = False
        self.terms_visible = False

    def set_consent(self, value: bool) -> None:
        self.consent_given = bool(value)

    def toggle_terms(self) -> bool:
        self.terms_visible = not self.terms_visible
        return self.terms_visible

    @property
    def terms(self) -> str:
        return render_terms()

    def require(self) -> None:
        if not self.consent_given:
            logger.info("checkout refused: terms not accepted")
            raise ConsentRequiredError(CONSENT_REQUIRED_MESSAGE)

    def attempt_checkout(self, submit: Callable[[], T]) -> T:
        self.require()
        return submit()
