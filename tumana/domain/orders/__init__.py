from tumana.domain.orders.aggregation import AggregatedTotals, aggregate_totals, cart_totals, seller_key
from tumana.domain.orders.consent import CheckoutConsent, ConsentRequiredError

__all__ = [
    "AggregatedTotals",
    "CheckoutConsent",
    "ConsentRequiredError",
    "aggregate_totals",
    "cart_totals",
    "seller_key",
]
