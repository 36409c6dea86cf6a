from __future__ import annotations

import argparse
import getpass
import json
import sys
from typing import Any, Sequence

from tumana.client.backend import BackendError, TumanaBackendClient
from tumana.core.config import get_settings
from tumana.core.logging import configure_logging
from tumana.core.session import SessionContext, SqlTokenStore
from tumana.domain.catalog.listing import CatalogProduct, quantity_delta, search_products, shuffle_products
from tumana.domain.orders.aggregation import cart_totals
from tumana.domain.orders.checkout import CartCheckout, CheckoutFailedError, DirectOrderCheckout, PreviewUnavailableError
from tumana.domain.orders.consent import ConsentRequiredError, render_terms
from tumana.domain.orders.models import parse_cart_items
from tumana.persistence.db import init_db

ROLES = ["customer", "seller", "worker", "employer"]


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _confirm(prompt: str) -> bool:
    return input(prompt).strip().lower() in {"y", "yes"}


def build_client() -> TumanaBackendClient:
    init_db()
    return TumanaBackendClient(SessionContext(SqlTokenStore()), get_settings())


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value}") from None
    if number < 1:
        raise argparse.ArgumentTypeError("quantity must be at least 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Digital Tumana marketplace CLI")
    parser.add_argument("--log-level", default=None)
    top = parser.add_subparsers(dest="command", required=True)

    login = top.add_parser("login", help="Sign in and remember the token")
    login.add_argument("--email", required=True)
    login.add_argument("--password", default=None, help="Prompted when omitted")

    top.add_parser("logout", help="Forget the stored token")

    products = top.add_parser("products", help="Browse marketplace products")
    products.add_argument("--search", default=None)
    products.add_argument("--type", dest="product_type", default=None)
    products.add_argument("--no-shuffle", action="store_true")

    status = top.add_parser("status", help="Registration state for a role")
    status.add_argument("role", choices=ROLES)

    cart = top.add_parser("cart", help="Cart operations")
    cart_sub = cart.add_subparsers(dest="cart_command", required=True)
    cart_sub.add_parser("show", help="List cart items with totals")
    add = cart_sub.add_parser("add", help="Add a product to the cart")
    add.add_argument("product_id")
    add.add_argument("--quantity", type=_positive_int, default=1)
    set_qty = cart_sub.add_parser("set-qty", help="Set the quantity of a cart line")
    set_qty.add_argument("product_id")
    set_qty.add_argument("quantity", type=int)
    remove = cart_sub.add_parser("remove", help="Remove a cart line")
    remove.add_argument("item_id")

    checkout = top.add_parser("checkout", help="Preview the cart and place orders")
    checkout.add_argument("--accept-terms", action="store_true")
    checkout.add_argument("--show-terms", action="store_true")

    order = top.add_parser("order", help="Order a single product directly")
    order.add_argument("product_id")
    order.add_argument("--quantity", type=_positive_int, default=1)
    order.add_argument("--accept-terms", action="store_true")
    order.add_argument("--show-terms", action="store_true")

    return parser


def _run_login(args: argparse.Namespace, client: TumanaBackendClient) -> int:
    password = args.password or getpass.getpass("Password: ")
    payload = client.login(args.email, password)
    _print_json({"message": payload.get("message", "Login successful"), "user": payload.get("user")})
    return 0


def _run_logout(_: argparse.Namespace, client: TumanaBackendClient) -> int:
    client.logout()
    _print_json({"message": "Logged out"})
    return 0


def _run_products(args: argparse.Namespace, client: TumanaBackendClient) -> int:
    products = [CatalogProduct.from_payload(row) for row in client.list_products() if isinstance(row, dict)]
    products = search_products(products, query=args.search, product_type=args.product_type)
    if client.settings.shuffle_marketplace and not args.no_shuffle:
        products = shuffle_products(products)
    _print_json({"count": len(products), "products": [p.model_dump() for p in products]})
    return 0


def _run_status(args: argparse.Namespace, client: TumanaBackendClient) -> int:
    _print_json(client.registration_status(args.role).to_dict())
    return 0


def _run_cart(args: argparse.Namespace, client: TumanaBackendClient) -> int:
    if args.cart_command == "show":
        items = parse_cart_items(client.cart_items())
        totals = cart_totals(items, client.settings.shipping_fee_per_seller)
        _print_json(
            {
                "items": [{**item.model_dump(), "subtotal": item.subtotal} for item in items],
                "totals": totals.to_dict(),
            }
        )
        return 0

    if args.cart_command == "add":
        _print_json(client.add_to_cart(args.product_id, args.quantity))
        return 0

    if args.cart_command == "set-qty":
        items = parse_cart_items(client.cart_items())
        line = next((item for item in items if item.product.id == args.product_id), None)
        if line is None:
            print(f"product {args.product_id} is not in the cart", file=sys.stderr)
            return 1
        try:
            delta = quantity_delta(items, args.product_id, args.quantity, line.product.stock)
        except ValueError as exc:
            print(str(exc), file=sys.stderr)
            return 1
        if delta:
            client.add_to_cart(args.product_id, delta, stock_limit=line.product.stock)
        _print_json({"product_id": args.product_id, "quantity": args.quantity, "delta": delta})
        return 0

    _print_json(client.remove_cart_item(args.item_id))
    return 0


def _place_with_retry(page: CartCheckout, accept_terms: bool) -> int:
    page.consent.set_consent(accept_terms or _confirm("Accept the terms and conditions? [y/N] "))
    while True:
        try:
            result = page.place_order()
        except ConsentRequiredError as exc:
            print(str(exc), file=sys.stderr)
            return 1
        except CheckoutFailedError as exc:
            print(str(exc), file=sys.stderr)
            # consent is kept; only ask whether to resend
            if not _confirm("Retry? [y/N] "):
                return 1
            continue
        _print_json(result.to_dict())
        return 0


def _run_checkout(args: argparse.Namespace, client: TumanaBackendClient) -> int:
    if args.command == "order":
        page: CartCheckout = DirectOrderCheckout(client, args.product_id, args.quantity)
    else:
        page = CartCheckout(client)
    page.load()
    _print_json(page.view())
    if args.show_terms:
        print(render_terms())
    return _place_with_retry(page, args.accept_terms)


COMMANDS = {
    "login": _run_login,
    "logout": _run_logout,
    "products": _run_products,
    "status": _run_status,
    "cart": _run_cart,
    "checkout": _run_checkout,
    "order": _run_checkout,
}


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.error("unsupported command")
        return 2

    client = build_client()
    try:
        return handler(args, client)
    except (BackendError, PreviewUnavailableError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
