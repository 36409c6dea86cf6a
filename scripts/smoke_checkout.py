#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json

import requests


def main() -> None:
    parser = argparse.ArgumentParser(description="Preview the cart through a running storefront and optionally check out")
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--token", required=True, help="Bearer token issued by the backend login")
    parser.add_argument("--accept-terms", action="store_true")
    parser.add_argument("--place", action="store_true", help="Submit the checkout after previewing")
    args = parser.parse_args()

    headers = {"Authorization": f"Bearer {args.token}"}

    preview = requests.get(f"{args.base_url}/orders/preview/cart", headers=headers, timeout=30)
    preview.raise_for_status()
    print(json.dumps(preview.json()["totals"], indent=2, ensure_ascii=False))

    if not args.place:
        return

    resp = requests.post(
        f"{args.base_url}/orders/checkout",
        headers=headers,
        json={"accept_terms": args.accept_terms},
        timeout=60,
    )
    print(json.dumps({"status_code": resp.status_code, **resp.json()}, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
