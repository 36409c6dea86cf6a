from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from tumana.api.deps import get_public_backend_client
from tumana.client.backend import TumanaBackendClient
from tumana.domain.catalog.listing import CatalogProduct, search_products, shuffle_products

router = APIRouter(tags=["marketplace"])


@router.get("/marketplace/products")
def list_products(
    q: str | None = Query(default=None, description="Case-insensitive name/type/store search"),
    product_type: str | None = Query(default=None, alias="type"),
    shuffle: bool | None = Query(default=None),
    client: TumanaBackendClient = Depends(get_public_backend_client),
):
    products = [CatalogProduct.from_payload(row) for row in client.list_products() if isinstance(row, dict)]
    products = search_products(products, query=q, product_type=product_type)

    do_shuffle = client.settings.shuffle_marketplace if shuffle is None else shuffle
    if do_shuffle:
        products = shuffle_products(products)

    return {
        "count": len(products),
        "shuffled": do_shuffle,
        "products": [product.model_dump() for product in products],
    }


@router.get("/marketplace/products/{product_id}")
def get_product(product_id: str, client: TumanaBackendClient = Depends(get_public_backend_client)):
    return {"product": client.get_product(product_id)}
