from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tumana.api.routes_accounts import router as accounts_router
from tumana.api.routes_cart import router as cart_router
from tumana.api.routes_catalog import router as catalog_router
from tumana.api.routes_orders import router as orders_router
from tumana.client.backend import BackendError, BackendUnavailableError
from tumana.core.config import get_settings
from tumana.core.logging import configure_logging
from tumana.domain.orders.checkout import CheckoutFailedError, PreviewUnavailableError
from tumana.domain.orders.consent import ConsentRequiredError

configure_logging()
logger = logging.getLogger(__name__)
settings = get_settings()

app = FastAPI(title=settings.app_name)


@app.exception_handler(ConsentRequiredError)
async def consent_required_handler(_: Request, exc: ConsentRequiredError):
    return JSONResponse(status_code=409, content={"detail": str(exc), "error": "consent_required"})


@app.exception_handler(BackendUnavailableError)
async def backend_unavailable_handler(_: Request, exc: BackendUnavailableError):
    return JSONResponse(status_code=502, content={"detail": exc.detail, "error": "backend_unavailable"})


@app.exception_handler(BackendError)
async def backend_error_handler(_: Request, exc: BackendError):
    status_code = exc.status_code if exc.status_code and 400 <= exc.status_code < 500 else 502
    return JSONResponse(status_code=status_code, content={"detail": exc.detail, "error": "backend"})


@app.exception_handler(PreviewUnavailableError)
async def preview_unavailable_handler(_: Request, exc: PreviewUnavailableError):
    logger.warning("preview unavailable: %s", exc)
    return JSONResponse(status_code=502, content={"detail": str(exc), "error": "invalid_preview"})


@app.exception_handler(CheckoutFailedError)
async def checkout_failed_handler(_: Request, exc: CheckoutFailedError):
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc), "error": "checkout_failed", "backend_status": exc.status_code},
    )


@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}


app.include_router(catalog_router)
app.include_router(accounts_router)
app.include_router(cart_router)
app.include_router(orders_router)
