from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from tumana.api.deps import get_backend_client
from tumana.client.backend import TumanaBackendClient
from tumana.domain.accounts.status import DASHBOARD_PATHS

router = APIRouter(tags=["accounts"])


@router.get("/accounts/{role}/status")
def registration_status(role: str, client: TumanaBackendClient = Depends(get_backend_client)):
    if role not in DASHBOARD_PATHS:
        raise HTTPException(status_code=404, detail=f"unknown role: {role}")
    return client.registration_status(role).to_dict()
