from __future__ import annotations

from fastapi import Depends

from tumana.client.backend import TumanaBackendClient
from tumana.core.config import get_settings
from tumana.core.security import get_optional_session, get_session_context
from tumana.core.session import SessionContext


def get_backend_client(session: SessionContext = Depends(get_session_context)) -> TumanaBackendClient:
    return TumanaBackendClient(session, get_settings())


def get_public_backend_client(session: SessionContext = Depends(get_optional_session)) -> TumanaBackendClient:
    return TumanaBackendClient(session, get_settings())
