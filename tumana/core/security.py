from __future__ import annotations

from fastapi import Header, HTTPException

from tumana.core.session import SessionContext


def _auth_error(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def _extract_bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _auth_error("invalid authorization header")
    return token.strip()


def get_optional_session(authorization: str | None = Header(default=None)) -> SessionContext:
    return SessionContext.from_bearer(_extract_bearer(authorization))


def get_session_context(authorization: str | None = Header(default=None)) -> SessionContext:
    token = _extract_bearer(authorization)
    if not token:
        raise _auth_error("missing bearer token")
    return SessionContext.from_bearer(token)
