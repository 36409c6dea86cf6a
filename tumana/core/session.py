from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Protocol

from sqlalchemy import delete

from tumana.persistence.db import session_scope
from tumana.persistence.models import ClientStorageModel

TOKEN_KEY = "token"
USER_KEY = "user"


class TokenStore(Protocol):
    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class SqlTokenStore:
    """Persistent key-value storage backed by the ``client_storage`` table."""

    def get(self, key: str) -> str | None:
        with session_scope() as session:
            row = session.get(ClientStorageModel, key)
            return row.value if row is not None else None

    def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc)
        with session_scope() as session:
            row = session.get(ClientStorageModel, key)
            if row is None:
                session.add(ClientStorageModel(key=key, value=value, updated_at=now))
            else:
                row.value = value
                row.updated_at = now

    def delete(self, key: str) -> None:
        with session_scope() as session:
            session.execute(delete(ClientStorageModel).where(ClientStorageModel.key == key))


class MemoryTokenStore:
    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class SessionContext:
    """Signed-in state shared by every backend call of one client.

    The token is sent as-is; a missing or expired token surfaces as the
    backend's 401 response rather than being checked here.
    """

    def __init__(self, store: TokenStore):
        self.store = store

    @classmethod
    def from_bearer(cls, token: str | None) -> "SessionContext":
        store = MemoryTokenStore({TOKEN_KEY: token} if token else None)
        return cls(store)

    @property
    def token(self) -> str | None:
        return self.store.get(TOKEN_KEY)

    @property
    def user(self) -> dict[str, Any] | None:
        raw = self.store.get(USER_KEY)
        if not raw:
            return None
        return json.loads(raw)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def remember(self, token: str, user: dict[str, Any] | None = None) -> None:
        self.store.set(TOKEN_KEY, token)
        if user is not None:
            self.store.set(USER_KEY, json.dumps(user, ensure_ascii=False, separators=(",", ":")))

    def forget(self) -> None:
        self.store.delete(TOKEN_KEY)
        self.store.delete(USER_KEY)

    def auth_headers(self) -> dict[str, str]:
        token = self.token
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}
