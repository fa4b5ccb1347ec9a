from __future__ import annotations

import threading
from typing import Optional

from app.core.config import db_configured, settings
from app.core.errors import StoreUnavailable
from app.services.pool import initialize_pool
from app.store.base import TicketStore
from app.store.memory import InMemoryTicketStore
from app.store.postgres import PostgresTicketStore

_STORE: Optional[TicketStore] = None
_STORE_LOCK = threading.Lock()


def build_store(backend: str) -> TicketStore:
    if backend == "memory":
        return InMemoryTicketStore()
    if backend == "postgres":
        if not db_configured():
            raise StoreUnavailable("Database is not configured")
        return PostgresTicketStore()
    raise ValueError(f"Unknown store backend: {backend}")


def get_store() -> TicketStore:
    global _STORE
    if _STORE is not None:
        return _STORE
    with _STORE_LOCK:
        if _STORE is None:
            store = build_store(settings.store_backend)
            initialize_pool(store, settings.pool_size)
            _STORE = store
    return _STORE


def set_store(store: Optional[TicketStore]) -> None:
    global _STORE
    with _STORE_LOCK:
        _STORE = store
