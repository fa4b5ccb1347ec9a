from __future__ import annotations

import logging

from app.store.base import TicketStore

logger = logging.getLogger(__name__)


def initialize_pool(store: TicketStore, pool_size: int) -> int:
    """Create tickets 1..pool_size on first startup; an existing pool is left untouched."""
    if pool_size <= 0:
        raise ValueError("Pool size must be positive")
    existing = store.count_where()
    if existing:
        if existing != pool_size:
            logger.warning(
                "Ticket pool holds %s numbers but POOL_SIZE is %s; keeping the existing pool",
                existing,
                pool_size,
            )
        return 0
    return store.seed(pool_size)
