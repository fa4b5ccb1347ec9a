from __future__ import annotations

import logging

from app.store.base import TicketStore

logger = logging.getLogger(__name__)


def reset_all(store: TicketStore) -> dict:
    """Return every ticket to available.

    Not coordinated with purchases in flight: a sale committing while the
    reset runs may survive it or be wiped, per ticket. Run it only while
    sales are closed.
    """
    reset_count = store.reset_all()
    logger.warning("Administrative reset cleared %s sold tickets", reset_count)
    return {"reset_count": reset_count}
