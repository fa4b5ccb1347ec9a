from __future__ import annotations

from decimal import Decimal
from typing import Optional

from app.models.ticket import AVAILABLE, SOLD, TicketFilter
from app.store.base import TicketStore


def list_all(store: TicketStore) -> list[dict]:
    return [ticket.as_dict() for ticket in store.find_all()]


def list_sold(store: TicketStore) -> list[dict]:
    return [ticket.as_dict() for ticket in store.find_all(SOLD)]


def list_available(store: TicketStore) -> list[dict]:
    return [ticket.as_dict() for ticket in store.find_all(AVAILABLE)]


def list_by_buyer(store: TicketStore, buyer: str) -> list[dict]:
    return [ticket.as_dict() for ticket in store.find_all(TicketFilter(buyer=buyer.strip()))]


def stats(store: TicketStore, ticket_price: Decimal) -> dict:
    total = store.count_where()
    sold = store.count_where(SOLD)
    # Derived rather than counted so that total == sold + available even
    # while purchases land between the two queries.
    available = total - sold
    return {
        "total": total,
        "sold": sold,
        "available": available,
        "revenue": Decimal(ticket_price) * sold,
    }


def admin_numbers(
    store: TicketStore,
    ticket_price: Decimal,
    buyer: Optional[str] = None,
    sold: Optional[bool] = None,
) -> dict:
    ticket_filter = TicketFilter(sold=sold, buyer=buyer.strip() if buyer else None)
    return {
        "numbers": [ticket.as_dict() for ticket in store.find_all(ticket_filter)],
        "stats": stats(store, ticket_price),
    }
