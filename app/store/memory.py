from __future__ import annotations

from dataclasses import replace
from datetime import datetime
import logging
import threading
from typing import Optional

from app.core.errors import UnknownTicket
from app.models.ticket import SaleOutcome, Ticket, TicketFilter
from app.store.base import TicketStore

logger = logging.getLogger(__name__)


class InMemoryTicketStore(TicketStore):
    """Process-local store; one lock guards the whole pool.

    Only safe for a single process. Deployments running several workers
    share a PostgreSQL store instead.
    """

    backend = "memory"

    def __init__(self, pool_size: int = 0) -> None:
        self._lock = threading.Lock()
        self._tickets: dict[int, Ticket] = {}
        if pool_size:
            self.seed(pool_size)

    def find_by_numbers(self, numbers: set[int]) -> list[Ticket]:
        with self._lock:
            return [self._tickets[number] for number in sorted(numbers) if number in self._tickets]

    def commit_sale(self, numbers: set[int], buyer: str, sold_at: datetime) -> SaleOutcome:
        with self._lock:
            missing = [number for number in numbers if number not in self._tickets]
            if missing:
                raise UnknownTicket(missing)
            conflicts = tuple(sorted(number for number in numbers if self._tickets[number].sold))
            if conflicts:
                return SaleOutcome(committed=False, conflicts=conflicts)
            for number in numbers:
                self._tickets[number] = Ticket(number=number, sold=True, buyer=buyer, sold_at=sold_at)
            return SaleOutcome(committed=True)

    def find_all(self, ticket_filter: Optional[TicketFilter] = None) -> list[Ticket]:
        with self._lock:
            tickets = [self._tickets[number] for number in sorted(self._tickets)]
        if ticket_filter is None:
            return tickets
        return [ticket for ticket in tickets if ticket_filter.matches(ticket)]

    def reset_all(self) -> int:
        reset = 0
        with self._lock:
            for number, ticket in self._tickets.items():
                if ticket.sold:
                    reset += 1
                self._tickets[number] = replace(ticket, sold=False, buyer=None, sold_at=None)
        logger.info("Reset %s sold tickets", reset)
        return reset

    def count_where(self, ticket_filter: Optional[TicketFilter] = None) -> int:
        with self._lock:
            tickets = list(self._tickets.values())
        if ticket_filter is None:
            return len(tickets)
        return sum(1 for ticket in tickets if ticket_filter.matches(ticket))

    def seed(self, pool_size: int) -> int:
        with self._lock:
            if self._tickets:
                return 0
            for number in range(1, pool_size + 1):
                self._tickets[number] = Ticket(number=number)
        logger.info("Initialized ticket pool with %s numbers", pool_size)
        return pool_size
