from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from app.models.ticket import SaleOutcome, Ticket, TicketFilter


class TicketStore(ABC):
    """Persistence contract for the ticket pool.

    ``commit_sale`` is the only operation that coordinates across tickets:
    it must sell every requested ticket or none of them, as seen by every
    concurrent caller, including callers in other processes when the
    backing storage is shared. Everything else is a plain read or a bulk
    write with no cross-request guarantees.
    """

    backend = "abstract"

    @abstractmethod
    def find_by_numbers(self, numbers: set[int]) -> list[Ticket]:
        """Current state of the requested tickets, ascending; unknown numbers are omitted."""

    @abstractmethod
    def commit_sale(self, numbers: set[int], buyer: str, sold_at: datetime) -> SaleOutcome:
        """Atomically sell ``numbers`` to ``buyer``, or report the tickets already sold."""

    @abstractmethod
    def find_all(self, ticket_filter: Optional[TicketFilter] = None) -> list[Ticket]:
        ...

    @abstractmethod
    def reset_all(self) -> int:
        """Return every ticket to available; the result counts tickets that were sold."""

    @abstractmethod
    def count_where(self, ticket_filter: Optional[TicketFilter] = None) -> int:
        ...

    @abstractmethod
    def seed(self, pool_size: int) -> int:
        """Create tickets 1..pool_size when the pool is empty; return how many were created."""

    def ping(self) -> bool:
        return True
