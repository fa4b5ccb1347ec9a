from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Ticket:
    number: int
    sold: bool = False
    buyer: Optional[str] = None
    sold_at: Optional[datetime] = None

    def as_dict(self) -> dict:
        return {
            "number": self.number,
            "sold": self.sold,
            "buyer": self.buyer,
            "sold_at": self.sold_at,
        }


@dataclass(frozen=True)
class TicketFilter:
    """Restricts store listings and counts. ``None`` fields match anything."""

    sold: Optional[bool] = None
    buyer: Optional[str] = None

    def matches(self, ticket: Ticket) -> bool:
        if self.sold is not None and ticket.sold != self.sold:
            return False
        if self.buyer is not None and ticket.buyer != self.buyer:
            return False
        return True


SOLD = TicketFilter(sold=True)
AVAILABLE = TicketFilter(sold=False)


@dataclass(frozen=True)
class SaleOutcome:
    committed: bool
    conflicts: tuple[int, ...] = ()
