from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Callable, Iterable

from app.core.errors import AlreadySold, UnknownTicket, ValidationError
from app.store.base import TicketStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PurchaseResult:
    numbers: list[int]
    buyer: str
    sold_at: datetime

    def as_dict(self) -> dict:
        return {
            "success": True,
            "updated_numbers": self.numbers,
            "buyer": self.buyer,
            "sold_at": self.sold_at,
        }


def _validate_numbers(numbers: Iterable[int]) -> set[int]:
    if numbers is None or isinstance(numbers, (str, bytes)):
        raise ValidationError("Numbers must be a collection of ticket numbers")
    values = list(numbers)
    if not values:
        raise ValidationError("At least one number is required")
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"Invalid ticket number: {value!r}")
        if value < 1:
            raise ValidationError(f"Ticket numbers start at 1, got {value}")
    requested = set(values)
    if len(requested) != len(values):
        raise ValidationError("Duplicate numbers are not allowed")
    return requested


def _validate_buyer(buyer: str) -> str:
    if not isinstance(buyer, str) or not buyer.strip():
        raise ValidationError("Buyer name is required")
    return buyer.strip()


class AllocationEngine:
    """Sells sets of ticket numbers all-or-nothing.

    The engine keeps no ticket state between calls. Every purchase re-reads
    the store, and the store's atomic ``commit_sale`` settles races the
    pre-check cannot see, so several engines in different processes can
    share one store.

    Purchases are not idempotent: repeating a request that succeeded fails
    with ``AlreadySold``. Deduplicating retries is up to the caller.
    """

    def __init__(self, store: TicketStore, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock

    def purchase(self, numbers: Iterable[int], buyer: str) -> PurchaseResult:
        requested = _validate_numbers(numbers)
        name = _validate_buyer(buyer)

        tickets = self._store.find_by_numbers(requested)
        missing = requested - {ticket.number for ticket in tickets}
        if missing:
            logger.warning("Purchase by %r rejected, unknown numbers %s", name, sorted(missing))
            raise UnknownTicket(missing)

        conflicts = [ticket.number for ticket in tickets if ticket.sold]
        if conflicts:
            logger.warning("Purchase by %r rejected, already sold %s", name, sorted(conflicts))
            raise AlreadySold(conflicts)

        sold_at = self._clock()
        outcome = self._store.commit_sale(requested, name, sold_at)
        if not outcome.committed:
            # Lost a race between the pre-check and the commit.
            logger.warning(
                "Purchase by %r lost a concurrent sale on %s", name, list(outcome.conflicts)
            )
            raise AlreadySold(outcome.conflicts)

        result = PurchaseResult(numbers=sorted(requested), buyer=name, sold_at=sold_at)
        logger.info("Sold numbers %s to %r", result.numbers, name)
        return result


def purchase_numbers(store: TicketStore, numbers: Iterable[int], buyer: str) -> dict:
    return AllocationEngine(store).purchase(numbers, buyer).as_dict()
