from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
import logging
from typing import Optional

from pg8000.exceptions import DatabaseError, InterfaceError

from app.core.errors import StoreUnavailable, UnknownTicket
from app.db.connection import fetch_all, fetch_one, run_transaction
from app.models.ticket import SaleOutcome, Ticket, TicketFilter
from app.store.base import TicketStore

logger = logging.getLogger(__name__)

_TICKET_COLUMNS = "number, sold, buyer, sold_at"


class _SaleConflict(Exception):
    def __init__(self, numbers: tuple[int, ...]) -> None:
        self.numbers = numbers
        super().__init__(f"Tickets already sold: {list(numbers)}")


@contextmanager
def _store_errors(operation: str):
    try:
        yield
    except (InterfaceError, DatabaseError, OSError) as exc:
        logger.exception("Ticket store operation %s failed", operation)
        raise StoreUnavailable(f"Ticket store failed during {operation}") from exc


def _ticket_from_row(row: dict) -> Ticket:
    return Ticket(
        number=row["number"],
        sold=bool(row["sold"]),
        buyer=row.get("buyer") or None,
        sold_at=row.get("sold_at"),
    )


def _where(ticket_filter: Optional[TicketFilter]) -> tuple[str, list]:
    if ticket_filter is None:
        return "", []
    clauses = []
    params: list = []
    if ticket_filter.sold is not None:
        clauses.append("sold = %s")
        params.append(ticket_filter.sold)
    if ticket_filter.buyer is not None:
        clauses.append("buyer = %s")
        params.append(ticket_filter.buyer)
    if not clauses:
        return "", []
    return " WHERE " + " AND ".join(clauses), params


class PostgresTicketStore(TicketStore):
    """Ticket pool kept in the ``tickets`` table.

    Sales lock the requested rows with ``SELECT ... FOR UPDATE`` in
    ascending number order, so overlapping purchases serialize on the shared
    rows without deadlocking, across any number of processes.
    """

    backend = "postgres"

    def find_by_numbers(self, numbers: set[int]) -> list[Ticket]:
        if not numbers:
            return []
        ordered = sorted(numbers)
        placeholders = ", ".join(["%s"] * len(ordered))
        with _store_errors("find_by_numbers"):
            rows = fetch_all(
                f"""
                SELECT {_TICKET_COLUMNS}
                FROM tickets
                WHERE number IN ({placeholders})
                ORDER BY number ASC
                """,
                tuple(ordered),
            )
        return [_ticket_from_row(row) for row in rows]

    def commit_sale(self, numbers: set[int], buyer: str, sold_at: datetime) -> SaleOutcome:
        ordered = sorted(numbers)
        placeholders = ", ".join(["%s"] * len(ordered))

        def _handler(conn):
            cur = conn.cursor()
            cur.execute(
                f"""
                SELECT number, sold
                FROM tickets
                WHERE number IN ({placeholders})
                ORDER BY number ASC
                FOR UPDATE
                """,
                ordered,
            )
            rows = cur.fetchall()
            found = {row[0] for row in rows}
            missing = [number for number in ordered if number not in found]
            if missing:
                cur.close()
                raise UnknownTicket(missing)
            conflicts = tuple(row[0] for row in rows if row[1])
            if conflicts:
                cur.close()
                raise _SaleConflict(conflicts)
            cur.execute(
                f"""
                UPDATE tickets
                SET sold = true,
                    buyer = %s,
                    sold_at = %s
                WHERE number IN ({placeholders}) AND sold = false
                """,
                [buyer, sold_at, *ordered],
            )
            cur.close()
            return SaleOutcome(committed=True)

        try:
            with _store_errors("commit_sale"):
                return run_transaction(_handler)
        except _SaleConflict as conflict:
            return SaleOutcome(committed=False, conflicts=conflict.numbers)

    def find_all(self, ticket_filter: Optional[TicketFilter] = None) -> list[Ticket]:
        where, params = _where(ticket_filter)
        with _store_errors("find_all"):
            rows = fetch_all(
                f"SELECT {_TICKET_COLUMNS} FROM tickets{where} ORDER BY number ASC",
                tuple(params),
            )
        return [_ticket_from_row(row) for row in rows]

    def reset_all(self) -> int:
        def _handler(conn):
            cur = conn.cursor()
            cur.execute(
                """
                UPDATE tickets
                SET sold = false,
                    buyer = NULL,
                    sold_at = NULL
                WHERE sold = true
                """
            )
            reset = cur.rowcount
            cur.close()
            return reset

        with _store_errors("reset_all"):
            reset = run_transaction(_handler)
        logger.info("Reset %s sold tickets", reset)
        return reset

    def count_where(self, ticket_filter: Optional[TicketFilter] = None) -> int:
        where, params = _where(ticket_filter)
        with _store_errors("count_where"):
            row = fetch_one(f"SELECT COUNT(*) AS total FROM tickets{where}", tuple(params))
        return int(row["total"]) if row else 0

    def seed(self, pool_size: int) -> int:
        def _handler(conn):
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM tickets")
            if cur.fetchone()[0] > 0:
                cur.close()
                return 0
            cur.execute(
                """
                INSERT INTO tickets (number, sold, buyer, sold_at)
                SELECT n, false, NULL, NULL
                FROM generate_series(1, %s::int) AS n
                ON CONFLICT (number) DO NOTHING
                """,
                (pool_size,),
            )
            inserted = cur.rowcount
            cur.close()
            return inserted

        with _store_errors("seed"):
            inserted = run_transaction(_handler)
        if inserted:
            logger.info("Initialized ticket pool with %s numbers", inserted)
        return inserted

    def ping(self) -> bool:
        try:
            fetch_one("SELECT 1 AS ok")
        except (StoreUnavailable, InterfaceError, DatabaseError, OSError):
            logger.warning("Ticket store ping failed", exc_info=True)
            return False
        return True
