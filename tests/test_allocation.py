from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
import threading

import pytest

from app.core.errors import AlreadySold, StoreUnavailable, UnknownTicket, ValidationError
from app.models.ticket import SaleOutcome
from app.services.allocation import AllocationEngine, purchase_numbers
from app.store.memory import InMemoryTicketStore

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _engine(store):
    return AllocationEngine(store, clock=lambda: FIXED_NOW)


def test_purchase_sells_requested_numbers(store):
    result = _engine(store).purchase({2, 3}, "Alice")

    assert result.numbers == [2, 3]
    assert result.buyer == "Alice"
    sold = store.find_all()
    assert [(t.number, t.buyer) for t in sold if t.sold] == [(2, "Alice"), (3, "Alice")]
    assert all(t.sold_at == FIXED_NOW for t in sold if t.sold)


def test_overlapping_purchase_names_conflicts_and_sells_nothing(store):
    engine = _engine(store)
    engine.purchase({2, 3}, "Alice")
    before = store.find_all()

    with pytest.raises(AlreadySold) as excinfo:
        engine.purchase({3, 4}, "Bob")

    assert excinfo.value.numbers == [3]
    assert excinfo.value.payload()["soldNumbers"] == [3]
    assert store.find_all() == before
    assert store.find_by_numbers({4})[0].sold is False


def test_unknown_number_is_reported(store):
    with pytest.raises(UnknownTicket) as excinfo:
        _engine(store).purchase({99}, "Carol")

    assert excinfo.value.numbers == [99]
    assert excinfo.value.payload()["unknownNumbers"] == [99]


def test_unknown_numbers_abort_the_whole_request(store):
    before = store.find_all()

    with pytest.raises(UnknownTicket) as excinfo:
        _engine(store).purchase([1, 6, 7], "Carol")

    assert excinfo.value.numbers == [6, 7]
    assert store.find_all() == before


def test_repeating_a_successful_purchase_fails(store):
    engine = _engine(store)
    engine.purchase({1}, "Alice")

    with pytest.raises(AlreadySold) as excinfo:
        engine.purchase({1}, "Alice")

    assert excinfo.value.numbers == [1]


def test_buyer_name_is_trimmed(store):
    result = _engine(store).purchase([5], "  Dana  ")

    assert result.buyer == "Dana"
    assert store.find_by_numbers({5})[0].buyer == "Dana"


@pytest.mark.parametrize(
    "numbers, buyer",
    [
        ([], "Alice"),
        (set(), "Alice"),
        ([0], "Alice"),
        ([-3], "Alice"),
        ([1, 1], "Alice"),
        ([True], "Alice"),
        (["1"], "Alice"),
        ("12", "Alice"),
        (None, "Alice"),
        ([1], ""),
        ([1], "   "),
        ([1], None),
    ],
)
def test_invalid_requests_never_reach_the_store(numbers, buyer):
    class ExplodingStore:
        def __getattr__(self, name):
            raise AssertionError(f"store.{name} should not be called")

    with pytest.raises(ValidationError):
        AllocationEngine(ExplodingStore()).purchase(numbers, buyer)


def test_conflict_at_commit_time_is_reported():
    class RacingStore(InMemoryTicketStore):
        """Sells ticket 3 to someone else between the pre-check and the commit."""

        def commit_sale(self, numbers, buyer, sold_at):
            super().commit_sale({3}, "Eve", sold_at)
            return super().commit_sale(numbers, buyer, sold_at)

    store = RacingStore(pool_size=5)

    with pytest.raises(AlreadySold) as excinfo:
        _engine(store).purchase({2, 3}, "Bob")

    assert excinfo.value.numbers == [3]
    assert store.find_by_numbers({2})[0].sold is False
    assert store.find_by_numbers({3})[0].buyer == "Eve"


def test_store_failure_propagates_without_mutation(store, monkeypatch):
    def failing_commit(numbers, buyer, sold_at):
        raise StoreUnavailable("timeout")

    monkeypatch.setattr(store, "commit_sale", failing_commit)

    with pytest.raises(StoreUnavailable):
        _engine(store).purchase({1, 2}, "Alice")

    assert store.count_where() == 5
    assert all(not t.sold for t in store.find_all())


def test_engine_rereads_store_on_every_purchase():
    calls = []

    class CountingStore(InMemoryTicketStore):
        def find_by_numbers(self, numbers):
            calls.append(set(numbers))
            return super().find_by_numbers(numbers)

    engine = _engine(CountingStore(pool_size=5))
    engine.purchase({1}, "Alice")
    with pytest.raises(AlreadySold):
        engine.purchase({1}, "Bob")

    assert calls == [{1}, {1}]


def test_simultaneous_purchases_of_same_number_sell_once():
    store = InMemoryTicketStore(pool_size=5)
    engine = _engine(store)
    barrier = threading.Barrier(2)

    def attempt(buyer):
        barrier.wait()
        try:
            engine.purchase({5}, buyer)
            return buyer, None
        except AlreadySold as exc:
            return buyer, exc.numbers

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(attempt, ["Alice", "Bob"]))

    winners = [buyer for buyer, conflict in results if conflict is None]
    losers = [conflict for _, conflict in results if conflict is not None]
    assert len(winners) == 1
    assert losers == [[5]]
    assert store.find_by_numbers({5})[0].buyer == winners[0]


def test_no_double_sell_under_contention():
    store = InMemoryTicketStore(pool_size=20)
    engine = AllocationEngine(store)
    requests = [({n, n + 1, n + 2}, f"buyer-{i}") for i, n in enumerate(list(range(1, 19)) * 3)]

    def attempt(request):
        numbers, buyer = request
        try:
            return buyer, engine.purchase(numbers, buyer).numbers, None
        except AlreadySold as exc:
            return buyer, sorted(numbers), exc.numbers

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, requests))

    owners = {}
    for buyer, numbers, conflict in results:
        if conflict is None:
            for number in numbers:
                assert number not in owners, f"ticket {number} sold twice"
                owners[number] = buyer
        else:
            assert conflict
            assert set(conflict) <= set(numbers)
    for ticket in store.find_all():
        assert ticket.sold == (ticket.number in owners)
        if ticket.sold:
            assert ticket.buyer == owners[ticket.number]


def test_purchase_numbers_returns_response_shape(store):
    body = purchase_numbers(store, [4, 1], "Alice")

    assert body["success"] is True
    assert body["updated_numbers"] == [1, 4]
    assert body["buyer"] == "Alice"
    assert body["sold_at"].tzinfo is not None


def test_commit_outcome_defaults():
    assert SaleOutcome(committed=True).conflicts == ()
