# tests/test_fetcher.py
import asyncio
import random

from catalog.errors import FetchFailed
from catalog.fetcher import ConcurrentFetcher, SimulatedDetailSource, fetch_many
from catalog.models import Product


class FlakySource:
    """Fails for the ids in `failing`, tracks how many fetches overlap."""

    def __init__(self, failing=(), delays=None):
        self.failing = set(failing)
        self.delays = delays or {}
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_product_details(self, product_id):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(product_id, 0.001))
            if product_id in self.failing:
                raise FetchFailed(product_id=product_id)
            return Product(id=product_id, name=f"Product {product_id}", price=1.0, quantity=1, category="Category")
        finally:
            self.in_flight -= 1


def test_failures_are_dropped_and_reported():
    errors = []
    source = FlakySource(failing={2, 4})
    products = asyncio.run(fetch_many(source, [1, 2, 3, 4, 5], on_error=lambda pid, e: errors.append((pid, e))))
    assert sorted(p.id for p in products) == [1, 3, 5]
    assert sorted(pid for pid, _ in errors) == [2, 4]
    assert all(isinstance(e, FetchFailed) for _, e in errors)


def test_results_follow_completion_order():
    source = FlakySource(delays={1: 0.06, 2: 0.03, 3: 0.001})
    products = asyncio.run(fetch_many(source, [1, 2, 3]))
    assert [p.id for p in products] == [3, 2, 1]


def test_unbounded_runs_everything_at_once():
    source = FlakySource()
    asyncio.run(fetch_many(source, range(50)))
    assert source.max_in_flight == 50


def test_limit_bounds_in_flight_fetches():
    source = FlakySource()
    products = asyncio.run(fetch_many(source, range(40), limit=4))
    assert len(products) == 40
    assert source.max_in_flight <= 4


def test_empty_batch():
    assert asyncio.run(fetch_many(FlakySource(), [])) == []


def test_simulated_source_results_are_subset_of_request():
    source = SimulatedDetailSource(time_unit=0, rng=random.Random(42))
    ids = list(range(1, 101))
    products = asyncio.run(fetch_many(source, ids))
    assert 0 <= len(products) <= len(ids)
    assert {p.id for p in products} <= set(ids)
    # ~10% failure rate
    assert 70 <= len(products) <= 100
    for p in products:
        assert p.name == f"Product {p.id}"
        assert p.category == "Category"
        assert 0 <= p.price <= 99
        assert 0 <= p.quantity <= 99


def test_simulated_source_can_always_fail():
    source = SimulatedDetailSource(time_unit=0, failure_rate=1.0)
    fetcher = ConcurrentFetcher(source, limit=3)
    assert asyncio.run(fetcher.fetch_many([1, 2, 3])) == []
