# catalog/fetcher.py
import asyncio
import logging
import random
from typing import Callable, Iterable, List, Optional, Protocol

from .errors import FetchFailed
from .models import Product

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[int, Exception], None]


class DetailSource(Protocol):
    async def fetch_product_details(self, product_id: int) -> Product: ...


class SimulatedDetailSource:
    """Pretends to be a remote product API: random delay, 10% failures."""

    def __init__(
        self,
        base_url: str = "",
        time_unit: float = 1.0,
        failure_rate: float = 0.1,
        rng: Optional[random.Random] = None,
    ):
        self.base_url = base_url
        self.time_unit = time_unit
        self.failure_rate = failure_rate
        self.rng = rng or random.Random()

    async def fetch_product_details(self, product_id: int) -> Product:
        delay = self.rng.uniform(0, 2) * self.time_unit
        if delay > 0:
            await asyncio.sleep(delay)
        if self.rng.random() < self.failure_rate:
            raise FetchFailed(product_id=product_id)
        return Product(
            id=product_id,
            name=f"Product {product_id}",
            price=float(self.rng.randint(0, 99)),
            quantity=self.rng.randint(0, 99),
            category="Category",
        )


async def fetch_many(
    source: DetailSource,
    ids: Iterable[int],
    limit: Optional[int] = None,
    on_error: Optional[ErrorCallback] = None,
) -> List[Product]:
    """Fetch details for every id concurrently and return the successes.

    One task is started per id and all of them are awaited before returning;
    there is no timeout. Results come back in completion order, not input
    order. Failed fetches are left out of the result: they are only logged
    and passed to ``on_error``. ``limit`` caps how many fetches are in flight
    at once, ``None`` starts them all immediately.
    """
    results: List[Product] = []
    semaphore = asyncio.Semaphore(limit) if limit else None

    async def _fetch_one(product_id: int) -> None:
        try:
            if semaphore is None:
                product = await source.fetch_product_details(product_id)
            else:
                async with semaphore:
                    product = await source.fetch_product_details(product_id)
        except Exception as e:
            logger.warning("fetch for product %s dropped: %s", product_id, e)
            if on_error is not None:
                on_error(product_id, e)
            return
        results.append(product)

    await asyncio.gather(*(_fetch_one(pid) for pid in ids))
    return results


class ConcurrentFetcher:
    def __init__(self, source: DetailSource, limit: Optional[int] = None):
        self.source = source
        self.limit = limit

    async def fetch_many(self, ids: Iterable[int], on_error: Optional[ErrorCallback] = None) -> List[Product]:
        return await fetch_many(self.source, ids, limit=self.limit, on_error=on_error)
