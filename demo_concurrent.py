import asyncio
import time

from catalog.config import settings
from catalog.fetcher import SimulatedDetailSource, fetch_many
from catalog.log import configure_logging


async def main():
    configure_logging("WARNING")
    source = SimulatedDetailSource(time_unit=settings.simulated_latency, failure_rate=settings.failure_rate)
    ids = list(range(1, 21))
    failed = []

    for limit in (None, 5):
        failed.clear()
        label = "unbounded" if limit is None else f"limit={limit}"
        print(f"\n⚡ Fetching {len(ids)} products ({label})...")
        start = time.perf_counter()
        products = await fetch_many(source, ids, limit=limit, on_error=lambda pid, e: failed.append(pid))
        duration = time.perf_counter() - start

        print(f"✅ {len(products)} fetched, ❌ {len(failed)} dropped in {duration:.2f}s")
        print("   completion order:", [p.id for p in products])
        for p in products[:3]:
            print("  ", p.display())
        if failed:
            print("   dropped:", sorted(failed))


if __name__ == "__main__":
    asyncio.run(main())
