# tests/test_concurrency.py
import asyncio
import httpx
from fastapi.testclient import TestClient

from catalog.events import EventLog
from catalog.main import create_app
from catalog.service import CatalogService
from catalog.storage import MockDatabaseStorage


def make_app():
    # fresh app per test: its locks belong to the event loop of that test
    return create_app(service=CatalogService(MockDatabaseStorage(time_unit=0.005, failure_rate=0.0), EventLog()))


async def _sell_task(app, product_id, qty):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        return await ac.post(f"/products/{product_id}/sell", json={"quantity": qty})


async def _sell_all(app, product_id, buyers):
    return await asyncio.gather(*(_sell_task(app, product_id, 1) for _ in range(buyers)))


def test_concurrent_last_item():
    app = make_app()
    client = TestClient(app)
    client.post("/products", json={"id": 42, "name": "last", "price": 10.0, "quantity": 1, "category": "x"})

    # two buyers race for the single unit
    results = asyncio.run(_sell_all(app, 42, 2))
    statuses = sorted(r.status_code for r in results)
    assert statuses == [200, 409]
    assert client.get("/products/42").json()["quantity"] == 0


def test_many_buyers_never_oversell():
    app = make_app()
    client = TestClient(app)
    client.post("/products", json={"id": 7, "name": "hot", "price": 1.0, "quantity": 5, "category": "x"})

    results = asyncio.run(_sell_all(app, 7, 20))
    assert [r.status_code for r in results].count(200) == 5
    assert client.get("/products/7").json()["quantity"] == 0
