# tests/test_api.py
from fastapi.testclient import TestClient

from catalog.events import EventLog
from catalog.fetcher import ConcurrentFetcher, SimulatedDetailSource
from catalog.main import create_app
from catalog.service import CatalogService
from catalog.storage import MemoryStorage, MockDatabaseStorage

events = EventLog()
app = create_app(
    service=CatalogService(MemoryStorage(), events),
    fetcher=ConcurrentFetcher(SimulatedDetailSource(time_unit=0, failure_rate=0.0), limit=8),
)
client = TestClient(app)


def reset():
    client.post("/reset")
    events.clear()


def create(pid, name="Test Product", price=10.0, quantity=5, category="Test"):
    return client.post("/products", json={
        "id": pid, "name": name, "price": price, "quantity": quantity, "category": category
    })


def test_health():
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_get_and_conflict():
    reset()
    r = create(1)
    assert r.status_code == 201
    assert r.json() == {"id": 1, "name": "Test Product", "price": 10.0, "quantity": 5, "category": "Test"}
    assert create(1, name="dup").status_code == 409
    assert client.get("/products/1").json()["name"] == "Test Product"
    assert client.get("/products/2").status_code == 404


def test_display():
    reset()
    create(1)
    r = client.get("/products/1/display")
    assert r.json() == {"display": "ID: 1, Name: Test Product, Price: 10.00, Quantity: 5, Category: Test"}


def test_list_by_category_and_search():
    reset()
    create(3, name="Hammer", category="tools")
    create(1, name="Stapler", category="office")
    create(2, name="Hammer", category="tools")
    assert [p["id"] for p in client.get("/products").json()] == [1, 2, 3]
    assert [p["id"] for p in client.get("/products", params={"category": "tools"}).json()] == [2, 3]
    assert client.get("/products", params={"category": "garden"}).json() == []
    assert client.get("/products/search", params={"name": "Hammer"}).json()["id"] == 2
    assert client.get("/products/search", params={"name": "Nail"}).status_code == 404


def test_total_value():
    reset()
    assert client.get("/products/value").json() == {"total_value": 0.0}
    create(1, price=10, quantity=2)
    create(2, price=20, quantity=1)
    assert client.get("/products/value").json() == {"total_value": 40.0}


def test_update_publishes_event():
    reset()
    create(1)
    r = client.put("/products/1", json={"name": "Renamed", "price": 12.5, "quantity": 7, "category": "Test"})
    assert r.status_code == 200
    assert r.json()["name"] == "Renamed"
    assert [e.model_dump() for e in events.events] == [
        {"order_id": 1, "product_id": 1, "quantity": 7, "status": "updated"}
    ]
    missing = client.put("/products/99", json={"name": "x", "price": 1, "quantity": 1, "category": "x"})
    assert missing.status_code == 404


def test_delete_twice():
    reset()
    create(1)
    assert client.delete("/products/1").status_code == 204
    assert client.delete("/products/1").status_code == 404
    assert events.events[-1].status == "deleted"
    assert events.events[-1].quantity == 0


def test_sell_restock_price():
    reset()
    create(1, quantity=5)
    r = client.post("/products/1/sell", json={"quantity": 3})
    assert r.json()["quantity"] == 2
    r = client.post("/products/1/sell", json={"quantity": 3})
    assert r.status_code == 409
    assert client.get("/products/1").json()["quantity"] == 2
    assert client.post("/products/1/restock", json={"quantity": 4}).json()["quantity"] == 6
    assert client.post("/products/1/price", json={"price": 3.25}).json()["price"] == 3.25


def test_batch_fetch():
    ids = list(range(10, 30))
    r = client.post("/products/fetch", json={"ids": ids})
    body = r.json()
    assert body["requested"] == 20
    assert body["fetched"] == len(body["products"]) == 20
    assert {p["id"] for p in body["products"]} == set(ids)


def test_storage_failure_is_service_unavailable():
    flaky_app = create_app(service=CatalogService(MockDatabaseStorage(time_unit=0, failure_rate=1.0), EventLog()))
    flaky = TestClient(flaky_app)
    r = flaky.post("/products", json={"id": 1, "name": "x", "price": 1, "quantity": 1, "category": "x"})
    assert r.status_code == 503
    assert r.json()["detail"] == "failed to get product"
    assert flaky.get("/products/1").status_code == 404


def test_importing_the_app_leaves_logging_alone():
    import logging
    from rich.logging import RichHandler

    assert not any(isinstance(h, RichHandler) for h in logging.getLogger().handlers)


def test_empty_category_query_matches_nothing():
    reset()
    create(1, category="Test")
    assert client.get("/products", params={"category": ""}).json() == []
