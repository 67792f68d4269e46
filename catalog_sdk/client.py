# catalog_sdk/client.py
import requests
import httpx
from typing import Iterable, List, Optional


class CatalogClient:
    def __init__(self, base_url: str = "http://localhost:8085", api_key: Optional[str] = None, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.timeout = timeout
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def reset(self):
        r = self.session.post(f"{self.base_url}/reset", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def health(self):
        r = self.session.get(f"{self.base_url}/health", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Products
    def create_product(self, product_id: int, name: str, price: float, quantity: int, category: str = "general"):
        r = self.session.post(f"{self.base_url}/products", json={
            "id": product_id, "name": name, "price": price, "quantity": quantity, "category": category
        }, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def list_products(self, category: Optional[str] = None):
        params = {}
        if category:
            params["category"] = category
        r = self.session.get(f"{self.base_url}/products", params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def search_product(self, name: str):
        r = self.session.get(f"{self.base_url}/products/search", params={"name": name}, timeout=self.timeout)
        try:
            r.raise_for_status()
        except requests.exceptions.HTTPError as e:
            if r.status_code == 404:
                return f"No product found with name '{name}'"
            raise e
        return r.json()

    def get_product(self, product_id: int):
        r = self.session.get(f"{self.base_url}/products/{product_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def display_product(self, product_id: int) -> str:
        r = self.session.get(f"{self.base_url}/products/{product_id}/display", timeout=self.timeout)
        r.raise_for_status()
        return r.json()["display"]

    def update_product(self, product_id: int, name: str, price: float, quantity: int, category: str = "general"):
        r = self.session.put(f"{self.base_url}/products/{product_id}", json={
            "name": name, "price": price, "quantity": quantity, "category": category
        }, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def delete_product(self, product_id: int) -> None:
        r = self.session.delete(f"{self.base_url}/products/{product_id}", timeout=self.timeout)
        r.raise_for_status()

    # Stock and price
    def update_price(self, product_id: int, price: float):
        r = self.session.post(f"{self.base_url}/products/{product_id}/price", json={"price": price}, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def sell(self, product_id: int, quantity: int):
        r = self.session.post(f"{self.base_url}/products/{product_id}/sell", json={"quantity": quantity}, timeout=self.timeout)
        # no raise_for_status(): callers inspect the 409 on insufficient stock
        return r

    def restock(self, product_id: int, quantity: int):
        r = self.session.post(f"{self.base_url}/products/{product_id}/restock", json={"quantity": quantity}, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def total_value(self) -> float:
        r = self.session.get(f"{self.base_url}/products/value", timeout=self.timeout)
        r.raise_for_status()
        return r.json()["total_value"]

    # Batch fetch from the external detail source
    def fetch_many(self, ids: Iterable[int]):
        r = self.session.post(f"{self.base_url}/products/fetch", json={"ids": list(ids)}, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    async def fetch_many_async(self, ids: Iterable[int]) -> List[dict]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.post(f"{self.base_url}/products/fetch", json={"ids": list(ids)})
            r.raise_for_status()
            return r.json()["products"]


if __name__ == "__main__":
    import argparse
    from rich import print

    from catalog.config import settings

    parser = argparse.ArgumentParser(description="product-catalog client")
    subparsers = parser.add_subparsers(dest="command", required=True)

    lp = subparsers.add_parser("list-products", help="List all products")
    lp.add_argument("--category", help="Filter products by category")

    sp = subparsers.add_parser("search", help="Find a product by exact name")
    sp.add_argument("--name", required=True, help="Product name")

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", type=int, required=True, help="ID of the product")

    cp = subparsers.add_parser("create-product", help="Create a product")
    cp.add_argument("--product-id", type=int, required=True, help="ID of the product")
    cp.add_argument("--name", required=True, help="Product name")
    cp.add_argument("--price", type=float, required=True, help="Price")
    cp.add_argument("--quantity", type=int, required=True, help="Quantity available")
    cp.add_argument("--category", default="general", help="Product category")

    dp = subparsers.add_parser("delete-product", help="Delete a product")
    dp.add_argument("--product-id", type=int, required=True)

    sl = subparsers.add_parser("sell", help="Sell units of a product")
    sl.add_argument("--product-id", type=int, required=True)
    sl.add_argument("--qty", type=int, required=True)

    rs = subparsers.add_parser("restock", help="Restock a product")
    rs.add_argument("--product-id", type=int, required=True)
    rs.add_argument("--qty", type=int, required=True)

    subparsers.add_parser("total-value", help="Sum of price x quantity")

    fm = subparsers.add_parser("fetch", help="Fetch product details for several IDs at once")
    fm.add_argument("ids", type=int, nargs="+")

    args = parser.parse_args()
    c = CatalogClient(base_url=settings.api_url)

    if args.command == "list-products":
        print(c.list_products(args.category))
    elif args.command == "search":
        print(c.search_product(args.name))
    elif args.command == "get-product":
        print(c.display_product(args.product_id))
    elif args.command == "create-product":
        print(c.create_product(args.product_id, args.name, args.price, args.quantity, args.category))
    elif args.command == "delete-product":
        c.delete_product(args.product_id)
        print(f"deleted {args.product_id}")
    elif args.command == "sell":
        print(c.sell(args.product_id, args.qty).json())
    elif args.command == "restock":
        print(c.restock(args.product_id, args.qty))
    elif args.command == "total-value":
        print(c.total_value())
    elif args.command == "fetch":
        print(c.fetch_many(args.ids))
