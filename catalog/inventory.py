# catalog/inventory.py
from typing import Dict, List, Optional

from .errors import ProductAlreadyExists, ProductNotFound
from .models import Product


class Inventory:
    """Keyed collection of products.

    There is no lock in here: an Inventory shared between concurrent callers
    must be guarded by the caller (see CatalogService).
    """

    def __init__(self, products: Optional[Dict[int, Product]] = None):
        self.products: Dict[int, Product] = products if products is not None else {}

    def __len__(self) -> int:
        return len(self.products)

    def __contains__(self, product_id: int) -> bool:
        return product_id in self.products

    def add_product(self, p: Product) -> None:
        if p.id in self.products:
            raise ProductAlreadyExists(product_id=p.id)
        self.products[p.id] = p

    def remove_product(self, product_id: int) -> None:
        if product_id not in self.products:
            raise ProductNotFound(product_id=product_id)
        del self.products[product_id]

    def get(self, product_id: int) -> Product:
        p = self.products.get(product_id)
        if p is None:
            raise ProductNotFound(product_id=product_id)
        return p

    def replace(self, p: Product) -> None:
        if p.id not in self.products:
            raise ProductNotFound(product_id=p.id)
        self.products[p.id] = p

    def find_product_by_name(self, name: str) -> Product:
        # lowest id wins when several products share a name
        matches = [p for p in self.products.values() if p.name == name]
        if not matches:
            raise ProductNotFound(f"no product named {name!r}")
        return min(matches, key=lambda p: p.id)

    def list_by_category(self, category: str) -> List[Product]:
        return [p for p in self.list_products() if p.category == category]

    def list_products(self) -> List[Product]:
        return [self.products[pid] for pid in sorted(self.products)]

    def total_value(self) -> float:
        total = 0.0
        for p in self.products.values():
            total += p.price * p.quantity
        return total

    def clear(self) -> None:
        self.products.clear()
