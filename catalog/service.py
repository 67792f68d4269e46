# catalog/service.py
import asyncio
import logging
from typing import List, Optional

from .errors import ProductAlreadyExists, ProductNotFound
from .events import EventLog, EventPublisher
from .inventory import Inventory
from .models import ChangeEvent, Product, ProductIn, _make_product
from .storage import MemoryStorage, ProductStorage

logger = logging.getLogger(__name__)


class CatalogService:
    """Inventory + storage + change events behind one lock.

    The inventory is the read side; every mutation is written to storage
    first and only committed to the inventory when the write succeeded.
    Update and delete then publish a ChangeEvent. Publishing is best-effort:
    a failing publisher is logged and does not undo or fail the mutation.
    """

    def __init__(
        self,
        storage: Optional[ProductStorage] = None,
        publisher: Optional[EventPublisher] = None,
        inventory: Optional[Inventory] = None,
    ):
        self.storage = storage if storage is not None else MemoryStorage()
        self.publisher = publisher if publisher is not None else EventLog()
        self.inventory = inventory if inventory is not None else Inventory()
        self._lock = asyncio.Lock()

    # ---------------------------
    # Reads
    # ---------------------------
    async def get(self, product_id: int) -> Product:
        async with self._lock:
            return self.inventory.get(product_id).model_copy()

    async def list_products(self, category: Optional[str] = None) -> List[Product]:
        async with self._lock:
            if category is not None:
                products = self.inventory.list_by_category(category)
            else:
                products = self.inventory.list_products()
            return [p.model_copy() for p in products]

    async def search(self, name: str) -> Product:
        async with self._lock:
            return self.inventory.find_product_by_name(name).model_copy()

    async def total_value(self) -> float:
        async with self._lock:
            return self.inventory.total_value()

    # ---------------------------
    # Writes
    # ---------------------------
    async def create(self, p: Product) -> Product:
        async with self._lock:
            if p.id in self.inventory:
                raise ProductAlreadyExists(product_id=p.id)
            try:
                await self.storage.get_by_id(p.id)
            except ProductNotFound:
                pass
            else:
                raise ProductAlreadyExists(product_id=p.id)
            await self.storage.save(p)
            self.inventory.add_product(p.model_copy())
        logger.info("created product %s", p.id)
        return p

    async def update(self, product_id: int, payload: ProductIn) -> Product:
        async with self._lock:
            self.inventory.get(product_id)
            updated = _make_product(product_id, payload)
            await self.storage.save(updated)
            self.inventory.replace(updated)
        await self._publish(updated, "updated")
        return updated.model_copy()

    async def update_price(self, product_id: int, price: float) -> Product:
        async with self._lock:
            updated = self.inventory.get(product_id).model_copy()
            updated.update_price(price)
            await self._commit(updated)
        await self._publish(updated, "updated")
        return updated.model_copy()

    async def sell(self, product_id: int, quantity: int) -> Product:
        async with self._lock:
            updated = self.inventory.get(product_id).model_copy()
            updated.sell(quantity)
            await self._commit(updated)
        await self._publish(updated, "updated")
        return updated.model_copy()

    async def restock(self, product_id: int, quantity: int) -> Product:
        async with self._lock:
            updated = self.inventory.get(product_id).model_copy()
            updated.restock(quantity)
            await self._commit(updated)
        await self._publish(updated, "updated")
        return updated.model_copy()

    async def delete(self, product_id: int) -> None:
        async with self._lock:
            self.inventory.get(product_id)
            try:
                await self.storage.delete(product_id)
            except ProductNotFound:
                logger.info("product %s was already gone from storage", product_id)
            self.inventory.remove_product(product_id)
        await self._publish_event(ChangeEvent(order_id=product_id, product_id=product_id, quantity=0, status="deleted"))

    async def load(self) -> int:
        """Fill the inventory from storage, e.g. after a restart."""
        products = await self.storage.list_all()
        async with self._lock:
            self.inventory.clear()
            for p in products:
                self.inventory.add_product(p)
        logger.info("loaded %d products from storage", len(products))
        return len(products)

    async def reset(self) -> None:
        async with self._lock:
            self.inventory.clear()

    # ---------------------------
    # Helpers
    # ---------------------------
    async def _commit(self, updated: Product) -> None:
        await self.storage.save(updated)
        self.inventory.replace(updated)

    async def _publish(self, p: Product, status: str) -> None:
        await self._publish_event(ChangeEvent(order_id=p.id, product_id=p.id, quantity=p.quantity, status=status))

    async def _publish_event(self, event: ChangeEvent) -> None:
        try:
            # producers may block on a full queue, keep them off the event loop
            await asyncio.to_thread(self.publisher.publish, event)
        except Exception:
            logger.exception("could not publish %s event for product %s", event.status, event.product_id)
