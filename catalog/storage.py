# catalog/storage.py
import asyncio
import logging
import random
from typing import Dict, List, Optional, Protocol

from sqlalchemy import Column, Float, Integer, String, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from .errors import FailedToDelete, FailedToGet, FailedToSave, ProductNotFound
from .models import Product

logger = logging.getLogger(__name__)


class ProductStorage(Protocol):
    """Save / get / delete products.

    Implementations serialise their own operations; ``get_by_id`` and
    ``delete`` raise ProductNotFound for a missing key and a StorageError
    subclass for a transient failure.
    """

    async def save(self, p: Product) -> None: ...

    async def get_by_id(self, product_id: int) -> Product: ...

    async def delete(self, product_id: int) -> None: ...

    async def list_all(self) -> List[Product]: ...


# ---------------------------
# In-memory
# ---------------------------
class MemoryStorage:
    def __init__(self):
        self._lock = asyncio.Lock()
        self.products: Dict[int, Product] = {}

    async def save(self, p: Product) -> None:
        async with self._lock:
            self.products[p.id] = p.model_copy()

    async def get_by_id(self, product_id: int) -> Product:
        async with self._lock:
            p = self.products.get(product_id)
            if p is None:
                raise ProductNotFound(product_id=product_id)
            return p.model_copy()

    async def delete(self, product_id: int) -> None:
        async with self._lock:
            if product_id not in self.products:
                raise ProductNotFound(product_id=product_id)
            del self.products[product_id]

    async def list_all(self) -> List[Product]:
        async with self._lock:
            return [p.model_copy() for p in self.products.values()]


# ---------------------------
# Simulated database (random latency + random failure)
# ---------------------------
class MockDatabaseStorage:
    """Stand-in for a remote database.

    Every call holds the lock, sleeps ``uniform(0, 2)`` time units and then
    fails with probability ``failure_rate`` before looking at the key, so a
    transient failure can happen whether or not the product exists.
    """

    def __init__(
        self,
        time_unit: float = 1.0,
        failure_rate: float = 0.1,
        rng: Optional[random.Random] = None,
    ):
        self._lock = asyncio.Lock()
        self._store: Dict[int, Product] = {}
        self.time_unit = time_unit
        self.failure_rate = failure_rate
        self.rng = rng or random.Random()

    async def _simulate_io(self) -> bool:
        delay = self.rng.uniform(0, 2) * self.time_unit
        if delay > 0:
            await asyncio.sleep(delay)
        return self.rng.random() < self.failure_rate

    async def save(self, p: Product) -> None:
        async with self._lock:
            if await self._simulate_io():
                logger.warning("simulated save failure for product %s", p.id)
                raise FailedToSave(product_id=p.id)
            self._store[p.id] = p.model_copy()

    async def get_by_id(self, product_id: int) -> Product:
        async with self._lock:
            if await self._simulate_io():
                logger.warning("simulated get failure for product %s", product_id)
                raise FailedToGet(product_id=product_id)
            p = self._store.get(product_id)
            if p is None:
                raise ProductNotFound(product_id=product_id)
            return p.model_copy()

    async def delete(self, product_id: int) -> None:
        async with self._lock:
            if await self._simulate_io():
                logger.warning("simulated delete failure for product %s", product_id)
                raise FailedToDelete(product_id=product_id)
            if product_id not in self._store:
                raise ProductNotFound(product_id=product_id)
            del self._store[product_id]

    async def list_all(self) -> List[Product]:
        async with self._lock:
            if await self._simulate_io():
                logger.warning("simulated list failure")
                raise FailedToGet()
            return [p.model_copy() for p in self._store.values()]


# ---------------------------
# Relational (SQLAlchemy)
# ---------------------------
class Base(DeclarativeBase):
    pass


class ProductRow(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False)
    category = Column(String, nullable=False, index=True)

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "category": self.category,
        }


def make_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    in_memory = ":memory:" in database_url or database_url.endswith("://")
    if database_url.startswith("sqlite") and in_memory:
        # a single shared connection, otherwise every session sees a fresh database
        return create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(database_url, echo=echo)


class SqlStorage:
    def __init__(self, engine: AsyncEngine):
        self._lock = asyncio.Lock()
        self.engine = engine
        self.session_maker = async_sessionmaker(engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "SqlStorage":
        return cls(make_engine(database_url, echo=echo))

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def save(self, p: Product) -> None:
        async with self._lock:
            try:
                async with self.session_maker() as session:
                    await session.merge(ProductRow(**p.model_dump()))
                    await session.commit()
            except SQLAlchemyError as e:
                logger.warning("save failed for product %s: %s", p.id, e)
                raise FailedToSave(product_id=p.id) from e

    async def get_by_id(self, product_id: int) -> Product:
        async with self._lock:
            try:
                async with self.session_maker() as session:
                    row = await session.get(ProductRow, product_id)
            except SQLAlchemyError as e:
                logger.warning("get failed for product %s: %s", product_id, e)
                raise FailedToGet(product_id=product_id) from e
            if row is None:
                raise ProductNotFound(product_id=product_id)
            return Product(**row.to_schema)

    async def delete(self, product_id: int) -> None:
        async with self._lock:
            try:
                async with self.session_maker() as session:
                    row = await session.get(ProductRow, product_id)
                    if row is None:
                        raise ProductNotFound(product_id=product_id)
                    await session.delete(row)
                    await session.commit()
            except SQLAlchemyError as e:
                logger.warning("delete failed for product %s: %s", product_id, e)
                raise FailedToDelete(product_id=product_id) from e

    async def list_all(self) -> List[Product]:
        async with self._lock:
            try:
                async with self.session_maker() as session:
                    res = await session.execute(select(ProductRow).order_by(ProductRow.id))
                    rows = res.scalars().all()
            except SQLAlchemyError as e:
                logger.warning("listing products failed: %s", e)
                raise FailedToGet() from e
            return [Product(**row.to_schema) for row in rows]


def build_storage(settings) -> ProductStorage:
    backend = settings.storage_backend.lower()
    if backend == "memory":
        return MemoryStorage()
    if backend == "mock":
        return MockDatabaseStorage(
            time_unit=settings.simulated_latency,
            failure_rate=settings.failure_rate,
        )
    if backend == "sql":
        return SqlStorage.from_url(settings.database_url, echo=settings.database_echo)
    raise ValueError(f"unknown storage backend: {settings.storage_backend!r}")
