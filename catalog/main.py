# catalog/main.py
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import settings as default_settings
from .errors import (
    CatalogError, InsufficientStock, ProductAlreadyExists, ProductNotFound, StorageError
)
from .events import build_publisher
from .fetcher import ConcurrentFetcher, SimulatedDetailSource
from .log import configure_logging
from .models import FetchRequest, PriceIn, Product, ProductIn, QuantityIn
from .service import CatalogService
from .storage import SqlStorage, build_storage

logger = logging.getLogger(__name__)


# ---------------------------
# Dependencies
# ---------------------------
def get_service(request: Request) -> CatalogService:
    return request.app.state.service


def get_fetcher(request: Request) -> ConcurrentFetcher:
    return request.app.state.fetcher


# ---------------------------
# Error translation
# ---------------------------
def _error_handler(status_code: int):
    async def handler(request: Request, exc: CatalogError):
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
    return handler


def _register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProductNotFound, _error_handler(404))
    app.add_exception_handler(ProductAlreadyExists, _error_handler(409))
    app.add_exception_handler(InsufficientStock, _error_handler(409))
    app.add_exception_handler(StorageError, _error_handler(503))
    app.add_exception_handler(CatalogError, _error_handler(500))


# ---------------------------
# Routes
# ---------------------------
def _register_routes(app: FastAPI) -> None:

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.post("/products", status_code=201)
    async def create_product(payload: Product, service: CatalogService = Depends(get_service)):
        return await service.create(payload)

    @app.get("/products")
    async def list_products(category: Optional[str] = None, service: CatalogService = Depends(get_service)):
        return await service.list_products(category)

    @app.get("/products/search")
    async def search_product(
        name: str = Query(..., min_length=1),
        service: CatalogService = Depends(get_service),
    ):
        return await service.search(name)

    @app.get("/products/value")
    async def total_value(service: CatalogService = Depends(get_service)):
        return {"total_value": await service.total_value()}

    @app.post("/products/fetch")
    async def fetch_products(payload: FetchRequest, fetcher: ConcurrentFetcher = Depends(get_fetcher)):
        products = await fetcher.fetch_many(payload.ids)
        return {"requested": len(payload.ids), "fetched": len(products), "products": products}

    @app.get("/products/{product_id}")
    async def get_product(product_id: int, service: CatalogService = Depends(get_service)):
        return await service.get(product_id)

    @app.put("/products/{product_id}")
    async def update_product(product_id: int, payload: ProductIn, service: CatalogService = Depends(get_service)):
        return await service.update(product_id, payload)

    @app.delete("/products/{product_id}", status_code=204)
    async def delete_product(product_id: int, service: CatalogService = Depends(get_service)):
        await service.delete(product_id)
        return Response(status_code=204)

    @app.post("/products/{product_id}/price")
    async def update_price(product_id: int, payload: PriceIn, service: CatalogService = Depends(get_service)):
        return await service.update_price(product_id, payload.price)

    @app.post("/products/{product_id}/sell")
    async def sell_product(product_id: int, payload: QuantityIn, service: CatalogService = Depends(get_service)):
        return await service.sell(product_id, payload.quantity)

    @app.post("/products/{product_id}/restock")
    async def restock_product(product_id: int, payload: QuantityIn, service: CatalogService = Depends(get_service)):
        return await service.restock(product_id, payload.quantity)

    @app.get("/products/{product_id}/display")
    async def display_product(product_id: int, service: CatalogService = Depends(get_service)):
        p = await service.get(product_id)
        return {"display": p.display()}

    # Utility: reset (for tests/demo)
    @app.post("/reset")
    async def reset_all(service: CatalogService = Depends(get_service)):
        await service.reset()
        return {"status": "reset"}


# ---------------------------
# App factory
# ---------------------------
def create_app(
    settings=None,
    service: Optional[CatalogService] = None,
    fetcher: Optional[ConcurrentFetcher] = None,
) -> FastAPI:
    settings = settings or default_settings

    if service is None:
        service = CatalogService(build_storage(settings), build_publisher(settings))
    if fetcher is None:
        source = SimulatedDetailSource(
            time_unit=settings.simulated_latency,
            failure_rate=settings.failure_rate,
        )
        fetcher = ConcurrentFetcher(source, limit=settings.fetch_concurrency)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        if isinstance(service.storage, SqlStorage):
            await service.storage.create_all()
        await service.load()
        logger.info(
            "catalog ready: storage=%s events=%s fetch limit=%s",
            type(service.storage).__name__, type(service.publisher).__name__, fetcher.limit,
        )
        yield
        await asyncio.to_thread(service.publisher.flush)
        if isinstance(service.storage, SqlStorage):
            await service.storage.dispose()

    app = FastAPI(title="product-catalog", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.service = service
    app.state.fetcher = fetcher

    _register_error_handlers(app)
    _register_routes(app)
    return app


app = create_app()
