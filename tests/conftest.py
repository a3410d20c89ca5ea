"""Pytest configuration and fixtures."""

from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient

from catalog_sync.api.dependencies import get_container
from catalog_sync.config import Settings
from catalog_sync.exceptions import ImportOperationFailed, ProductNotFoundError
from catalog_sync.main import create_app
from catalog_sync.models import (
    Attribute,
    CategoryRef,
    ImportResult,
    Price,
    ProductTypeRef,
    SourceProduct,
    Variant,
)
from catalog_sync.services.dispatcher import EventDispatcher, ProductSyncService
from catalog_sync.services.full_sync import FullSyncService


class FakeReader:
    """In-memory catalog reader that records fetches."""

    def __init__(self, products: list[SourceProduct] | None = None):
        self.products = {p.id: p for p in products or []}
        self.fetched: list[str] = []

    async def fetch_all(self) -> list[SourceProduct]:
        return list(self.products.values())

    async def fetch_by_id(self, product_id: str) -> SourceProduct:
        self.fetched.append(product_id)
        if product_id not in self.products:
            raise ProductNotFoundError(product_id)
        return self.products[product_id]

    async def product_counts(self) -> dict[str, int]:
        total = len(self.products)
        return {"total": total, "published": total, "staged": 0, "draft": 0}


class FakeWriter:
    """Catalog writer that records calls and fails chosen batches."""

    def __init__(self, fail_batches: set[int] | None = None):
        self.fail_batches = fail_batches or set()
        self.batches: list[list[SourceProduct]] = []
        self.upserted: list[SourceProduct] = []
        self.deleted: list[str] = []

    async def upsert(self, product: SourceProduct) -> ImportResult:
        self.upserted.append(product)
        return ImportResult(
            operation_name="operations/import-single",
            processed_count=1,
            product_ids=[product.id],
        )

    async def upsert_batch(self, products: list[SourceProduct]) -> ImportResult:
        index = len(self.batches)
        self.batches.append(products)
        if index in self.fail_batches:
            raise ImportOperationFailed(
                "INVALID_ARGUMENT: bad item",
                operation_name=f"operations/import-{index}",
                product_ids=[p.id for p in products],
            )
        return ImportResult(
            operation_name=f"operations/import-{index}",
            processed_count=len(products),
            product_ids=[p.id for p in products],
        )

    async def delete(self, product_id: str) -> dict[str, Any]:
        self.deleted.append(product_id)
        return {"success": True, "productId": product_id, "deleted": True}


@pytest.fixture
def test_settings() -> Settings:
    """Get test settings with overrides."""
    return Settings(
        app_env="test",
        debug=True,
        ctp_project_key="test-project",
        ctp_client_id="test-client",
        ctp_client_secret="test-secret",
        ctp_region="gcp-europe-west1",
        vertex_project_id="test-gcp-project",
        product_base_url="https://shop.example.com",
        full_sync_batch_delay_seconds=0,
        operation_poll_interval_seconds=0,
        redis_host="localhost",
        redis_port=6379,
    )


@pytest.fixture
def make_product() -> Callable[..., SourceProduct]:
    """Factory for source products with sensible defaults."""

    def _make(
        product_id: str = "prod-1",
        *,
        sku: str | None = "SKU-1",
        quantity: int | None = 5,
        cent_amount: int | None = 1999,
        discounted: int | None = None,
        name: Any = None,
        attributes: list[Attribute] | None = None,
    ) -> SourceProduct:
        prices = []
        if cent_amount is not None:
            prices.append(
                Price(
                    currency_code="EUR",
                    cent_amount=cent_amount,
                    discounted_cent_amount=discounted,
                )
            )
        return SourceProduct(
            id=product_id,
            key=f"key-{product_id}",
            version=3,
            name=name if name is not None else {"en-US": "Claw Hammer", "de-DE": "Klauenhammer"},
            description={"en-US": "Forged steel hammer"},
            master_variant=Variant(
                id=1,
                sku=sku,
                prices=prices,
                attributes=attributes or [],
                available_quantity=quantity,
            ),
            categories=[CategoryRef(id="cat-1", name={"en-US": "Tools"}, slug={"en-US": "tools"})],
            product_type=ProductTypeRef(id="pt-1", name="hardware"),
        )

    return _make


@pytest.fixture
def fake_reader(make_product) -> FakeReader:
    return FakeReader([make_product("prod-1"), make_product("prod-2", sku="SKU-2")])


@pytest.fixture
def fake_writer() -> FakeWriter:
    return FakeWriter()


@pytest.fixture
def fake_container(fake_reader: FakeReader, fake_writer: FakeWriter) -> SimpleNamespace:
    """Container stand-in wired to in-memory reader and writer."""
    product_sync = ProductSyncService(fake_reader, fake_writer)
    return SimpleNamespace(
        reader=fake_reader,
        writer=fake_writer,
        product_sync=product_sync,
        dispatcher=EventDispatcher(product_sync),
        full_sync=FullSyncService(fake_reader, fake_writer, batch_size=50, batch_delay=0),
    )


@pytest.fixture
def app(fake_container: SimpleNamespace) -> Any:
    """Create test application."""
    app = create_app()
    app.dependency_overrides[get_container] = lambda: fake_container
    return app


@pytest.fixture
def client(app: Any) -> TestClient:
    """Create synchronous test client."""
    return TestClient(app)
