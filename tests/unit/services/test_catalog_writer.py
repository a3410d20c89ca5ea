"""Unit tests for the catalog writer against a mocked Retail API."""

import httpx
import orjson
import pytest

from catalog_sync.exceptions import ImportOperationFailed, ImportOperationTimeout, UpstreamError
from catalog_sync.infrastructure.retail import RetailClient
from catalog_sync.services.catalog_writer import CatalogWriter
from catalog_sync.services.polling import PollPolicy
from catalog_sync.services.transformer import ProductTransformer

BRANCH = "projects/p/locations/global/catalogs/default_catalog/branches/0"
OPERATION = f"{BRANCH}/operations/import-products-1"


class StaticTokenProvider:
    async def get_token(self) -> str:
        return "retail-token"


class FakeRetailApi:
    """Scripted Retail API: queued operation states served in order."""

    def __init__(self, operation_states: list[dict | httpx.Response], import_status: int = 200):
        self.operation_states = list(operation_states)
        self.import_status = import_status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "POST" and path.endswith("/products:import"):
            if self.import_status != 200:
                return httpx.Response(self.import_status, json={"error": {"message": "denied"}})
            return httpx.Response(200, json={"name": OPERATION})
        if request.method == "GET" and path.endswith(OPERATION):
            state = self.operation_states.pop(0) if len(self.operation_states) > 1 else self.operation_states[0]
            return state if isinstance(state, httpx.Response) else httpx.Response(200, json=state)
        if request.method == "DELETE":
            if path.endswith("/products/gone"):
                return httpx.Response(404, json={"error": {"code": 404}})
            return httpx.Response(200, json={})
        return httpx.Response(500)

    @property
    def import_bodies(self) -> list[dict]:
        return [
            orjson.loads(r.content)
            for r in self.requests
            if r.method == "POST"
        ]


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def make_writer(sleeps):
    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    def _make(api: FakeRetailApi, max_attempts: int = 5) -> CatalogWriter:
        client = RetailClient(
            "https://retail.test/v2",
            BRANCH,
            StaticTokenProvider(),
            transport=httpx.MockTransport(api),
        )
        transformer = ProductTransformer(region="gcp-us-central1", product_base_url="https://shop.test")
        policy = PollPolicy(interval=2, max_attempts=max_attempts, sleep=fake_sleep)
        return CatalogWriter(client, transformer, policy)

    return _make


class TestUpsert:
    """Import plus operation polling."""

    @pytest.mark.asyncio
    async def test_upsert_waits_for_done(self, make_writer, make_product, sleeps) -> None:
        api = FakeRetailApi([{"name": OPERATION, "done": False}, {"name": OPERATION, "done": True}])
        writer = make_writer(api)

        result = await writer.upsert(make_product("prod-1"))

        assert result.success is True
        assert result.operation_name == OPERATION
        assert result.product_ids == ["prod-1"]
        assert sleeps == [2]

        body = api.import_bodies[0]
        assert body["reconciliationMode"] == "INCREMENTAL"
        item = body["inputConfig"]["productInlineSource"]["products"][0]
        assert item["id"] == "prod-1"
        assert item["attributes"]["ctp_region"] == {"text": ["gcp-us-central1"]}
        assert api.requests[0].headers["Authorization"] == "Bearer retail-token"

    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_calls(self, make_writer) -> None:
        api = FakeRetailApi([{"done": True}])
        result = await make_writer(api).upsert_batch([])

        assert result.processed_count == 0
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_error_samples_fail_the_operation(self, make_writer, make_product) -> None:
        samples = [
            {"code": 3, "message": "Invalid priceInfo"},
            {"code": 3, "message": "Invalid uri"},
        ]
        api = FakeRetailApi([{"done": True, "response": {"errorSamples": samples}}])

        with pytest.raises(ImportOperationFailed) as exc_info:
            await make_writer(api).upsert_batch([make_product("a"), make_product("b")])

        error = exc_info.value
        assert error.error_samples == samples
        assert error.product_ids == ["a", "b"]
        assert "Invalid priceInfo" in str(error)
        assert "Invalid uri" in str(error)

    @pytest.mark.asyncio
    async def test_failure_count_fails_the_operation(self, make_writer, make_product) -> None:
        api = FakeRetailApi([{"done": True, "metadata": {"successCount": "1", "failureCount": "1"}}])

        with pytest.raises(ImportOperationFailed, match="1 items failed"):
            await make_writer(api).upsert(make_product())

    @pytest.mark.asyncio
    async def test_operation_error(self, make_writer, make_product) -> None:
        api = FakeRetailApi([{"done": True, "error": {"code": 7, "message": "Permission denied"}}])

        with pytest.raises(ImportOperationFailed, match="Permission denied"):
            await make_writer(api).upsert(make_product())

    @pytest.mark.asyncio
    async def test_timeout_is_distinct_from_failure(self, make_writer, make_product, sleeps) -> None:
        api = FakeRetailApi([{"done": False}])

        with pytest.raises(ImportOperationTimeout) as exc_info:
            await make_writer(api, max_attempts=3).upsert(make_product())

        assert exc_info.value.attempts == 3
        assert "timed out" in str(exc_info.value)
        assert not isinstance(exc_info.value, ImportOperationFailed)
        assert sleeps == [2, 2]

    @pytest.mark.asyncio
    async def test_poll_error_consumes_an_attempt(self, make_writer, make_product) -> None:
        api = FakeRetailApi([httpx.Response(503, text="unavailable"), {"done": True}])

        result = await make_writer(api).upsert(make_product())
        assert result.processed_count == 1

    @pytest.mark.asyncio
    async def test_import_rejected(self, make_writer, make_product) -> None:
        api = FakeRetailApi([{"done": True}], import_status=403)

        with pytest.raises(UpstreamError) as exc_info:
            await make_writer(api).upsert(make_product())
        assert exc_info.value.status_code == 403


class TestDelete:
    """Product deletion."""

    @pytest.mark.asyncio
    async def test_delete_existing(self, make_writer) -> None:
        api = FakeRetailApi([{"done": True}])
        result = await make_writer(api).delete("prod-1")

        assert result == {"success": True, "productId": "prod-1", "deleted": True}
        assert api.requests[0].url.path.endswith(f"{BRANCH}/products/prod-1")

    @pytest.mark.asyncio
    async def test_delete_missing_is_acknowledged(self, make_writer) -> None:
        api = FakeRetailApi([{"done": True}])
        result = await make_writer(api).delete("gone")

        assert result["success"] is True
        assert result["deleted"] is False
