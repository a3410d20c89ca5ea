"""Unit tests for service wiring."""

import httpx
import pytest

from catalog_sync.config import Settings
from catalog_sync.container import build_container
from catalog_sync.exceptions import MissingCredentialError


class StaticTokenProvider:
    async def get_token(self) -> str:
        return "token"


class TestBuildContainer:
    """Container construction from settings."""

    @pytest.mark.asyncio
    async def test_builds_services_from_settings(self, test_settings: Settings) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
        container = await build_container(
            test_settings,
            transport=transport,
            commercetools_token_provider=StaticTokenProvider(),
            retail_token_provider=StaticTokenProvider(),
        )
        try:
            assert container.reader.mode == "hybrid"
            assert container.full_sync.batch_size == 50
            assert container.writer.poll_policy.max_attempts == 30
            assert container.writer.transformer.region == "gcp-europe-west1"
            assert container.dispatcher.version_store is None
            assert container.redis is None
        finally:
            await container.aclose()

    @pytest.mark.asyncio
    async def test_missing_credentials_fail_fast(self) -> None:
        settings = Settings(ctp_project_key="", ctp_client_id="", ctp_client_secret="")
        with pytest.raises(MissingCredentialError):
            await build_container(settings)

    @pytest.mark.asyncio
    async def test_allow_missing_credentials_defers_failure(self) -> None:
        settings = Settings(
            ctp_project_key="",
            ctp_client_id="",
            ctp_client_secret="",
            vertex_credentials_json="",
            vertex_key_file_path="",
            allow_missing_credentials=True,
        )
        container = await build_container(settings)
        try:
            with pytest.raises(MissingCredentialError):
                await container.reader.fetch_all()
            with pytest.raises(MissingCredentialError):
                await container.writer.delete("prod-1")
        finally:
            await container.aclose()
