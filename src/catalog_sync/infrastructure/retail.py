"""HTTP client for the Google Cloud Retail v2 product API."""

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from catalog_sync.exceptions import UpstreamError
from catalog_sync.infrastructure.auth import TokenProvider

logger = structlog.get_logger()

SERVICE = "retail"


class RetailClient:
    """Product import, operation status and delete calls for one catalog branch."""

    def __init__(
        self,
        base_url: str,
        branch_path: str,
        token_provider: TokenProvider,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.branch_path = branch_path.strip("/")
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        # Token per call; the provider refreshes it when invalid.
        token = await self._token_provider.get_token()
        try:
            return await self._client.request(
                method,
                path,
                headers={"Authorization": f"Bearer {token}"},
                **kwargs,
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(SERVICE, f"{method} {path}: {exc}") from exc

    @staticmethod
    def _json(response: httpx.Response, method: str, path: str) -> dict[str, Any]:
        if not response.is_success:
            raise UpstreamError(
                SERVICE,
                f"{method} {path}",
                status_code=response.status_code,
                body=response.text,
            )
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(SERVICE, f"{method} {path}: invalid JSON", body=response.text) from exc

    async def import_products(self, products: list[dict[str, Any]]) -> dict[str, Any]:
        """Start an inline import and return the long-running operation."""
        path = f"{self.branch_path}/products:import"
        payload = {
            "inputConfig": {"productInlineSource": {"products": products}},
            "reconciliationMode": "INCREMENTAL",
        }
        response = await self._send("POST", path, json=payload)
        operation = self._json(response, "POST", path)
        if not operation.get("name"):
            raise UpstreamError(SERVICE, "import response carries no operation name")
        logger.info("Import operation started", operation=operation["name"], count=len(products))
        return operation

    async def get_operation(self, name: str) -> dict[str, Any]:
        response = await self._send("GET", name)
        return self._json(response, "GET", name)

    async def delete_product(self, product_id: str) -> bool:
        """Delete one product; returns False when it did not exist."""
        path = f"{self.branch_path}/products/{quote(product_id, safe='')}"
        response = await self._send("DELETE", path)
        if response.status_code == 404:
            return False
        self._json(response, "DELETE", path)
        return True
