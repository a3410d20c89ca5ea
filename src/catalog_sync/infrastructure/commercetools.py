"""HTTP client for the commercetools REST and GraphQL APIs."""

from typing import Any

import httpx
import structlog

from catalog_sync.exceptions import UpstreamError
from catalog_sync.infrastructure.auth import TokenProvider

logger = structlog.get_logger()

SERVICE = "commercetools"


class CommercetoolsClient:
    """Bearer-authorized access to one commercetools project."""

    def __init__(
        self,
        api_host: str,
        project_key: str,
        token_provider: TokenProvider,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.project_key = project_key
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=api_host.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": "catalog-sync/1.0"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _path(self, path: str) -> str:
        return f"/{self.project_key}/{path.lstrip('/')}"

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        token = await self._token_provider.get_token()
        try:
            return await self._client.request(
                method,
                self._path(path),
                headers={"Authorization": f"Bearer {token}"},
                **kwargs,
            )
        except httpx.HTTPError as exc:
            logger.error("commercetools request error", method=method, path=path, error=str(exc))
            raise UpstreamError(SERVICE, f"{method} {path}: {exc}") from exc

    @staticmethod
    def _json(response: httpx.Response, method: str, path: str) -> Any:
        if not response.is_success:
            raise UpstreamError(
                SERVICE,
                f"{method} {path}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(SERVICE, f"{method} {path}: invalid JSON", body=response.text) from exc

    async def get(self, path: str, params: Any = None) -> Any:
        response = await self._send("GET", path, params=params)
        return self._json(response, "GET", path)

    async def post(self, path: str, payload: dict[str, Any]) -> Any:
        response = await self._send("POST", path, json=payload)
        return self._json(response, "POST", path)

    async def get_optional(self, path: str, params: Any = None) -> Any | None:
        """GET that maps 404 to ``None``."""
        response = await self._send("GET", path, params=params)
        if response.status_code == 404:
            return None
        return self._json(response, "GET", path)

    async def delete_optional(self, path: str, params: Any = None) -> Any | None:
        """DELETE that maps 404 to ``None``."""
        response = await self._send("DELETE", path, params=params)
        if response.status_code == 404:
            return None
        return self._json(response, "DELETE", path)

    async def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL query and return its ``data`` member."""
        result = await self.post("graphql", {"query": query, "variables": variables or {}})
        if result.get("errors"):
            raise UpstreamError(SERVICE, f"GraphQL errors: {result['errors']}")
        return result.get("data") or {}

    async def get_product(self, product_id: str) -> dict[str, Any] | None:
        return await self.get_optional(f"products/{product_id}")

    async def query_products(self, params: Any) -> dict[str, Any]:
        return await self.get("products", params=params)
