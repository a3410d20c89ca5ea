"""Catalog reader for the commercetools source catalog.

Three read modes are supported:

- ``rest``: cursor pagination over ``/products`` (``where id > "<last>"``).
  Category and product type come back as raw ids, availability is included.
- ``graphql``: offset pagination with category and product-type names
  resolved server-side. No availability data.
- ``hybrid``: ``graphql`` plus a per-product REST lookup to merge live
  availability; lookups for one page run concurrently.

A failing page request aborts the whole read. A failing availability lookup
does not: the product is kept without availability.
"""

import asyncio
from typing import Any, Literal

import structlog

from catalog_sync.exceptions import CatalogSyncError, ProductNotFoundError
from catalog_sync.infrastructure.commercetools import CommercetoolsClient
from catalog_sync.models import SourceProduct
from catalog_sync.services.availability import merge_availability
from catalog_sync.services.product_parser import parse_product

logger = structlog.get_logger()

ReadMode = Literal["rest", "graphql", "hybrid"]

VARIANT_FIELDS = """
fragment VariantFields on ProductVariant {
  id
  sku
  images { url dimensions { width height } }
  prices {
    value { currencyCode centAmount }
    discounted { value { currencyCode centAmount } }
  }
  attributesRaw { name value }
}
"""

PRODUCT_FIELDS = """
fragment ProductFields on Product {
  id
  key
  version
  productType { id name }
  masterData {
    current {
      name(acceptLanguage: $acceptLanguage)
      description(acceptLanguage: $acceptLanguage)
      categories {
        id
        name(acceptLanguage: $acceptLanguage)
        slug(acceptLanguage: $acceptLanguage)
      }
      masterVariant { ...VariantFields }
      variants { ...VariantFields }
    }
  }
}
"""

PRODUCTS_PAGE_QUERY = (
    """
query ProductsPage($limit: Int!, $offset: Int!, $acceptLanguage: [Locale!]) {
  products(limit: $limit, offset: $offset, sort: ["id asc"]) {
    results { ...ProductFields }
  }
}
"""
    + PRODUCT_FIELDS
    + VARIANT_FIELDS
)

PRODUCT_BY_ID_QUERY = (
    """
query ProductById($id: String!, $acceptLanguage: [Locale!]) {
  product(id: $id) { ...ProductFields }
}
"""
    + PRODUCT_FIELDS
    + VARIANT_FIELDS
)

PUBLISHED_PREDICATE = "masterData(published = true)"
STAGED_PREDICATE = "masterData(hasStagedChanges = true)"


class CatalogReader:
    """Reads products from commercetools in the configured mode."""

    def __init__(
        self,
        client: CommercetoolsClient,
        *,
        mode: ReadMode = "hybrid",
        locales: list[str] | None = None,
        rest_page_size: int = 500,
        graphql_page_size: int = 100,
    ):
        self.client = client
        self.mode = mode
        self.locales = locales or ["en-US", "en-GB", "en"]
        self.rest_page_size = rest_page_size
        self.graphql_page_size = graphql_page_size

    async def fetch_all(self) -> list[SourceProduct]:
        """Fetch every product in the catalog."""
        if self.mode == "rest":
            products = await self._fetch_all_rest()
        else:
            products = await self._fetch_all_graphql()
        logger.info("Fetched catalog", mode=self.mode, count=len(products))
        return products

    async def fetch_by_id(self, product_id: str) -> SourceProduct:
        """Fetch one product; raises ``ProductNotFoundError`` if absent."""
        if self.mode == "rest":
            raw = await self.client.get_product(product_id)
            if raw is None:
                raise ProductNotFoundError(product_id)
            return parse_product(raw)

        data = await self.client.graphql(
            PRODUCT_BY_ID_QUERY, {"id": product_id, "acceptLanguage": self.locales}
        )
        raw = data.get("product")
        if not raw:
            raise ProductNotFoundError(product_id)
        product = parse_product(raw)
        if self.mode == "hybrid":
            product = await self._with_availability(product)
        return product

    async def product_counts(self) -> dict[str, int]:
        """Product counts by publication status."""
        total = await self._count()
        published = await self._count(PUBLISHED_PREDICATE)
        staged = await self._count(STAGED_PREDICATE)
        return {
            "total": total,
            "published": published,
            "staged": staged,
            "draft": max(total - published, 0),
        }

    async def _count(self, where: str | None = None) -> int:
        params: list[tuple[str, Any]] = [("limit", 1), ("withTotal", "true")]
        if where:
            params.append(("where", where))
        result = await self.client.query_products(params)
        return int(result.get("total") or 0)

    async def _fetch_all_rest(self) -> list[SourceProduct]:
        products: list[SourceProduct] = []
        last_id: str | None = None
        while True:
            params: list[tuple[str, Any]] = [
                ("limit", self.rest_page_size),
                ("sort", "id asc"),
                ("withTotal", "false"),
            ]
            if last_id is not None:
                params.append(("where", f'id > "{last_id}"'))
            page = (await self.client.query_products(params)).get("results") or []
            products.extend(parse_product(raw) for raw in page)
            logger.debug("Fetched REST page", size=len(page), last_id=last_id)
            if len(page) < self.rest_page_size:
                return products
            last_id = page[-1]["id"]

    async def _fetch_all_graphql(self) -> list[SourceProduct]:
        products: list[SourceProduct] = []
        offset = 0
        while True:
            data = await self.client.graphql(
                PRODUCTS_PAGE_QUERY,
                {
                    "limit": self.graphql_page_size,
                    "offset": offset,
                    "acceptLanguage": self.locales,
                },
            )
            page = [parse_product(raw) for raw in (data.get("products") or {}).get("results") or []]
            if self.mode == "hybrid" and page:
                page = list(await asyncio.gather(*(self._with_availability(p) for p in page)))
            products.extend(page)
            logger.debug("Fetched GraphQL page", size=len(page), offset=offset)
            if len(page) < self.graphql_page_size:
                return products
            offset += self.graphql_page_size

    async def _with_availability(self, product: SourceProduct) -> SourceProduct:
        try:
            rest_view = await self.client.get_product(product.id)
        except CatalogSyncError as exc:
            logger.warning(
                "Availability lookup failed, keeping product without stock",
                product_id=product.id,
                error=str(exc),
            )
            return product
        if rest_view is None:
            logger.warning("Availability lookup found no product", product_id=product.id)
            return product
        return merge_availability(product, rest_view)
