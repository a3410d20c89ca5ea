"""Parse raw commercetools product JSON into ``SourceProduct``.

Three shapes are accepted: REST ``Product`` (``masterData.current`` with
localized fields and reference ids), REST ``ProductProjection`` (the same
fields at top level), and the GraphQL query results used by the catalog
reader (locale-resolved strings, ``attributesRaw``, expanded names).
"""

from typing import Any

from catalog_sync.models import (
    Attribute,
    CategoryRef,
    Image,
    Price,
    ProductTypeRef,
    SourceProduct,
    Variant,
)


def _current_data(raw: dict[str, Any]) -> dict[str, Any]:
    master_data = raw.get("masterData")
    if isinstance(master_data, dict):
        return master_data.get("current") or {}
    return raw


def _money(value: Any) -> tuple[str | None, int | None]:
    if not isinstance(value, dict):
        return None, None
    return value.get("currencyCode"), value.get("centAmount")


def parse_price(raw: dict[str, Any]) -> Price:
    currency, amount = _money(raw.get("value"))
    discounted = raw.get("discounted") or {}
    discounted_currency, discounted_amount = _money(discounted.get("value"))
    return Price(
        currency_code=currency,
        cent_amount=amount,
        discounted_cent_amount=discounted_amount,
        discounted_currency_code=discounted_currency,
    )


def parse_image(raw: dict[str, Any]) -> Image | None:
    url = raw.get("url") or raw.get("uri")
    if not url:
        return None
    dimensions = raw.get("dimensions") or {}
    return Image(
        url=url,
        width=dimensions.get("w", dimensions.get("width")),
        height=dimensions.get("h", dimensions.get("height")),
    )


def parse_variant(raw: dict[str, Any] | None) -> Variant | None:
    if not raw:
        return None
    attributes = raw.get("attributes")
    if attributes is None:
        attributes = raw.get("attributesRaw") or []
    availability = raw.get("availability") or {}
    return Variant(
        id=raw.get("id"),
        sku=raw.get("sku"),
        prices=[parse_price(p) for p in raw.get("prices") or []],
        images=[img for img in (parse_image(i) for i in raw.get("images") or []) if img],
        attributes=[
            Attribute(name=a["name"], value=a.get("value"))
            for a in attributes
            if a.get("name")
        ],
        available_quantity=availability.get("availableQuantity"),
    )


def parse_category(raw: dict[str, Any]) -> CategoryRef:
    # REST references carry the expanded resource under "obj" when requested.
    expanded = raw.get("obj") or raw
    return CategoryRef(
        id=raw.get("id") or expanded.get("id"),
        name=expanded.get("name"),
        slug=expanded.get("slug"),
    )


def parse_product_type(raw: Any) -> ProductTypeRef | None:
    if not raw:
        return None
    if isinstance(raw, str):
        return ProductTypeRef(name=raw)
    expanded = raw.get("obj") or raw
    return ProductTypeRef(id=raw.get("id"), name=expanded.get("name"))


def parse_product(raw: dict[str, Any]) -> SourceProduct:
    """Build a ``SourceProduct`` from any supported product shape."""
    current = _current_data(raw)
    return SourceProduct(
        id=raw["id"],
        key=raw.get("key"),
        version=raw.get("version"),
        name=current.get("name") or raw.get("name"),
        title=raw.get("title"),
        description=current.get("description") or raw.get("description"),
        master_variant=parse_variant(current.get("masterVariant")),
        variants=[v for v in (parse_variant(r) for r in current.get("variants") or []) if v],
        categories=[parse_category(c) for c in current.get("categories") or []],
        product_type=parse_product_type(raw.get("productType")),
    )
