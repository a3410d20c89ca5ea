"""Stock resolution and REST availability merging.

GraphQL product reads carry no live inventory, so the hybrid reader fetches
the REST view of each product and overlays its variant availability here.
"""

from typing import Any

from catalog_sync.models import SourceProduct, Variant

# Attribute names recognized as stock counts, highest priority first.
STOCK_ATTRIBUTE_NAMES = (
    "stock",
    "quantity",
    "availableQuantity",
    "inventory",
    "stockLevel",
    "qty",
    "qtyAvailable",
)


def _parse_quantity(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return max(int(float(str(value).strip())), 0)
    except (TypeError, ValueError):
        return 0


def stock_from_attributes(variant: Variant) -> int | None:
    """Stock count from the first recognized attribute, in priority order."""
    by_name = {attr.name: attr.value for attr in variant.attributes}
    for name in STOCK_ATTRIBUTE_NAMES:
        value = by_name.get(name)
        if value is not None and value != "":
            return _parse_quantity(value)
    return None


def variant_quantity(variant: Variant) -> int | None:
    if variant.available_quantity is not None:
        return max(variant.available_quantity, 0)
    return stock_from_attributes(variant)


def resolve_available_quantity(product: SourceProduct) -> int:
    """Master variant first, then the other variants in order; 0 if unknown."""
    for variant in product.all_variants:
        quantity = variant_quantity(variant)
        if quantity is not None:
            return quantity
    return 0


def _rest_variants(rest_view: dict[str, Any]) -> tuple[dict[str, Any] | None, list[dict[str, Any]]]:
    master_data = rest_view.get("masterData")
    current = master_data.get("current", {}) if isinstance(master_data, dict) else rest_view
    return current.get("masterVariant"), current.get("variants") or []


def _quantity_of(raw_variant: dict[str, Any] | None) -> int | None:
    if not raw_variant:
        return None
    availability = raw_variant.get("availability") or {}
    return availability.get("availableQuantity")


def merge_availability(product: SourceProduct, rest_view: dict[str, Any]) -> SourceProduct:
    """Return a copy of ``product`` with availability taken from ``rest_view``.

    Variants are matched by variant id, falling back to list position.
    """
    rest_master, rest_variants = _rest_variants(rest_view)
    by_id = {v.get("id"): v for v in rest_variants if v.get("id") is not None}

    master = product.master_variant
    if master is not None:
        quantity = _quantity_of(rest_master)
        if quantity is not None:
            master = master.model_copy(update={"available_quantity": quantity})

    variants = []
    for index, variant in enumerate(product.variants):
        raw = by_id.get(variant.id)
        if raw is None and index < len(rest_variants):
            raw = rest_variants[index]
        quantity = _quantity_of(raw)
        if quantity is not None:
            variant = variant.model_copy(update={"available_quantity": quantity})
        variants.append(variant)

    return product.model_copy(update={"master_variant": master, "variants": variants})
