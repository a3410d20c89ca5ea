"""Source and destination catalog models.

``SourceProduct`` is the normalized view of a commercetools product, whichever
API (REST or GraphQL) it was read from. ``DestinationItem`` mirrors the Google
Cloud Retail ``Product`` resource and serializes to its camelCase wire shape.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Dump with wire aliases, omitting absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


# =============================================================================
# Source catalog
# =============================================================================

LocalizedText = str | dict[str, str] | None


class Price(BaseModel):
    """One price entry in minor currency units."""

    currency_code: str | None = None
    cent_amount: int | None = None
    discounted_cent_amount: int | None = None
    discounted_currency_code: str | None = None

    @property
    def is_discounted(self) -> bool:
        return self.discounted_cent_amount is not None


class Image(BaseModel):
    url: str
    width: int | None = None
    height: int | None = None


class Attribute(BaseModel):
    name: str
    value: Any = None


class Variant(BaseModel):
    """A purchasable variant of a product."""

    id: int | None = None
    sku: str | None = None
    prices: list[Price] = Field(default_factory=list)
    images: list[Image] = Field(default_factory=list)
    attributes: list[Attribute] = Field(default_factory=list)
    available_quantity: int | None = None


class CategoryRef(BaseModel):
    id: str | None = None
    name: LocalizedText = None
    slug: LocalizedText = None


class ProductTypeRef(BaseModel):
    id: str | None = None
    name: str | None = None


class SourceProduct(BaseModel):
    """A product as read from the source catalog."""

    id: str
    key: str | None = None
    version: int | None = None
    name: LocalizedText = None
    title: str | None = None
    description: LocalizedText = None
    master_variant: Variant | None = None
    variants: list[Variant] = Field(default_factory=list)
    categories: list[CategoryRef] = Field(default_factory=list)
    product_type: ProductTypeRef | None = None

    @property
    def primary_variant(self) -> Variant | None:
        """Master variant, or the first additional variant when absent."""
        if self.master_variant is not None:
            return self.master_variant
        return self.variants[0] if self.variants else None

    @property
    def all_variants(self) -> list[Variant]:
        head = [self.master_variant] if self.master_variant is not None else []
        return head + list(self.variants)

    @property
    def sku(self) -> str:
        """First SKU found on any variant, else the product id."""
        for variant in self.all_variants:
            if variant.sku:
                return variant.sku
        return self.id


# =============================================================================
# Destination catalog
# =============================================================================


class Availability(str, Enum):
    IN_STOCK = "IN_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"


class PriceInfo(CamelModel):
    currency_code: str
    price: float
    original_price: float


class ItemImage(CamelModel):
    uri: str
    width: int | None = None
    height: int | None = None


class CustomAttribute(CamelModel):
    text: list[str] | None = None
    numbers: list[float] | None = None


class FulfillmentInfo(CamelModel):
    type: str
    place_ids: list[str]


class DestinationItem(CamelModel):
    """A Retail catalog product built from one ``SourceProduct``."""

    id: str
    type: str = "PRIMARY"
    title: str
    description: str
    categories: list[str] = Field(default_factory=list)
    availability: Availability
    available_quantity: int
    uri: str | None = None
    images: list[ItemImage] = Field(default_factory=list)
    price_info: PriceInfo | None = None
    attributes: dict[str, CustomAttribute] = Field(default_factory=dict)
    fulfillment_info: list[FulfillmentInfo] | None = None

    def to_wire(self) -> dict[str, Any]:
        data = super().to_wire()
        data["availability"] = self.availability.value
        return data


# =============================================================================
# Results
# =============================================================================


class ImportResult(BaseModel):
    """Outcome of a completed import operation."""

    success: bool = True
    operation_name: str
    processed_count: int
    product_ids: list[str] = Field(default_factory=list)


class BatchError(CamelModel):
    batch_index: int
    error: str
    products: list[str]


class FullSyncResult(BaseModel):
    """Summary of one full synchronization run."""

    total_products: int = 0
    processed_count: int = 0
    error_count: int = 0
    elapsed_ms: int = 0
    errors: list[BatchError] = Field(default_factory=list)
