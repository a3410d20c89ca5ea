"""Product transformation from commercetools to the Retail catalog schema."""

from typing import Any

import orjson

from catalog_sync.config import Settings
from catalog_sync.models import (
    Availability,
    CustomAttribute,
    DestinationItem,
    FulfillmentInfo,
    ItemImage,
    LocalizedText,
    PriceInfo,
    SourceProduct,
    Variant,
)
from catalog_sync.services.availability import resolve_available_quantity

NAME_PLACEHOLDER = "No name"
SAME_DAY_DELIVERY_THRESHOLD = 10

PICKUP_IN_STORE = "pickup-in-store"
SAME_DAY_DELIVERY = "same-day-delivery"
DELIVERY = "delivery"


def resolve_text(value: LocalizedText, locales: list[str]) -> str | None:
    """Pick the first non-empty translation in locale preference order."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        for locale in locales:
            text = value.get(locale)
            if text:
                return text
    return None


def build_price_info(variant: Variant | None, default_currency: str) -> PriceInfo | None:
    """Price block from the variant's first price entry, or None without one."""
    if variant is None or not variant.prices:
        return None
    price = variant.prices[0]
    base = (price.cent_amount or 0) / 100
    currency = price.currency_code or price.discounted_currency_code or default_currency
    if price.is_discounted:
        return PriceInfo(
            currency_code=currency,
            price=price.discounted_cent_amount / 100,
            original_price=base,
        )
    return PriceInfo(currency_code=currency, price=base, original_price=base)


def build_fulfillment_info(quantity: int, place_ids: list[str]) -> list[FulfillmentInfo]:
    options = []
    if quantity > 0:
        options.append(FulfillmentInfo(type=PICKUP_IN_STORE, place_ids=place_ids))
    if quantity > SAME_DAY_DELIVERY_THRESHOLD:
        options.append(FulfillmentInfo(type=SAME_DAY_DELIVERY, place_ids=place_ids))
    options.append(FulfillmentInfo(type=DELIVERY, place_ids=place_ids))
    return options


class ProductTransformer:
    """Pure mapping of ``SourceProduct`` to ``DestinationItem``."""

    def __init__(
        self,
        *,
        locales: list[str] | None = None,
        default_currency: str = "USD",
        region: str = "",
        product_base_url: str = "https://your-store.com",
        place_ids: list[str] | None = None,
    ):
        self.locales = locales or ["en-US", "en-GB", "en"]
        self.default_currency = default_currency
        self.region = region or "unknown"
        self.product_base_url = product_base_url.rstrip("/")
        self.place_ids = place_ids if place_ids is not None else ["store1", "store2"]

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProductTransformer":
        return cls(
            locales=settings.locale_preferences,
            default_currency=settings.default_currency,
            region=settings.ctp_region,
            product_base_url=settings.product_base_url,
            place_ids=settings.place_ids,
        )

    def transform(self, product: SourceProduct) -> DestinationItem:
        variant = product.primary_variant
        quantity = resolve_available_quantity(product)

        return DestinationItem(
            id=product.id,
            title=self._title(product),
            description=resolve_text(product.description, self.locales) or "",
            categories=self._categories(product),
            availability=Availability.IN_STOCK if quantity > 0 else Availability.OUT_OF_STOCK,
            available_quantity=quantity,
            uri=self._uri(product),
            images=[
                ItemImage(uri=image.url, width=image.width, height=image.height)
                for image in (variant.images if variant else [])
            ],
            price_info=build_price_info(variant, self.default_currency),
            attributes=self._attributes(product, variant),
            fulfillment_info=build_fulfillment_info(quantity, self.place_ids),
        )

    def transform_many(self, products: list[SourceProduct]) -> list[DestinationItem]:
        return [self.transform(product) for product in products]

    def _title(self, product: SourceProduct) -> str:
        return (
            resolve_text(product.name, self.locales)
            or product.title
            or NAME_PLACEHOLDER
        )

    def _categories(self, product: SourceProduct) -> list[str]:
        names = []
        for category in product.categories:
            display = (
                resolve_text(category.name, self.locales)
                or resolve_text(category.slug, self.locales)
                or category.id
            )
            if display:
                names.append(display)
        return names

    def _uri(self, product: SourceProduct) -> str:
        variant = product.primary_variant
        handle = (variant.sku if variant else None) or product.key or product.id
        return f"{self.product_base_url}/products/{handle}"

    def _attributes(
        self, product: SourceProduct, variant: Variant | None
    ) -> dict[str, CustomAttribute]:
        attributes: dict[str, CustomAttribute] = {}
        for attr in variant.attributes if variant else []:
            values = self._stringify(attr.value)
            if values:
                attributes[attr.name] = CustomAttribute(text=values)

        sku = (variant.sku if variant else None) or product.sku
        product_type = product.product_type
        attributes["sku"] = CustomAttribute(text=[sku])
        attributes["product_type"] = CustomAttribute(
            text=[(product_type.name or product_type.id) if product_type else "unknown"]
        )
        attributes["ctp_region"] = CustomAttribute(text=[self.region])
        return attributes

    def _stringify(self, value: Any) -> list[str]:
        """Render an attribute value as text values; empty list when blank."""
        if value is None:
            return []
        if isinstance(value, bool):
            return ["true" if value else "false"]
        if isinstance(value, str):
            return [value] if value.strip() else []
        if isinstance(value, (int, float)):
            return [str(value)]
        if isinstance(value, list):
            return [text for item in value for text in self._stringify(item)]
        if isinstance(value, dict):
            return self._stringify_object(value)
        return [str(value)]

    def _stringify_object(self, value: dict[str, Any]) -> list[str]:
        # Enum values carry a label (possibly localized) and a key.
        if "label" in value:
            label = value["label"]
            text = resolve_text(label, self.locales) if isinstance(label, dict) else label
            return self._stringify(text if text is not None else value.get("key"))
        if "key" in value and isinstance(value["key"], str):
            return self._stringify(value["key"])
        if "centAmount" in value:
            amount = value["centAmount"] / 100
            return [f"{amount:.2f} {value.get('currencyCode', self.default_currency)}"]
        if value and all(isinstance(v, str) for v in value.values()):
            text = resolve_text(value, self.locales)
            if text:
                return [text]
        return [orjson.dumps(value, option=orjson.OPT_SORT_KEYS).decode()]
