"""Unit tests for the product transformer."""

import orjson
import pytest

from catalog_sync.models import Attribute, CategoryRef, Price, SourceProduct, Variant
from catalog_sync.services.transformer import (
    ProductTransformer,
    build_fulfillment_info,
    build_price_info,
    resolve_text,
)


@pytest.fixture
def transformer() -> ProductTransformer:
    return ProductTransformer(
        locales=["en-US", "en-GB", "en"],
        default_currency="USD",
        region="gcp-europe-west1",
        product_base_url="https://shop.example.com/",
        place_ids=["store1", "store2"],
    )


class TestPricing:
    """Price block construction."""

    def test_no_price_entries_omits_price_info(self, transformer, make_product) -> None:
        """A product without prices must not get a zero-valued price block."""
        item = transformer.transform(make_product(cent_amount=None))

        assert item.price_info is None
        assert "priceInfo" not in item.to_wire()

    def test_regular_price_in_major_units(self, transformer, make_product) -> None:
        item = transformer.transform(make_product(cent_amount=1999))

        assert item.price_info.price == 19.99
        assert item.price_info.original_price == 19.99
        assert item.price_info.currency_code == "EUR"

    def test_discounted_price(self, transformer, make_product) -> None:
        item = transformer.transform(make_product(cent_amount=2500, discounted=1500))

        assert item.price_info.price == 15.0
        assert item.price_info.original_price == 25.0

    def test_currency_falls_back_to_default(self) -> None:
        variant = Variant(prices=[Price(cent_amount=100)])
        assert build_price_info(variant, "USD").currency_code == "USD"

    def test_missing_variant(self) -> None:
        assert build_price_info(None, "USD") is None


class TestAvailabilityAndFulfillment:
    """Stock status and fulfillment options."""

    def test_zero_quantity_is_out_of_stock(self, transformer, make_product) -> None:
        item = transformer.transform(make_product(quantity=0))

        types = [f.type for f in item.fulfillment_info]
        assert item.availability.value == "OUT_OF_STOCK"
        assert item.available_quantity == 0
        assert "same-day-delivery" not in types
        assert "pickup-in-store" not in types
        assert "delivery" in types

    def test_eleven_units_enable_same_day_delivery(self, transformer, make_product) -> None:
        item = transformer.transform(make_product(quantity=11))

        types = [f.type for f in item.fulfillment_info]
        assert item.availability.value == "IN_STOCK"
        assert types == ["pickup-in-store", "same-day-delivery", "delivery"]

    def test_ten_units_do_not_enable_same_day_delivery(self) -> None:
        types = [f.type for f in build_fulfillment_info(10, ["store1"])]
        assert types == ["pickup-in-store", "delivery"]

    def test_stock_attribute_used_without_availability(self, transformer, make_product) -> None:
        product = make_product(quantity=None, attributes=[Attribute(name="stock", value="7")])
        item = transformer.transform(product)

        assert item.available_quantity == 7
        assert item.availability.value == "IN_STOCK"

    def test_unknown_stock_is_out_of_stock(self, transformer, make_product) -> None:
        item = transformer.transform(make_product(quantity=None))
        assert item.availability.value == "OUT_OF_STOCK"


class TestContentMapping:
    """Title, description, categories, uri and attributes."""

    def test_localized_title_and_description(self, transformer, make_product) -> None:
        item = transformer.transform(make_product())

        assert item.title == "Claw Hammer"
        assert item.description == "Forged steel hammer"
        assert item.categories == ["Tools"]

    def test_locale_preference_order(self) -> None:
        assert resolve_text({"en": "Plain", "en-GB": "British"}, ["en-US", "en-GB", "en"]) == "British"
        assert resolve_text({"fr-FR": "Marteau"}, ["en-US"]) is None
        assert resolve_text("", ["en-US"]) is None

    def test_missing_name_uses_placeholder(self, transformer) -> None:
        item = transformer.transform(SourceProduct(id="bare"))

        assert item.title == "No name"
        assert item.description == ""
        assert item.categories == []

    def test_uri_uses_sku(self, transformer, make_product) -> None:
        item = transformer.transform(make_product(sku="HAM-01"))
        assert item.uri == "https://shop.example.com/products/HAM-01"

    def test_synthetic_sku_is_product_id(self, transformer) -> None:
        item = transformer.transform(SourceProduct(id="no-variants"))

        assert item.attributes["sku"].text == ["no-variants"]
        assert item.uri == "https://shop.example.com/products/no-variants"

    def test_injected_attributes(self, transformer, make_product) -> None:
        item = transformer.transform(make_product())

        assert item.attributes["product_type"].text == ["hardware"]
        assert item.attributes["ctp_region"].text == ["gcp-europe-west1"]

    def test_attribute_values_are_stringified(self, transformer, make_product) -> None:
        product = make_product(
            attributes=[
                Attribute(name="color", value={"key": "red", "label": {"en-US": "Red"}}),
                Attribute(name="sizes", value=["S", "M"]),
                Attribute(name="cordless", value=False),
                Attribute(name="weight", value=1.5),
                Attribute(name="empty", value="  "),
            ]
        )
        attributes = transformer.transform(product).attributes

        assert attributes["color"].text == ["Red"]
        assert attributes["sizes"].text == ["S", "M"]
        assert attributes["cordless"].text == ["false"]
        assert attributes["weight"].text == ["1.5"]
        assert "empty" not in attributes

    def test_category_falls_back_to_slug_then_id(self, transformer, make_product) -> None:
        product = make_product().model_copy(
            update={
                "categories": [
                    CategoryRef(id="c1", slug={"en-US": "power-tools"}),
                    CategoryRef(id="c2"),
                ]
            }
        )
        assert transformer.transform(product).categories == ["power-tools", "c2"]


class TestWireFormat:
    """Serialized destination item."""

    def test_camel_case_keys(self, transformer, make_product) -> None:
        wire = transformer.transform(make_product()).to_wire()

        assert wire["type"] == "PRIMARY"
        assert wire["availability"] == "IN_STOCK"
        assert wire["availableQuantity"] == 5
        assert wire["priceInfo"] == {"currencyCode": "EUR", "price": 19.99, "originalPrice": 19.99}
        assert wire["fulfillmentInfo"][0]["placeIds"] == ["store1", "store2"]

    def test_transform_is_deterministic(self, transformer, make_product) -> None:
        product = make_product(
            attributes=[Attribute(name="specs", value={"b": 1, "a": {"nested": True}})]
        )
        first = orjson.dumps(transformer.transform(product).to_wire())
        second = orjson.dumps(transformer.transform(product).to_wire())

        assert first == second
