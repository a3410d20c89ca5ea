"""Unit tests for raw product parsing."""

from catalog_sync.services.product_parser import parse_product


REST_PRODUCT = {
    "id": "p-1",
    "key": "hammer",
    "version": 7,
    "productType": {"typeId": "product-type", "id": "pt-1"},
    "masterData": {
        "current": {
            "name": {"en-US": "Hammer"},
            "description": {"en-US": "Steel"},
            "categories": [{"typeId": "category", "id": "cat-1"}],
            "masterVariant": {
                "id": 1,
                "sku": "HAM-1",
                "prices": [
                    {
                        "value": {"currencyCode": "USD", "centAmount": 1299},
                        "discounted": {"value": {"currencyCode": "USD", "centAmount": 999}},
                    }
                ],
                "images": [{"url": "https://img/1.png", "dimensions": {"w": 800, "h": 600}}],
                "attributes": [{"name": "color", "value": "red"}],
                "availability": {"availableQuantity": 14},
            },
            "variants": [{"id": 2, "sku": "HAM-2"}],
        }
    },
}

GRAPHQL_PRODUCT = {
    "id": "p-1",
    "key": "hammer",
    "version": 7,
    "productType": {"id": "pt-1", "name": "hardware"},
    "masterData": {
        "current": {
            "name": "Hammer",
            "description": "Steel",
            "categories": [{"id": "cat-1", "name": "Tools", "slug": "tools"}],
            "masterVariant": {
                "id": 1,
                "sku": "HAM-1",
                "prices": [{"value": {"currencyCode": "USD", "centAmount": 1299}, "discounted": None}],
                "images": [{"url": "https://img/1.png", "dimensions": {"width": 800, "height": 600}}],
                "attributesRaw": [{"name": "color", "value": "red"}],
            },
            "variants": [],
        }
    },
}


class TestParseProduct:
    """REST, projection and GraphQL shapes."""

    def test_rest_product(self) -> None:
        product = parse_product(REST_PRODUCT)

        assert product.id == "p-1"
        assert product.version == 7
        assert product.name == {"en-US": "Hammer"}
        assert product.product_type.id == "pt-1"
        assert product.categories[0].id == "cat-1"
        variant = product.master_variant
        assert variant.sku == "HAM-1"
        assert variant.available_quantity == 14
        assert variant.prices[0].cent_amount == 1299
        assert variant.prices[0].discounted_cent_amount == 999
        assert variant.images[0].width == 800
        assert variant.attributes[0].value == "red"
        assert [v.sku for v in product.variants] == ["HAM-2"]

    def test_graphql_product(self) -> None:
        product = parse_product(GRAPHQL_PRODUCT)

        assert product.name == "Hammer"
        assert product.product_type.name == "hardware"
        assert product.categories[0].name == "Tools"
        assert product.master_variant.images[0].height == 600
        assert product.master_variant.attributes[0].name == "color"
        assert product.master_variant.prices[0].is_discounted is False
        assert product.master_variant.available_quantity is None

    def test_projection_product(self) -> None:
        projection = {
            "id": "p-2",
            "name": {"en-US": "Saw"},
            "masterVariant": {"id": 1, "sku": "SAW-1"},
            "variants": [],
        }
        product = parse_product(projection)

        assert product.name == {"en-US": "Saw"}
        assert product.sku == "SAW-1"

    def test_expanded_category_reference(self) -> None:
        raw = {
            "id": "p-3",
            "categories": [
                {"typeId": "category", "id": "cat-9", "obj": {"id": "cat-9", "name": {"en": "Saws"}}}
            ],
        }
        assert parse_product(raw).categories[0].name == {"en": "Saws"}
