from conftest import make_item, make_variation

from core.converters import (
    build_item_object,
    category_options,
    extract_category_ids,
    extract_vendor_id,
    lookup_name,
    map_catalog_item,
    measurement_unit_name,
    money_to_number,
    number_to_money,
    sort_variations,
    visibility,
)


def test_money_conversions():
    assert money_to_number({"amount": 1250, "currency": "USD"}) == 12.5
    assert money_to_number(None) == 0.0
    assert money_to_number({"currency": "USD"}) == 0.0
    assert number_to_money(12.5) == {"amount": 1250, "currency": "USD"}
    assert number_to_money(0.285, "CAD") == {"amount": 28, "currency": "CAD"}


def test_lookup_name_defaults_to_id():
    names = {"A": "Apparel", "B": "   "}
    assert lookup_name(names, "A") == "Apparel"
    assert lookup_name(names, "B") == "B"
    assert lookup_name(names, "C") == "C"


def test_extract_category_ids_merges_both_shapes_in_order():
    item = make_item("I1", "Shirt", categories=["C2", "C1"], category_ids=["C1", "C3"])
    assert extract_category_ids(item) == ["C2", "C1", "C3"]


def test_extract_vendor_id_uses_first_variation_with_vendor():
    item = make_item("I1", "Shirt", variations=[
        make_variation("V1"),
        make_variation("V2", vendor_id="VEND-2"),
        make_variation("V3", vendor_id="VEND-3"),
    ])
    assert extract_vendor_id(item) == "VEND-2"
    assert extract_vendor_id(make_item("I2", "Bare")) is None


def test_measurement_unit_name():
    custom = {"type": "MEASUREMENT_UNIT", "measurement_unit_data": {"measurement_unit": {"custom_unit": {"name": "crate"}, "type": "TYPE_GENERIC"}}}
    weight = {"type": "MEASUREMENT_UNIT", "measurement_unit_data": {"measurement_unit": {"weight_unit": "IMPERIAL_POUND", "type": "TYPE_WEIGHT"}}}
    unknown = {"type": "MEASUREMENT_UNIT", "measurement_unit_data": {"measurement_unit": {}}}
    assert measurement_unit_name(custom) == "crate"
    assert measurement_unit_name(weight) == "per pound"
    assert measurement_unit_name(unknown) is None


def test_variations_sorted_by_ordinal_missing_last():
    variations = [
        make_variation("V-none-1"),
        make_variation("V2", ordinal=2),
        make_variation("V0", ordinal=0),
        make_variation("V-none-2"),
    ]
    assert [v["id"] for v in sort_variations(variations)] == ["V0", "V2", "V-none-1", "V-none-2"]


def test_visibility():
    assert visibility({"available_online": True, "available_for_pickup": True}) == "PUBLIC"
    assert visibility({"available_online": True}) == "PICKUP_ONLY"
    assert visibility({}) == "PRIVATE"


def test_map_catalog_item_joins_and_defaults():
    item = make_item(
        "I1",
        "Coffee Beans",
        category_ids=["CAT-1", "CAT-missing"],
        image_ids=["IMG-1"],
        description="Whole bean",
        is_taxable=True,
        variations=[
            make_variation("V2", name="5lb", sku="CB-5", amount=5000, ordinal=1, unit_id="U-missing", vendor_id="VEND-missing"),
            make_variation("V1", name="1lb", sku="CB-1", amount=1200, ordinal=0, unit_id="U-1", vendor_id="VEND-1",
                           vendor_sku="ACME-1", inventory_alert_threshold=4, stockable=True),
        ],
    )
    mapped = map_catalog_item(
        item,
        category_names={"CAT-1": "Coffee"},
        vendor_names={"VEND-1": "Acme Roasters"},
        unit_names={"U-1": "per pound"},
        image_urls={"IMG-1": "https://img.test/1.jpg"},
        quantities={"V1": 7, "V2": 3},
    )

    assert mapped["categories"] == ["Coffee", "CAT-missing"]
    assert mapped["category_ids"] == ["CAT-1", "CAT-missing"]
    assert mapped["sku"] == "CB-1"
    assert mapped["price"] == 12.0
    assert mapped["unit_type"] == "per pound"
    assert mapped["image_url"] == "https://img.test/1.jpg"
    assert mapped["quantity"] == 10
    assert mapped["reorder_point"] == 4
    assert mapped["track_inventory"] is True
    # vendor comes from the first variation in source order that has one
    assert mapped["vendor_id"] == "VEND-missing"
    assert mapped["vendor_name"] == "VEND-missing"

    first, second = mapped["variations"]
    assert first["id"] == "V1"
    assert first["vendor_name"] == "Acme Roasters"
    assert first["vendor_sku"] == "ACME-1"
    assert first["quantity"] == 7
    assert second["measurement_unit"] == "U-missing"
    assert second["vendor_name"] == "VEND-missing"
    assert second["vendor_sku"] == "VEND-missing-CB-5"


def test_map_catalog_item_without_vendor_or_unit():
    item = make_item("I1", "Sticker", variations=[make_variation("V1", sku="ST")])
    mapped = map_catalog_item(item, {}, {}, {}, {})
    assert mapped["vendor_name"] == "No Vendor"
    assert mapped["unit_type"] == "unit"
    assert mapped["variations"][0]["vendor_sku"] is None
    assert mapped["quantity"] == 0


def test_build_item_object_for_new_item():
    obj = build_item_object({
        "name": "Mug",
        "description": "Ceramic",
        "category_ids": ["CAT-1"],
        "variations": [
            {"name": "Small", "sku": "MUG-S", "price": 9.99, "currency": "USD"},
            {"name": "Large", "price": 12, "measurement_unit_id": "U-1", "inventory_alert_threshold": 2},
        ],
    })
    assert obj["id"] == "#item"
    assert obj["type"] == "ITEM"
    assert "version" not in obj
    assert obj["item_data"]["categories"] == [{"id": "CAT-1"}]
    small, large = obj["item_data"]["variations"]
    assert small["id"] == "#variation-0"
    assert small["item_variation_data"]["price_money"] == {"amount": 999, "currency": "USD"}
    assert small["item_variation_data"]["item_id"] == "#item"
    assert large["item_variation_data"]["ordinal"] == 1
    assert large["item_variation_data"]["measurement_unit_id"] == "U-1"
    assert large["item_variation_data"]["inventory_alert_threshold"] == 2


def test_build_item_object_for_existing_item_keeps_ids_and_versions():
    obj = build_item_object(
        {"name": "Mug", "version": 7, "variations": [{"id": "V1", "version": 3, "name": "Small", "price": 1}]},
        item_id="I1",
    )
    assert obj["id"] == "I1"
    assert obj["version"] == 7
    variation = obj["item_data"]["variations"][0]
    assert variation["id"] == "V1"
    assert variation["version"] == 3
    assert variation["item_variation_data"]["item_id"] == "I1"


def test_category_options_sorted_by_label_with_id_fallback():
    options = category_options({"c2": "bakery", "c1": "Apparel", "zz": ""})
    assert options == [
        {"value": "c1", "label": "Apparel"},
        {"value": "c2", "label": "bakery"},
        {"value": "zz", "label": "zz"},
    ]
