import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)

NO_VENDOR = "No Vendor"
DEFAULT_UNIT = "unit"

UNIT_TYPE_LABELS = {
    "TYPE_WEIGHT": "per pound",
    "TYPE_LENGTH": "per foot",
    "TYPE_VOLUME": "per fluid ounce",
    "TYPE_AREA": "per square foot",
    "TYPE_TIME": "per hour",
    "TYPE_GENERIC": "per unit",
}


def money_to_number(money: Optional[Mapping[str, Any]]) -> float:
    """Square money is in minor units (cents)."""
    if not money or not money.get("amount"):
        return 0.0
    return float(money["amount"]) / 100


def number_to_money(amount: Optional[float], currency: str = "USD") -> Dict[str, Any]:
    return {"amount": int(round(float(amount or 0) * 100)), "currency": currency}


def lookup_name(mapping: Mapping[str, str], object_id: str) -> str:
    """Mapped name, or the id itself when the name is missing or blank."""
    name = mapping.get(object_id)
    if name and name.strip():
        return name
    logger.debug("No name found for id %s, using id", object_id)
    return object_id


def extract_category_ids(item: Mapping[str, Any]) -> List[str]:
    item_data = item.get("item_data") or {}
    seen: Dict[str, None] = {}
    for category in item_data.get("categories") or []:
        if category and category.get("id"):
            seen.setdefault(category["id"], None)
    for category_id in item_data.get("category_ids") or []:
        if category_id:
            seen.setdefault(category_id, None)
    return list(seen)


def _first_vendor_info(variation: Mapping[str, Any]) -> Dict[str, Any]:
    variation_data = variation.get("item_variation_data") or {}
    vendor_infos = variation_data.get("item_variation_vendor_infos") or []
    if not vendor_infos:
        return {}
    return (vendor_infos[0] or {}).get("item_variation_vendor_info_data") or {}


def extract_vendor_id(item: Mapping[str, Any]) -> Optional[str]:
    for variation in (item.get("item_data") or {}).get("variations") or []:
        vendor_id = _first_vendor_info(variation).get("vendor_id")
        if vendor_id:
            return vendor_id
    return None


def measurement_unit_name(obj: Mapping[str, Any]) -> Optional[str]:
    unit = (obj.get("measurement_unit_data") or {}).get("measurement_unit") or {}
    custom = unit.get("custom_unit") or {}
    if custom.get("name"):
        return custom["name"]
    return UNIT_TYPE_LABELS.get(unit.get("type"))


def sort_variations(variations: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    # sorted() is stable, so variations without an ordinal keep source order at the end
    def key(v):
        ordinal = (v.get("item_variation_data") or {}).get("ordinal")
        return (ordinal is None, ordinal if ordinal is not None else 0)

    return sorted(variations, key=key)


def visibility(item_data: Mapping[str, Any]) -> str:
    if item_data.get("available_online"):
        return "PUBLIC" if item_data.get("available_for_pickup") else "PICKUP_ONLY"
    return "PRIVATE"


def map_variation(
    variation: Mapping[str, Any],
    unit_names: Mapping[str, str],
    vendor_names: Mapping[str, str],
    quantities: Optional[Mapping[str, int]] = None,
) -> Dict[str, Any]:
    data = variation.get("item_variation_data") or {}
    unit_id = data.get("measurement_unit_id")
    vendor_info = _first_vendor_info(variation)
    vendor_id = vendor_info.get("vendor_id")
    sku = data.get("sku") or ""

    vendor_sku = None
    if vendor_id:
        vendor_sku = vendor_info.get("sku") or f"{vendor_id}-{sku}"

    price_money = data.get("price_money") or {}
    return {
        "id": variation.get("id"),
        "name": data.get("name") or "",
        "sku": sku,
        "price": money_to_number(price_money),
        "currency": price_money.get("currency"),
        "ordinal": data.get("ordinal"),
        "measurement_unit": lookup_name(unit_names, unit_id) if unit_id else DEFAULT_UNIT,
        "measurement_unit_id": unit_id or "",
        "vendor_id": vendor_id or "",
        "vendor_name": lookup_name(vendor_names, vendor_id) if vendor_id else NO_VENDOR,
        "vendor_sku": vendor_sku,
        "cost": money_to_number(vendor_info.get("price_money")),
        "stockable": bool(data.get("stockable", False)),
        "location_overrides": [
            {
                "location_id": o.get("location_id"),
                "track_inventory": o.get("track_inventory"),
                "sold_out": o.get("sold_out"),
            }
            for o in data.get("location_overrides") or []
            if o and o.get("location_id")
        ],
        "quantity": int((quantities or {}).get(variation.get("id"), 0)),
    }


def map_catalog_item(
    item: Mapping[str, Any],
    category_names: Mapping[str, str],
    vendor_names: Mapping[str, str],
    unit_names: Mapping[str, str],
    image_urls: Mapping[str, str],
    quantities: Optional[Mapping[str, int]] = None,
) -> Dict[str, Any]:
    item_data = item.get("item_data") or {}
    raw_variations = sort_variations(item_data.get("variations") or [])
    variations = [map_variation(v, unit_names, vendor_names, quantities) for v in raw_variations]
    first = variations[0] if variations else {}
    first_data = (raw_variations[0].get("item_variation_data") or {}) if raw_variations else {}

    category_ids = extract_category_ids(item)
    vendor_id = extract_vendor_id(item)
    image_ids = item_data.get("image_ids") or []
    image_id = image_ids[0] if image_ids else None

    return {
        "id": item.get("id"),
        "name": item_data.get("name") or "",
        "description": item_data.get("description") or "",
        "sku": first.get("sku", ""),
        "price": first.get("price", 0.0),
        "categories": [lookup_name(category_names, cid) for cid in category_ids],
        "category_ids": category_ids,
        "vendor_id": vendor_id or "",
        "vendor_name": lookup_name(vendor_names, vendor_id) if vendor_id else NO_VENDOR,
        "vendor_code": vendor_id or "",
        "unit_type": first.get("measurement_unit", DEFAULT_UNIT),
        "measurement_unit_id": first.get("measurement_unit_id", ""),
        "image_id": image_id,
        "image_url": image_urls.get(image_id) if image_id else None,
        "quantity": sum(v["quantity"] for v in variations),
        "reorder_point": int(first_data.get("inventory_alert_threshold") or 0),
        "is_taxable": bool(item_data.get("is_taxable", False)),
        "visibility": visibility(item_data),
        "track_inventory": any(
            (v.get("item_variation_data") or {}).get("stockable")
            or (v.get("item_variation_data") or {}).get("track_inventory")
            for v in raw_variations
        ),
        "version": item.get("version"),
        "updated_at": item.get("updated_at"),
        "variations": variations,
    }


def build_item_object(payload: Mapping[str, Any], item_id: Optional[str] = None) -> Dict[str, Any]:
    """Turn an upsert payload into a Square ITEM object; new objects get '#' temp ids."""
    object_id = item_id or "#item"
    variations = []
    for index, v in enumerate(payload.get("variations") or []):
        variation_data: Dict[str, Any] = {
            "item_id": object_id,
            "name": v.get("name") or "",
            "pricing_type": "FIXED_PRICING",
            "price_money": number_to_money(v.get("price"), v.get("currency") or "USD"),
            "ordinal": v.get("ordinal") if v.get("ordinal") is not None else index,
        }
        if v.get("sku"):
            variation_data["sku"] = v["sku"]
        if v.get("measurement_unit_id"):
            variation_data["measurement_unit_id"] = v["measurement_unit_id"]
        if v.get("track_inventory") is not None:
            variation_data["track_inventory"] = v["track_inventory"]
        if v.get("inventory_alert_threshold") is not None:
            variation_data["inventory_alert_type"] = "LOW_QUANTITY"
            variation_data["inventory_alert_threshold"] = v["inventory_alert_threshold"]

        variation: Dict[str, Any] = {
            "type": "ITEM_VARIATION",
            "id": v.get("id") or f"#variation-{index}",
            "item_variation_data": variation_data,
        }
        if v.get("version") is not None:
            variation["version"] = v["version"]
        variations.append(variation)

    item_data: Dict[str, Any] = {
        "name": payload.get("name") or "",
        "description": payload.get("description") or "",
        "categories": [{"id": cid} for cid in payload.get("category_ids") or []],
        "is_taxable": bool(payload.get("is_taxable", True)),
        "variations": variations,
    }
    if payload.get("image_ids"):
        item_data["image_ids"] = list(payload["image_ids"])
    if payload.get("available_online") is not None:
        item_data["available_online"] = payload["available_online"]
    if payload.get("available_for_pickup") is not None:
        item_data["available_for_pickup"] = payload["available_for_pickup"]

    obj: Dict[str, Any] = {"type": "ITEM", "id": object_id, "item_data": item_data}
    if payload.get("version") is not None:
        obj["version"] = payload["version"]
    return obj


def category_options(category_names: Mapping[str, str]) -> List[Dict[str, str]]:
    return sorted(
        ({"value": cid, "label": lookup_name(category_names, cid)} for cid in category_names),
        key=lambda o: o["label"].lower(),
    )
