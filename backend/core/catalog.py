import logging
from typing import Any, Dict, List, Mapping, Optional

from core.cache import BoundedCache
from core.converters import build_item_object, lookup_name, map_catalog_item
from core.errors import SquareApiError
from core.inventory import retrieve_counts
from core.lookups import (
    collect_reference_ids,
    name_maps_from_objects,
    resolve_catalog_names,
    resolve_vendor_names,
)
from core.square_client import SquareClient

logger = logging.getLogger(__name__)


def _is_active_item(obj: Mapping[str, Any]) -> bool:
    return obj.get("type") == "ITEM" and not obj.get("is_deleted")


def _assemble_items(
    client: SquareClient,
    cache: BoundedCache,
    items: List[Mapping[str, Any]],
    known: Mapping[str, Mapping[str, str]],
    include_inventory: bool,
) -> List[Dict[str, Any]]:
    refs = collect_reference_ids(items)
    category_names = resolve_catalog_names(client, cache, refs["CATEGORY"], "CATEGORY", known.get("CATEGORY"))
    unit_names = resolve_catalog_names(client, cache, refs["MEASUREMENT_UNIT"], "MEASUREMENT_UNIT", known.get("MEASUREMENT_UNIT"))
    image_urls = resolve_catalog_names(client, cache, refs["IMAGE"], "IMAGE", known.get("IMAGE"))
    vendor_names = resolve_vendor_names(client, cache, refs["VENDOR"])

    quantities: Dict[str, int] = {}
    if include_inventory:
        variation_ids = [
            v["id"]
            for item in items
            for v in (item.get("item_data") or {}).get("variations") or []
            if v.get("id")
        ]
        quantities = retrieve_counts(client, cache, variation_ids)

    return [
        map_catalog_item(item, category_names, vendor_names, unit_names, image_urls, quantities)
        for item in items
    ]


def load_catalog_items(
    client: SquareClient,
    cache: BoundedCache,
    include_inventory: bool = True,
    category: Optional[str] = None,
) -> List[Dict[str, Any]]:
    objects = client.list_catalog()
    items = [o for o in objects if _is_active_item(o)]
    logger.info("Found %d active items", len(items))

    mapped = _assemble_items(client, cache, items, name_maps_from_objects(objects), include_inventory)
    if category:
        wanted = category.strip().lower()
        mapped = [
            m for m in mapped
            if any(c.lower() == wanted for c in m["categories"]) or category in m["category_ids"]
        ]
    return mapped


def load_catalog_item(
    client: SquareClient,
    cache: BoundedCache,
    item_id: str,
    include_inventory: bool = True,
) -> Optional[Dict[str, Any]]:
    result = client.retrieve_object(item_id, include_related=True)
    obj = result["object"]
    if not obj or not _is_active_item(obj):
        return None
    known = name_maps_from_objects(result["related_objects"])
    return _assemble_items(client, cache, [obj], known, include_inventory)[0]


def list_category_names(client: SquareClient, cache: BoundedCache) -> Dict[str, str]:
    objects = client.list_catalog(types=("CATEGORY",))
    names = name_maps_from_objects(objects)["CATEGORY"]
    for category_id, name in names.items():
        cache.set(f"CATEGORY:{category_id}", name)
    # nameless categories stay in as "" so options fall back to the id
    return {
        obj["id"]: names.get(obj["id"], "")
        for obj in objects
        if obj.get("type") == "CATEGORY" and not obj.get("is_deleted") and obj.get("id")
    }


def vendors_from_catalog(client: SquareClient, cache: BoundedCache) -> List[Dict[str, Any]]:
    """Vendors referenced by catalog item variations, each with the items they supply."""
    items = [o for o in client.list_catalog(types=("ITEM",)) if _is_active_item(o)]
    vendors: Dict[str, Dict[str, Any]] = {}

    for item in items:
        item_data = item.get("item_data") or {}
        for variation in item_data.get("variations") or []:
            data = variation.get("item_variation_data") or {}
            for info in data.get("item_variation_vendor_infos") or []:
                vendor_id = ((info or {}).get("item_variation_vendor_info_data") or {}).get("vendor_id")
                if not vendor_id:
                    continue
                entry = vendors.setdefault(vendor_id, {"id": vendor_id, "name": vendor_id, "items": []})
                entry["items"].append({
                    "item_id": item.get("id"),
                    "item_name": item_data.get("name") or "Unknown Item",
                    "variation_id": variation.get("id"),
                    "sku": data.get("sku") or "",
                })

    names = resolve_vendor_names(client, cache, list(vendors))
    for vendor_id, entry in vendors.items():
        entry["name"] = lookup_name(names, vendor_id)

    logger.info("Found %d unique vendors across %d items", len(vendors), len(items))
    return list(vendors.values())


def upsert_catalog_item(
    client: SquareClient,
    cache: BoundedCache,
    payload: Mapping[str, Any],
    item_id: Optional[str] = None,
) -> Dict[str, Any]:
    try:
        result = client.upsert_object(build_item_object(payload, item_id))
    finally:
        cache.clear()
    saved = result["object"]
    if not saved:
        raise SquareApiError(502, message="Square accepted the upsert but returned no catalog object")
    return _assemble_items(client, cache, [saved], {}, include_inventory=False)[0]


def delete_catalog_item(client: SquareClient, cache: BoundedCache, item_id: str) -> List[str]:
    try:
        deleted = client.delete_object(item_id)
    finally:
        cache.clear()
    logger.info("Deleted catalog object %s (%d object(s) removed)", item_id, len(deleted))
    return deleted
