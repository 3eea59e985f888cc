"""
Bulk id -> display-name joins for catalog items.

Referenced ids are collected into sets, resolved in batches through the
Square client (skipping anything already in the cache), and mapped back with
`lookup_name`, which falls back to the raw id.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.cache import BoundedCache
from core.converters import extract_category_ids, lookup_name, measurement_unit_name
from core.square_client import SquareClient

logger = logging.getLogger(__name__)

__all__ = [
    "collect_reference_ids",
    "name_maps_from_objects",
    "resolve_catalog_names",
    "resolve_vendor_names",
    "lookup_name",
]

LOOKUP_TYPES = ("CATEGORY", "MEASUREMENT_UNIT", "IMAGE")


def _cache_key(object_type: str, object_id: str) -> str:
    return f"{object_type}:{object_id}"


def _object_name(obj: Mapping[str, Any]) -> Optional[str]:
    object_type = obj.get("type")
    if object_type == "CATEGORY":
        name = ((obj.get("category_data") or {}).get("name") or "").strip()
        return name or None
    if object_type == "MEASUREMENT_UNIT":
        return measurement_unit_name(obj)
    if object_type == "IMAGE":
        return (obj.get("image_data") or {}).get("url") or None
    return None


def collect_reference_ids(items: Iterable[Mapping[str, Any]]) -> Dict[str, List[str]]:
    categories: Dict[str, None] = {}
    vendors: Dict[str, None] = {}
    units: Dict[str, None] = {}
    images: Dict[str, None] = {}

    for item in items:
        item_data = item.get("item_data") or {}
        for category_id in extract_category_ids(item):
            categories.setdefault(category_id, None)
        for image_id in item_data.get("image_ids") or []:
            images.setdefault(image_id, None)
        for variation in item_data.get("variations") or []:
            data = variation.get("item_variation_data") or {}
            if data.get("measurement_unit_id"):
                units.setdefault(data["measurement_unit_id"], None)
            for info in data.get("item_variation_vendor_infos") or []:
                vendor_id = ((info or {}).get("item_variation_vendor_info_data") or {}).get("vendor_id")
                if vendor_id:
                    vendors.setdefault(vendor_id, None)

    return {
        "CATEGORY": list(categories),
        "VENDOR": list(vendors),
        "MEASUREMENT_UNIT": list(units),
        "IMAGE": list(images),
    }


def name_maps_from_objects(objects: Iterable[Mapping[str, Any]]) -> Dict[str, Dict[str, str]]:
    """Build lookup maps from objects already present in a catalog listing."""
    maps: Dict[str, Dict[str, str]] = {t: {} for t in LOOKUP_TYPES}
    for obj in objects:
        object_type = obj.get("type")
        if object_type not in maps or obj.get("is_deleted") or not obj.get("id"):
            continue
        name = _object_name(obj)
        if name:
            maps[object_type][obj["id"]] = name
    return maps


def resolve_catalog_names(
    client: SquareClient,
    cache: BoundedCache,
    ids: Iterable[str],
    object_type: str,
    known: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    id -> name for catalog objects of `object_type`.

    Names found in `known` or the cache are used as-is; the rest are fetched
    with one batch-retrieve per chunk. Ids Square can't name are left out of
    the result, so callers fall back to the id via `lookup_name`.
    """
    known = known or {}
    resolved: Dict[str, str] = {}
    missing: List[str] = []

    for object_id in dict.fromkeys(ids):
        if not object_id:
            continue
        if object_id in known:
            resolved[object_id] = known[object_id]
            cache.set(_cache_key(object_type, object_id), known[object_id])
            continue
        cached = cache.get(_cache_key(object_type, object_id))
        if cached is not None:
            resolved[object_id] = cached
        else:
            missing.append(object_id)

    if missing:
        logger.debug("Retrieving %d %s object(s) not in cache", len(missing), object_type)
        result = client.batch_retrieve_objects(missing)
        for obj in result["objects"]:
            if obj.get("type") != object_type or obj.get("is_deleted"):
                continue
            name = _object_name(obj)
            if name:
                resolved[obj["id"]] = name
                cache.set(_cache_key(object_type, obj["id"]), name)
        unnamed = [i for i in missing if i not in resolved]
        if unnamed:
            logger.debug("No %s name for %s; showing ids", object_type, ", ".join(unnamed))

    return resolved


def resolve_vendor_names(client: SquareClient, cache: BoundedCache, ids: Iterable[str]) -> Dict[str, str]:
    resolved: Dict[str, str] = {}
    missing: List[str] = []

    for vendor_id in dict.fromkeys(ids):
        if not vendor_id:
            continue
        cached = cache.get(_cache_key("VENDOR", vendor_id))
        if cached is not None:
            resolved[vendor_id] = cached
        else:
            missing.append(vendor_id)

    if missing:
        for vendor_id, vendor in client.bulk_retrieve_vendors(missing).items():
            name = (vendor.get("name") or "").strip()
            if name:
                resolved[vendor_id] = name
                cache.set(_cache_key("VENDOR", vendor_id), name)

    return resolved
