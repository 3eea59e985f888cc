import hashlib
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from core.cache import BoundedCache
from core.errors import SquareConfigError
from core.pagination import chunked
from core.square_client import INVENTORY_STATES, SquareClient

logger = logging.getLogger(__name__)


def _as_int(x) -> int:
    # Square reports quantities as decimal strings; truncate toward 0
    try:
        return int(Decimal(str(x)))
    except (InvalidOperation, TypeError, ValueError):
        return 0


def _format_quantity(quantity) -> str:
    q = Decimal(str(quantity))
    if q == q.to_integral_value():
        return str(int(q))
    return format(q.normalize(), "f")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _counts_cache_key(variation_ids: List[str], location_ids: Optional[List[str]]) -> str:
    key_data = f"{','.join(variation_ids)}|{','.join(location_ids or [])}"
    return f"inventory_counts:{hashlib.md5(key_data.encode()).hexdigest()}"


def _resolve_location(client: SquareClient, location_id: Optional[str]) -> str:
    location_id = location_id or client.location_id
    if not location_id:
        raise SquareConfigError("SQUARE_LOCATION_ID is not configured")
    return location_id


def retrieve_counts(
    client: SquareClient,
    cache: BoundedCache,
    variation_ids: Iterable[str],
    location_ids: Optional[List[str]] = None,
) -> Dict[str, int]:
    """IN_STOCK quantity per variation id, summed across locations."""
    ids = [v for v in dict.fromkeys(variation_ids) if v]
    if not ids:
        return {}

    cache_key = _counts_cache_key(ids, location_ids)
    cached = cache.get(cache_key)
    if cached is not None:
        return dict(cached)

    wanted = set(ids)
    out: Dict[str, int] = {}
    for count in client.batch_retrieve_inventory_counts(ids, location_ids):
        object_id = count.get("catalog_object_id")
        if object_id not in wanted or count.get("state") != INVENTORY_STATES["IN_STOCK"]:
            continue
        out[object_id] = out.get(object_id, 0) + _as_int(count.get("quantity"))

    cache.set(cache_key, out)
    return dict(out)


def counts_by_item(client: SquareClient, cache: BoundedCache, items: List[Dict[str, str]]) -> Dict[str, int]:
    """Roll variation counts up to their catalog item ids."""
    counts = retrieve_counts(client, cache, [i["variation_id"] for i in items])
    out: Dict[str, int] = {}
    for i in items:
        out[i["catalog_item_id"]] = out.get(i["catalog_item_id"], 0) + counts.get(i["variation_id"], 0)
    return out


def adjust_inventory(
    client: SquareClient,
    cache: BoundedCache,
    variation_id: str,
    quantity,
    from_state: str = INVENTORY_STATES["IN_STOCK"],
    to_state: str = INVENTORY_STATES["SOLD"],
    location_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    location = _resolve_location(client, location_id)
    change = {
        "type": "ADJUSTMENT",
        "adjustment": {
            "catalog_object_id": variation_id,
            "location_id": location,
            "from_state": from_state,
            "to_state": to_state,
            "quantity": _format_quantity(quantity),
            "occurred_at": _now_iso(),
        },
    }
    try:
        counts = client.batch_change_inventory([change])
    finally:
        cache.clear()
    logger.info("Adjusted %s by %s (%s -> %s)", variation_id, quantity, from_state, to_state)
    return counts


def set_inventory_level(
    client: SquareClient,
    cache: BoundedCache,
    variation_id: str,
    quantity: int,
    location_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Move a variation's IN_STOCK count to `quantity`.

    Increases are recorded as NONE -> IN_STOCK adjustments, decreases as
    IN_STOCK -> WASTE, matching how the dashboard has always written stock.
    """
    location = _resolve_location(client, location_id)
    counts = client.retrieve_inventory_count(variation_id, [location])
    current = sum(
        _as_int(c.get("quantity"))
        for c in counts
        if c.get("state") == INVENTORY_STATES["IN_STOCK"] and c.get("location_id") in (None, location)
    )

    difference = int(quantity) - current
    if difference > 0:
        adjust_inventory(client, cache, variation_id, difference, INVENTORY_STATES["NONE"], INVENTORY_STATES["IN_STOCK"], location)
    elif difference < 0:
        adjust_inventory(client, cache, variation_id, abs(difference), INVENTORY_STATES["IN_STOCK"], INVENTORY_STATES["WASTE"], location)

    cache.clear()
    return {
        "variation_id": variation_id,
        "previous_quantity": current,
        "quantity": int(quantity),
        "change": difference,
    }


def batch_set_inventory_levels(
    client: SquareClient,
    cache: BoundedCache,
    items: List[Dict[str, Any]],
    location_id: Optional[str] = None,
) -> int:
    location = _resolve_location(client, location_id)
    occurred_at = _now_iso()
    changed = 0
    # earlier chunks are already saved if a later one fails
    try:
        for batch in chunked(items, client.batch_size):
            client.batch_change_inventory([
                {
                    "type": "PHYSICAL_COUNT",
                    "physical_count": {
                        "catalog_object_id": item["variation_id"],
                        "location_id": location,
                        "state": INVENTORY_STATES["IN_STOCK"],
                        "quantity": _format_quantity(item["quantity"]),
                        "occurred_at": occurred_at,
                    },
                }
                for item in batch
            ])
            changed += len(batch)
    finally:
        cache.clear()
    logger.info("Set %d inventory level(s) at %s", changed, location)
    return changed
