from typing import Dict

from fastapi import APIRouter, Depends

from core.cache import BoundedCache, get_cache
from core.errors import success_envelope
from core.inventory import (
    adjust_inventory,
    batch_set_inventory_levels,
    counts_by_item,
    retrieve_counts,
    set_inventory_level,
)
from core.square_client import SquareClient, get_square_client
from schemas.common import ApiResponse
from schemas.inventory import (
    InventoryAdjustment,
    InventoryBatchResult,
    InventoryBatchUpdate,
    InventoryCountRead,
    InventoryLevelRead,
    InventoryLevelUpdate,
    InventoryQueryRequest,
)

router = APIRouter()


@router.post("/counts", response_model=ApiResponse[Dict[str, int]])
def query_inventory_counts(
    payload: InventoryQueryRequest,
    client: SquareClient = Depends(get_square_client),
    cache: BoundedCache = Depends(get_cache),
):
    """IN_STOCK quantity per catalog item id, summed over the requested variations."""
    items = [i.model_dump() for i in payload.items]
    return success_envelope(counts_by_item(client, cache, items))


@router.post("/adjust", response_model=ApiResponse[Dict])
def create_adjustment(
    payload: InventoryAdjustment,
    client: SquareClient = Depends(get_square_client),
    cache: BoundedCache = Depends(get_cache),
):
    adjust_inventory(
        client,
        cache,
        payload.variation_id,
        payload.quantity,
        from_state=payload.from_state,
        to_state=payload.to_state,
        location_id=payload.location_id,
    )
    return success_envelope({
        "variation_id": payload.variation_id,
        "quantity": payload.quantity,
        "from_state": payload.from_state,
        "to_state": payload.to_state,
    })


@router.post("/batch", response_model=ApiResponse[InventoryBatchResult])
def batch_update_levels(
    payload: InventoryBatchUpdate,
    client: SquareClient = Depends(get_square_client),
    cache: BoundedCache = Depends(get_cache),
):
    items = [i.model_dump() for i in payload.items]
    updated = batch_set_inventory_levels(client, cache, items, location_id=payload.location_id)
    return success_envelope({"updated": updated})


@router.get("/{variation_id}", response_model=ApiResponse[InventoryCountRead])
def get_inventory_count(
    variation_id: str,
    client: SquareClient = Depends(get_square_client),
    cache: BoundedCache = Depends(get_cache),
):
    counts = retrieve_counts(client, cache, [variation_id])
    return success_envelope({"variation_id": variation_id, "quantity": counts.get(variation_id, 0)})


@router.put("/{variation_id}", response_model=ApiResponse[InventoryLevelRead])
def update_inventory_level(
    variation_id: str,
    payload: InventoryLevelUpdate,
    client: SquareClient = Depends(get_square_client),
    cache: BoundedCache = Depends(get_cache),
):
    result = set_inventory_level(client, cache, variation_id, payload.quantity, location_id=payload.location_id)
    return success_envelope(result)
