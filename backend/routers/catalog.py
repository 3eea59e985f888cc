from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from core.cache import BoundedCache, get_cache
from core.catalog import (
    delete_catalog_item,
    load_catalog_item,
    load_catalog_items,
    upsert_catalog_item,
)
from core.errors import success_envelope
from core.square_client import SquareClient, get_square_client
from schemas.catalog import CatalogItemRead, CatalogItemUpsert, DeletedObjects
from schemas.common import ApiResponse

router = APIRouter()


@router.get("/", response_model=ApiResponse[List[CatalogItemRead]])
def list_catalog_items(
    include_inventory: bool = True,
    category: Optional[str] = None,
    client: SquareClient = Depends(get_square_client),
    cache: BoundedCache = Depends(get_cache),
):
    """
    List active catalog items with category, vendor, unit and image names joined in.

    - include_inventory joins IN_STOCK quantities onto items and variations.
    - category filters by category name (case-insensitive) or id.
    """
    items = load_catalog_items(client, cache, include_inventory=include_inventory, category=category)
    return success_envelope(items)


@router.get("/{item_id}", response_model=ApiResponse[CatalogItemRead])
def get_catalog_item(
    item_id: str,
    include_inventory: bool = True,
    client: SquareClient = Depends(get_square_client),
    cache: BoundedCache = Depends(get_cache),
):
    item = load_catalog_item(client, cache, item_id, include_inventory=include_inventory)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Catalog item {item_id} not found")
    return success_envelope(item)


@router.post("/", response_model=ApiResponse[CatalogItemRead], status_code=status.HTTP_201_CREATED)
def create_catalog_item(
    payload: CatalogItemUpsert,
    client: SquareClient = Depends(get_square_client),
    cache: BoundedCache = Depends(get_cache),
):
    item = upsert_catalog_item(client, cache, payload.model_dump())
    return success_envelope(item)


@router.put("/{item_id}", response_model=ApiResponse[CatalogItemRead])
def update_catalog_item(
    item_id: str,
    payload: CatalogItemUpsert,
    client: SquareClient = Depends(get_square_client),
    cache: BoundedCache = Depends(get_cache),
):
    """Update an existing item; Square rejects the write if `version` is stale."""
    item = upsert_catalog_item(client, cache, payload.model_dump(), item_id=item_id)
    return success_envelope(item)


@router.delete("/{item_id}", response_model=ApiResponse[DeletedObjects])
def remove_catalog_item(
    item_id: str,
    client: SquareClient = Depends(get_square_client),
    cache: BoundedCache = Depends(get_cache),
):
    deleted = delete_catalog_item(client, cache, item_id)
    return success_envelope({"deleted_object_ids": deleted})
