from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from core.cache import BoundedCache, get_cache
from core.catalog import vendors_from_catalog
from core.errors import success_envelope
from core.square_client import SquareClient, get_square_client
from schemas.common import ApiResponse
from schemas.vendors import VendorRead, VendorWithItems

router = APIRouter()


def _vendor_out(v: dict) -> dict:
    return {"id": v["id"], "name": (v.get("name") or "").strip() or v["id"], "status": v.get("status")}


@router.get("/", response_model=ApiResponse[List[VendorRead]])
def list_vendors(
    client: SquareClient = Depends(get_square_client),
    cache: BoundedCache = Depends(get_cache),
):
    vendors = [v for v in client.search_vendors(["ACTIVE"]) if v.get("id")]
    for v in vendors:
        if (v.get("name") or "").strip():
            cache.set(f"VENDOR:{v['id']}", v["name"].strip())
    out = [_vendor_out(v) for v in vendors]
    return success_envelope(sorted(out, key=lambda v: v["name"].lower()))


@router.get("/catalog", response_model=ApiResponse[List[VendorWithItems]])
def list_catalog_vendors(
    client: SquareClient = Depends(get_square_client),
    cache: BoundedCache = Depends(get_cache),
):
    """Vendors as seen from the catalog: every vendor referenced by a variation, with its items."""
    return success_envelope(vendors_from_catalog(client, cache))


@router.get("/{vendor_id}", response_model=ApiResponse[VendorRead])
def get_vendor(
    vendor_id: str,
    client: SquareClient = Depends(get_square_client),
):
    vendor = client.retrieve_vendor(vendor_id)
    if not vendor:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor not found")
    return success_envelope(_vendor_out(vendor))
