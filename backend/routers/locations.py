from fastapi import APIRouter, Depends
from typing import List

from core.errors import success_envelope
from core.square_client import SquareClient, get_square_client
from schemas.common import ApiResponse
from schemas.vendors import LocationRead

router = APIRouter()


@router.get("/", response_model=ApiResponse[List[LocationRead]])
def list_locations(client: SquareClient = Depends(get_square_client)):
    """Active store locations (inventory is tracked per location)."""
    locations = [
        {"id": loc["id"], "name": loc.get("name") or loc["id"]}
        for loc in client.list_locations()
        if loc.get("id") and loc.get("status") == "ACTIVE"
    ]
    return success_envelope(locations)
