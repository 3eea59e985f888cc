from fastapi import APIRouter, Depends
from typing import List

from core.cache import BoundedCache, get_cache
from core.catalog import list_category_names
from core.converters import category_options
from core.errors import success_envelope
from core.square_client import SquareClient, get_square_client
from schemas.catalog import CategoryOption
from schemas.common import ApiResponse

router = APIRouter()


@router.get("/", response_model=ApiResponse[List[CategoryOption]])
def list_categories(
    client: SquareClient = Depends(get_square_client),
    cache: BoundedCache = Depends(get_cache),
):
    names = list_category_names(client, cache)
    return success_envelope(category_options(names))
