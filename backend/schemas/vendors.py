from pydantic import BaseModel
from typing import List, Optional


class VendorRead(BaseModel):
    id: str
    name: str
    status: Optional[str] = None


class VendorItem(BaseModel):
    item_id: str
    item_name: str
    variation_id: Optional[str] = None
    sku: str = ""


class VendorWithItems(BaseModel):
    id: str
    name: str
    items: List[VendorItem] = []


class LocationRead(BaseModel):
    id: str
    name: str
