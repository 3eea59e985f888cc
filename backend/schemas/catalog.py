from typing import List, Literal, Optional

from pydantic import BaseModel, field_validator


Visibility = Literal["PUBLIC", "PICKUP_ONLY", "PRIVATE"]


class LocationOverride(BaseModel):
    location_id: str
    track_inventory: Optional[bool] = None
    sold_out: Optional[bool] = None


class ItemVariationRead(BaseModel):
    id: Optional[str] = None
    name: str = ""
    sku: str = ""
    price: float = 0.0
    currency: Optional[str] = None
    ordinal: Optional[int] = None
    measurement_unit: str = "unit"
    measurement_unit_id: str = ""
    vendor_id: str = ""
    vendor_name: str = "No Vendor"
    vendor_sku: Optional[str] = None
    cost: float = 0.0
    stockable: bool = False
    location_overrides: List[LocationOverride] = []
    quantity: int = 0


class CatalogItemRead(BaseModel):
    id: str
    name: str
    description: str = ""
    sku: str = ""
    price: float = 0.0
    categories: List[str] = []
    category_ids: List[str] = []
    vendor_id: str = ""
    vendor_name: str = "No Vendor"
    vendor_code: str = ""
    unit_type: str = "unit"
    measurement_unit_id: str = ""
    image_id: Optional[str] = None
    image_url: Optional[str] = None
    quantity: int = 0
    reorder_point: int = 0
    is_taxable: bool = False
    visibility: Visibility = "PRIVATE"
    track_inventory: bool = False
    version: Optional[int] = None
    updated_at: Optional[str] = None
    variations: List[ItemVariationRead] = []


class CategoryOption(BaseModel):
    value: str
    label: str


class VariationUpsert(BaseModel):
    id: Optional[str] = None
    version: Optional[int] = None
    name: str
    sku: Optional[str] = None
    price: float = 0.0
    currency: str = "USD"
    ordinal: Optional[int] = None
    measurement_unit_id: Optional[str] = None
    track_inventory: Optional[bool] = None
    inventory_alert_threshold: Optional[int] = None

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("price")
    @classmethod
    def _price_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("price must be >= 0")
        return v

    @field_validator("currency")
    @classmethod
    def _currency(cls, v: str) -> str:
        v = (v or "").strip().upper()
        if len(v) != 3:
            raise ValueError("currency must be a 3-letter code (e.g. USD)")
        return v


class CatalogItemUpsert(BaseModel):
    version: Optional[int] = None
    name: str
    description: Optional[str] = None
    category_ids: List[str] = []
    image_ids: List[str] = []
    is_taxable: bool = True
    available_online: Optional[bool] = None
    available_for_pickup: Optional[bool] = None
    variations: List[VariationUpsert]

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("variations")
    @classmethod
    def _at_least_one_variation(cls, v: List[VariationUpsert]) -> List[VariationUpsert]:
        if not v:
            raise ValueError("at least one variation is required")
        return v


class DeletedObjects(BaseModel):
    deleted_object_ids: List[str]
