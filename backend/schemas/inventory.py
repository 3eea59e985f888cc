from typing import List, Literal, Optional

from pydantic import BaseModel, field_validator


InventoryState = Literal["NONE", "IN_STOCK", "SOLD", "WASTE", "UNLINKED_RETURN"]


def _strip_id(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("field is required")
    return v


class InventoryQueryItem(BaseModel):
    catalog_item_id: str
    variation_id: str

    @field_validator("catalog_item_id", "variation_id")
    @classmethod
    def _required(cls, v: str) -> str:
        return _strip_id(v)


class InventoryQueryRequest(BaseModel):
    items: List[InventoryQueryItem]


class InventoryLevelUpdate(BaseModel):
    quantity: int
    location_id: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def _quantity_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("quantity must be >= 0")
        return v


class InventoryBatchItem(BaseModel):
    variation_id: str
    quantity: int

    @field_validator("variation_id")
    @classmethod
    def _required(cls, v: str) -> str:
        return _strip_id(v)

    @field_validator("quantity")
    @classmethod
    def _quantity_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("quantity must be >= 0")
        return v


class InventoryBatchUpdate(BaseModel):
    items: List[InventoryBatchItem]
    location_id: Optional[str] = None

    @field_validator("items")
    @classmethod
    def _not_empty(cls, v: List[InventoryBatchItem]) -> List[InventoryBatchItem]:
        if not v:
            raise ValueError("items cannot be empty")
        return v


class InventoryAdjustment(BaseModel):
    variation_id: str
    quantity: float
    from_state: InventoryState = "IN_STOCK"
    to_state: InventoryState = "SOLD"
    location_id: Optional[str] = None

    @field_validator("variation_id")
    @classmethod
    def _required(cls, v: str) -> str:
        return _strip_id(v)

    @field_validator("quantity")
    @classmethod
    def _quantity_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("quantity must be > 0")
        return v


class InventoryCountRead(BaseModel):
    variation_id: str
    quantity: int


class InventoryLevelRead(BaseModel):
    variation_id: str
    previous_quantity: int
    quantity: int
    change: int


class InventoryBatchResult(BaseModel):
    updated: int
