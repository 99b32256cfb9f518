from datetime import datetime
from typing import Any, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from core.units import coerce_amount, minor_to_price


InventoryUnit = Literal["kg", "g", "liters", "ml", "pieces", "boxes", "cans", "bottles"]
Amount = Union[int, float]


def _non_negative(v: Optional[float]) -> Optional[float]:
    if v is None:
        return None
    if v < 0:
        raise ValueError("must be >= 0")
    return v


class InventoryItemCreate(BaseModel):
    name: str
    category: str
    quantity: Amount = 0
    unit: InventoryUnit = "kg"
    min_stock: Amount = Field(0, alias="minStock")
    price: float = 0
    supplier: Optional[str] = ""

    class Config:
        populate_by_name = True

    @field_validator("name", "category")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("supplier")
    @classmethod
    def _strip_supplier(cls, v: Optional[str]) -> str:
        return (v or "").strip()

    @field_validator("quantity", "min_stock", "price")
    @classmethod
    def _non_negative(cls, v):
        return _non_negative(v)

    @model_validator(mode="after")
    def _match_unit(self):
        # whole numbers only for counted units
        self.quantity = coerce_amount(self.quantity, self.unit)
        self.min_stock = coerce_amount(self.min_stock, self.unit)
        return self


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    quantity: Optional[Amount] = None
    unit: Optional[InventoryUnit] = None
    min_stock: Optional[Amount] = Field(None, alias="minStock")
    price: Optional[float] = None
    supplier: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("name", "category")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = (v or "").strip()
        if not v:
            raise ValueError("cannot be empty")
        return v

    @field_validator("supplier")
    @classmethod
    def _strip_supplier_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip()

    @field_validator("quantity", "min_stock", "price")
    @classmethod
    def _non_negative_optional(cls, v):
        return _non_negative(v)


class InventoryItem(BaseModel):
    """Client-visible inventory record (camelCase on the wire)."""

    id: UUID
    name: str
    category: str
    quantity: Amount = 0
    unit: str
    min_stock: Amount = Field(0, alias="minStock")
    price: float = 0
    supplier: str = ""
    last_updated: Optional[datetime] = Field(None, alias="lastUpdated")

    class Config:
        populate_by_name = True

    @field_validator("supplier", mode="before")
    @classmethod
    def _supplier_default(cls, v):
        return v or ""

    @classmethod
    def from_model(cls, model: Any) -> "InventoryItem":
        unit = model.unit
        return cls(
            id=model.id,
            name=model.name,
            category=model.category,
            quantity=coerce_amount(model.quantity or 0, unit),
            unit=unit,
            min_stock=coerce_amount(model.min_stock or 0, unit),
            price=minor_to_price(model.price_minor),
            supplier=model.supplier or "",
            last_updated=model.updated_at,
        )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_stock

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def editable_fields(self) -> dict:
        """Body for a full update: everything except id and lastUpdated."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id", "last_updated"})


class Pagination(BaseModel):
    page: int
    page_size: int = Field(alias="pageSize")
    total_items: int = Field(alias="totalItems")
    total_pages: int = Field(alias="totalPages")

    class Config:
        populate_by_name = True
