"""
Draft state for the add/edit item form.

Coercion rules:
- quantity / minStock / price never go below 0; garbage input becomes 0.
- quantity / minStock are floored to whole numbers while the unit is a
  counted unit (pieces, boxes, cans, bottles). Switching to such a unit
  floors the held values; switching back does not restore the fractions.

Lookup merge is last-write-wins: any non-None name / category / brand from a
barcode lookup replaces the form's name / category / supplier, even if the
user already typed something there.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Optional, Union

from client import messages
from client.lookup import ProductLookupClient
from client.scanner import BarcodeScanner, PermissionDenied, ScannerError, is_secure_origin
from core.units import DEFAULT_UNIT, UNITS, coerce_amount, coerce_price, parse_number
from schemas.inventory import InventoryItem, InventoryItemCreate
from schemas.upc import LookupResult, LookupSuccess

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = ("quantity", "min_stock", "price")
TEXT_FIELDS = ("name", "category", "supplier")
REQUIRED_FIELDS = ("name", "category", "supplier")


class FormValidationError(ValueError):
    pass


class FormStateError(RuntimeError):
    pass


@dataclass
class ItemDraft:
    name: str = ""
    category: str = ""
    quantity: Union[int, float] = 0
    unit: str = DEFAULT_UNIT
    min_stock: Union[int, float] = 0
    price: float = 0
    supplier: str = ""

    @classmethod
    def from_item(cls, item: InventoryItem) -> "ItemDraft":
        return cls(
            name=item.name,
            category=item.category,
            quantity=item.quantity,
            unit=item.unit,
            min_stock=item.min_stock,
            price=item.price,
            supplier=item.supplier,
        )


class ItemFormController:
    def __init__(
        self,
        item: Optional[InventoryItem] = None,
        *,
        lookup_client: Optional[ProductLookupClient] = None,
    ):
        self.item = item
        self.lookup_client = lookup_client
        self.draft = ItemDraft.from_item(item) if item else ItemDraft()

        self.upc_value = ""
        self.lookup_loading = False
        self.lookup_error: Optional[str] = None
        self.camera_notice: Optional[str] = None

    @property
    def editing(self) -> bool:
        return self.item is not None

    # ----------------------------
    # Field edits
    # ----------------------------

    def change(self, field: str, value) -> None:
        if field == "unit":
            self.set_unit(value)
        elif field in ("quantity", "min_stock"):
            setattr(self.draft, field, coerce_amount(parse_number(value), self.draft.unit))
        elif field == "price":
            self.draft.price = coerce_price(parse_number(value))
        elif field in TEXT_FIELDS:
            setattr(self.draft, field, "" if value is None else str(value))
        else:
            raise FormValidationError(f"Unknown field {field!r}")

    def set_unit(self, unit: str) -> None:
        if unit not in UNITS:
            raise FormValidationError(f"Unknown unit {unit!r}")
        self.draft.unit = unit
        self.draft.quantity = coerce_amount(self.draft.quantity, unit)
        self.draft.min_stock = coerce_amount(self.draft.min_stock, unit)

    # ----------------------------
    # Barcode lookup
    # ----------------------------

    def apply_lookup(self, result: LookupResult) -> bool:
        """Merge a successful lookup into the draft. Returns False for failures."""
        if not isinstance(result, LookupSuccess):
            return False
        data = result.data
        if data.name is not None:
            self.draft.name = data.name
        if data.category is not None:
            self.draft.category = data.category
        if data.brand is not None:
            self.draft.supplier = data.brand
        return True

    async def lookup(self, code: Optional[str] = None) -> Optional[LookupResult]:
        upc = (code if code is not None else self.upc_value).strip()
        if not upc:
            return None
        if self.lookup_client is None:
            raise FormStateError("No lookup client configured")

        self.lookup_error = None
        self.lookup_loading = True
        try:
            result = await asyncio.to_thread(self.lookup_client.lookup, upc)
        finally:
            self.lookup_loading = False

        if not self.apply_lookup(result):
            self.lookup_error = result.error or messages.BARCODE_NOT_FOUND
        return result

    async def scan(self, scanner: BarcodeScanner, device_id: Optional[str] = None) -> Optional[str]:
        """Scan one barcode, fill the UPC field, then look it up."""
        self.lookup_error = None
        if not is_secure_origin(scanner.origin):
            self.camera_notice = messages.CAMERA_INSECURE
            return None

        try:
            async with scanner.session(device_id) as s:
                code = await s.read_code()
        except PermissionDenied as e:
            logger.info("Scanner error: %s", e)
            self.lookup_error = messages.CAMERA_DENIED
            return None
        except ScannerError as e:
            logger.info("Scanner error: %s", e)
            self.lookup_error = messages.CAMERA_UNAVAILABLE
            return None

        self.upc_value = code
        await self.lookup(code)
        return code

    # ----------------------------
    # Submit / cancel
    # ----------------------------

    def missing_fields(self) -> list[str]:
        return [f for f in REQUIRED_FIELDS if not str(getattr(self.draft, f) or "").strip()]

    def submit(self) -> Union[InventoryItem, InventoryItemCreate]:
        missing = self.missing_fields()
        if missing:
            raise FormValidationError(messages.REQUIRED_FIELD.format(field=missing[0]))

        fields = asdict(self.draft)
        if self.item is not None:
            out: Union[InventoryItem, InventoryItemCreate] = self.item.model_copy(update=fields)
        else:
            out = InventoryItemCreate(**fields)

        self.reset()
        return out

    def cancel(self) -> bool:
        if not self.editing:
            raise FormStateError("Cancel is only available while editing an item")
        self.reset()
        return True

    def reset(self) -> None:
        self.item = None
        self.draft = ItemDraft()
        self.upc_value = ""
        self.lookup_error = None
        self.camera_notice = None
