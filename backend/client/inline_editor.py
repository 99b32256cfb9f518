from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Set, Union

from client import messages
from client.api import InventoryApiClient
from core.units import parse_number
from schemas.inventory import InventoryItem, InventoryItemCreate

logger = logging.getLogger(__name__)

Alert = Callable[[str], None]
Confirm = Callable[[str], bool]

ALL_CATEGORIES = "all"


@dataclass
class InlineValue:
    quantity: Union[int, float]
    price: float


def _alert_to_log(message: str) -> None:
    logger.warning(message)


class InventoryListEditor:
    """
    Inventory table state with inline quantity/price edits.

    Each row keeps a shadow value that the user edits; saving sends the row
    with its new quantity/price and swaps in the server's copy on success.
    A failed save puts the shadow back to the last server values and raises
    the blocking alert. Rows save independently of each other.
    """

    def __init__(
        self,
        api: InventoryApiClient,
        *,
        alert: Alert = _alert_to_log,
        confirm: Optional[Confirm] = None,
    ):
        self.api = api
        self.alert = alert
        self.confirm = confirm

        self.items: List[InventoryItem] = []
        self._shadow: Dict[str, InlineValue] = {}
        self._saving: Set[str] = set()

        self.search_term = ""
        self.category_filter = ALL_CATEGORIES
        self.low_stock_only = False
        self.pagination: Optional[Dict[str, Any]] = None

    # ----------------------------
    # Authoritative items
    # ----------------------------

    def set_items(self, items: List[InventoryItem]) -> None:
        """
        Replace the authoritative list. In-progress shadows survive for rows
        whose server record is unchanged; rows with a new server version are
        reseeded from it.
        """
        previous = {str(it.id): it for it in self.items}
        shadow: Dict[str, InlineValue] = {}
        for item in items:
            key = str(item.id)
            old = previous.get(key)
            if old is not None and old.last_updated == item.last_updated and key in self._shadow:
                shadow[key] = self._shadow[key]
            else:
                shadow[key] = InlineValue(quantity=item.quantity, price=item.price)
        self.items = list(items)
        self._shadow = shadow
        self._saving &= set(shadow)

    def get_item(self, item_id) -> InventoryItem:
        key = str(item_id)
        for item in self.items:
            if str(item.id) == key:
                return item
        raise KeyError(key)

    def _replace_item(self, updated: InventoryItem) -> None:
        key = str(updated.id)
        # The list may have been refreshed while the save was in flight.
        if not any(str(it.id) == key for it in self.items):
            return
        self.items = [updated if str(it.id) == key else it for it in self.items]
        self._shadow[key] = InlineValue(quantity=updated.quantity, price=updated.price)

    async def refresh(self, page: int = 1, page_size: int = 50) -> Dict[str, Any]:
        envelope = await asyncio.to_thread(self.api.fetch_inventory, page, page_size)
        if envelope.get("success"):
            self.pagination = envelope.get("pagination")
            # A fresh fetch replaces the list wholesale.
            self.items = []
            self._shadow = {}
            self.set_items([InventoryItem.model_validate(d) for d in envelope.get("data") or []])
        return envelope

    # ----------------------------
    # Inline edits
    # ----------------------------

    def value(self, item_id) -> InlineValue:
        key = str(item_id)
        if key not in self._shadow:
            item = self.get_item(key)
            self._shadow[key] = InlineValue(quantity=item.quantity, price=item.price)
        return self._shadow[key]

    def is_saving(self, item_id) -> bool:
        return str(item_id) in self._saving

    def is_low_stock(self, item_id) -> bool:
        return self.value(item_id).quantity <= self.get_item(item_id).min_stock

    def row_total(self, item_id) -> float:
        v = self.value(item_id)
        return float(v.quantity) * float(v.price)

    def edit(self, item_id, field: str, raw) -> bool:
        """Update a row's shadow value. Ignored while that row is saving."""
        if field not in ("quantity", "price"):
            raise ValueError(f"Inline edits only cover quantity and price, not {field!r}")
        if self.is_saving(item_id):
            return False
        setattr(self.value(item_id), field, max(0.0, parse_number(raw)))
        return True

    async def on_key(self, item_id, key: str) -> bool:
        if key == "Enter":
            return await self.commit(item_id)
        return False

    async def on_blur(self, item_id) -> bool:
        return await self.commit(item_id)

    async def commit(self, item_id) -> bool:
        """
        Save the row if its shadow differs from the server values.
        Returns True when a request was sent and succeeded.
        """
        key = str(item_id)
        if key in self._saving:
            return False
        item = self.get_item(key)
        current = self.value(key)
        if current.quantity == item.quantity and current.price == item.price:
            return False

        body = item.editable_fields()
        body["quantity"] = current.quantity
        body["price"] = current.price

        self._saving.add(key)
        try:
            envelope = await asyncio.to_thread(self.api.update_item, key, body)
            if not envelope.get("success"):
                raise RuntimeError(envelope.get("error") or "update failed")
            self._replace_item(InventoryItem.model_validate(envelope["data"]))
            return True
        except Exception as e:
            logger.error("Inline update of %s failed: %r", key, e)
            # Back to the pre-edit server values, unless a refresh dropped the row.
            if key in self._shadow:
                self._shadow[key] = InlineValue(quantity=item.quantity, price=item.price)
            self.alert(messages.INLINE_UPDATE_FAILED)
            return False
        finally:
            self._saving.discard(key)

    # ----------------------------
    # Create / full update / delete
    # ----------------------------

    async def create(self, payload: InventoryItemCreate) -> Dict[str, Any]:
        envelope = await asyncio.to_thread(self.api.create_item, payload)
        if envelope.get("success"):
            created = InventoryItem.model_validate(envelope["data"])
            self.items.insert(0, created)
            self._shadow[str(created.id)] = InlineValue(quantity=created.quantity, price=created.price)
        return envelope

    async def update(self, item: InventoryItem) -> Dict[str, Any]:
        envelope = await asyncio.to_thread(self.api.update_item, str(item.id), item.editable_fields())
        if envelope.get("success"):
            self._replace_item(InventoryItem.model_validate(envelope["data"]))
        return envelope

    async def delete(self, item_id) -> Optional[Dict[str, Any]]:
        """Delete after confirmation. Returns None when the user declines."""
        key = str(item_id)
        item = self.get_item(key)
        if self.confirm is not None and not self.confirm(messages.CONFIRM_DELETE.format(name=item.name)):
            return None
        envelope = await asyncio.to_thread(self.api.delete_item, key)
        if envelope.get("success"):
            self.items = [it for it in self.items if str(it.id) != key]
            self._shadow.pop(key, None)
            self._saving.discard(key)
        else:
            self.alert(envelope.get("error") or "Failed to delete item")
        return envelope

    # ----------------------------
    # Filters and summary
    # ----------------------------

    def categories(self) -> List[str]:
        seen: Dict[str, None] = {}
        for item in self.items:
            seen.setdefault(item.category, None)
        return [ALL_CATEGORIES, *seen]

    def filtered_items(self) -> List[InventoryItem]:
        term = self.search_term.strip().lower()
        out = []
        for item in self.items:
            if term and term not in item.name.lower() and term not in item.supplier.lower():
                continue
            if self.category_filter != ALL_CATEGORIES and item.category != self.category_filter:
                continue
            if self.low_stock_only and not item.is_low_stock:
                continue
            out.append(item)
        return out

    def summary(self) -> Dict[str, float]:
        items = self.filtered_items()
        return {
            "showing": len(items),
            "total_quantity": sum(float(it.quantity) for it in items),
            "total_value": round(sum(float(it.quantity) * float(it.price) for it in items), 2),
        }
