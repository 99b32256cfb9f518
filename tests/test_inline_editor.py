import asyncio
import threading
from datetime import datetime, timezone

import pytest

from client import messages
from client.inline_editor import InventoryListEditor
from conftest import make_item
from schemas.inventory import InventoryItemCreate

LATER = datetime(2026, 2, 1, tzinfo=timezone.utc).isoformat()


class FakeApi:
    def __init__(self):
        self.updates = []
        self.deletes = []
        self.update_response = None
        self.update_error = None
        self.delete_response = {"success": True, "message": "Inventory item deleted successfully"}
        self.page = {"success": True, "data": [], "pagination": None}

    def update_item(self, item_id, body):
        self.updates.append((item_id, body))
        if self.update_error is not None:
            raise self.update_error
        if self.update_response is not None:
            return self.update_response
        return {"success": True, "data": {**body, "id": item_id, "lastUpdated": LATER}}

    def delete_item(self, item_id):
        self.deletes.append(item_id)
        return self.delete_response

    def create_item(self, payload):
        data = payload.model_dump(mode="json", by_alias=True)
        return {"success": True, "data": make_item(**data).to_wire()}

    def fetch_inventory(self, page, page_size):
        return self.page


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def alerts():
    return []


@pytest.fixture
def editor(api, alerts):
    ed = InventoryListEditor(api, alert=alerts.append)
    ed.set_items([
        make_item(name="Tomatoes", quantity=10, price=2.5, minStock=5),
        make_item(name="Tuna", category="Canned", unit="cans", quantity=3, price=1.85, minStock=10, supplier="Ocean Pantry"),
    ])
    return ed


def first_id(editor):
    return str(editor.items[0].id)


async def test_blur_without_change_sends_nothing(editor, api):
    assert await editor.on_blur(first_id(editor)) is False
    assert api.updates == []


async def test_enter_commits_changed_quantity(editor, api):
    item_id = first_id(editor)
    editor.edit(item_id, "quantity", "7")

    assert await editor.on_key(item_id, "Enter")

    sent_id, body = api.updates[0]
    assert sent_id == item_id
    assert body["quantity"] == 7
    assert body["name"] == "Tomatoes"
    assert "id" not in body
    assert editor.get_item(item_id).quantity == 7
    assert editor.get_item(item_id).last_updated.isoformat() == LATER


async def test_other_keys_do_not_commit(editor, api):
    item_id = first_id(editor)
    editor.edit(item_id, "price", "3")

    assert await editor.on_key(item_id, "Tab") is False
    assert api.updates == []


async def test_failed_save_reverts_and_alerts(editor, api, alerts):
    item_id = first_id(editor)
    api.update_error = RuntimeError("network down")
    editor.edit(item_id, "quantity", "1")

    assert await editor.commit(item_id) is False

    assert editor.value(item_id).quantity == 10
    assert alerts == [messages.INLINE_UPDATE_FAILED]
    assert not editor.is_saving(item_id)


async def test_unsuccessful_envelope_also_reverts(editor, api, alerts):
    item_id = first_id(editor)
    api.update_response = {"success": False, "error": "Item not found"}
    editor.edit(item_id, "price", "9.99")

    assert await editor.commit(item_id) is False

    assert editor.value(item_id).price == 2.5
    assert alerts == [messages.INLINE_UPDATE_FAILED]


def test_edits_clamp_to_zero(editor):
    item_id = first_id(editor)
    editor.edit(item_id, "quantity", "-5")
    editor.edit(item_id, "price", "junk")

    assert editor.value(item_id).quantity == 0
    assert editor.value(item_id).price == 0


def test_only_quantity_and_price_are_inline(editor):
    with pytest.raises(ValueError):
        editor.edit(first_id(editor), "name", "x")


def test_low_stock_follows_shadow_value(editor):
    item_id = first_id(editor)
    assert not editor.is_low_stock(item_id)

    editor.edit(item_id, "quantity", "5")
    assert editor.is_low_stock(item_id)
    assert editor.row_total(item_id) == pytest.approx(12.5)


async def test_row_is_locked_while_saving(editor, api):
    item_id = first_id(editor)
    started = threading.Event()
    release = threading.Event()
    original = api.update_item

    def slow_update(i, body):
        started.set()
        release.wait(5)
        return original(i, body)

    api.update_item = slow_update
    editor.edit(item_id, "quantity", "8")
    task = asyncio.create_task(editor.commit(item_id))
    await asyncio.to_thread(started.wait, 5)

    assert editor.is_saving(item_id)
    assert editor.edit(item_id, "quantity", "99") is False
    assert await editor.commit(item_id) is False
    # other rows stay editable
    assert editor.edit(str(editor.items[1].id), "quantity", "4")

    release.set()
    assert await task
    assert not editor.is_saving(item_id)
    assert editor.value(item_id).quantity == 8


def test_set_items_keeps_shadow_only_for_unchanged_rows(editor):
    tomatoes, tuna = editor.items
    editor.edit(str(tomatoes.id), "quantity", "1")
    editor.edit(str(tuna.id), "quantity", "1")

    refreshed_tuna = tuna.model_copy(update={"quantity": 20, "last_updated": datetime.fromisoformat(LATER)})
    editor.set_items([tomatoes, refreshed_tuna])

    assert editor.value(tomatoes.id).quantity == 1
    assert editor.value(tuna.id).quantity == 20


async def test_refresh_replaces_list(editor, api):
    fresh = make_item(name="Flour", category="Baking")
    editor.edit(first_id(editor), "quantity", "1")
    api.page = {
        "success": True,
        "data": [fresh.to_wire()],
        "pagination": {"page": 1, "pageSize": 50, "totalItems": 1, "totalPages": 1},
    }

    await editor.refresh()

    assert [it.name for it in editor.items] == ["Flour"]
    assert editor.pagination["totalItems"] == 1
    assert editor.value(fresh.id).quantity == fresh.quantity


async def test_delete_needs_confirmation(api, alerts):
    prompts = []
    answer = {"value": False}

    def confirm(message):
        prompts.append(message)
        return answer["value"]

    editor = InventoryListEditor(api, alert=alerts.append, confirm=confirm)
    item = make_item(name="Napkins")
    editor.set_items([item])

    assert await editor.delete(item.id) is None
    assert api.deletes == []
    assert prompts == ["Are you sure you want to delete Napkins?"]

    answer["value"] = True
    envelope = await editor.delete(item.id)

    assert envelope["success"]
    assert editor.items == []


async def test_failed_delete_keeps_row_and_alerts(editor, api, alerts):
    api.delete_response = {"success": False, "error": "Item not found"}
    item_id = first_id(editor)

    await editor.delete(item_id)

    assert editor.get_item(item_id)
    assert alerts == ["Item not found"]


async def test_create_prepends_new_item(editor):
    envelope = await editor.create(InventoryItemCreate(name="Flour", category="Baking", quantity=25))

    assert envelope["success"]
    assert editor.items[0].name == "Flour"
    assert len(editor.items) == 3


def test_filters_and_summary(editor):
    assert editor.categories() == ["all", "Vegetables", "Canned"]

    editor.search_term = "ocean"
    assert [it.name for it in editor.filtered_items()] == ["Tuna"]

    editor.search_term = ""
    editor.category_filter = "Vegetables"
    assert [it.name for it in editor.filtered_items()] == ["Tomatoes"]

    editor.category_filter = "all"
    editor.low_stock_only = True
    assert [it.name for it in editor.filtered_items()] == ["Tuna"]
    assert editor.summary() == {"showing": 1, "total_quantity": 3.0, "total_value": 5.55}


async def test_save_finishing_after_refresh_does_not_resurrect_row(editor, api):
    item_id = first_id(editor)
    started = threading.Event()
    release = threading.Event()
    original = api.update_item

    def slow_update(i, body):
        started.set()
        release.wait(5)
        return original(i, body)

    api.update_item = slow_update
    editor.edit(item_id, "quantity", "8")
    task = asyncio.create_task(editor.commit(item_id))
    await asyncio.to_thread(started.wait, 5)

    fresh = make_item(name="Flour", category="Baking")
    api.page = {"success": True, "data": [fresh.to_wire()], "pagination": None}
    await editor.refresh()

    release.set()
    await task

    assert [str(it.id) for it in editor.items] == [str(fresh.id)]
    with pytest.raises(KeyError):
        editor.value(item_id)
