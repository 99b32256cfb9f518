import pytest

from client.stats import inventory_stats
from conftest import make_item


def test_dashboard_stats():
    items = [
        make_item(name="Tomatoes", category="Vegetables", quantity=10, price=2.5, minStock=5),
        make_item(name="Onions", category="Vegetables", quantity=2, price=1, minStock=4),
        make_item(name="Olive Oil", category="Pantry", unit="liters", quantity=3, price=9.9, minStock=4),
    ]

    stats = inventory_stats(items)

    assert stats["total_items"] == 3
    assert [it.name for it in stats["low_stock_items"]] == ["Onions", "Olive Oil"]
    assert stats["low_stock_count"] == 2
    assert stats["total_value"] == pytest.approx(56.7)
    assert stats["category_count"] == 2
    assert stats["categories"] == [
        {"name": "Pantry", "count": 1, "value": 29.7},
        {"name": "Vegetables", "count": 2, "value": 27.0},
    ]


def test_empty_inventory():
    stats = inventory_stats([])
    assert stats["total_items"] == 0
    assert stats["total_value"] == 0
    assert stats["categories"] == []
