from typing import Dict, Iterable, List

from schemas.inventory import InventoryItem


def inventory_stats(items: Iterable[InventoryItem]) -> Dict:
    """Dashboard numbers: counts, low-stock list, total value, per-category value."""
    items = list(items)
    low_stock = [it for it in items if it.is_low_stock]
    by_category: Dict[str, Dict] = {}
    for it in items:
        row = by_category.setdefault(it.category, {"name": it.category, "count": 0, "value": 0.0})
        row["count"] += 1
        row["value"] += float(it.quantity) * float(it.price)

    categories: List[Dict] = sorted(by_category.values(), key=lambda r: r["value"], reverse=True)
    for row in categories:
        row["value"] = round(row["value"], 2)

    return {
        "total_items": len(items),
        "low_stock_items": low_stock,
        "low_stock_count": len(low_stock),
        "total_value": round(sum(float(it.quantity) * float(it.price) for it in items), 2),
        "category_count": len(categories),
        "categories": categories,
    }
