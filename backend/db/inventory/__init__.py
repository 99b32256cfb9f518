"""
Per-user inventory records.

Models:
- InventoryItem (one stock line owned by one user; quantity, unit, min stock, price, supplier)
"""
