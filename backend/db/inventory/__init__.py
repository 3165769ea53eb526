"""
Inventory models.

- InventoryCategory (grouping for items)
- Location (place that can hold items)
- InventoryItem (a single tracked asset, held by a location and/or a person)
- InventoryMovement (append-only record of a holder change)
"""
