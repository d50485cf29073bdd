from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import pandas as pd

from steelops.data.interface import DataAccess
from steelops.data.models import (
    INVENTORY_STATUSES,
    InventoryFilters,
    InventoryItem,
    InventoryItemCreate,
    InventoryItemUpdate,
)
from steelops.errors import DataAccessError, DuplicateKeyError, FormError, NotAuthenticatedError
from steelops.logging import get_logger

logger = get_logger(__name__)


class InventoryService:
    """Reads and writes behind the inventory page.

    Writes require a signed-in user; pass ``user_id=None`` for anonymous
    visitors, who can still read.
    """

    def __init__(self, data_access: DataAccess, user_id: Optional[str] = None) -> None:
        self.data_access = data_access
        self.user_id = user_id

    def list_items(self, filters: Optional[InventoryFilters] = None) -> List[InventoryItem]:
        return self.data_access.list_inventory(filters)

    def add_item(self, item: InventoryItemCreate) -> InventoryItem:
        if not self.user_id:
            raise NotAuthenticatedError("You must be logged in to add inventory items.")
        try:
            created = self.data_access.add_inventory_item(item)
        except DuplicateKeyError as e:
            raise DuplicateKeyError("Item ID already exists. Please use a unique Item ID.", e.constraint) from e
        except DataAccessError as e:
            logger.error(f"Error adding inventory item: {e}")
            raise DataAccessError(f"Failed to add inventory item: {e.message}", e.code, e.constraint) from e
        logger.info(f"Inventory item {created.item_id} added")
        return created

    def update_item(self, row_id: str, quantity: int, status: str) -> InventoryItem:
        if not self.user_id:
            raise NotAuthenticatedError("You must be logged in to update inventory.")
        try:
            return self.data_access.update_inventory_item(row_id, InventoryItemUpdate(quantity=quantity, status=status))
        except DataAccessError as e:
            logger.error(f"Error updating inventory: {e}")
            raise DataAccessError(f"Failed to update inventory: {e.message}", e.code, e.constraint) from e


def status_counts(items: List[InventoryItem]) -> Dict[str, int]:
    """Summary card values: total plus one count per stock status."""
    counts = {"Total Items": len(items)}
    for status in INVENTORY_STATUSES:
        counts[status] = sum(1 for item in items if item.status == status)
    return counts


def edited_rows(original: pd.DataFrame, edited: pd.DataFrame) -> List[Tuple[str, int, str]]:
    """(row id, quantity, status) for every row changed in the inventory editor."""
    blank = edited[edited["quantity"].isna()]
    if len(blank):
        raise FormError(f"Enter a quantity for {', '.join(blank['item_id'])} before saving.")
    changed = edited[(edited["quantity"] != original["quantity"]) | (edited["status"] != original["status"])]
    return [(row.id, int(row.quantity), row.status) for row in changed.itertuples(index=False)]
