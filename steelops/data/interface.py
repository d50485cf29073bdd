# steelops/data/interface.py
from __future__ import annotations

from typing import List, Optional, Protocol

from .models import (
    # Filter classes
    InventoryFilters,
    ProductionFilters,
    MaterialRequestFilters,
    VendorOrderFilters,
    # Response models
    UserProfile,
    InventoryItem,
    ProductionRecord,
    MaterialRequest,
    VendorOrder,
    # Write payloads
    UserProfileCreate,
    InventoryItemCreate,
    InventoryItemUpdate,
    ProductionRecordCreate,
    MaterialRequestInsert,
    VendorOrderCreate,
)


# ---- Data access protocol ----

class DataAccess(Protocol):
    """
    Backend-agnostic contract for the dashboard pages.

    - Reads return validated response models, newest first unless noted.
    - Writes raise DuplicateKeyError on unique-constraint violations and
      DataAccessError for any other backend failure.
    - Implementations MUST NOT cache results: every page render issues a
      fresh read so edits from other sessions show up.
    """

    # User profiles

    def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        """Get the profile row for an auth user, or None."""
        ...

    def find_user(self, email: str, employee_id: str) -> Optional[UserProfile]:
        """Find a profile matching either the email or the employee id."""
        ...

    def create_user_profile(self, profile: UserProfileCreate) -> UserProfile:
        """Insert the profile row created at signup."""
        ...

    # Session audit procedures

    def log_user_login(self, user_id: str, role: str, user_agent: Optional[str] = None) -> str:
        """Record a login and return the new audit session id."""
        ...

    def log_user_logout(self, session_id: str) -> None:
        """Close the audit session opened by log_user_login."""
        ...

    # Inventory

    def list_inventory(self, filters: Optional[InventoryFilters] = None) -> List[InventoryItem]:
        """List inventory items ordered by created_at descending."""
        ...

    def add_inventory_item(self, item: InventoryItemCreate) -> InventoryItem:
        """Insert a new inventory item. item_id is unique."""
        ...

    def update_inventory_item(self, row_id: str, update: InventoryItemUpdate) -> InventoryItem:
        """Update quantity and status of an item by row id."""
        ...

    # Production

    def list_production(self, filters: Optional[ProductionFilters] = None) -> List[ProductionRecord]:
        """List production records ordered by date descending, limited to filters.limit rows."""
        ...

    def add_production_record(self, record: ProductionRecordCreate) -> ProductionRecord:
        """Append a production record. (date, shift) is unique."""
        ...

    # Material requests

    def list_material_requests(self, filters: Optional[MaterialRequestFilters] = None) -> List[MaterialRequest]:
        """List material requests ordered by created_at descending."""
        ...

    def add_material_request(self, request: MaterialRequestInsert) -> MaterialRequest:
        """Insert a material request. request_id is unique."""
        ...

    # Vendor orders

    def list_vendor_orders(self, filters: Optional[VendorOrderFilters] = None) -> List[VendorOrder]:
        """List vendor orders, optionally only those of one user."""
        ...

    def create_vendor_orders(self, orders: List[VendorOrderCreate]) -> List[VendorOrder]:
        """Insert all order lines of one checkout, all or nothing."""
        ...
