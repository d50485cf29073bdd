from .data_filters import (
    InventoryFilters,
    ProductionFilters,
    MaterialRequestFilters,
    VendorOrderFilters,
)

from .users import UserProfile, UserProfileCreate
from .inventory import (
    InventoryItem, InventoryItemCreate, InventoryItemUpdate,
    INVENTORY_CATEGORIES, INVENTORY_STATUSES, INVENTORY_UNITS,
)
from .production import ProductionRecord, ProductionRecordCreate, SHIFTS
from .material_requests import (
    MaterialRequest, MaterialRequestCreate, MaterialRequestInsert,
    MATERIALS, PRIORITIES, REQUEST_STATUSES, REQUEST_UNITS,
)
from .vendor_orders import VendorOrder, VendorOrderCreate

__all__ = [
    # Filter classes
    "InventoryFilters",
    "ProductionFilters",
    "MaterialRequestFilters",
    "VendorOrderFilters",
    # Response models
    "UserProfile",
    "InventoryItem",
    "ProductionRecord",
    "MaterialRequest",
    "VendorOrder",
    # Write payloads
    "UserProfileCreate",
    "InventoryItemCreate",
    "InventoryItemUpdate",
    "ProductionRecordCreate",
    "MaterialRequestCreate",
    "MaterialRequestInsert",
    "VendorOrderCreate",
    # Form options
    "INVENTORY_CATEGORIES",
    "INVENTORY_STATUSES",
    "INVENTORY_UNITS",
    "SHIFTS",
    "MATERIALS",
    "PRIORITIES",
    "REQUEST_STATUSES",
    "REQUEST_UNITS",
]
