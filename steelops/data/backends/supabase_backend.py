from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

from steelops.errors import UNIQUE_VIOLATION, DataAccessError, DuplicateKeyError
from steelops.logging import get_logger
from ..interface import DataAccess
from ..models import (
    InventoryFilters, ProductionFilters, MaterialRequestFilters, VendorOrderFilters,
    UserProfile, InventoryItem, ProductionRecord, MaterialRequest, VendorOrder,
    UserProfileCreate, InventoryItemCreate, InventoryItemUpdate, ProductionRecordCreate,
    MaterialRequestInsert, VendorOrderCreate,
)

logger = get_logger(__name__)

_CONSTRAINT_RE = re.compile(r'unique constraint "([^"]+)"')


def _translate(err: APIError, action: str) -> DataAccessError:
    message = err.message or str(err)
    if err.code == UNIQUE_VIOLATION:
        match = _CONSTRAINT_RE.search(message)
        return DuplicateKeyError(message, constraint=match.group(1) if match else None)
    return DataAccessError(f"Failed to {action}: {message}", code=err.code)


def _quoted(value: str) -> str:
    """Double-quote a value inside an or=() filter so PostgREST reads it as one literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _filter_in(query, column: str, value):
    if isinstance(value, str):
        return query.eq(column, value)
    return query.in_(column, list(value))


class SupabaseDataAccess(DataAccess):
    """
    Supabase (PostgREST) implementation.
    - Every call executes a fresh request; nothing is cached client side.
    - Multi-row inserts are sent as one request, which PostgREST runs as a single
      statement, so a checkout either writes all of its order lines or none.
    """

    def __init__(self, client: Client) -> None:
        self.client = client

    def _execute(self, query, action: str) -> Any:
        try:
            response = query.execute()
        except APIError as e:
            logger.error(f"Supabase error while trying to {action}: {e.message} (code={e.code})")
            raise _translate(e, action) from e
        return response.data or []

    # ---------- user profiles ----------

    def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        rows = self._execute(
            self.client.table("users").select("*").eq("id", user_id).limit(1),
            "load user profile",
        )
        return UserProfile(**rows[0]) if rows else None

    def find_user(self, email: str, employee_id: str) -> Optional[UserProfile]:
        rows = self._execute(
            self.client.table("users").select("*")
            .or_(f"email.eq.{_quoted(email)},employee_id.eq.{_quoted(employee_id)}").limit(1),
            "look up existing users",
        )
        return UserProfile(**rows[0]) if rows else None

    def create_user_profile(self, profile: UserProfileCreate) -> UserProfile:
        rows = self._execute(
            self.client.table("users").insert(profile.model_dump(mode="json")),
            "create user profile",
        )
        return UserProfile(**rows[0])

    # ---------- session audit procedures ----------

    def log_user_login(self, user_id: str, role: str, user_agent: Optional[str] = None) -> str:
        response = self._execute(
            self.client.rpc("log_user_login", {
                "p_user_id": user_id,
                "p_role": role,
                "p_ip_address": None,
                "p_user_agent": user_agent,
            }),
            "log user login",
        )
        # The procedure returns a scalar uuid, which PostgREST sends as a bare JSON string
        return str(response)

    def log_user_logout(self, session_id: str) -> None:
        self._execute(
            self.client.rpc("log_user_logout", {"p_session_id": session_id}),
            "log user logout",
        )

    # ---------- inventory ----------

    def list_inventory(self, filters: Optional[InventoryFilters] = None) -> List[InventoryItem]:
        query = self.client.table("inventory").select("*")
        if filters:
            if filters.category:
                query = _filter_in(query, "category", filters.category)
            if filters.status:
                query = _filter_in(query, "status", filters.status)
            if filters.search and filters.search.strip():
                s = filters.search.strip()
                pattern = _quoted(f"%{s}%")
                query = query.or_(f"item_id.ilike.{pattern},name.ilike.{pattern}")
        rows = self._execute(query.order("created_at", desc=True), "load inventory data")
        return [InventoryItem(**row) for row in rows]

    def add_inventory_item(self, item: InventoryItemCreate) -> InventoryItem:
        rows = self._execute(
            self.client.table("inventory").insert(item.model_dump(mode="json")),
            "add inventory item",
        )
        return InventoryItem(**rows[0])

    def update_inventory_item(self, row_id: str, update: InventoryItemUpdate) -> InventoryItem:
        payload = update.model_dump(mode="json")
        payload["updated_at"] = datetime.now(timezone.utc).isoformat()
        rows = self._execute(
            self.client.table("inventory").update(payload).eq("id", row_id),
            "update inventory",
        )
        if not rows:
            raise DataAccessError(f"Inventory item not found: {row_id}")
        return InventoryItem(**rows[0])

    # ---------- production ----------

    def list_production(self, filters: Optional[ProductionFilters] = None) -> List[ProductionRecord]:
        filters = filters or ProductionFilters()
        query = self.client.table("production").select("*")
        if filters.start_date:
            query = query.gte("date", filters.start_date.isoformat())
        if filters.end_date:
            query = query.lte("date", filters.end_date.isoformat())
        if filters.shift:
            query = _filter_in(query, "shift", filters.shift)
        query = query.order("date", desc=True).order("created_at", desc=True).limit(filters.limit)
        rows = self._execute(query, "load production data")
        return [ProductionRecord(**row) for row in rows]

    def add_production_record(self, record: ProductionRecordCreate) -> ProductionRecord:
        rows = self._execute(
            self.client.table("production").insert(record.model_dump(mode="json")),
            "save production data",
        )
        return ProductionRecord(**rows[0])

    # ---------- material requests ----------

    def list_material_requests(self, filters: Optional[MaterialRequestFilters] = None) -> List[MaterialRequest]:
        query = self.client.table("material_requests").select("*")
        if filters:
            if filters.user_id:
                query = query.eq("user_id", filters.user_id)
            if filters.status:
                query = _filter_in(query, "status", filters.status)
            if filters.request_id:
                query = query.eq("request_id", filters.request_id)
        rows = self._execute(query.order("created_at", desc=True), "load material requests")
        return [MaterialRequest(**row) for row in rows]

    def add_material_request(self, request: MaterialRequestInsert) -> MaterialRequest:
        rows = self._execute(
            self.client.table("material_requests").insert(request.model_dump(mode="json")),
            "submit request",
        )
        return MaterialRequest(**rows[0])

    # ---------- vendor orders ----------

    def list_vendor_orders(self, filters: Optional[VendorOrderFilters] = None) -> List[VendorOrder]:
        filters = filters or VendorOrderFilters()
        query = self.client.table("vendor_orders").select("*")
        if filters.user_id:
            query = query.eq("user_id", filters.user_id)
        query = query.order("created_at", desc=(filters.order_by == "created_at_desc"))
        rows = self._execute(query, "load orders")
        return [VendorOrder(**row) for row in rows]

    def create_vendor_orders(self, orders: List[VendorOrderCreate]) -> List[VendorOrder]:
        if not orders:
            return []
        rows = self._execute(
            self.client.table("vendor_orders").insert([o.model_dump(mode="json") for o in orders]),
            "place order",
        )
        return [VendorOrder(**row) for row in rows]
