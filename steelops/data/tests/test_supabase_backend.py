from datetime import date
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError

from steelops.data.backends.supabase_backend import SupabaseDataAccess
from steelops.data.models import (
    InventoryFilters,
    InventoryItemCreate,
    ProductionFilters,
    VendorOrderCreate,
    VendorOrderFilters,
)
from steelops.errors import DataAccessError, DuplicateKeyError


class FakeQuery:
    """Records the builder calls made on one table or rpc and returns canned data."""

    def __init__(self, data=None, error=None):
        self.calls = []
        self.data = data
        self.error = error

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    def execute(self):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(data=self.data)


class FakeClient:
    def __init__(self, query):
        self.query = query
        self.tables = []
        self.rpcs = []

    def table(self, name):
        self.tables.append(name)
        return self.query

    def rpc(self, name, params):
        self.rpcs.append((name, params))
        return self.query


PRODUCTION_ROW = {
    "id": "p1", "date": "2024-05-02", "shift": "Day", "steel_production": 2450.0,
    "molten_iron": 1750.0, "efficiency": 94.0, "quality_rate": 98.5, "uptime_hours": 22.0,
    "downtime_hours": 2.0, "downtime_reason": None, "energy_consumption": None, "notes": None,
    "operator_id": None, "created_at": "2024-05-02T06:00:00+00:00",
}


def test_list_production_orders_and_limits():
    query = FakeQuery(data=[PRODUCTION_ROW])
    da = SupabaseDataAccess(FakeClient(query))
    rows = da.list_production(ProductionFilters(limit=30))
    assert rows[0].date == date(2024, 5, 2)
    assert ("order", ("date",), {"desc": True}) in query.calls
    assert ("limit", (30,), {}) in query.calls


def test_vendor_orders_are_inserted_in_one_request():
    query = FakeQuery(data=[])
    client = FakeClient(query)
    orders = [
        VendorOrderCreate(order_id=f"ORD1-{i}", product="Wire Rods", quantity=1,
                          unit_price=48000, total_amount=48000, user_id="u1")
        for i in (1, 2)
    ]
    query.data = [
        {**o.model_dump(mode="json"), "id": f"row{i}", "created_at": None}
        for i, o in enumerate(orders)
    ]
    saved = SupabaseDataAccess(client).create_vendor_orders(orders)
    inserts = [c for c in query.calls if c[0] == "insert"]
    assert len(inserts) == 1
    assert len(inserts[0][1][0]) == 2
    assert [o.order_id for o in saved] == ["ORD1-1", "ORD1-2"]


def test_vendor_orders_filter_by_user():
    query = FakeQuery(data=[])
    SupabaseDataAccess(FakeClient(query)).list_vendor_orders(VendorOrderFilters(user_id="u1"))
    assert ("eq", ("user_id", "u1"), {}) in query.calls
    assert ("order", ("created_at",), {"desc": True}) in query.calls


def test_unique_violation_becomes_duplicate_key_error():
    error = APIError({
        "message": 'duplicate key value violates unique constraint "inventory_item_id_key"',
        "code": "23505",
        "hint": None,
        "details": None,
    })
    da = SupabaseDataAccess(FakeClient(FakeQuery(error=error)))
    with pytest.raises(DuplicateKeyError) as exc:
        da.add_inventory_item(InventoryItemCreate(item_id="STL001", name="Coil", category="Finished Products", quantity=1))
    assert exc.value.constraint == "inventory_item_id_key"


def test_other_api_errors_become_data_access_errors():
    error = APIError({"message": "permission denied", "code": "42501", "hint": None, "details": None})
    da = SupabaseDataAccess(FakeClient(FakeQuery(error=error)))
    with pytest.raises(DataAccessError) as exc:
        da.list_inventory()
    assert not isinstance(exc.value, DuplicateKeyError)
    assert "permission denied" in str(exc.value)


def test_login_rpc_returns_session_id():
    query = FakeQuery(data="5b0c7d5e-0000-4000-8000-000000000001")
    client = FakeClient(query)
    session_id = SupabaseDataAccess(client).log_user_login("u1", "admin", "pytest")
    assert session_id == "5b0c7d5e-0000-4000-8000-000000000001"
    name, params = client.rpcs[0]
    assert name == "log_user_login"
    assert params["p_user_id"] == "u1"
    assert params["p_role"] == "admin"


def test_user_lookup_quotes_values():
    query = FakeQuery(data=[])
    da = SupabaseDataAccess(FakeClient(query))
    assert da.find_user("x@y.z,id.not.is.null", 'EMP"1') is None
    (or_call,) = [call for call in query.calls if call[0] == "or_"]
    assert or_call[1] == ('email.eq."x@y.z,id.not.is.null",employee_id.eq."EMP\\"1"',)


def test_inventory_search_quotes_pattern():
    query = FakeQuery(data=[])
    SupabaseDataAccess(FakeClient(query)).list_inventory(InventoryFilters(search=" coil,x "))
    (or_call,) = [call for call in query.calls if call[0] == "or_"]
    assert or_call[1] == ('item_id.ilike."%coil,x%",name.ilike."%coil,x%"',)
