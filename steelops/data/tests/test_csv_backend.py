from datetime import date

import pandas as pd
import pytest

from steelops.data.backends.csv_backend import TABLES, CsvDataAccess
from steelops.data.models import (
    InventoryFilters,
    InventoryItemCreate,
    InventoryItemUpdate,
    MaterialRequestFilters,
    MaterialRequestInsert,
    ProductionFilters,
    ProductionRecordCreate,
    UserProfileCreate,
    VendorOrderCreate,
    VendorOrderFilters,
)
from steelops.errors import DataAccessError, DuplicateKeyError


@pytest.fixture
def da(tmp_path):
    return CsvDataAccess(tmp_path)


def _item(item_id="STL001", **overrides):
    fields = dict(item_id=item_id, name="Hot Rolled Coil", category="Finished Products", quantity=500)
    fields.update(overrides)
    return InventoryItemCreate(**fields)


def _record(day, shift="Day", steel=2400.0):
    return ProductionRecordCreate(
        date=day, shift=shift, steel_production=steel, molten_iron=1700.0,
        efficiency=93.5, quality_rate=98.0, uptime_hours=22.0,
    )


def _order(order_id, product="Hot Rolled Coils", quantity=2):
    return VendorOrderCreate(
        order_id=order_id, product=product, quantity=quantity,
        unit_price=45000, total_amount=45000 * quantity, user_id="user-1",
    )


def test_missing_data_dir_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        CsvDataAccess(tmp_path / "nope")


def test_missing_files_start_empty(da):
    assert da.list_inventory() == []
    assert da.list_production() == []
    assert da.list_vendor_orders() == []


def test_failed_update_leaves_table_unchanged(da, monkeypatch):
    created = da.add_inventory_item(_item())
    session_id = da.log_user_login("u1", "admin", "pytest")

    def fail(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(pd.DataFrame, "to_csv", fail)
    with pytest.raises(DataAccessError):
        da.update_inventory_item(created.id, InventoryItemUpdate(quantity=1, status="Critical"))
    with pytest.raises(DataAccessError):
        da.log_user_logout(session_id)

    (item,) = da.list_inventory()
    assert item.quantity == created.quantity
    assert item.status == "In Stock"
    assert da._tables["login_sessions"].loc[0, "logout_at"] == ""



def test_add_inventory_item_persists(da, tmp_path):
    created = da.add_inventory_item(_item())
    assert created.item_id == "STL001"
    assert created.status == "In Stock"
    assert created.unit == "tons"

    reloaded = CsvDataAccess(tmp_path)
    assert [i.item_id for i in reloaded.list_inventory()] == ["STL001"]


def test_duplicate_item_id_is_rejected(da):
    da.add_inventory_item(_item())
    with pytest.raises(DuplicateKeyError) as exc:
        da.add_inventory_item(_item(name="Another"))
    assert exc.value.constraint == "inventory_item_id_key"
    assert exc.value.code == "23505"
    assert len(da.list_inventory()) == 1


def test_inventory_newest_first_and_filters(da):
    da.add_inventory_item(_item("STL001"))
    da.add_inventory_item(_item("RM001", name="Iron Ore", category="Raw Materials", status="Low Stock"))
    assert [i.item_id for i in da.list_inventory()] == ["RM001", "STL001"]
    assert [i.item_id for i in da.list_inventory(InventoryFilters(category="Raw Materials"))] == ["RM001"]
    assert [i.item_id for i in da.list_inventory(InventoryFilters(search="coil"))] == ["STL001"]


def test_update_inventory_item(da):
    created = da.add_inventory_item(_item())
    updated = da.update_inventory_item(created.id, InventoryItemUpdate(quantity=40, status="Critical"))
    assert updated.quantity == 40
    assert updated.status == "Critical"
    assert da.list_inventory()[0].status == "Critical"


def test_update_unknown_item(da):
    with pytest.raises(DataAccessError):
        da.update_inventory_item("missing", InventoryItemUpdate(quantity=1, status="In Stock"))


def test_production_duplicate_date_and_shift(da):
    da.add_production_record(_record(date(2024, 5, 1)))
    da.add_production_record(_record(date(2024, 5, 1), shift="Night"))
    with pytest.raises(DuplicateKeyError) as exc:
        da.add_production_record(_record(date(2024, 5, 1)))
    assert exc.value.constraint == "production_date_shift_key"


def test_production_limit_and_order(da):
    for day in range(1, 11):
        da.add_production_record(_record(date(2024, 5, day)))
    rows = da.list_production(ProductionFilters(limit=3))
    assert [r.date.day for r in rows] == [10, 9, 8]


def test_material_request_lookup(da):
    da.add_material_request(MaterialRequestInsert(
        request_id="REQ123456", material="Coal", quantity=100, request_date=date(2024, 5, 1),
        estimated_delivery=date(2024, 5, 11), user_id="user-1",
    ))
    (found,) = da.list_material_requests(MaterialRequestFilters(request_id="REQ123456"))
    assert found.status == "Pending"
    assert found.priority == "Medium"
    assert found.estimated_delivery == date(2024, 5, 11)
    assert da.list_material_requests(MaterialRequestFilters(request_id="REQ000000")) == []


def test_vendor_orders_batch_insert(da):
    saved = da.create_vendor_orders([_order("ORD1-1"), _order("ORD1-2", product="Wire Rods")])
    assert [o.order_id for o in saved] == ["ORD1-1", "ORD1-2"]
    assert all(o.payment_status == "Paid" and o.status == "Processing" for o in saved)
    assert len(da.list_vendor_orders(VendorOrderFilters(user_id="user-1"))) == 2
    assert da.list_vendor_orders(VendorOrderFilters(user_id="someone-else")) == []


def test_vendor_orders_all_or_nothing(da):
    da.create_vendor_orders([_order("ORD1-1")])
    with pytest.raises(DuplicateKeyError):
        da.create_vendor_orders([_order("ORD2-1"), _order("ORD1-1")])
    assert [o.order_id for o in da.list_vendor_orders()] == ["ORD1-1"]


def test_vendor_orders_sort_direction(da, monkeypatch):
    stamps = iter(["2024-05-01T08:00:00+00:00", "2024-05-02T08:00:00+00:00"])
    monkeypatch.setattr("steelops.data.backends.csv_backend._now_iso", lambda: next(stamps))
    da.create_vendor_orders([_order("ORD1-1")])
    da.create_vendor_orders([_order("ORD2-1")])
    newest = da.list_vendor_orders(VendorOrderFilters(user_id="user-1"))
    oldest = da.list_vendor_orders(VendorOrderFilters(user_id="user-1", order_by="created_at_asc"))
    assert [o.order_id for o in newest] == ["ORD2-1", "ORD1-1"]
    assert [o.order_id for o in oldest] == ["ORD1-1", "ORD2-1"]


def test_failed_write_leaves_table_unchanged(da, monkeypatch):
    def fail(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(pd.DataFrame, "to_csv", fail)
    with pytest.raises(DataAccessError):
        da.create_vendor_orders([_order("ORD1-1")])
    assert da.list_vendor_orders() == []


def test_user_profiles_and_sessions(da, tmp_path):
    da.create_user_profile(UserProfileCreate(id="u1", employee_id="EMP001", email="a@rinl.co.in", role="admin"))
    assert da.get_user_profile("u1").role == "admin"
    assert da.find_user("other@rinl.co.in", "EMP001").id == "u1"
    assert da.find_user("other@rinl.co.in", "EMP999") is None
    with pytest.raises(DuplicateKeyError) as exc:
        da.create_user_profile(UserProfileCreate(id="u2", employee_id="EMP002", email="a@rinl.co.in", role="vendor"))
    assert exc.value.constraint == "users_email_key"

    session_id = da.log_user_login("u1", "admin", "pytest")
    da.log_user_logout(session_id)
    sessions = pd.read_csv(tmp_path / TABLES["login_sessions"].file, dtype=str, keep_default_na=False)
    assert sessions.loc[0, "session_id"] == session_id
    assert sessions.loc[0, "logout_at"] != ""
