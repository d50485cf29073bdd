from datetime import date, timedelta

import pandas as pd
import pytest

from steelops.data.backends.csv_backend import CsvDataAccess
from steelops.data.models import InventoryFilters, InventoryItemCreate, MaterialRequestCreate, ProductionRecordCreate
from steelops.errors import DuplicateKeyError, FormError, NotAuthenticatedError
from steelops.services.inventory import InventoryService, edited_rows, status_counts
from steelops.services.materials import (
    MaterialsService,
    RequestNotFoundError,
    estimated_delivery,
    new_request_id,
    status_counts as request_status_counts,
)
from steelops.services.production import (
    DEFAULT_STATS,
    ProductionService,
    current_stats,
    efficiency_trend,
    monthly_average,
    production_insights,
)


@pytest.fixture
def da(tmp_path):
    return CsvDataAccess(tmp_path)


def _record(day, shift="Day", steel=2400.0, efficiency=94.0, quality=98.0, downtime=1.0):
    return ProductionRecordCreate(
        date=day, shift=shift, steel_production=steel, molten_iron=1700.0, efficiency=efficiency,
        quality_rate=quality, uptime_hours=24 - downtime, downtime_hours=downtime,
    )


# ---------- inventory ----------

def test_inventory_writes_require_login(da):
    service = InventoryService(da, user_id=None)
    with pytest.raises(NotAuthenticatedError, match="You must be logged in to add inventory items."):
        service.add_item(InventoryItemCreate(item_id="STL001", name="Coil", category="Finished Products", quantity=1))


def test_duplicate_item_id_message(da):
    service = InventoryService(da, user_id="u1")
    item = InventoryItemCreate(item_id="STL001", name="Coil", category="Finished Products", quantity=1)
    service.add_item(item)
    with pytest.raises(DuplicateKeyError, match="Item ID already exists. Please use a unique Item ID."):
        service.add_item(item)


def test_status_counts(da):
    service = InventoryService(da, user_id="u1")
    for n, status in enumerate(["In Stock", "In Stock", "Low Stock", "Critical"]):
        service.add_item(InventoryItemCreate(item_id=f"I{n}", name="x", category="Spare Parts", quantity=1, status=status))
    counts = status_counts(service.list_items())
    assert counts == {"Total Items": 4, "In Stock": 2, "Low Stock": 1, "Critical": 1}


def _inventory_table(quantities, statuses):
    return pd.DataFrame({
        "id": ["r1", "r2"],
        "item_id": ["STL001", "STL002"],
        "quantity": quantities,
        "status": statuses,
    })


def test_edited_rows_returns_only_changes():
    original = _inventory_table([10, 20], ["In Stock", "In Stock"])
    edited = _inventory_table([10, 5], ["In Stock", "Low Stock"])
    assert edited_rows(original, edited) == [("r2", 5, "Low Stock")]
    assert edited_rows(original, original.copy()) == []


def test_edited_rows_rejects_cleared_quantity():
    original = _inventory_table([10, 20], ["In Stock", "In Stock"])
    edited = _inventory_table([None, 20], ["In Stock", "In Stock"])
    with pytest.raises(FormError, match="Enter a quantity for STL001 before saving."):
        edited_rows(original, edited)


# ---------- production ----------

def test_duplicate_production_message(da):
    service = ProductionService(da, user_id="u1")
    service.add_record(_record(date(2024, 5, 1)))
    with pytest.raises(DuplicateKeyError, match="Production data for this date and shift already exists."):
        service.add_record(_record(date(2024, 5, 1)))


def test_production_record_keeps_operator(da):
    created = ProductionService(da, user_id="u1").add_record(_record(date(2024, 5, 1)))
    assert created.operator_id == "u1"


def test_row_limit(da):
    service = ProductionService(da, user_id="u1", row_limit=30)
    start = date(2024, 1, 1)
    for offset in range(35):
        service.add_record(_record(start + timedelta(days=offset)))
    records = service.recent_records()
    assert len(records) == 30
    assert records[0].date == start + timedelta(days=34)


def test_default_stats_without_data():
    assert current_stats([]) == DEFAULT_STATS
    assert DEFAULT_STATS == {"daily_output": 2500.0, "efficiency": 94.2, "uptime": 22.1, "quality_rate": 98.7}


def test_stats_from_latest_record(da):
    service = ProductionService(da, user_id="u1")
    service.add_record(_record(date(2024, 5, 1), steel=2000.0))
    service.add_record(_record(date(2024, 5, 2), steel=2600.0, efficiency=96.5))
    stats = current_stats(service.recent_records())
    assert stats["daily_output"] == 2600.0
    assert stats["efficiency"] == 96.5


def test_monthly_average_keeps_six_latest_months(da):
    service = ProductionService(da, user_id="u1")
    for month in range(1, 9):
        service.add_record(_record(date(2024, month, 10), steel=2000.0 + month))
        service.add_record(_record(date(2024, month, 11), steel=3000.0 + month))
    monthly = monthly_average(service.recent_records())
    assert list(monthly["month"]) == ["Mar", "Apr", "May", "Jun", "Jul", "Aug"]
    assert list(monthly["production"]) == [2503, 2504, 2505, 2506, 2507, 2508]
    assert set(monthly["target"]) == {2500.0}


def test_efficiency_trend_oldest_first(da):
    service = ProductionService(da, user_id="u1")
    for day in range(1, 11):
        service.add_record(_record(date(2024, 5, day), efficiency=80.0 + day))
    trend = efficiency_trend(service.recent_records())
    assert list(trend["efficiency"]) == [84.0, 85.0, 86.0, 87.0, 88.0, 89.0, 90.0]
    assert trend["day"].iloc[-1] == date(2024, 5, 10).strftime("%a")


def test_insights(da):
    service = ProductionService(da, user_id="u1")
    service.add_record(_record(date(2024, 5, 1), steel=2000.0, efficiency=90.0, quality=97.0, downtime=1.5))
    service.add_record(_record(date(2024, 5, 2), steel=3000.0, efficiency=96.0, quality=99.0, downtime=0.5))
    insights = production_insights(service.recent_records())
    assert insights[0] == "Current average production efficiency is 93.0%"
    assert insights[1] == "Best efficiency recorded: 96.0% on 02/05/2024"
    assert insights[2] == "Total steel production in last 2 records: 5000 tons"
    assert insights[3] == "Average quality rate maintained at 98.0%"
    assert insights[4] == "Total downtime in recent operations: 2.0 hours"
    assert production_insights([]) == []


# ---------- materials ----------

def test_request_id_format():
    assert new_request_id(1717171717123) == "REQ717123"
    assert new_request_id().startswith("REQ")
    assert len(new_request_id()) == 9


def test_estimated_delivery():
    today = date(2024, 5, 1)
    assert estimated_delivery(None, 10, today) == date(2024, 5, 11)
    assert estimated_delivery(date(2024, 6, 1), 10, today) == date(2024, 6, 1)


def test_submit_and_track(da):
    service = MaterialsService(da, user_id="u1")
    created = service.submit_request(MaterialRequestCreate(material="Coal", quantity=100, priority="High"))
    assert created.status == "Pending"
    assert created.request_date == date.today()
    assert created.estimated_delivery == date.today() + timedelta(days=10)
    assert service.track_request(f"  {created.request_id} ").id == created.id
    with pytest.raises(RequestNotFoundError, match="Request not found"):
        service.track_request("REQ000000")


def test_submit_requires_login(da):
    with pytest.raises(NotAuthenticatedError):
        MaterialsService(da).submit_request(MaterialRequestCreate(material="Coal", quantity=1))


def test_request_summary_counts(da, monkeypatch):
    ids = iter(["REQ000001", "REQ000002"])
    monkeypatch.setattr("steelops.services.materials.new_request_id", lambda: next(ids))
    service = MaterialsService(da, user_id="u1")
    for material in ("Coal", "Limestone"):
        service.submit_request(MaterialRequestCreate(material=material, quantity=10))
    requests = service.list_requests()
    requests[0] = requests[0].model_copy(update={"status": "In Transit"})
    assert request_status_counts(requests) == {"Total Requests": 2, "Pending": 1, "Approved": 0, "In Transit": 1}
    assert request_status_counts([]) == {"Total Requests": 0, "Pending": 0, "Approved": 0, "In Transit": 0}


def test_requests_filter_by_status_and_owner(da, monkeypatch):
    ids = iter(["REQ000001", "REQ000002"])
    monkeypatch.setattr("steelops.services.materials.new_request_id", lambda: next(ids))
    MaterialsService(da, user_id="u1").submit_request(MaterialRequestCreate(material="Coal", quantity=10))
    MaterialsService(da, user_id="u2").submit_request(MaterialRequestCreate(material="Limestone", quantity=5))

    service = MaterialsService(da, user_id="u1")
    assert len(service.list_requests()) == 2
    assert [r.material for r in service.list_requests(mine_only=True)] == ["Coal"]
    assert len(service.list_requests(status=["Pending"])) == 2
    assert service.list_requests(status=["Approved", "In Transit"]) == []
    with pytest.raises(NotAuthenticatedError):
        MaterialsService(da).list_requests(mine_only=True)


def test_inventory_filters(da):
    service = InventoryService(da, user_id="u1")
    service.add_item(InventoryItemCreate(item_id="STL001", name="Hot Rolled Coil", category="Finished Products", quantity=5))
    service.add_item(InventoryItemCreate(item_id="RAW001", name="Iron Ore", category="Raw Materials", quantity=5,
                                         status="Critical"))
    assert [i.item_id for i in service.list_items(InventoryFilters(search="coil"))] == ["STL001"]
    assert [i.item_id for i in service.list_items(InventoryFilters(category=["Raw Materials"]))] == ["RAW001"]
    assert [i.item_id for i in service.list_items(InventoryFilters(status=["Critical"]))] == ["RAW001"]


def test_production_records_by_date_and_shift(da):
    service = ProductionService(da, user_id="u1")
    for day in (1, 2, 3):
        service.add_record(_record(date(2024, 5, day), shift="Day"))
        service.add_record(_record(date(2024, 5, day), shift="Night"))
    window = service.recent_records(start_date=date(2024, 5, 2), end_date=date(2024, 5, 3))
    assert {r.date for r in window} == {date(2024, 5, 2), date(2024, 5, 3)}
    nights = service.recent_records(shift=["Night"])
    assert len(nights) == 3 and {r.shift for r in nights} == {"Night"}
