"""Production page analytics.

Chart helpers take records newest first, as ``DataAccess.list_production``
returns them, and build the frames the plotly charts draw.
"""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

import pandas as pd

from steelops.data.interface import DataAccess
from steelops.data.models import ProductionFilters, ProductionRecord, ProductionRecordCreate
from steelops.errors import DataAccessError, DuplicateKeyError, NotAuthenticatedError
from steelops.logging import get_logger

logger = get_logger(__name__)

DEFAULT_STATS = {
    "daily_output": 2500.0,
    "efficiency": 94.2,
    "uptime": 22.1,
    "quality_rate": 98.7,
}

# Static product mix (percent), not derived from production records
PRODUCT_BREAKDOWN = pd.DataFrame(
    [
        ("Hot Rolled Coils", 35),
        ("Cold Rolled Sheets", 25),
        ("Wire Rods", 20),
        ("Structural Steel", 15),
        ("Others", 5),
    ],
    columns=["product", "share"],
)


class ProductionService:
    def __init__(self, data_access: DataAccess, user_id: Optional[str] = None, row_limit: int = 30) -> None:
        self.data_access = data_access
        self.user_id = user_id
        self.row_limit = row_limit

    def recent_records(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        shift: Optional[List[str]] = None,
    ) -> List[ProductionRecord]:
        return self.data_access.list_production(ProductionFilters(
            start_date=start_date,
            end_date=end_date,
            shift=shift or None,
            limit=self.row_limit,
        ))

    def add_record(self, record: ProductionRecordCreate) -> ProductionRecord:
        if not self.user_id:
            raise NotAuthenticatedError("You must be logged in to update production data.")
        record = record.model_copy(update={"operator_id": self.user_id})
        try:
            created = self.data_access.add_production_record(record)
        except DuplicateKeyError as e:
            raise DuplicateKeyError("Production data for this date and shift already exists.", e.constraint) from e
        except DataAccessError as e:
            logger.error(f"Error updating production: {e}")
            raise DataAccessError("Failed to save production data. Please try again.", e.code, e.constraint) from e
        logger.info(f"Production record saved for {created.date} ({created.shift} shift)")
        return created


def current_stats(records: List[ProductionRecord]) -> Dict[str, float]:
    """Stats cards: the latest record, or fixed defaults when there is none."""
    if not records:
        return dict(DEFAULT_STATS)
    latest = records[0]
    return {
        "daily_output": latest.steel_production,
        "efficiency": latest.efficiency,
        "uptime": latest.uptime_hours,
        "quality_rate": latest.quality_rate,
    }


def _frame(records: List[ProductionRecord]) -> pd.DataFrame:
    return pd.DataFrame([r.model_dump() for r in records])


def monthly_average(records: List[ProductionRecord], target: float = 2500.0, months: int = 6) -> pd.DataFrame:
    """Mean steel production per calendar month for the most recent months, oldest first."""
    if not records:
        return pd.DataFrame(columns=["month", "production", "target"])
    df = _frame(records)
    df["period"] = pd.to_datetime(df["date"]).dt.to_period("M")
    grouped = (
        df.groupby("period")["steel_production"].mean()
        .sort_index()
        .tail(months)
        .round()
        .reset_index()
    )
    return pd.DataFrame({
        "month": grouped["period"].dt.strftime("%b"),
        "production": grouped["steel_production"].astype(int),
        "target": target,
    })


def efficiency_trend(records: List[ProductionRecord], points: int = 7) -> pd.DataFrame:
    """Efficiency of the most recent records, oldest first, labelled by weekday."""
    recent = list(reversed(records[:points]))
    return pd.DataFrame({
        "day": [r.date.strftime("%a") for r in recent],
        "date": [r.date for r in recent],
        "efficiency": [r.efficiency for r in recent],
    })


def production_insights(records: List[ProductionRecord]) -> List[str]:
    if not records:
        return []
    df = _frame(records)
    best = records[int(df["efficiency"].idxmax())]
    return [
        f"Current average production efficiency is {df['efficiency'].mean():.1f}%",
        f"Best efficiency recorded: {best.efficiency:.1f}% on {best.date.strftime('%d/%m/%Y')}",
        f"Total steel production in last {len(records)} records: {df['steel_production'].sum():.0f} tons",
        f"Average quality rate maintained at {df['quality_rate'].mean():.1f}%",
        f"Total downtime in recent operations: {df['downtime_hours'].fillna(0).sum():.1f} hours",
    ]
