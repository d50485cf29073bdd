from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd
from pydantic import BaseModel

from steelops.config import get_config
from steelops.errors import DataAccessError, DuplicateKeyError
from steelops.logging import get_logger
from ..interface import DataAccess
from ..models import (
    InventoryFilters, ProductionFilters, MaterialRequestFilters, VendorOrderFilters,
    UserProfile, InventoryItem, ProductionRecord, MaterialRequest, VendorOrder,
    UserProfileCreate, InventoryItemCreate, InventoryItemUpdate, ProductionRecordCreate,
    MaterialRequestInsert, VendorOrderCreate,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class _TableSpec:
    file: str
    columns: Tuple[str, ...]
    # constraint name -> columns that must be unique together
    unique: Tuple[Tuple[str, Tuple[str, ...]], ...] = ()


TABLES: Dict[str, _TableSpec] = {
    "users": _TableSpec(
        "users.csv",
        ("id", "employee_id", "email", "role", "created_at"),
        (("users_pkey", ("id",)), ("users_email_key", ("email",)), ("users_employee_id_key", ("employee_id",))),
    ),
    "inventory": _TableSpec(
        "inventory.csv",
        ("id", "item_id", "name", "category", "quantity", "unit", "status", "min_threshold",
         "max_threshold", "location", "supplier", "cost_per_unit", "created_at", "updated_at"),
        (("inventory_item_id_key", ("item_id",)),),
    ),
    "production": _TableSpec(
        "production.csv",
        ("id", "date", "shift", "steel_production", "molten_iron", "efficiency", "quality_rate",
         "uptime_hours", "downtime_hours", "downtime_reason", "energy_consumption", "notes",
         "operator_id", "created_at"),
        (("production_date_shift_key", ("date", "shift")),),
    ),
    "material_requests": _TableSpec(
        "material_requests.csv",
        ("id", "request_id", "material", "quantity", "unit", "priority", "status", "request_date",
         "required_date", "estimated_delivery", "notes", "user_id", "created_at"),
        (("material_requests_request_id_key", ("request_id",)),),
    ),
    "vendor_orders": _TableSpec(
        "vendor_orders.csv",
        ("id", "order_id", "product", "quantity", "unit", "unit_price", "total_amount",
         "specifications", "delivery_date", "status", "payment_status", "user_id", "created_at"),
        (("vendor_orders_order_id_key", ("order_id",)),),
    ),
    "login_sessions": _TableSpec(
        "login_sessions.csv",
        ("session_id", "user_id", "role", "ip_address", "user_agent", "login_at", "logout_at"),
        (("login_sessions_pkey", ("session_id",)),),
    ),
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _in(df: pd.DataFrame, column: str, value: str | Sequence[str]) -> pd.DataFrame:
    if isinstance(value, str):
        return df[df[column] == value]
    return df[df[column].isin(list(value))]


class CsvDataAccess(DataAccess):
    """
    CSV-backed implementation for local development.
    - Loads every table from `data_dir` once at construction; missing files
      start as empty tables.
    - Frames hold strings only; rows are validated into the pydantic models on read.
    - Writes check unique constraints like the database would, then persist the
      whole table back to its CSV file.
    """

    def __init__(self, data_dir: str | Path = None) -> None:
        if data_dir is None:
            config = get_config()
            data_dir = config.data_dir

        self.data_dir = Path(data_dir)

        # If the path is relative, make it relative to the repository root
        if not self.data_dir.is_absolute():
            current = Path.cwd()
            repo_root = None

            # Look up the directory tree for pyproject.toml
            for parent in [current] + list(current.parents):
                if (parent / "pyproject.toml").exists():
                    repo_root = parent
                    break

            self.data_dir = (repo_root or current) / self.data_dir

        self._lock = threading.Lock()
        self._tables = self._load_tables(self.data_dir)

    # ---------- loading / persistence helpers ----------

    @staticmethod
    def _load_tables(data_dir: Path) -> Dict[str, pd.DataFrame]:
        if not data_dir.exists():
            raise FileNotFoundError(
                f"Data directory not found: {data_dir}\n"
                f"Please either:\n"
                f"  1. Generate sample data: python -m steelops.data.seed_data\n"
                f"  2. Set DATA_DIR environment variable to point to your data directory\n"
                f"  3. Create a .env file with DATA_DIR=/path/to/your/data"
            )

        tables: Dict[str, pd.DataFrame] = {}
        for name, spec in TABLES.items():
            path = data_dir / spec.file
            if not path.exists():
                tables[name] = pd.DataFrame(columns=list(spec.columns), dtype=str)
                continue
            try:
                df = pd.read_csv(path, dtype=str, keep_default_na=False)
            except Exception as e:
                raise RuntimeError(
                    f"Error reading {path}: {e}\n"
                    f"Please check that the CSV files are valid and readable."
                ) from e
            # Tolerate files written by older seeds that miss newer columns
            for col in spec.columns:
                if col not in df.columns:
                    df[col] = ""
            tables[name] = df[list(spec.columns)].copy()
        logger.debug(f"Loaded CSV tables from {data_dir}: " + ", ".join(f"{k}={len(v)}" for k, v in tables.items()))
        return tables

    def _persist(self, name: str) -> None:
        path = self.data_dir / TABLES[name].file
        try:
            self._tables[name].to_csv(path, index=False)
        except OSError as e:
            raise DataAccessError(f"Failed to write {path.name}: {e}") from e

    def _check_unique(self, name: str, rows: List[Dict[str, str]]) -> None:
        df = self._tables[name]
        for constraint, cols in TABLES[name].unique:
            seen = set(map(tuple, df[list(cols)].itertuples(index=False, name=None))) if not df.empty else set()
            for row in rows:
                key = tuple(row[c] for c in cols)
                if key in seen:
                    raise DuplicateKeyError(
                        f'duplicate key value violates unique constraint "{constraint}"',
                        constraint=constraint,
                    )
                seen.add(key)

    def _swap(self, name: str, df: pd.DataFrame) -> None:
        """Install a changed copy of a table, keeping the old one if the write fails.

        Callers hold ``self._lock``.
        """
        previous = self._tables[name]
        self._tables[name] = df
        try:
            self._persist(name)
        except DataAccessError:
            self._tables[name] = previous
            raise

    def _insert(self, name: str, rows: List[Dict[str, object]]) -> List[Dict[str, str]]:
        columns = TABLES[name].columns
        cells = [{c: _cell(row.get(c)) for c in columns} for row in rows]
        with self._lock:
            self._check_unique(name, cells)
            self._swap(name, pd.concat(
                [self._tables[name], pd.DataFrame(cells, columns=list(columns), dtype=str)],
                ignore_index=True,
            ))
        logger.debug(f"Inserted {len(cells)} row(s) into {name}")
        return cells

    @staticmethod
    def _records(df: pd.DataFrame) -> List[Dict[str, Optional[str]]]:
        return [{k: (v if v != "" else None) for k, v in rec.items()} for rec in df.to_dict("records")]

    @staticmethod
    def _new_row(payload: BaseModel, **extra) -> Dict[str, object]:
        row = {"id": str(uuid.uuid4()), "created_at": _now_iso()}
        row.update(payload.model_dump(mode="json"))
        row.update(extra)
        return row

    # ---------- user profiles ----------

    def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        df = self._tables["users"]
        match = self._records(df[df["id"] == user_id])
        return UserProfile(**match[0]) if match else None

    def find_user(self, email: str, employee_id: str) -> Optional[UserProfile]:
        df = self._tables["users"]
        match = self._records(df[(df["email"] == email) | (df["employee_id"] == employee_id)])
        return UserProfile(**match[0]) if match else None

    def create_user_profile(self, profile: UserProfileCreate) -> UserProfile:
        row = profile.model_dump(mode="json")
        row["created_at"] = _now_iso()
        (cells,) = self._insert("users", [row])
        return UserProfile(**cells)

    # ---------- session audit procedures ----------

    def log_user_login(self, user_id: str, role: str, user_agent: Optional[str] = None) -> str:
        session_id = str(uuid.uuid4())
        self._insert("login_sessions", [{
            "session_id": session_id,
            "user_id": user_id,
            "role": role,
            "ip_address": None,
            "user_agent": user_agent,
            "login_at": _now_iso(),
        }])
        return session_id

    def log_user_logout(self, session_id: str) -> None:
        with self._lock:
            df = self._tables["login_sessions"].copy()
            mask = df["session_id"] == session_id
            if not mask.any():
                raise DataAccessError(f"Unknown login session: {session_id}")
            df.loc[mask, "logout_at"] = _now_iso()
            self._swap("login_sessions", df)

    # ---------- inventory ----------

    def list_inventory(self, filters: Optional[InventoryFilters] = None) -> List[InventoryItem]:
        df = self._tables["inventory"].copy()

        if filters:
            if filters.category:
                df = _in(df, "category", filters.category)
            if filters.status:
                df = _in(df, "status", filters.status)
            if filters.search and filters.search.strip():
                s = filters.search.strip().lower()
                mask = df["item_id"].str.lower().str.contains(s, regex=False) | \
                    df["name"].str.lower().str.contains(s, regex=False)
                df = df[mask]

        df = df.sort_values("created_at", ascending=False, kind="stable")
        return [InventoryItem(**rec) for rec in self._records(df)]

    def add_inventory_item(self, item: InventoryItemCreate) -> InventoryItem:
        now = _now_iso()
        (cells,) = self._insert("inventory", [self._new_row(item, updated_at=now)])
        return InventoryItem(**{k: (v or None) for k, v in cells.items()})

    def update_inventory_item(self, row_id: str, update: InventoryItemUpdate) -> InventoryItem:
        with self._lock:
            df = self._tables["inventory"].copy()
            mask = df["id"] == row_id
            if not mask.any():
                raise DataAccessError(f"Inventory item not found: {row_id}")
            df.loc[mask, "quantity"] = str(update.quantity)
            df.loc[mask, "status"] = update.status
            df.loc[mask, "updated_at"] = _now_iso()
            self._swap("inventory", df)
            (rec,) = self._records(df[mask])
        return InventoryItem(**rec)

    # ---------- production ----------

    def list_production(self, filters: Optional[ProductionFilters] = None) -> List[ProductionRecord]:
        filters = filters or ProductionFilters()
        df = self._tables["production"].copy()

        if filters.start_date:
            df = df[df["date"] >= filters.start_date.isoformat()]
        if filters.end_date:
            df = df[df["date"] <= filters.end_date.isoformat()]
        if filters.shift:
            df = _in(df, "shift", filters.shift)

        df = df.sort_values(["date", "created_at"], ascending=False, kind="stable")
        # LIMIT (client side, since CSV)
        df = df.head(int(filters.limit))
        return [ProductionRecord(**rec) for rec in self._records(df)]

    def add_production_record(self, record: ProductionRecordCreate) -> ProductionRecord:
        (cells,) = self._insert("production", [self._new_row(record)])
        return ProductionRecord(**{k: (v or None) for k, v in cells.items()})

    # ---------- material requests ----------

    def list_material_requests(self, filters: Optional[MaterialRequestFilters] = None) -> List[MaterialRequest]:
        df = self._tables["material_requests"].copy()

        if filters:
            if filters.user_id:
                df = df[df["user_id"] == filters.user_id]
            if filters.status:
                df = _in(df, "status", filters.status)
            if filters.request_id:
                df = df[df["request_id"] == filters.request_id]

        df = df.sort_values("created_at", ascending=False, kind="stable")
        return [MaterialRequest(**rec) for rec in self._records(df)]

    def add_material_request(self, request: MaterialRequestInsert) -> MaterialRequest:
        (cells,) = self._insert("material_requests", [self._new_row(request)])
        return MaterialRequest(**{k: (v or None) for k, v in cells.items()})

    # ---------- vendor orders ----------

    def list_vendor_orders(self, filters: Optional[VendorOrderFilters] = None) -> List[VendorOrder]:
        filters = filters or VendorOrderFilters()
        df = self._tables["vendor_orders"].copy()

        if filters.user_id:
            df = df[df["user_id"] == filters.user_id]

        asc = (filters.order_by == "created_at_asc")
        df = df.sort_values("created_at", ascending=asc, kind="stable")
        return [VendorOrder(**rec) for rec in self._records(df)]

    def create_vendor_orders(self, orders: List[VendorOrderCreate]) -> List[VendorOrder]:
        if not orders:
            return []
        # One _insert call: the constraint check covers every line before anything is appended
        cells = self._insert("vendor_orders", [self._new_row(order) for order in orders])
        return [VendorOrder(**{k: (v or None) for k, v in row.items()}) for row in cells]
