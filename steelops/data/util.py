from __future__ import annotations

from typing import TYPE_CHECKING, Literal, Optional

from steelops.config import get_config
from .backends.csv_backend import CsvDataAccess
from .interface import DataAccess

if TYPE_CHECKING:
    from supabase import Client


def get_data_access(kind: Optional[Literal["csv", "supabase"]] = None, client: "Optional[Client]" = None) -> DataAccess:
    config = get_config()
    kind = kind or config.data_backend
    if kind == "csv":
        # Reads from configured CSV folder
        return CsvDataAccess(data_dir=config.data_dir)
    if kind == "supabase":
        # Imported lazily so local CSV development does not need Supabase credentials
        from .backends.supabase_backend import SupabaseDataAccess
        if client is None:
            from steelops.supabase.client import get_supabase_connection
            client = get_supabase_connection().get_client()
        return SupabaseDataAccess(client)
    raise ValueError(f"Unknown data access kind: {kind}")
