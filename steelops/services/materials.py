from __future__ import annotations

import time
from datetime import date, timedelta
from typing import Dict, List, Optional

from steelops.data.interface import DataAccess
from steelops.data.models import (
    MaterialRequest,
    MaterialRequestCreate,
    MaterialRequestFilters,
    MaterialRequestInsert,
)
from steelops.errors import DataAccessError, NotAuthenticatedError, SteelOpsError
from steelops.logging import get_logger

logger = get_logger(__name__)


class RequestNotFoundError(SteelOpsError):
    def __init__(self, request_id: str) -> None:
        super().__init__("Request not found")
        self.request_id = request_id


def new_request_id(now_ms: Optional[int] = None) -> str:
    """REQ followed by the last 6 digits of the epoch time in milliseconds."""
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    return f"REQ{str(now_ms)[-6:]}"


def estimated_delivery(required_date: Optional[date], delivery_days: int = 10, today: Optional[date] = None) -> date:
    if required_date is not None:
        return required_date
    return (today or date.today()) + timedelta(days=delivery_days)


class MaterialsService:
    def __init__(self, data_access: DataAccess, user_id: Optional[str] = None, delivery_days: int = 10) -> None:
        self.data_access = data_access
        self.user_id = user_id
        self.delivery_days = delivery_days

    def list_requests(self, status: Optional[List[str]] = None, mine_only: bool = False) -> List[MaterialRequest]:
        if mine_only and not self.user_id:
            raise NotAuthenticatedError("You must be logged in to view your requests.")
        return self.data_access.list_material_requests(MaterialRequestFilters(
            user_id=self.user_id if mine_only else None,
            status=status or None,
        ))

    def submit_request(self, request: MaterialRequestCreate) -> MaterialRequest:
        if not self.user_id:
            raise NotAuthenticatedError("You must be logged in to submit a request.")
        row = MaterialRequestInsert(
            **request.model_dump(),
            request_id=new_request_id(),
            request_date=date.today(),
            estimated_delivery=estimated_delivery(request.required_date, self.delivery_days),
            user_id=self.user_id,
        )
        try:
            created = self.data_access.add_material_request(row)
        except DataAccessError as e:
            logger.error(f"Error submitting request: {e}")
            raise DataAccessError("Failed to submit request. Please try again.", e.code, e.constraint) from e
        logger.info(f"Material request {created.request_id} submitted for {created.quantity} {created.unit} of {created.material}")
        return created

    def track_request(self, request_id: str) -> MaterialRequest:
        request_id = (request_id or "").strip()
        if not request_id:
            raise RequestNotFoundError(request_id)
        matches = self.data_access.list_material_requests(MaterialRequestFilters(request_id=request_id))
        if not matches:
            raise RequestNotFoundError(request_id)
        return matches[0]


def status_counts(requests: List[MaterialRequest]) -> Dict[str, int]:
    """Summary card values for the requests page."""
    return {
        "Total Requests": len(requests),
        "Pending": sum(1 for r in requests if r.status == "Pending"),
        "Approved": sum(1 for r in requests if r.status == "Approved"),
        "In Transit": sum(1 for r in requests if r.status == "In Transit"),
    }
