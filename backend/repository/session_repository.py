"""In-memory holder for the planning snapshot of the current session."""

from __future__ import annotations

from datetime import datetime, timezone
from threading import RLock
from typing import Optional

from backend.domain.models import PlanningDataset
from backend.utils.logger import get_logger, log_event


logger = get_logger(__name__)


class SessionRepository:
    """Keeps exactly one ``PlanningDataset`` reference, swapped wholesale.

    Nothing is written to disk. Readers that already hold a snapshot keep
    using it after an upload or reset replaces the reference.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._dataset: Optional[PlanningDataset] = None
        self._source_name: Optional[str] = None
        self._loaded_at: Optional[datetime] = None

    def current(self) -> Optional[PlanningDataset]:
        with self._lock:
            return self._dataset

    def store(self, dataset: PlanningDataset, source_name: str) -> None:
        with self._lock:
            self._dataset = dataset
            self._source_name = source_name
            self._loaded_at = datetime.now(timezone.utc)
        log_event(logger, "Planning snapshot stored", source=source_name, hotel=dataset.hotel_name)

    def clear(self) -> None:
        with self._lock:
            self._dataset = None
            self._source_name = None
            self._loaded_at = None
        log_event(logger, "Planning snapshot cleared")

    def metadata(self) -> dict[str, Optional[str]]:
        with self._lock:
            return {
                "source_name": self._source_name,
                "loaded_at": self._loaded_at.isoformat() if self._loaded_at else None,
            }
