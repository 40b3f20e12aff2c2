"""Day-by-day availability lookup over a planning snapshot."""

from __future__ import annotations

from datetime import timedelta
from typing import Optional, Sequence

from backend.domain.constraints import parse_iso_date
from backend.domain.models import AvailabilityDay, PlanningDataset, RoomAvailability
from backend.utils.logger import get_logger, log_event


logger = get_logger(__name__)

_NO_DATA = RoomAvailability(available=0, status="closed")


class AvailabilityService:
    """Read-only queries; uses the dataset's first-match ``(room_type, date)`` index.

    A range whose start falls after its end covers no day and yields an
    empty list.
    """

    def query(
        self,
        dataset: PlanningDataset,
        start_date: str,
        end_date: str,
        room_type_names: Optional[Sequence[str]] = None,
    ) -> list[AvailabilityDay]:
        start = parse_iso_date(start_date, "start_date")
        end = parse_iso_date(end_date, "end_date")
        names = list(room_type_names) if room_type_names else dataset.room_type_names
        index = dataset.availability_index

        days: list[AvailabilityDay] = []
        current = start
        while current <= end:
            iso_date = current.isoformat()
            per_room_type: dict[str, RoomAvailability] = {}
            for name in names:
                fact = index.get((name, iso_date))
                per_room_type[name] = (
                    RoomAvailability(available=fact.available, status=fact.status)
                    if fact is not None
                    else _NO_DATA
                )
            days.append(AvailabilityDay(date=iso_date, per_room_type=per_room_type))
            current += timedelta(days=1)

        log_event(
            logger,
            "Availability queried",
            start=start_date,
            end=end_date,
            room_types=len(names),
            days=len(days),
        )
        return days
