from __future__ import annotations

import pytest

from backend.domain.errors import InvalidInputError
from backend.domain.models import AvailabilityFact, PlanningDataset, RoomType
from backend.services.availability_service import AvailabilityService


def _build_dataset(availability: list[AvailabilityFact]) -> PlanningDataset:
    return PlanningDataset(
        hotel_name="HOTEL TEST",
        dates=("2024-01-05", "2024-01-06", "2024-01-07"),
        room_types={
            "DOUBLE": RoomType(code="DOUBLE", name="Double", description="Double"),
            "SUITE": RoomType(code="SUITE", name="Suite", description="Suite"),
        },
        rate_plans={},
        availability=availability,
        pricing=[],
    )


def test_query_reports_each_day_of_inclusive_range() -> None:
    dataset = _build_dataset(
        [
            AvailabilityFact.from_count("Double", "2024-01-05", 3),
            AvailabilityFact.from_count("Double", "2024-01-06", 0),
            AvailabilityFact.from_count("Double", "2024-01-07", -1),
            AvailabilityFact.from_count("Suite", "2024-01-05", 1),
        ]
    )

    days = AvailabilityService().query(dataset, "2024-01-05", "2024-01-07")

    assert [day.date for day in days] == ["2024-01-05", "2024-01-06", "2024-01-07"]
    assert days[0].to_dict() == {
        "date": "2024-01-05",
        "room_types": {
            "Double": {"available": 3, "status": "available"},
            "Suite": {"available": 1, "status": "available"},
        },
    }
    assert days[1].per_room_type["Double"].status == "sold-out"
    assert days[2].per_room_type["Double"].status == "closed"
    assert days[2].per_room_type["Double"].available == -1


def test_missing_facts_are_reported_closed_with_zero_rooms() -> None:
    dataset = _build_dataset([])

    days = AvailabilityService().query(dataset, "2024-02-01", "2024-02-03", ["Double"])

    assert len(days) == 3
    for day in days:
        assert day.per_room_type["Double"].available == 0
        assert day.per_room_type["Double"].status == "closed"


def test_every_room_type_defaults_to_closed_without_facts() -> None:
    days = AvailabilityService().query(_build_dataset([]), "2024-03-01", "2024-03-03")

    assert len(days) == 3
    for day in days:
        assert day.to_dict()["room_types"] == {
            "Double": {"available": 0, "status": "closed"},
            "Suite": {"available": 0, "status": "closed"},
        }


def test_first_fact_wins_for_duplicate_room_and_date() -> None:
    dataset = _build_dataset(
        [
            AvailabilityFact.from_count("Double", "2024-01-05", 5),
            AvailabilityFact.from_count("Double", "2024-01-05", 0),
        ]
    )

    days = AvailabilityService().query(dataset, "2024-01-05", "2024-01-05", ["Double"])

    assert days[0].per_room_type["Double"].available == 5


def test_explicit_room_type_list_restricts_output() -> None:
    dataset = _build_dataset([AvailabilityFact.from_count("Suite", "2024-01-05", 2)])

    days = AvailabilityService().query(dataset, "2024-01-05", "2024-01-05", ["Suite"])

    assert list(days[0].per_room_type) == ["Suite"]


def test_query_spans_month_boundary() -> None:
    days = AvailabilityService().query(_build_dataset([]), "2024-02-28", "2024-03-01", ["Double"])

    assert [day.date for day in days] == ["2024-02-28", "2024-02-29", "2024-03-01"]


def test_inverted_range_covers_no_day() -> None:
    assert AvailabilityService().query(_build_dataset([]), "2024-01-07", "2024-01-05") == []


def test_malformed_dates_are_rejected() -> None:
    with pytest.raises(InvalidInputError):
        AvailabilityService().query(_build_dataset([]), "05/01/2024", "2024-01-07")
