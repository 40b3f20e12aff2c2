"""Planning grid parser: positional spreadsheet rows to a ``PlanningDataset``.

The parser is lenient at cell and row level. Unrecognized header dates,
non-numeric prices, short rows and unknown row kinds are skipped without
raising; only a grid too short to hold a header and one body row is rejected.
"""

from __future__ import annotations

import logging
import math
import re
import unicodedata
from datetime import date, datetime
from typing import Optional, Sequence

from backend.domain.constraints import default_commission
from backend.domain.errors import InvalidInputError
from backend.domain.models import (
    AVAILABILITY_ROW_KIND,
    CLOSED_SENTINEL,
    PRICE_ROW_KIND,
    AvailabilityFact,
    GridCell,
    PlanningDataset,
    PricingFact,
    RatePlan,
    RawSheet,
    RoomType,
)
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger, log_event


logger = get_logger(__name__)

DEFAULT_HOTEL_NAME = "Hôtel"
RATE_PLAN_SEPARATOR = " - "
FIRST_VALUE_COLUMN = 3
ROOM_TYPE_CODE_MAX_LENGTH = 20

_HOTEL_NAME_PATTERN = re.compile(r"[A-Z\s]+")
_HEADER_DATE_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2,4})$")
_LEADING_DECIMAL_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_NON_CODE_CHARACTERS = re.compile(r"[^A-Z0-9]")


def _is_missing(cell: GridCell) -> bool:
    return cell is None or (isinstance(cell, float) and math.isnan(cell))


def cell_text(cell: GridCell) -> str:
    """Render a cell the way a spreadsheet export would print it."""
    if _is_missing(cell):
        return ""
    if isinstance(cell, bool):
        return str(cell).lower()
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    if isinstance(cell, datetime):
        return cell.date().isoformat()
    return str(cell)


def parse_decimal(cell: GridCell) -> Optional[float]:
    """Lenient decimal parse: leading number wins, first comma is a decimal point."""
    if _is_missing(cell) or isinstance(cell, bool):
        return None
    if isinstance(cell, (int, float)):
        return float(cell)
    text = cell_text(cell).strip().replace(",", ".", 1)
    match = _LEADING_DECIMAL_PATTERN.match(text)
    if match is None:
        return None
    return float(match.group(0))


def parse_availability(cell: GridCell) -> int:
    """Remaining-room count for one availability cell.

    ``X``/``x`` marks a closed cell and yields the ``-1`` sentinel, never a
    count. Empty and unparsable cells count as zero. Unlike prices, a comma
    ends the number: ``"2,9"`` is 2.
    """
    if _is_missing(cell) or cell == "":
        return 0
    if cell in ("X", "x"):
        return CLOSED_SENTINEL
    if isinstance(cell, bool):
        return 0
    if isinstance(cell, (int, float)):
        value = float(cell)
    else:
        match = _LEADING_DECIMAL_PATTERN.match(cell_text(cell).strip())
        if match is None:
            return 0
        value = float(match.group(0))
    if not math.isfinite(value):
        return 0
    return math.floor(value)


def derive_room_type_code(name: str) -> str:
    folded = unicodedata.normalize("NFKD", name.upper())
    ascii_only = "".join(char for char in folded if not unicodedata.combining(char))
    return _NON_CODE_CHARACTERS.sub("_", ascii_only)[:ROOM_TYPE_CODE_MAX_LENGTH]


def split_rate_plan_label(label: str) -> tuple[str, str]:
    code, separator, name = label.partition(RATE_PLAN_SEPARATOR)
    if not separator:
        return label, label
    return code or label, name or label


def extract_hotel_name(cell: GridCell) -> str:
    match = _HOTEL_NAME_PATTERN.search(cell_text(cell))
    if match is None:
        return DEFAULT_HOTEL_NAME
    return match.group(0).strip()


def is_header_date(cell: GridCell) -> bool:
    """True for cells that occupy a slot on the date axis."""
    if isinstance(cell, date):
        return True
    return _HEADER_DATE_PATTERN.match(cell_text(cell)) is not None


def parse_header_date(cell: GridCell) -> Optional[str]:
    """Normalize one header cell to ``YYYY-MM-DD`` or return ``None``.

    ``None`` covers both text that is not a date and text that is shaped like
    one but names no calendar day (``2/30/24``).
    """
    if isinstance(cell, datetime):
        return cell.date().isoformat()
    if isinstance(cell, date):
        return cell.isoformat()

    match = _HEADER_DATE_PATTERN.match(cell_text(cell))
    if match is None:
        return None
    month, day, year = (int(part) for part in match.groups())
    if year < 100:
        year = 2000 + year if year < 50 else 1900 + year
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


class PlanningParser:
    """Builds an immutable ``PlanningDataset`` from a raw spreadsheet grid."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def _extract_date_columns(
        self,
        header_cells: Sequence[GridCell],
    ) -> list[tuple[Optional[str], int]]:
        """Pair each date-shaped header cell with the body column it reads.

        The j-th date-shaped cell reads body column ``3 + j`` whatever its own
        header position, so cells that are not date-shaped shift later values
        left. A date-shaped cell that names no calendar day keeps its column
        with a ``None`` date; its values are dropped.
        """
        date_columns: list[tuple[Optional[str], int]] = []
        for offset, cell in enumerate(header_cells):
            if _is_missing(cell) or cell == "":
                continue
            if not is_header_date(cell):
                log_event(
                    logger,
                    "Header date not recognized",
                    level=logging.DEBUG,
                    column=FIRST_VALUE_COLUMN + offset,
                    value=repr(cell),
                )
                continue
            column = FIRST_VALUE_COLUMN + len(date_columns)
            iso_date = parse_header_date(cell)
            if iso_date is None:
                log_event(
                    logger,
                    "Impossible header date",
                    level=logging.DEBUG,
                    column=column,
                    value=repr(cell),
                )
            date_columns.append((iso_date, column))
        return date_columns

    def parse(self, grid: Optional[RawSheet]) -> PlanningDataset:
        if grid is None or len(grid) < 2:
            raise InvalidInputError("Planning grid must contain a header row and at least one data row")

        header_row = grid[0] or []
        hotel_name = extract_hotel_name(header_row[0] if header_row else None)
        date_columns = [
            (iso_date, column)
            for iso_date, column in self._extract_date_columns(list(header_row[FIRST_VALUE_COLUMN:]))
            if iso_date is not None
        ]
        # Repeated dates keep their own columns; the date axis lists each once.
        dates = list(dict.fromkeys(iso_date for iso_date, _ in date_columns))

        room_types: dict[str, RoomType] = {}
        rate_plans: dict[str, RatePlan] = {}
        availability: list[AvailabilityFact] = []
        pricing: list[PricingFact] = []
        skipped_rows = 0

        for row in grid[1:]:
            if not row or len(row) < FIRST_VALUE_COLUMN + 1:
                skipped_rows += 1
                continue

            room_type_label = cell_text(row[0]).strip()
            rate_plan_label = cell_text(row[1]).strip()
            row_kind = cell_text(row[2]).strip()
            if not room_type_label:
                skipped_rows += 1
                continue

            room_code = derive_room_type_code(room_type_label)
            if room_code not in room_types:
                room_types[room_code] = RoomType(
                    code=room_code,
                    name=room_type_label,
                    description=room_type_label,
                )

            plan_code, plan_name = split_rate_plan_label(rate_plan_label)
            if rate_plan_label and rate_plan_label != AVAILABILITY_ROW_KIND:
                if plan_code not in rate_plans:
                    rate_plans[plan_code] = RatePlan(
                        code=plan_code,
                        name=plan_name,
                        description=plan_name,
                        commission=default_commission(plan_code),
                    )

            for iso_date, column in date_columns:
                if column >= len(row) or _is_missing(row[column]):
                    continue
                value = row[column]

                if row_kind == AVAILABILITY_ROW_KIND:
                    availability.append(
                        AvailabilityFact.from_count(
                            room_type=room_type_label,
                            date=iso_date,
                            available=parse_availability(value),
                        )
                    )
                elif row_kind == PRICE_ROW_KIND and rate_plan_label:
                    price = parse_decimal(value)
                    if price is not None and math.isfinite(price) and price > 0:
                        pricing.append(
                            PricingFact(
                                room_type=room_type_label,
                                rate_plan=plan_code,
                                date=iso_date,
                                price=price,
                            )
                        )

        dataset = PlanningDataset(
            hotel_name=hotel_name,
            dates=tuple(dates),
            room_types=room_types,
            rate_plans=rate_plans,
            availability=tuple(availability),
            pricing=tuple(pricing),
        )
        log_event(
            logger,
            "Planning parsed",
            hotel=hotel_name,
            dates=len(dates),
            room_types=len(room_types),
            rate_plans=len(rate_plans),
            availability_facts=len(availability),
            pricing_facts=len(pricing),
            skipped_rows=skipped_rows,
        )
        return dataset
