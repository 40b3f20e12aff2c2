"""Domain models for planning ingestion, pricing simulation and analytics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from functools import cached_property
from types import MappingProxyType
from typing import Literal, Mapping, Optional, Sequence, Union


GridCell = Union[str, int, float, date, datetime, None]
RawSheet = Sequence[Optional[Sequence[GridCell]]]

AvailabilityStatus = Literal["available", "sold-out", "closed"]
PriceTrend = Literal["up", "down", "stable"]

AVAILABILITY_ROW_KIND = "Left for sale"
PRICE_ROW_KIND = "Price (EUR)"
CLOSED_SENTINEL = -1
DEFAULT_CURRENCY = "EUR"


def availability_status(available: int) -> AvailabilityStatus:
    """Map a remaining-room count onto its status.

    Anything that is neither zero nor positive is closed, including the
    ``-1`` sentinel for blocked cells.
    """
    if available == 0:
        return "sold-out"
    if available > 0:
        return "available"
    return "closed"


@dataclass(frozen=True)
class RoomType:
    code: str
    name: str
    description: str


@dataclass(frozen=True)
class RatePlan:
    code: str
    name: str
    description: str
    commission: float

    def to_dict(self) -> dict[str, str | float]:
        return {
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "commission": self.commission,
        }


@dataclass(frozen=True)
class AvailabilityFact:
    room_type: str
    date: str
    available: int
    status: AvailabilityStatus

    @classmethod
    def from_count(cls, room_type: str, date: str, available: int) -> "AvailabilityFact":
        return cls(
            room_type=room_type,
            date=date,
            available=available,
            status=availability_status(available),
        )


@dataclass(frozen=True)
class PricingFact:
    room_type: str
    rate_plan: str
    date: str
    price: float
    currency: str = DEFAULT_CURRENCY


@dataclass(frozen=True, eq=False)
class PlanningDataset:
    """Immutable snapshot produced by one successful parse.

    Availability is keyed by room type *name* and pricing by rate plan
    *code*, mirroring the spreadsheet layout.
    """

    hotel_name: str
    dates: tuple[str, ...]
    room_types: Mapping[str, RoomType]
    rate_plans: Mapping[str, RatePlan]
    availability: tuple[AvailabilityFact, ...]
    pricing: tuple[PricingFact, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "room_types", MappingProxyType(dict(self.room_types)))
        object.__setattr__(self, "rate_plans", MappingProxyType(dict(self.rate_plans)))
        object.__setattr__(self, "dates", tuple(self.dates))
        object.__setattr__(self, "availability", tuple(self.availability))
        object.__setattr__(self, "pricing", tuple(self.pricing))

    @property
    def room_type_names(self) -> list[str]:
        return [room_type.name for room_type in self.room_types.values()]

    @cached_property
    def availability_index(self) -> Mapping[tuple[str, str], AvailabilityFact]:
        """First fact per ``(room_type, date)``; later duplicates are ignored."""
        index: dict[tuple[str, str], AvailabilityFact] = {}
        for fact in self.availability:
            index.setdefault((fact.room_type, fact.date), fact)
        return MappingProxyType(index)

    def summary(self) -> dict[str, str | int | None]:
        sorted_dates = sorted(self.dates)
        return {
            "hotel_name": self.hotel_name,
            "room_type_count": len(self.room_types),
            "rate_plan_count": len(self.rate_plans),
            "date_count": len(self.dates),
            "availability_fact_count": len(self.availability),
            "pricing_fact_count": len(self.pricing),
            "first_date": sorted_dates[0] if sorted_dates else None,
            "last_date": sorted_dates[-1] if sorted_dates else None,
        }


@dataclass(frozen=True)
class Partner:
    name: str
    commission: float
    codes: frozenset[str] = field(default_factory=frozenset)

    def authorizes(self, rate_plan_code: str) -> bool:
        return rate_plan_code in self.codes

    def to_dict(self) -> dict[str, str | float | list[str]]:
        return {
            "name": self.name,
            "commission": self.commission,
            "codes": sorted(self.codes),
        }


@dataclass(frozen=True)
class SimulationRequest:
    partner_name: str
    room_type: str
    rate_plan: str
    start_date: str
    end_date: str


@dataclass(frozen=True)
class SimulationOptions:
    apply_commission: bool = True
    promotional_discount_percent: float = 0.0


@dataclass(frozen=True)
class SimulationResult:
    room_type: str
    rate_plan: str
    partner: str
    start_date: str
    end_date: str
    gross_price: float
    commission_percent: float
    net_price: float
    nights: int
    available: bool

    def to_dict(self) -> dict[str, str | float | int | bool]:
        return {
            "room_type": self.room_type,
            "rate_plan": self.rate_plan,
            "partner": self.partner,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "gross_price": self.gross_price,
            "commission_percent": self.commission_percent,
            "net_price": self.net_price,
            "nights": self.nights,
            "available": self.available,
        }


@dataclass(frozen=True)
class RoomAvailability:
    available: int
    status: AvailabilityStatus


@dataclass(frozen=True)
class AvailabilityDay:
    date: str
    per_room_type: Mapping[str, RoomAvailability]

    def to_dict(self) -> dict[str, object]:
        return {
            "date": self.date,
            "room_types": {
                name: {"available": item.available, "status": item.status}
                for name, item in self.per_room_type.items()
            },
        }


@dataclass(frozen=True)
class PriceDisparity:
    date: str
    room_type: str
    rate_plan: str
    price: float
    mean_price: float
    deviation: float
    deviation_percent: float
    trend: PriceTrend

    def to_dict(self) -> dict[str, str | float]:
        return {
            "date": self.date,
            "room_type": self.room_type,
            "rate_plan": self.rate_plan,
            "price": self.price,
            "mean_price": self.mean_price,
            "deviation": self.deviation,
            "deviation_percent": self.deviation_percent,
            "trend": self.trend,
        }


@dataclass(frozen=True)
class MonthlyTrend:
    month: str
    avg_price: float
    min_price: float
    max_price: float
    fact_count: int

    def to_dict(self) -> dict[str, str | float | int]:
        return {
            "month": self.month,
            "avg_price": self.avg_price,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "fact_count": self.fact_count,
        }


@dataclass(frozen=True)
class StrategyCombo:
    room_type: str
    rate_plan: str

    @property
    def key(self) -> str:
        return f"{self.room_type} - {self.rate_plan}"


@dataclass(frozen=True)
class StrategyPoint:
    date: str
    room_type: str
    rate_plan: str
    price: float

    def to_dict(self) -> dict[str, str | float]:
        return {
            "date": self.date,
            "room_type": self.room_type,
            "rate_plan": self.rate_plan,
            "price": self.price,
        }


@dataclass(frozen=True)
class ForecastPoint:
    date: str
    predicted_price: float
    min_price: float
    max_price: float
    confidence: float

    def to_dict(self) -> dict[str, str | float]:
        return {
            "date": self.date,
            "predicted_price": self.predicted_price,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "confidence": self.confidence,
        }
