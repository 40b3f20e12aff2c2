"""Tariff analytics: price disparity, monthly trends and rate plan comparison."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from backend.domain.errors import IncompleteRequestError
from backend.domain.models import (
    MonthlyTrend,
    PlanningDataset,
    PriceDisparity,
    PricingFact,
    StrategyCombo,
    StrategyPoint,
)
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger, log_event


logger = get_logger(__name__)

ALL_FILTER = "all"


def _is_unfiltered(value: Optional[str]) -> bool:
    return not value or value == ALL_FILTER


def _require_range(start_date: str, end_date: str) -> None:
    if not start_date or not end_date:
        raise IncompleteRequestError("start_date and end_date are required")


def _facts_in_range(
    dataset: PlanningDataset,
    start_date: str,
    end_date: str,
) -> list[PricingFact]:
    return [fact for fact in dataset.pricing if start_date <= fact.date <= end_date]


class AnalyticsService:
    """Statistics over the pricing facts of one planning snapshot."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def analyze_disparities(
        self,
        dataset: PlanningDataset,
        start_date: str,
        end_date: str,
        room_type: Optional[str] = None,
        rate_plan: Optional[str] = None,
    ) -> list[PriceDisparity]:
        """Deviation of each price from the mean of the filtered set.

        Sorted by absolute deviation percent, largest first. An empty filtered
        set yields an empty list.
        """
        _require_range(start_date, end_date)
        facts = [
            fact
            for fact in _facts_in_range(dataset, start_date, end_date)
            if (_is_unfiltered(room_type) or fact.room_type == room_type)
            and (_is_unfiltered(rate_plan) or fact.rate_plan == rate_plan)
        ]
        if not facts:
            return []

        mean_price = float(np.mean([fact.price for fact in facts]))
        threshold = self._settings.disparity_stable_threshold_percent

        disparities: list[PriceDisparity] = []
        for fact in facts:
            deviation = fact.price - mean_price
            deviation_percent = deviation / mean_price * 100
            if abs(deviation_percent) <= threshold:
                trend = "stable"
            else:
                trend = "up" if deviation_percent > 0 else "down"
            disparities.append(
                PriceDisparity(
                    date=fact.date,
                    room_type=fact.room_type,
                    rate_plan=fact.rate_plan,
                    price=fact.price,
                    mean_price=mean_price,
                    deviation=deviation,
                    deviation_percent=deviation_percent,
                    trend=trend,
                )
            )

        disparities.sort(key=lambda item: abs(item.deviation_percent), reverse=True)
        log_event(
            logger,
            "Disparity analysis completed",
            start=start_date,
            end=end_date,
            facts=len(facts),
            mean=mean_price,
        )
        return disparities

    def aggregate_monthly(
        self,
        dataset: PlanningDataset,
        start_date: str,
        end_date: str,
    ) -> list[MonthlyTrend]:
        _require_range(start_date, end_date)
        facts = _facts_in_range(dataset, start_date, end_date)
        if not facts:
            return []

        frame = pd.DataFrame(
            {
                "month": [fact.date[:7] for fact in facts],
                "price": [fact.price for fact in facts],
            }
        )
        grouped = (
            frame.groupby("month", sort=True)["price"]
            .agg(["mean", "min", "max", "count"])
            .sort_index()
        )
        return [
            MonthlyTrend(
                month=str(month),
                avg_price=float(row["mean"]),
                min_price=float(row["min"]),
                max_price=float(row["max"]),
                fact_count=int(row["count"]),
            )
            for month, row in grouped.iterrows()
        ]

    def compare_strategies(
        self,
        dataset: PlanningDataset,
        combos: Sequence[StrategyCombo],
        start_date: str,
        end_date: str,
    ) -> list[StrategyPoint]:
        """Flat union of the pricing facts of every requested combo, by date."""
        _require_range(start_date, end_date)
        wanted = {(combo.room_type, combo.rate_plan) for combo in combos}
        points = [
            StrategyPoint(
                date=fact.date,
                room_type=fact.room_type,
                rate_plan=fact.rate_plan,
                price=fact.price,
            )
            for fact in _facts_in_range(dataset, start_date, end_date)
            if (fact.room_type, fact.rate_plan) in wanted
        ]
        points.sort(key=lambda point: point.date)
        return points


def pivot_strategies(points: Sequence[StrategyPoint]) -> dict[str, dict[str, float]]:
    """Date -> ``"<room type> - <rate plan>"`` -> price; first price per cell wins."""
    pivot: dict[str, dict[str, float]] = {}
    for point in points:
        key = StrategyCombo(room_type=point.room_type, rate_plan=point.rate_plan).key
        pivot.setdefault(point.date, {}).setdefault(key, point.price)
    return pivot
