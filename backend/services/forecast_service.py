"""Naive seasonal price forecast.

This is a demonstration curve, not a fitted model: a recent-price baseline
modulated by a sine seasonality and a random trend factor. The random source
is injectable so callers and tests can fix it.
"""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Optional

import numpy as np

from backend.domain.errors import InvalidInputError, NoPricingDataError
from backend.domain.models import ForecastPoint, PlanningDataset
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger, log_event


logger = get_logger(__name__)

SEASONALITY_AMPLITUDE = 0.1
TREND_LOW = 0.95
TREND_HIGH = 1.05
CONFIDENCE_FLOOR = 0.7
CONFIDENCE_DECAY = 0.3
BAND_LOW = 0.9
BAND_HIGH = 1.1


class ForecastService:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._rng = rng

    def _baseline(self, dataset: PlanningDataset) -> float:
        window = self._settings.forecast_baseline_window
        recent = sorted(dataset.pricing, key=lambda fact: fact.date)[-window:]
        return float(np.mean([fact.price for fact in recent]))

    def forecast(
        self,
        dataset: PlanningDataset,
        horizon_days: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> list[ForecastPoint]:
        horizon = horizon_days if horizon_days is not None else self._settings.forecast_horizon_days
        if horizon < 1:
            raise InvalidInputError("horizon_days must be >= 1")
        if not dataset.pricing:
            raise NoPricingDataError("Forecast requires at least one pricing fact")

        generator = rng or self._rng or np.random.default_rng(self._settings.forecast_random_seed)
        baseline = self._baseline(dataset)
        last_date = date.fromisoformat(max(fact.date for fact in dataset.pricing))
        trends = generator.uniform(TREND_LOW, TREND_HIGH, size=horizon)

        points: list[ForecastPoint] = []
        for step in range(1, horizon + 1):
            seasonality = 1 + SEASONALITY_AMPLITUDE * math.sin(2 * math.pi * step / horizon)
            predicted = baseline * seasonality * float(trends[step - 1])
            confidence = max(CONFIDENCE_FLOOR, 1 - (step / horizon) * CONFIDENCE_DECAY)
            points.append(
                ForecastPoint(
                    date=(last_date + timedelta(days=step)).isoformat(),
                    predicted_price=predicted,
                    min_price=predicted * BAND_LOW,
                    max_price=predicted * BAND_HIGH,
                    confidence=confidence,
                )
            )

        log_event(
            logger,
            "Forecast generated",
            horizon=horizon,
            baseline=baseline,
            start=points[0].date,
        )
        return points
