from __future__ import annotations

from dataclasses import replace

import numpy as np
import pytest

from backend.domain.errors import InvalidInputError, NoPricingDataError
from backend.domain.models import PlanningDataset, PricingFact
from backend.services.forecast_service import ForecastService
from backend.utils.config import get_settings


class _FlatTrend:
    """Random source stand-in that always returns a neutral trend factor."""

    def uniform(self, low, high, size):
        return np.ones(size)


def _build_dataset(pricing: list[PricingFact]) -> PlanningDataset:
    return PlanningDataset(
        hotel_name="HOTEL TEST",
        dates=tuple(sorted({fact.date for fact in pricing})),
        room_types={},
        rate_plans={},
        availability=[],
        pricing=pricing,
    )


def _sample_pricing() -> list[PricingFact]:
    return [
        PricingFact("Double", "OTA-RO-FLEX", "2024-01-05", 100.0),
        PricingFact("Double", "OTA-RO-FLEX", "2024-01-06", 110.0),
        PricingFact("Double", "OTA-RO-FLEX", "2024-01-07", 120.0),
    ]


def test_forecast_default_horizon_and_dates() -> None:
    points = ForecastService().forecast(_build_dataset(_sample_pricing()))

    assert len(points) == get_settings().forecast_horizon_days
    assert points[0].date == "2024-01-08"
    assert points[-1].date == "2024-02-06"


def test_forecast_is_reproducible_with_default_seed() -> None:
    dataset = _build_dataset(_sample_pricing())
    service = ForecastService()

    first = service.forecast(dataset, horizon_days=10)
    second = service.forecast(dataset, horizon_days=10)

    assert [point.predicted_price for point in first] == [point.predicted_price for point in second]


def test_forecast_accepts_injected_generator() -> None:
    dataset = _build_dataset(_sample_pricing())

    first = ForecastService(rng=np.random.default_rng(7)).forecast(dataset, horizon_days=5)
    second = ForecastService().forecast(dataset, horizon_days=5, rng=np.random.default_rng(7))

    assert [point.predicted_price for point in first] == [point.predicted_price for point in second]


def test_forecast_confidence_and_bands() -> None:
    points = ForecastService().forecast(_build_dataset(_sample_pricing()), horizon_days=30)

    assert points[0].confidence == pytest.approx(0.99)
    assert points[-1].confidence == pytest.approx(0.7)
    confidences = [point.confidence for point in points]
    assert confidences == sorted(confidences, reverse=True)
    for point in points:
        assert point.min_price == pytest.approx(point.predicted_price * 0.9)
        assert point.max_price == pytest.approx(point.predicted_price * 1.1)
        assert 0.7 <= point.confidence <= 1.0


def test_forecast_stays_within_seasonality_and_trend_envelope() -> None:
    points = ForecastService().forecast(_build_dataset(_sample_pricing()), horizon_days=30)

    for point in points:
        assert 110.0 * 0.9 * 0.95 <= point.predicted_price <= 110.0 * 1.1 * 1.05


def test_forecast_baseline_uses_most_recent_dates() -> None:
    # Facts arrive out of date order; the latest date carries 200.
    pricing = [
        PricingFact("Double", "OTA-RO-FLEX", "2024-01-07", 200.0),
        PricingFact("Double", "OTA-RO-FLEX", "2024-01-05", 100.0),
        PricingFact("Double", "OTA-RO-FLEX", "2024-01-06", 100.0),
    ]
    settings = replace(get_settings(), forecast_baseline_window=1)

    points = ForecastService(settings=settings, rng=_FlatTrend()).forecast(
        _build_dataset(pricing),
        horizon_days=4,
    )

    # Seasonality is neutral halfway through and at the end of the horizon.
    assert points[1].predicted_price == pytest.approx(200.0)
    assert points[3].predicted_price == pytest.approx(200.0)
    assert points[0].predicted_price == pytest.approx(220.0)
    assert points[2].predicted_price == pytest.approx(180.0)


def test_forecast_errors() -> None:
    service = ForecastService()
    with pytest.raises(NoPricingDataError):
        service.forecast(_build_dataset([]))
    with pytest.raises(InvalidInputError):
        service.forecast(_build_dataset(_sample_pricing()), horizon_days=0)
