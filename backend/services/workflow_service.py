"""Session orchestration: upload -> parse -> store, then queries on the snapshot."""

from __future__ import annotations

from pathlib import PurePath
from typing import Any, Optional, Sequence

from backend.domain.errors import DatasetNotLoadedError, InvalidInputError
from backend.domain.models import (
    GridCell,
    PlanningDataset,
    SimulationOptions,
    SimulationRequest,
    StrategyCombo,
)
from backend.repository.session_repository import SessionRepository
from backend.repository.workbook_reader import read_workbook
from backend.services.analytics_service import AnalyticsService, pivot_strategies
from backend.services.availability_service import AvailabilityService
from backend.services.forecast_service import ForecastService
from backend.services.parsing_service import PlanningParser
from backend.services.partner_registry import PartnerRegistry
from backend.services.pricing_service import PricingService, export_simulations_csv
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger, log_event


logger = get_logger(__name__)


class PlanningWorkflowService:
    """Coordinates the parser, the partner registry and the query services.

    Each public query reads the current snapshot once and works on that
    reference only, so a concurrent upload never changes a result mid-way.
    """

    def __init__(
        self,
        repository: Optional[SessionRepository] = None,
        partner_registry: Optional[PartnerRegistry] = None,
        parser: Optional[PlanningParser] = None,
        availability_service: Optional[AvailabilityService] = None,
        pricing_service: Optional[PricingService] = None,
        analytics_service: Optional[AnalyticsService] = None,
        forecast_service: Optional[ForecastService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or SessionRepository()
        self._partner_registry = partner_registry or PartnerRegistry.with_defaults()
        self._parser = parser or PlanningParser(settings=self._settings)
        self._availability_service = availability_service or AvailabilityService()
        self._pricing_service = pricing_service or PricingService(settings=self._settings)
        self._analytics_service = analytics_service or AnalyticsService(settings=self._settings)
        self._forecast_service = forecast_service or ForecastService(settings=self._settings)

    @property
    def partner_registry(self) -> PartnerRegistry:
        return self._partner_registry

    def _dataset(self) -> PlanningDataset:
        dataset = self._repository.current()
        if dataset is None:
            raise DatasetNotLoadedError("No planning loaded. Upload a planning file first.")
        return dataset

    def _summary_payload(self, dataset: PlanningDataset) -> dict[str, Any]:
        payload: dict[str, Any] = dict(dataset.summary())
        payload.update(self._repository.metadata())
        payload["room_types"] = dataset.room_type_names
        payload["rate_plans"] = [plan.to_dict() for plan in dataset.rate_plans.values()]
        payload["dates"] = list(dataset.dates)
        return payload

    def load_planning_file(self, content: bytes, filename: str) -> dict[str, Any]:
        suffix = PurePath(filename).suffix.lower()
        if suffix not in self._settings.allowed_upload_suffixes:
            raise InvalidInputError(
                f"Unsupported planning file '{filename}'. Allowed: "
                f"{', '.join(self._settings.allowed_upload_suffixes)}"
            )
        if len(content) > self._settings.max_upload_bytes:
            raise InvalidInputError(
                f"Planning file exceeds {self._settings.max_upload_bytes} bytes"
            )
        log_event(logger, "Planning upload received", filename=filename, bytes=len(content))
        rows = read_workbook(content, filename)
        return self.load_planning_grid(rows, source_name=filename)

    def load_planning_grid(
        self,
        rows: Sequence[Sequence[GridCell]],
        source_name: str = "grid",
    ) -> dict[str, Any]:
        dataset = self._parser.parse(rows)
        self._repository.store(dataset, source_name=source_name)
        return self._summary_payload(dataset)

    def reset_planning(self) -> None:
        self._repository.clear()

    def get_summary(self) -> dict[str, Any]:
        return self._summary_payload(self._dataset())

    def query_availability(
        self,
        *,
        start_date: str,
        end_date: str,
        room_types: Optional[Sequence[str]] = None,
    ) -> list[dict[str, Any]]:
        days = self._availability_service.query(
            self._dataset(),
            start_date=start_date,
            end_date=end_date,
            room_type_names=room_types,
        )
        return [day.to_dict() for day in days]

    def simulate(
        self,
        request: SimulationRequest,
        options: Optional[SimulationOptions] = None,
    ) -> dict[str, Any]:
        result = self._pricing_service.simulate(
            self._dataset(),
            self._partner_registry.snapshot(),
            request,
            options,
        )
        return result.to_dict()

    def export_simulations(
        self,
        requests: Sequence[tuple[SimulationRequest, SimulationOptions]],
    ) -> str:
        dataset = self._dataset()
        partners = self._partner_registry.snapshot()
        results = [
            self._pricing_service.simulate(dataset, partners, request, options)
            for request, options in requests
        ]
        log_event(logger, "Simulation export generated", rows=len(results))
        return export_simulations_csv(results)

    def rate_plans_for_partner(self, partner_name: str) -> list[dict[str, Any]]:
        plans = self._pricing_service.authorized_rate_plans(
            self._dataset(),
            self._partner_registry.snapshot(),
            partner_name,
        )
        return [plan.to_dict() for plan in plans]

    def analyze_disparities(
        self,
        *,
        start_date: str,
        end_date: str,
        room_type: Optional[str] = None,
        rate_plan: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        disparities = self._analytics_service.analyze_disparities(
            self._dataset(),
            start_date=start_date,
            end_date=end_date,
            room_type=room_type,
            rate_plan=rate_plan,
        )
        return [item.to_dict() for item in disparities]

    def aggregate_monthly(self, *, start_date: str, end_date: str) -> list[dict[str, Any]]:
        trends = self._analytics_service.aggregate_monthly(
            self._dataset(),
            start_date=start_date,
            end_date=end_date,
        )
        return [item.to_dict() for item in trends]

    def compare_strategies(
        self,
        *,
        combos: Sequence[StrategyCombo],
        start_date: str,
        end_date: str,
    ) -> dict[str, Any]:
        points = self._analytics_service.compare_strategies(
            self._dataset(),
            combos=combos,
            start_date=start_date,
            end_date=end_date,
        )
        return {
            "points": [point.to_dict() for point in points],
            "pivot": pivot_strategies(points),
        }

    def forecast(self, *, horizon_days: Optional[int] = None) -> list[dict[str, Any]]:
        points = self._forecast_service.forecast(self._dataset(), horizon_days=horizon_days)
        return [point.to_dict() for point in points]
