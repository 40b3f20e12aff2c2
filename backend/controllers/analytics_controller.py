"""Controller layer for tariff disparity, trend, comparison and forecast endpoints."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from backend.controllers.dependencies import get_workflow_service, to_http_error
from backend.domain.errors import PlanningError
from backend.domain.models import StrategyCombo
from backend.services.workflow_service import PlanningWorkflowService
from backend.utils.logger import format_event, get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


class DateRangeRequest(BaseModel):
    start_date: date
    end_date: date


class DisparityRequest(DateRangeRequest):
    room_type: Optional[str] = None
    rate_plan: Optional[str] = None


class DisparityRow(BaseModel):
    date: date
    room_type: str
    rate_plan: str
    price: float = Field(gt=0.0)
    mean_price: float = Field(gt=0.0)
    deviation: float
    deviation_percent: float
    trend: str


class DisparityResponse(BaseModel):
    disparities: list[DisparityRow]


class MonthlyTrendRow(BaseModel):
    month: str = Field(pattern=r"^\d{4}-\d{2}$")
    avg_price: float
    min_price: float
    max_price: float
    fact_count: int = Field(ge=1)


class TrendResponse(BaseModel):
    months: list[MonthlyTrendRow]


class ComboRequest(BaseModel):
    room_type: str = Field(min_length=1)
    rate_plan: str = Field(min_length=1)


class CompareRequest(DateRangeRequest):
    combos: list[ComboRequest] = Field(min_length=1)


class StrategyPointRow(BaseModel):
    date: date
    room_type: str
    rate_plan: str
    price: float


class CompareResponse(BaseModel):
    points: list[StrategyPointRow]
    pivot: dict[str, dict[str, float]]


class ForecastRequest(BaseModel):
    horizon_days: Optional[int] = Field(default=None, ge=1, le=365)


class ForecastRow(BaseModel):
    date: date
    predicted_price: float
    min_price: float
    max_price: float
    confidence: float = Field(ge=0.0, le=1.0)


class ForecastResponse(BaseModel):
    forecast: list[ForecastRow]


def _unexpected(action: str, exc: Exception) -> HTTPException:
    logger.exception(format_event("Unexpected analytics failure", action=action))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


@router.post("/disparities", response_model=DisparityResponse, status_code=status.HTTP_200_OK)
async def disparities(
    payload: DisparityRequest,
    workflow_service: PlanningWorkflowService = Depends(get_workflow_service),
) -> DisparityResponse:
    try:
        rows = workflow_service.analyze_disparities(
            start_date=payload.start_date.isoformat(),
            end_date=payload.end_date.isoformat(),
            room_type=payload.room_type,
            rate_plan=payload.rate_plan,
        )
        return DisparityResponse(disparities=rows)
    except PlanningError as exc:
        raise to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("analyze price disparities", exc) from exc


@router.post("/trends", response_model=TrendResponse, status_code=status.HTTP_200_OK)
async def trends(
    payload: DateRangeRequest,
    workflow_service: PlanningWorkflowService = Depends(get_workflow_service),
) -> TrendResponse:
    try:
        rows = workflow_service.aggregate_monthly(
            start_date=payload.start_date.isoformat(),
            end_date=payload.end_date.isoformat(),
        )
        return TrendResponse(months=rows)
    except PlanningError as exc:
        raise to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("aggregate monthly trends", exc) from exc


@router.post("/compare", response_model=CompareResponse, status_code=status.HTTP_200_OK)
async def compare(
    payload: CompareRequest,
    workflow_service: PlanningWorkflowService = Depends(get_workflow_service),
) -> CompareResponse:
    try:
        result = workflow_service.compare_strategies(
            combos=[
                StrategyCombo(room_type=combo.room_type, rate_plan=combo.rate_plan)
                for combo in payload.combos
            ],
            start_date=payload.start_date.isoformat(),
            end_date=payload.end_date.isoformat(),
        )
        return CompareResponse(**result)
    except PlanningError as exc:
        raise to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("compare rate strategies", exc) from exc


@router.post("/forecast", response_model=ForecastResponse, status_code=status.HTTP_200_OK)
async def forecast(
    payload: ForecastRequest,
    workflow_service: PlanningWorkflowService = Depends(get_workflow_service),
) -> ForecastResponse:
    """Demonstration forecast; seeded, not a fitted model."""
    try:
        rows = workflow_service.forecast(horizon_days=payload.horizon_days)
        return ForecastResponse(forecast=rows)
    except PlanningError as exc:
        raise to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise _unexpected("generate forecast", exc) from exc
