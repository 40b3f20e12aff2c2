"""Controller layer for planning upload, availability and price simulation."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response
from pydantic import BaseModel, Field, field_validator

from backend.controllers.dependencies import get_workflow_service, to_http_error
from backend.domain.errors import PlanningError
from backend.domain.models import SimulationOptions, SimulationRequest
from backend.services.workflow_service import PlanningWorkflowService
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["planning"])


class GridUploadRequest(BaseModel):
    rows: list[list[Any]]
    source_name: str = Field(default="grid", min_length=1)


class RatePlanRow(BaseModel):
    code: str
    name: str
    description: str
    commission: float = Field(ge=0.0)


class PlanningSummaryResponse(BaseModel):
    hotel_name: str
    room_type_count: int = Field(ge=0)
    rate_plan_count: int = Field(ge=0)
    date_count: int = Field(ge=0)
    availability_fact_count: int = Field(ge=0)
    pricing_fact_count: int = Field(ge=0)
    first_date: Optional[date] = None
    last_date: Optional[date] = None
    source_name: Optional[str] = None
    loaded_at: Optional[str] = None
    room_types: list[str]
    rate_plans: list[RatePlanRow]
    dates: list[date]


class AvailabilityRequest(BaseModel):
    start_date: date
    end_date: date
    room_types: Optional[list[str]] = None

    @field_validator("room_types")
    @classmethod
    def validate_room_types(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        if value is None:
            return None
        return [name.strip() for name in value if name.strip()]


class RoomAvailabilityRow(BaseModel):
    available: int
    status: str


class AvailabilityDayRow(BaseModel):
    date: date
    room_types: dict[str, RoomAvailabilityRow]


class AvailabilityResponse(BaseModel):
    days: list[AvailabilityDayRow]


class SimulateRequest(BaseModel):
    partner_name: str = ""
    room_type: str = ""
    rate_plan: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    apply_commission: bool = True
    promotional_discount_percent: float = Field(default=0.0, ge=0.0, le=100.0)

    def to_domain(self) -> tuple[SimulationRequest, SimulationOptions]:
        return (
            SimulationRequest(
                partner_name=self.partner_name.strip(),
                room_type=self.room_type.strip(),
                rate_plan=self.rate_plan.strip(),
                start_date=self.start_date.isoformat() if self.start_date else "",
                end_date=self.end_date.isoformat() if self.end_date else "",
            ),
            SimulationOptions(
                apply_commission=self.apply_commission,
                promotional_discount_percent=self.promotional_discount_percent,
            ),
        )


class SimulateResponse(BaseModel):
    room_type: str
    rate_plan: str
    partner: str
    start_date: date
    end_date: date
    gross_price: float = Field(gt=0.0)
    commission_percent: float = Field(ge=0.0)
    net_price: float
    nights: int = Field(ge=1)
    available: bool


class ExportRequest(BaseModel):
    simulations: list[SimulateRequest] = Field(min_length=1)


@router.get("/health", status_code=status.HTTP_200_OK)
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post(
    "/planning/upload",
    response_model=PlanningSummaryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_planning(
    file: UploadFile = File(...),
    workflow_service: PlanningWorkflowService = Depends(get_workflow_service),
) -> PlanningSummaryResponse:
    """Parse an exported planning workbook and make it the current snapshot."""
    content = await file.read()
    try:
        result = workflow_service.load_planning_file(content, file.filename or "")
        return PlanningSummaryResponse(**result)
    except PlanningError as exc:
        raise to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected planning upload failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load planning file",
        ) from exc


@router.post(
    "/planning/grid",
    response_model=PlanningSummaryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_planning_grid(
    payload: GridUploadRequest,
    workflow_service: PlanningWorkflowService = Depends(get_workflow_service),
) -> PlanningSummaryResponse:
    try:
        result = workflow_service.load_planning_grid(payload.rows, source_name=payload.source_name)
        return PlanningSummaryResponse(**result)
    except PlanningError as exc:
        raise to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected planning grid failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load planning grid",
        ) from exc


@router.get("/planning", response_model=PlanningSummaryResponse, status_code=status.HTTP_200_OK)
async def get_planning(
    workflow_service: PlanningWorkflowService = Depends(get_workflow_service),
) -> PlanningSummaryResponse:
    try:
        return PlanningSummaryResponse(**workflow_service.get_summary())
    except PlanningError as exc:
        raise to_http_error(exc) from exc


@router.delete("/planning", status_code=status.HTTP_204_NO_CONTENT)
async def reset_planning(
    workflow_service: PlanningWorkflowService = Depends(get_workflow_service),
) -> Response:
    workflow_service.reset_planning()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/availability", response_model=AvailabilityResponse, status_code=status.HTTP_200_OK)
async def availability(
    payload: AvailabilityRequest,
    workflow_service: PlanningWorkflowService = Depends(get_workflow_service),
) -> AvailabilityResponse:
    try:
        days = workflow_service.query_availability(
            start_date=payload.start_date.isoformat(),
            end_date=payload.end_date.isoformat(),
            room_types=payload.room_types,
        )
        return AvailabilityResponse(days=days)
    except PlanningError as exc:
        raise to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected availability failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute availability",
        ) from exc


@router.post("/simulate", response_model=SimulateResponse, status_code=status.HTTP_200_OK)
async def simulate(
    payload: SimulateRequest,
    workflow_service: PlanningWorkflowService = Depends(get_workflow_service),
) -> SimulateResponse:
    """Gross price, commission and net price for one partner booking."""
    try:
        request, options = payload.to_domain()
        return SimulateResponse(**workflow_service.simulate(request, options))
    except PlanningError as exc:
        raise to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected simulation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to run simulation",
        ) from exc


@router.post("/simulate/export", status_code=status.HTTP_200_OK)
async def export_simulations(
    payload: ExportRequest,
    workflow_service: PlanningWorkflowService = Depends(get_workflow_service),
) -> Response:
    try:
        csv_text = workflow_service.export_simulations(
            [item.to_domain() for item in payload.simulations]
        )
    except PlanningError as exc:
        raise to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected simulation export failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to export simulations",
        ) from exc
    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=simulations.csv"},
    )
