"""Controller layer for the OTA partner registry."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from pydantic import BaseModel, Field, field_validator

from backend.controllers.dependencies import (
    get_partner_registry,
    get_workflow_service,
    to_http_error,
)
from backend.controllers.planning_controller import RatePlanRow
from backend.domain.errors import PlanningError
from backend.domain.models import Partner
from backend.services.partner_registry import PartnerRegistry
from backend.services.workflow_service import PlanningWorkflowService
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/partners", tags=["partners"])


class PartnerBody(BaseModel):
    commission: float = Field(ge=0.0, le=100.0)
    codes: list[str] = Field(default_factory=list)

    @field_validator("codes")
    @classmethod
    def strip_codes(cls, value: list[str]) -> list[str]:
        return [code.strip() for code in value if code.strip()]


class PartnerCreateRequest(PartnerBody):
    name: str = Field(min_length=1)


class PartnerRow(BaseModel):
    name: str
    commission: float
    codes: list[str]


class PartnerListResponse(BaseModel):
    partners: list[PartnerRow]


def _to_list_response(partners: tuple[Partner, ...]) -> PartnerListResponse:
    return PartnerListResponse(partners=[PartnerRow(**partner.to_dict()) for partner in partners])


@router.get("", response_model=PartnerListResponse, status_code=status.HTTP_200_OK)
async def list_partners(
    registry: PartnerRegistry = Depends(get_partner_registry),
) -> PartnerListResponse:
    return _to_list_response(registry.snapshot())


@router.put("/config", response_model=PartnerListResponse, status_code=status.HTTP_200_OK)
async def replace_partner_config(
    payload: dict[str, Any],
    registry: PartnerRegistry = Depends(get_partner_registry),
) -> PartnerListResponse:
    """Replace the whole partner list with a ``{"partners": {...}}`` document."""
    try:
        return _to_list_response(registry.load_config(payload))
    except PlanningError as exc:
        raise to_http_error(exc) from exc


@router.post("/reset", response_model=PartnerListResponse, status_code=status.HTTP_200_OK)
async def reset_partners(
    registry: PartnerRegistry = Depends(get_partner_registry),
) -> PartnerListResponse:
    return _to_list_response(registry.reset_to_defaults())


@router.post("", response_model=PartnerRow, status_code=status.HTTP_201_CREATED)
async def add_partner(
    payload: PartnerCreateRequest,
    registry: PartnerRegistry = Depends(get_partner_registry),
) -> PartnerRow:
    try:
        partner = registry.add(payload.name, payload.commission, payload.codes)
        return PartnerRow(**partner.to_dict())
    except PlanningError as exc:
        raise to_http_error(exc) from exc


@router.put("/{name}", response_model=PartnerRow, status_code=status.HTTP_200_OK)
async def update_partner(
    name: str,
    payload: PartnerBody,
    registry: PartnerRegistry = Depends(get_partner_registry),
) -> PartnerRow:
    try:
        partner = registry.update(name, payload.commission, payload.codes)
        return PartnerRow(**partner.to_dict())
    except PlanningError as exc:
        raise to_http_error(exc) from exc


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_partner(
    name: str,
    registry: PartnerRegistry = Depends(get_partner_registry),
) -> Response:
    try:
        registry.remove(name)
    except PlanningError as exc:
        raise to_http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{name}/rate_plans", response_model=list[RatePlanRow], status_code=status.HTTP_200_OK)
async def partner_rate_plans(
    name: str,
    workflow_service: PlanningWorkflowService = Depends(get_workflow_service),
) -> list[RatePlanRow]:
    """Rate plans of the current planning that the partner may sell."""
    try:
        return [RatePlanRow(**plan) for plan in workflow_service.rate_plans_for_partner(name)]
    except PlanningError as exc:
        raise to_http_error(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected partner rate plan lookup failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list partner rate plans",
        ) from exc
