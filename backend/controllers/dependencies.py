"""Shared FastAPI dependency providers and error translation for controllers."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from backend.domain.errors import (
    DatasetNotLoadedError,
    DuplicatePartnerError,
    IncompleteRequestError,
    InvalidInputError,
    NoPricingDataError,
    PartnerNotFoundError,
    PlanningError,
    UnauthorizedRatePlanError,
)
from backend.services.partner_registry import PartnerRegistry
from backend.services.workflow_service import PlanningWorkflowService
from backend.utils.config import get_settings


_STATUS_BY_ERROR: tuple[tuple[type[PlanningError], int], ...] = (
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (IncompleteRequestError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedRatePlanError, status.HTTP_403_FORBIDDEN),
    (NoPricingDataError, status.HTTP_404_NOT_FOUND),
    (DatasetNotLoadedError, status.HTTP_404_NOT_FOUND),
    (PartnerNotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicatePartnerError, status.HTTP_409_CONFLICT),
)


def to_http_error(exc: PlanningError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def get_workflow_service(request: Request) -> PlanningWorkflowService:
    service = getattr(request.app.state, "workflow_service", None)
    if service is None:
        registry = getattr(request.app.state, "partner_registry", None)
        service = PlanningWorkflowService(
            partner_registry=registry,
            settings=get_settings(),
        )
        request.app.state.workflow_service = service
    return service


def get_partner_registry(request: Request) -> PartnerRegistry:
    registry = getattr(request.app.state, "partner_registry", None)
    if registry is None:
        registry = get_workflow_service(request).partner_registry
        request.app.state.partner_registry = registry
    return registry
