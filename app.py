"""
app.py: FastAPI application factory.

This is the ASGI application object imported by uvicorn. It wires the
session repository, the partner registry and the query services, then
registers the routers.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from backend.controllers.analytics_controller import router as analytics_router
from backend.controllers.partner_controller import router as partner_router
from backend.controllers.planning_controller import router as planning_router
from backend.repository.session_repository import SessionRepository
from backend.services.analytics_service import AnalyticsService
from backend.services.availability_service import AvailabilityService
from backend.services.forecast_service import ForecastService
from backend.services.parsing_service import PlanningParser
from backend.services.partner_registry import PartnerRegistry
from backend.services.pricing_service import PricingService
from backend.services.workflow_service import PlanningWorkflowService
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger, log_event


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Every service is created here and stored on app.state; nothing is a
    module-level singleton, so tests can build isolated apps.
    """
    settings = settings or get_settings()

    # --- In-memory session state ---
    repository = SessionRepository()
    partner_registry = PartnerRegistry.with_defaults()

    # --- Services (pure computation over the current snapshot) ---
    workflow_service = PlanningWorkflowService(
        repository=repository,
        partner_registry=partner_registry,
        parser=PlanningParser(settings=settings),
        availability_service=AvailabilityService(),
        pricing_service=PricingService(settings=settings),
        analytics_service=AnalyticsService(settings=settings),
        forecast_service=ForecastService(settings=settings),
        settings=settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log_event(
            logger,
            "Startup complete",
            app=settings.app_name,
            version=settings.app_version,
            partners=len(partner_registry.snapshot()),
        )
        yield
        log_event(logger, "Shutdown", planning_snapshot="discarded")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(planning_router)
    app.include_router(partner_router)
    app.include_router(analytics_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.repository = repository
    app.state.partner_registry = partner_registry
    app.state.workflow_service = workflow_service

    return app


# Module-level app object for uvicorn
app = create_app()
