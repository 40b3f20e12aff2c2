"""Booking price simulation for a partner, room type and rate plan."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from backend.domain.errors import (
    IncompleteRequestError,
    NoPricingDataError,
    UnauthorizedRatePlanError,
)
from backend.domain.models import (
    Partner,
    PlanningDataset,
    RatePlan,
    SimulationOptions,
    SimulationRequest,
    SimulationResult,
)
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger, log_event


logger = get_logger(__name__)

EXPORT_COLUMNS = [
    "Type Chambre",
    "Plan Tarifaire",
    "Partenaire",
    "Date Début",
    "Date Fin",
    "Prix",
    "Commission",
    "Prix Net",
]


def _find_partner(partners: Iterable[Partner], name: str) -> Optional[Partner]:
    for partner in partners:
        if partner.name == name:
            return partner
    return None


class PricingService:
    """Resolves a simulation request into gross and net prices.

    The result always reports ``available=True``: availability rows are not
    cross-checked against the requested stay.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def _validate_request(self, request: SimulationRequest) -> None:
        missing = [
            field_name
            for field_name, value in (
                ("partner_name", request.partner_name),
                ("room_type", request.room_type),
                ("rate_plan", request.rate_plan),
                ("start_date", request.start_date),
                ("end_date", request.end_date),
            )
            if not value or not str(value).strip()
        ]
        if missing:
            raise IncompleteRequestError(f"Missing required fields: {', '.join(missing)}")

    def simulate(
        self,
        dataset: PlanningDataset,
        partners: Sequence[Partner],
        request: SimulationRequest,
        options: Optional[SimulationOptions] = None,
    ) -> SimulationResult:
        options = options or SimulationOptions()
        self._validate_request(request)

        partner = _find_partner(partners, request.partner_name)
        if partner is not None and not partner.authorizes(request.rate_plan):
            raise UnauthorizedRatePlanError(partner.name, request.rate_plan)

        # Fixed-width ISO dates compare correctly as strings.
        prices = [
            fact.price
            for fact in dataset.pricing
            if fact.room_type == request.room_type
            and fact.rate_plan == request.rate_plan
            and request.start_date <= fact.date <= request.end_date
        ]
        if not prices:
            raise NoPricingDataError(
                (
                    f"No pricing data for room type '{request.room_type}' and rate plan "
                    f"'{request.rate_plan}' between {request.start_date} and {request.end_date}"
                )
            )

        gross_price = float(np.mean(prices))
        if options.apply_commission:
            commission_percent = (
                partner.commission
                if partner is not None
                else self._settings.default_commission_percent
            )
        else:
            commission_percent = 0.0
        net_price = (
            gross_price
            * (1 - commission_percent / 100)
            * (1 - options.promotional_discount_percent / 100)
        )

        result = SimulationResult(
            room_type=request.room_type,
            rate_plan=request.rate_plan,
            partner=request.partner_name,
            start_date=request.start_date,
            end_date=request.end_date,
            gross_price=gross_price,
            commission_percent=float(commission_percent),
            net_price=net_price,
            nights=len(prices),
            available=True,
        )
        log_event(
            logger,
            "Simulation completed",
            partner=result.partner,
            room_type=result.room_type,
            rate_plan=result.rate_plan,
            nights=result.nights,
            gross=result.gross_price,
            commission=result.commission_percent,
            net=result.net_price,
        )
        return result

    def authorized_rate_plans(
        self,
        dataset: PlanningDataset,
        partners: Sequence[Partner],
        partner_name: str,
    ) -> list[RatePlan]:
        """Rate plans the partner may sell; every plan when the partner is unknown."""
        partner = _find_partner(partners, partner_name)
        plans = list(dataset.rate_plans.values())
        if partner is None:
            return plans
        return [plan for plan in plans if partner.authorizes(plan.code)]


def export_simulations_csv(results: Sequence[SimulationResult]) -> str:
    frame = pd.DataFrame(
        [
            {
                "Type Chambre": result.room_type,
                "Plan Tarifaire": result.rate_plan,
                "Partenaire": result.partner,
                "Date Début": result.start_date,
                "Date Fin": result.end_date,
                "Prix": f"{result.gross_price:.2f}",
                "Commission": f"{result.commission_percent:g}%",
                "Prix Net": f"{result.net_price:.2f}",
            }
            for result in results
        ],
        columns=EXPORT_COLUMNS,
    )
    return frame.to_csv(index=False, lineterminator="\n")
