from __future__ import annotations

from dataclasses import replace

import pytest

from backend.domain.errors import (
    IncompleteRequestError,
    NoPricingDataError,
    UnauthorizedRatePlanError,
)
from backend.domain.models import SimulationOptions, SimulationRequest
from backend.services.parsing_service import PlanningParser
from backend.services.partner_registry import DEFAULT_PARTNERS
from backend.services.pricing_service import PricingService, export_simulations_csv
from backend.utils.config import get_settings


def _build_dataset():
    return PlanningParser().parse(
        [
            ["HOTEL TEST", "", "", "1/5/24", "1/6/24", "1/7/24"],
            ["Chambre Double", "OTA-RO-FLEX - Room only flexible", "Price (EUR)", 100, 100, 120],
            ["Chambre Double", "PKG-EXP-RO-FLEX - Package", "Price (EUR)", 90, 95, 0],
            ["Chambre Double", "OTA-RO-NANR - Non refundable", "Price (EUR)", 80, 80, 80],
        ]
    )


def _request(**overrides) -> SimulationRequest:
    values = {
        "partner_name": "Booking.com",
        "room_type": "Chambre Double",
        "rate_plan": "OTA-RO-FLEX",
        "start_date": "2024-01-05",
        "end_date": "2024-01-06",
    }
    values.update(overrides)
    return SimulationRequest(**values)


def test_simulate_applies_commission_then_promotion() -> None:
    result = PricingService().simulate(
        _build_dataset(),
        DEFAULT_PARTNERS,
        _request(),
        SimulationOptions(apply_commission=True, promotional_discount_percent=10),
    )

    assert result.gross_price == pytest.approx(100.0)
    assert result.commission_percent == 15.0
    assert result.net_price == pytest.approx(76.5)
    assert result.nights == 2
    assert result.available is True


def test_simulate_averages_every_night_in_range() -> None:
    result = PricingService().simulate(
        _build_dataset(),
        DEFAULT_PARTNERS,
        _request(end_date="2024-01-07"),
    )

    assert result.gross_price == pytest.approx(320 / 3)
    assert result.net_price == pytest.approx(320 / 3 * 0.85)


def test_simulate_without_commission_keeps_gross_price() -> None:
    result = PricingService().simulate(
        _build_dataset(),
        DEFAULT_PARTNERS,
        _request(),
        SimulationOptions(apply_commission=False),
    )

    assert result.commission_percent == 0.0
    assert result.net_price == pytest.approx(result.gross_price)


def test_unknown_partner_uses_default_commission() -> None:
    settings = replace(get_settings(), default_commission_percent=12.0)

    result = PricingService(settings=settings).simulate(
        _build_dataset(),
        DEFAULT_PARTNERS,
        _request(partner_name="Direct website"),
    )

    assert result.commission_percent == 12.0
    assert result.net_price == pytest.approx(88.0)


def test_partner_rate_plan_authorization() -> None:
    with pytest.raises(UnauthorizedRatePlanError) as exc_info:
        PricingService().simulate(
            _build_dataset(),
            DEFAULT_PARTNERS,
            _request(partner_name="Expedia", rate_plan="OTA-RO-NANR"),
        )

    assert exc_info.value.partner_name == "Expedia"
    assert exc_info.value.rate_plan == "OTA-RO-NANR"

    result = PricingService().simulate(
        _build_dataset(),
        DEFAULT_PARTNERS,
        _request(partner_name="Expedia", rate_plan="PKG-EXP-RO-FLEX"),
    )
    assert result.commission_percent == 18.0
    assert result.gross_price == pytest.approx(92.5)


@pytest.mark.parametrize("field_name", ["partner_name", "room_type", "rate_plan", "start_date", "end_date"])
def test_incomplete_request_is_rejected(field_name: str) -> None:
    with pytest.raises(IncompleteRequestError):
        PricingService().simulate(_build_dataset(), DEFAULT_PARTNERS, _request(**{field_name: ""}))


def test_no_pricing_in_range() -> None:
    with pytest.raises(NoPricingDataError):
        PricingService().simulate(
            _build_dataset(),
            DEFAULT_PARTNERS,
            _request(start_date="2024-03-01", end_date="2024-03-05"),
        )
    with pytest.raises(NoPricingDataError):
        PricingService().simulate(
            _build_dataset(),
            DEFAULT_PARTNERS,
            _request(room_type="Suite"),
        )


def test_authorized_rate_plans_filter_by_partner_codes() -> None:
    service = PricingService()
    dataset = _build_dataset()

    expedia = service.authorized_rate_plans(dataset, DEFAULT_PARTNERS, "Expedia")
    unknown = service.authorized_rate_plans(dataset, DEFAULT_PARTNERS, "Direct website")

    assert [plan.code for plan in expedia] == ["OTA-RO-FLEX", "PKG-EXP-RO-FLEX"]
    assert [plan.code for plan in unknown] == ["OTA-RO-FLEX", "PKG-EXP-RO-FLEX", "OTA-RO-NANR"]


def test_export_simulations_csv_formats_rows() -> None:
    result = PricingService().simulate(
        _build_dataset(),
        DEFAULT_PARTNERS,
        _request(),
        SimulationOptions(promotional_discount_percent=10),
    )

    csv_text = export_simulations_csv([result])

    assert csv_text.splitlines() == [
        "Type Chambre,Plan Tarifaire,Partenaire,Date Début,Date Fin,Prix,Commission,Prix Net",
        "Chambre Double,OTA-RO-FLEX,Booking.com,2024-01-05,2024-01-06,100.00,15%,76.50",
    ]


def test_export_with_no_rows_keeps_header() -> None:
    assert export_simulations_csv([]).strip() == (
        "Type Chambre,Plan Tarifaire,Partenaire,Date Début,Date Fin,Prix,Commission,Prix Net"
    )
