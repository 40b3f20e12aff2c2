#!/usr/bin/env python3
"""Validate local planning-analytics environment readiness."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.domain.models import SimulationOptions, SimulationRequest
from backend.services.forecast_service import ForecastService
from backend.services.parsing_service import PlanningParser
from backend.services.partner_registry import PartnerRegistry
from backend.services.pricing_service import PricingService

SEPARATOR_LINE = "=" * 44

SAMPLE_GRID = [
    ["HOTEL SAMPLE planning", "", "", "1/5/24", "1/6/24", "1/7/24"],
    ["Chambre Double", "Left for sale", "Left for sale", 4, 0, "X"],
    ["Chambre Double", "OTA-RO-FLEX - Room only flexible", "Price (EUR)", "120,50", 135, 99],
]


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = [
        "fastapi",
        "uvicorn",
        "pydantic",
        "numpy",
        "pandas",
        "openpyxl",
        "multipart",
        "httpx",
        "pytest",
    ]
    import_errors: list[str] = []
    for module_name in package_specs:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3: Sample planning parse
    dataset = None
    try:
        dataset = PlanningParser().parse(SAMPLE_GRID)
        if len(dataset.dates) != 3 or len(dataset.pricing) != 3:
            raise RuntimeError(
                f"expected 3 dates and 3 prices, got {len(dataset.dates)} and {len(dataset.pricing)}"
            )
        ok, line = _print_result("Sample planning parse", True, f": hotel={dataset.hotel_name}")
    except Exception as exc:
        ok, line = _print_result("Sample planning parse", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    if dataset is not None:
        # CHECK 4: Price simulation
        try:
            result = PricingService().simulate(
                dataset,
                PartnerRegistry.with_defaults().snapshot(),
                SimulationRequest(
                    partner_name="Booking.com",
                    room_type="Chambre Double",
                    rate_plan="OTA-RO-FLEX",
                    start_date="2024-01-05",
                    end_date="2024-01-07",
                ),
                SimulationOptions(apply_commission=True, promotional_discount_percent=10.0),
            )
            ok, line = _print_result(
                "Price simulation",
                True,
                f": gross={result.gross_price:.2f} net={result.net_price:.2f}",
            )
        except Exception as exc:
            ok, line = _print_result("Price simulation", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Forecast
        try:
            points = ForecastService().forecast(dataset, horizon_days=7)
            if len(points) != 7:
                raise RuntimeError(f"expected 7 forecast points, got {len(points)}")
            ok, line = _print_result("Forecast", True, f": first={points[0].predicted_price:.2f}")
        except Exception as exc:
            ok, line = _print_result("Forecast", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" Planning Analytics Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
