"""Domain-level rules: default commissions, partner configuration, ISO dates."""

from __future__ import annotations

import json
import math
from datetime import date, datetime
from typing import Any, Mapping

from backend.domain.errors import InvalidInputError
from backend.domain.models import Partner


FALLBACK_COMMISSION_PERCENT = 15.0

# Scanned in order; the first prefix the code starts with wins.
COMMISSION_PREFIXES: tuple[tuple[str, float], ...] = (
    ("OTA", 15.0),
    ("MOBILE", 12.0),
    ("VIP", 10.0),
    ("HB", 18.0),
    ("TO", 20.0),
    ("HOTUSA", 16.0),
    ("FB-CORPO", 8.0),
    ("CWT", 12.0),
    ("PKG-EXP", 14.0),
    ("PROMO", 10.0),
    ("TRAVCO", 22.0),
)


def default_commission(rate_plan_code: str) -> float:
    for prefix, commission in COMMISSION_PREFIXES:
        if rate_plan_code.startswith(prefix):
            return commission
    return FALLBACK_COMMISSION_PERCENT


def parse_iso_date(value: str, field_name: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{field_name} must follow YYYY-MM-DD format") from exc


def validate_partner(name: str, commission: Any, codes: Any) -> Partner:
    """Build a partner after checking the shape of one configuration entry."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError("partner name must be a non-empty string")
    if isinstance(commission, bool) or not isinstance(commission, (int, float)):
        raise InvalidInputError(f"commission for partner '{name}' must be a number")
    if not math.isfinite(commission) or not 0.0 <= commission <= 100.0:
        raise InvalidInputError(f"commission for partner '{name}' must be between 0 and 100")
    if not isinstance(codes, (list, tuple, set, frozenset)):
        raise InvalidInputError(f"codes for partner '{name}' must be a list of strings")
    cleaned_codes = []
    for code in codes:
        if not isinstance(code, str):
            raise InvalidInputError(f"codes for partner '{name}' must be a list of strings")
        if code.strip():
            cleaned_codes.append(code.strip())
    return Partner(name=name.strip(), commission=float(commission), codes=frozenset(cleaned_codes))


def parse_partner_config(payload: str | bytes | Mapping[str, Any]) -> list[Partner]:
    """Turn a ``{"partners": {name: {commission, codes}}}`` document into partners.

    Keys other than ``commission`` and ``codes`` are ignored.
    """

    if isinstance(payload, (str, bytes)):
        try:
            document = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidInputError(f"partner configuration is not valid JSON: {exc}") from exc
    else:
        document = payload

    if not isinstance(document, Mapping):
        raise InvalidInputError("partner configuration must be a JSON object")
    partners_section = document.get("partners")
    if not isinstance(partners_section, Mapping):
        raise InvalidInputError("partner configuration requires a 'partners' object")

    partners: list[Partner] = []
    for name, entry in partners_section.items():
        if not isinstance(entry, Mapping):
            raise InvalidInputError(f"partner '{name}' must be a JSON object")
        partners.append(
            validate_partner(
                name=name,
                commission=entry.get("commission"),
                codes=entry.get("codes", []),
            )
        )
    return partners
