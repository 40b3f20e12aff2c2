"""Tests for commission defaults, partner configuration and ISO date parsing."""

from __future__ import annotations

from datetime import date

import pytest

from backend.domain.constraints import (
    COMMISSION_PREFIXES,
    default_commission,
    parse_iso_date,
    parse_partner_config,
    validate_partner,
)
from backend.domain.errors import InvalidInputError


# --- Commission prefix table ---

@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("OTA-RO-FLEX", 15),
        ("PKG-EXP-RO-FLEX", 14),
        ("MOBILE-RO", 12),
        ("VIP-BB", 10),
        ("HB-FLEX", 18),
        ("TO-RO", 20),
        ("HOTUSA-NANR", 16),
        ("FB-CORPO-2024", 8),
        ("CWT-RO", 12),
        ("PROMO-EARLY", 10),
        ("TRAVCO-RO", 22),
        ("DIRECT", 15),
        ("", 15),
    ],
)
def test_default_commission(code: str, expected: float) -> None:
    assert default_commission(code) == expected


def test_commission_table_keeps_declared_order() -> None:
    prefixes = [prefix for prefix, _ in COMMISSION_PREFIXES]
    assert prefixes == [
        "OTA",
        "MOBILE",
        "VIP",
        "HB",
        "TO",
        "HOTUSA",
        "FB-CORPO",
        "CWT",
        "PKG-EXP",
        "PROMO",
        "TRAVCO",
    ]


def test_first_matching_prefix_wins_over_later_ones() -> None:
    # "TOUR-OPERATOR" starts with "TO", which is scanned first.
    assert default_commission("TOUR-OPERATOR") == 20


# --- Partner configuration ---

def test_parse_partner_config_from_json_text() -> None:
    partners = parse_partner_config(
        '{"partners": {"Booking.com": {"commission": 17, "codes": ["OTA-RO-FLEX", " OTA-BB "]},'
        ' "Direct": {"commission": 0, "codes": [], "defaultDiscount": {"percentage": 5}}}}'
    )

    assert [partner.name for partner in partners] == ["Booking.com", "Direct"]
    assert partners[0].commission == 17.0
    assert partners[0].codes == frozenset({"OTA-RO-FLEX", "OTA-BB"})
    assert partners[1].codes == frozenset()


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        "[]",
        '{"other": {}}',
        '{"partners": []}',
        '{"partners": {"A": 12}}',
        '{"partners": {"A": {"commission": "high", "codes": []}}}',
        '{"partners": {"A": {"commission": -1, "codes": []}}}',
        '{"partners": {"A": {"commission": 10, "codes": "OTA"}}}',
        '{"partners": {"A": {"commission": 10, "codes": [1, 2]}}}',
    ],
)
def test_parse_partner_config_rejects_malformed_documents(payload: str) -> None:
    with pytest.raises(InvalidInputError):
        parse_partner_config(payload)


def test_validate_partner_requires_name() -> None:
    with pytest.raises(InvalidInputError):
        validate_partner(name="  ", commission=10, codes=[])


# --- Date ranges ---

def test_parse_iso_date() -> None:
    assert parse_iso_date("2024-02-29", "start_date") == date(2024, 2, 29)


@pytest.mark.parametrize("value", ["01/05/2024", "2024-02-30", ""])
def test_parse_iso_date_rejects_malformed_dates(value: str) -> None:
    with pytest.raises(InvalidInputError):
        parse_iso_date(value, "start_date")
