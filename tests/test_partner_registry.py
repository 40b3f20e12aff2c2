from __future__ import annotations

import pytest

from backend.domain.errors import (
    DuplicatePartnerError,
    InvalidInputError,
    PartnerNotFoundError,
)
from backend.domain.models import Partner
from backend.services.partner_registry import DEFAULT_PARTNERS, PartnerRegistry


def test_registry_with_defaults_holds_three_partners() -> None:
    registry = PartnerRegistry.with_defaults()

    assert [partner.name for partner in registry.snapshot()] == ["Booking.com", "Expedia", "Agoda"]
    assert registry.get("Expedia") == DEFAULT_PARTNERS[1]
    assert registry.get("Unknown") is None


def test_empty_registry_by_default() -> None:
    assert PartnerRegistry().snapshot() == ()


def test_load_config_replaces_partner_list_wholesale() -> None:
    registry = PartnerRegistry.with_defaults()
    before = registry.snapshot()

    loaded = registry.load_config({"partners": {"Hotelbeds": {"commission": 20, "codes": ["TO-RO"]}}})

    assert [partner.name for partner in loaded] == ["Hotelbeds"]
    assert registry.snapshot() == loaded
    assert registry.get("Booking.com") is None
    assert len(before) == 3


def test_invalid_config_leaves_registry_untouched() -> None:
    registry = PartnerRegistry.with_defaults()
    before = registry.snapshot()

    with pytest.raises(InvalidInputError):
        registry.load_config('{"partners": {"Broken": {"commission": "x"}}}')

    assert registry.snapshot() is before


def test_duplicate_partner_names_are_rejected() -> None:
    partner = Partner(name="Same", commission=10.0, codes=frozenset())
    with pytest.raises(InvalidInputError):
        PartnerRegistry([partner, partner])


def test_add_update_remove_swap_the_snapshot() -> None:
    registry = PartnerRegistry.with_defaults()
    first_snapshot = registry.snapshot()

    added = registry.add("Hotelbeds", 20, ["TO-RO"])
    assert added.codes == frozenset({"TO-RO"})
    assert registry.get("Hotelbeds") == added

    updated = registry.update("Expedia", 19.5, ["OTA-RO-FLEX"])
    assert registry.get("Expedia") == updated
    assert updated.commission == 19.5

    registry.remove("Agoda")
    assert [partner.name for partner in registry.snapshot()] == ["Booking.com", "Expedia", "Hotelbeds"]
    assert [partner.name for partner in first_snapshot] == ["Booking.com", "Expedia", "Agoda"]


def test_registry_edit_errors() -> None:
    registry = PartnerRegistry.with_defaults()

    with pytest.raises(DuplicatePartnerError):
        registry.add("Agoda", 10, [])
    with pytest.raises(PartnerNotFoundError):
        registry.update("Nobody", 10, [])
    with pytest.raises(PartnerNotFoundError):
        registry.remove("Nobody")


def test_reset_to_defaults_restores_builtin_partners() -> None:
    registry = PartnerRegistry()
    registry.reset_to_defaults()

    assert registry.snapshot() == DEFAULT_PARTNERS
