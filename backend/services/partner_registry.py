"""Runtime registry of OTA partners and the rate plans they may sell."""

from __future__ import annotations

from threading import RLock
from typing import Any, Iterable, Mapping, Optional

from backend.domain.constraints import parse_partner_config, validate_partner
from backend.domain.errors import (
    DuplicatePartnerError,
    InvalidInputError,
    PartnerNotFoundError,
)
from backend.domain.models import Partner
from backend.utils.logger import get_logger, log_event


logger = get_logger(__name__)


DEFAULT_PARTNERS: tuple[Partner, ...] = (
    Partner(
        name="Booking.com",
        commission=15.0,
        codes=frozenset({"OTA-RO-FLEX", "OTA-BB-FLEX", "OTA-RO-NANR", "MOBILE-RO-FLEX"}),
    ),
    Partner(
        name="Expedia",
        commission=18.0,
        codes=frozenset({"OTA-RO-FLEX", "OTA-BB-FLEX", "PKG-EXP-RO-FLEX"}),
    ),
    Partner(
        name="Agoda",
        commission=17.0,
        codes=frozenset({"OTA-RO-FLEX", "OTA-RO-NANR", "PROMO-RO-NANR"}),
    ),
)


class PartnerRegistry:
    """Holds the partner list as one immutable tuple swapped under a lock.

    Every edit builds a new tuple and replaces the old one, so a caller that
    grabbed ``snapshot()`` keeps a consistent list for the whole request.
    """

    def __init__(self, partners: Optional[Iterable[Partner]] = None) -> None:
        self._lock = RLock()
        self._partners: tuple[Partner, ...] = self._check_unique(partners or ())

    @classmethod
    def with_defaults(cls) -> "PartnerRegistry":
        return cls(DEFAULT_PARTNERS)

    @staticmethod
    def _check_unique(partners: Iterable[Partner]) -> tuple[Partner, ...]:
        collected = tuple(partners)
        seen: set[str] = set()
        for partner in collected:
            if partner.name in seen:
                raise InvalidInputError(f"partner '{partner.name}' is defined more than once")
            seen.add(partner.name)
        return collected

    def snapshot(self) -> tuple[Partner, ...]:
        with self._lock:
            return self._partners

    def get(self, name: str) -> Optional[Partner]:
        for partner in self.snapshot():
            if partner.name == name:
                return partner
        return None

    def replace_all(self, partners: Iterable[Partner]) -> tuple[Partner, ...]:
        checked = self._check_unique(partners)
        with self._lock:
            self._partners = checked
        log_event(logger, "Partner registry replaced", partners=[partner.name for partner in checked])
        return checked

    def load_config(self, payload: str | bytes | Mapping[str, Any]) -> tuple[Partner, ...]:
        """Replace every partner with the ones described by a JSON configuration."""
        return self.replace_all(parse_partner_config(payload))

    def reset_to_defaults(self) -> tuple[Partner, ...]:
        return self.replace_all(DEFAULT_PARTNERS)

    def add(self, name: str, commission: float, codes: Iterable[str]) -> Partner:
        partner = validate_partner(name=name, commission=commission, codes=list(codes))
        with self._lock:
            if any(existing.name == partner.name for existing in self._partners):
                raise DuplicatePartnerError(f"partner '{partner.name}' already exists")
            self._partners = self._partners + (partner,)
        log_event(logger, "Partner added", name=partner.name, commission=partner.commission)
        return partner

    def update(self, name: str, commission: float, codes: Iterable[str]) -> Partner:
        partner = validate_partner(name=name, commission=commission, codes=list(codes))
        with self._lock:
            if not any(existing.name == name for existing in self._partners):
                raise PartnerNotFoundError(f"partner '{name}' not found")
            self._partners = tuple(
                partner if existing.name == name else existing
                for existing in self._partners
            )
        log_event(logger, "Partner updated", name=partner.name, commission=partner.commission)
        return partner

    def remove(self, name: str) -> None:
        with self._lock:
            remaining = tuple(partner for partner in self._partners if partner.name != name)
            if len(remaining) == len(self._partners):
                raise PartnerNotFoundError(f"partner '{name}' not found")
            self._partners = remaining
        log_event(logger, "Partner removed", name=name)
