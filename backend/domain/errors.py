"""Error taxonomy shared by the parser, registry and query services."""

from __future__ import annotations


class PlanningError(Exception):
    """Base exception for planning ingestion and query failures."""


class InvalidInputError(PlanningError):
    """Raised for a structurally unusable grid, configuration or query range."""


class IncompleteRequestError(PlanningError):
    """Raised when a required request field is missing or blank."""


class UnauthorizedRatePlanError(PlanningError):
    """Raised when a partner is not allowed to sell the requested rate plan."""

    def __init__(self, partner_name: str, rate_plan: str) -> None:
        super().__init__(
            f"Partner '{partner_name}' is not authorized to sell rate plan '{rate_plan}'"
        )
        self.partner_name = partner_name
        self.rate_plan = rate_plan


class NoPricingDataError(PlanningError):
    """Raised when a valid request matches no pricing facts."""


class DatasetNotLoadedError(PlanningError):
    """Raised when a query runs before any planning has been uploaded."""


class PartnerNotFoundError(PlanningError):
    """Raised when a registry edit targets an unknown partner."""


class DuplicatePartnerError(PlanningError):
    """Raised when adding a partner whose name is already registered."""
