"""Errors raised when a state mutation is refused."""

from __future__ import annotations


class PortfolioError(ValueError):
    """Base class; the snapshot is never modified when one of these is raised."""


class StateValidationError(PortfolioError):
    """Input that must be corrected before the mutation can run."""


class ConfirmationRequired(PortfolioError):
    """A destructive operation was requested without an explicit confirm."""

    def __init__(self, action: str) -> None:
        super().__init__(f"Confirmation required to {action}")
        self.action = action


def require_confirm(confirm: bool, action: str) -> None:
    if not confirm:
        raise ConfirmationRequired(action)
