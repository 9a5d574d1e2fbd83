"""Exception types shared across the recommendation pipeline."""
from __future__ import annotations

from typing import Iterable, Optional


class AdvisorError(RuntimeError):
    """Base class for stay advisor errors."""


class InvalidPreferencesError(AdvisorError, ValueError):
    """Raised when search preferences fail validation before a run starts."""

    def __init__(self, reasons: Iterable[str]) -> None:
        self.reasons = [reason for reason in reasons if reason] or ["invalid preferences"]
        super().__init__("Invalid search preferences: " + "; ".join(self.reasons))


class ProviderUnavailableError(AdvisorError):
    """Raised inside a provider adapter when its upstream call cannot be used.

    Adapters convert this into an empty result at their boundary; it never
    reaches the engine caller.
    """

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        error_type: str = "unknown",
        http_status: Optional[int] = None,
    ) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.error_type = error_type
        self.http_status = http_status


__all__ = ["AdvisorError", "InvalidPreferencesError", "ProviderUnavailableError"]
