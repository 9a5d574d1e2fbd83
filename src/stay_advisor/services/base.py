"""Shared plumbing for hotel inventory provider adapters."""
from __future__ import annotations

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

import httpx

from stay_advisor.core.errors import ProviderUnavailableError
from stay_advisor.hotels.models import CanonicalHotelRecord, ProviderOutcome
from stay_advisor.utils.throttling import RateGate

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StayWindow:
    check_in: date
    check_out: date

    @property
    def nights(self) -> int:
        return max(1, (self.check_out - self.check_in).days)


@dataclass(slots=True)
class ProviderFilters:
    """Search filters forwarded to providers that support them."""

    price_min: float = 0.0
    price_max: Optional[float] = None
    min_star_rating: Optional[int] = None
    amenities: List[str] = field(default_factory=list)
    currency: str = "INR"
    country: Optional[str] = None


class ProviderAdapter(ABC):
    """Base class for one external hotel source.

    Subclasses implement :meth:`_fetch`. The public entry points never raise:
    every failure becomes an empty list plus a :class:`ProviderOutcome` carrying
    the reason.
    """

    name: str = "provider"

    def __init__(
        self,
        *,
        timeout_s: float,
        rate_limit_ms: int = 0,
        gate: Optional[RateGate] = None,
    ) -> None:
        self.timeout_s = timeout_s
        self._gate = gate or RateGate(rate_limit_ms / 1000.0, label=self.name)

    @property
    def gate(self) -> RateGate:
        return self._gate

    @abstractmethod
    async def _fetch(
        self,
        area: str,
        stay: StayWindow,
        guests: int,
        filters: ProviderFilters,
    ) -> List[CanonicalHotelRecord]:
        """Query the upstream source and return canonical records."""

    async def search(
        self,
        area: str,
        stay: StayWindow,
        guests: int,
        filters: Optional[ProviderFilters] = None,
    ) -> List[CanonicalHotelRecord]:
        hotels, _ = await self.search_with_outcome(area, stay, guests, filters)
        return hotels

    async def search_with_outcome(
        self,
        area: str,
        stay: StayWindow,
        guests: int,
        filters: Optional[ProviderFilters] = None,
    ) -> Tuple[List[CanonicalHotelRecord], ProviderOutcome]:
        filters = filters or ProviderFilters()
        outcome = ProviderOutcome(provider=self.name, area=area)
        await self._gate.wait()
        started = time.perf_counter()
        logger.info("Searching %s for area '%s' (%s nights, %s guests)", self.name, area, stay.nights, guests)
        try:
            hotels = await asyncio.wait_for(
                self._fetch(area, stay, guests, filters), timeout=self.timeout_s
            )
        except asyncio.TimeoutError:
            outcome.error = f"timed out after {self.timeout_s}s"
            outcome.error_type = "timeout"
            hotels = []
        except ProviderUnavailableError as exc:
            outcome.error = str(exc)
            outcome.error_type = exc.error_type
            hotels = []
        except httpx.HTTPStatusError as exc:
            outcome.error = f"HTTP {exc.response.status_code}"
            outcome.error_type = "http_status"
            hotels = []
        except httpx.HTTPError as exc:
            outcome.error = f"{type(exc).__name__}: {exc}"
            outcome.error_type = "transport"
            hotels = []
        except (json.JSONDecodeError, ValueError, TypeError, KeyError) as exc:
            outcome.error = f"{type(exc).__name__}: {exc}"
            outcome.error_type = "parse"
            hotels = []
        except Exception as exc:  # noqa: BLE001
            outcome.error = f"{type(exc).__name__}: {exc}"
            outcome.error_type = "unknown"
            hotels = []
        outcome.elapsed_ms = int((time.perf_counter() - started) * 1000)
        outcome.hotel_count = len(hotels)
        if outcome.ok:
            logger.info("%s returned %s hotels for '%s' in %sms", self.name, len(hotels), area, outcome.elapsed_ms)
        else:
            logger.warning(
                "%s search for '%s' failed (%s): %s", self.name, area, outcome.error_type, outcome.error
            )
        return hotels, outcome

    async def aclose(self) -> None:
        """Release any resources owned by the adapter."""


class HttpProviderAdapter(ProviderAdapter):
    """Adapter backed by an ``httpx.AsyncClient``.

    An injected client is reused and left open; otherwise a short-lived client
    is created per call.
    """

    def __init__(
        self,
        *,
        timeout_s: float,
        rate_limit_ms: int = 0,
        user_agent: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        gate: Optional[RateGate] = None,
    ) -> None:
        super().__init__(timeout_s=timeout_s, rate_limit_ms=rate_limit_ms, gate=gate)
        self.user_agent = user_agent
        self._client = client

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._client is not None:
            response = await self._client.request(method, url, **kwargs)
        else:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                response = await client.request(method, url, **kwargs)
        if response.status_code >= 400:
            raise ProviderUnavailableError(
                self.name,
                f"HTTP {response.status_code} from {url}",
                error_type="http_status",
                http_status=response.status_code,
            )
        return response

    def _decode(self, response: httpx.Response) -> object:
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderUnavailableError(
                self.name, f"malformed JSON response: {exc}", error_type="parse"
            ) from exc


__all__ = ["HttpProviderAdapter", "ProviderAdapter", "ProviderFilters", "StayWindow"]
