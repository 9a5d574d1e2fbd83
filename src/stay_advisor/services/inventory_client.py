"""Adapter over the locally stored hotel catalogue."""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from stay_advisor.core.errors import ProviderUnavailableError
from stay_advisor.hotels.models import CanonicalHotelRecord
from stay_advisor.hotels.normalizer import extract_results, try_build_hotel_record
from stay_advisor.utils.throttling import RateGate

from .base import ProviderAdapter, ProviderFilters, StayWindow

logger = logging.getLogger(__name__)

_INACTIVE_STATUSES = {"inactive", "disabled", "archived", "deleted"}


def _is_listed(entry: Dict[str, Any]) -> bool:
    status = str(entry.get("status") or "active").strip().lower()
    if status in _INACTIVE_STATUSES:
        return False
    return entry.get("isAvailable") is not False


def _entry_city(entry: Dict[str, Any]) -> Optional[str]:
    city = entry.get("city")
    if not city:
        location = entry.get("location")
        if isinstance(location, dict):
            city = location.get("city")
    return str(city).strip() if city else None


class InventoryClient(ProviderAdapter):
    """Serves hotels from a JSON catalogue file.

    The file may hold ``{"hotels": [...]}`` or any other envelope accepted by
    :func:`stay_advisor.hotels.normalizer.extract_results`. The catalogue is
    re-read on every call so edits show up without a restart.
    """

    name = "inventory"

    def __init__(
        self,
        path: Path,
        *,
        max_results: int = 100,
        currency: str = "INR",
        timeout_s: float = 5.0,
        rate_limit_ms: int = 0,
        gate: Optional[RateGate] = None,
    ) -> None:
        super().__init__(timeout_s=timeout_s, rate_limit_ms=rate_limit_ms, gate=gate)
        self.path = Path(path)
        self.max_results = max_results
        self.currency = currency

    def _load(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            raise ProviderUnavailableError(
                self.name, f"catalogue not found at {self.path}", error_type="transport"
            )
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ProviderUnavailableError(
                self.name, f"catalogue is not valid JSON: {exc}", error_type="parse"
            ) from exc
        return extract_results(payload)

    def _accepts(self, record: CanonicalHotelRecord, filters: ProviderFilters) -> bool:
        if filters.country and record.country:
            if filters.country.strip().lower() not in record.country.lower():
                return False
        if filters.min_star_rating and (record.star_rating or 0) < filters.min_star_rating:
            return False
        price = record.price
        if price is not None:
            if filters.price_min and price < filters.price_min:
                return False
            if filters.price_max is not None and price > filters.price_max:
                return False
        return True

    async def _fetch(
        self,
        area: str,
        stay: StayWindow,
        guests: int,
        filters: ProviderFilters,
    ) -> List[CanonicalHotelRecord]:
        entries = await asyncio.to_thread(self._load)
        wanted = area.strip().lower()
        hotels: List[CanonicalHotelRecord] = []
        for entry in entries:
            if not _is_listed(entry):
                continue
            city = _entry_city(entry)
            if not city or city.lower() != wanted:
                continue
            record = try_build_hotel_record(
                entry,
                provider=self.name,
                default_currency=filters.currency or self.currency,
                search_area=area,
            )
            if record is None or not self._accepts(record, filters):
                continue
            hotels.append(record)
            if len(hotels) >= self.max_results:
                break
        logger.debug("Inventory matched %s of %s catalogue entries for '%s'", len(hotels), len(entries), area)
        return hotels


__all__ = ["InventoryClient"]
