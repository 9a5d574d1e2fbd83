"""Instantiate the provider adapters enabled in settings."""
from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from stay_advisor.config.settings import Settings

from .base import ProviderAdapter
from .cozycozy_client import CozyCozyClient
from .inventory_client import InventoryClient
from .makemytrip_client import MakeMyTripClient

logger = logging.getLogger(__name__)


def build_adapters(
    settings: Settings,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> List[ProviderAdapter]:
    """Return one adapter per enabled provider.

    ``client`` is shared by the HTTP adapters when given; otherwise each call
    opens its own short-lived client.
    """
    adapters: List[ProviderAdapter] = []
    if settings.provider_enabled("cozycozy"):
        adapters.append(
            CozyCozyClient(
                base_url=settings.cozycozy_base_url,
                auth_token=settings.cozycozy_auth_token,
                result_count=settings.cozycozy_result_count,
                currency=settings.default_currency,
                timeout_s=settings.cozycozy_timeout_s,
                rate_limit_ms=settings.cozycozy_rate_limit_ms,
                user_agent=settings.user_agent,
                client=client,
            )
        )
    if settings.provider_enabled("makemytrip"):
        adapters.append(
            MakeMyTripClient(
                base_url=settings.makemytrip_base_url,
                currency=settings.default_currency,
                timeout_s=settings.makemytrip_timeout_s,
                rate_limit_ms=settings.makemytrip_rate_limit_ms,
                user_agent=settings.user_agent,
                client=client,
            )
        )
    if settings.provider_enabled("inventory"):
        adapters.append(
            InventoryClient(
                settings.inventory_path,
                max_results=settings.inventory_max_results,
                currency=settings.default_currency,
                timeout_s=settings.inventory_timeout_s,
                rate_limit_ms=settings.inventory_rate_limit_ms,
            )
        )
    if not adapters:
        logger.warning("No hotel providers enabled; every run will use fallback hotels")
    else:
        logger.debug("Enabled providers: %s", ", ".join(adapter.name for adapter in adapters))
    return adapters


__all__ = ["build_adapters"]
