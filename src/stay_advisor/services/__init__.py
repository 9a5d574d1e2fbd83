"""Provider adapters for external hotel sources."""

from .base import HttpProviderAdapter, ProviderAdapter, ProviderFilters, StayWindow
from .cozycozy_client import CozyCozyClient
from .inventory_client import InventoryClient
from .makemytrip_client import MakeMyTripClient
from .registry import build_adapters

__all__ = [
    "CozyCozyClient",
    "HttpProviderAdapter",
    "InventoryClient",
    "MakeMyTripClient",
    "ProviderAdapter",
    "ProviderFilters",
    "StayWindow",
    "build_adapters",
]
