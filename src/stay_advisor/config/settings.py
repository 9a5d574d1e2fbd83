"""Runtime configuration for the recommendation engine.

Relies on pydantic-settings so that environment variables (prefixed with ``ADVISOR_``)
can override defaults. See `.env.example` for common values.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Iterable, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Captures runtime configuration for recommendation runs."""

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("data/logs"))
    output_dir: Path = Field(
        default=Path("data/recommendations"), description="Where manual runs write their JSON output"
    )

    result_limit: int = Field(default=20, description="Maximum recommendations returned per run")
    acceptance_threshold: float = Field(
        default=0.0, description="Minimum relevance score a candidate needs to be kept"
    )
    relaxed_acceptance_threshold: float = Field(
        default=0.0, description="Threshold applied on the second pass when the first keeps nothing"
    )

    weight_price: float = Field(default=0.25, ge=0)
    weight_amenities: float = Field(default=0.25, ge=0)
    weight_star_rating: float = Field(default=0.15, ge=0)
    weight_location: float = Field(default=0.15, ge=0)
    weight_conference: float = Field(default=0.20, ge=0)
    weight_location_without_conference: float = Field(
        default=0.25, ge=0, description="Location weight used when no conference venue is given"
    )

    default_guest_count: int = Field(default=2, ge=1)
    default_currency: str = Field(default="INR")
    user_agent: str = Field(default=DEFAULT_USER_AGENT)

    cozycozy_enabled: bool = True
    cozycozy_base_url: str = Field(default="https://www.cozycozy.com/api")
    cozycozy_auth_token: Optional[str] = Field(default=None, description="Bearer token for the results API")
    cozycozy_rate_limit_ms: int = Field(default=1000, ge=0)
    cozycozy_timeout_s: float = Field(default=30.0, gt=0)
    cozycozy_result_count: int = Field(default=40, ge=1)

    makemytrip_enabled: bool = True
    makemytrip_base_url: str = Field(default="https://www.makemytrip.com")
    makemytrip_rate_limit_ms: int = Field(default=2000, ge=0)
    makemytrip_timeout_s: float = Field(default=5.0, gt=0)

    inventory_enabled: bool = True
    inventory_path: Path = Field(
        default=Path("data/inventory/hotels.json"), description="Stored hotel catalogue (JSON)"
    )
    inventory_rate_limit_ms: int = Field(default=0, ge=0)
    inventory_timeout_s: float = Field(default=5.0, gt=0)
    inventory_max_results: int = Field(default=100, ge=1)

    disabled_providers: Annotated[Tuple[str, ...], NoDecode] = Field(
        default=(), description="Provider names to skip regardless of their enabled flag"
    )

    model_config = SettingsConfigDict(
        env_prefix="ADVISOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    @field_validator("log_dir", "output_dir", "inventory_path", mode="before")
    def _expand_path(cls, value: str | Path) -> Path:  # noqa: D401
        if isinstance(value, Path):
            return value.expanduser()
        return Path(value).expanduser()

    @field_validator("result_limit")
    def _validate_result_limit(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("result_limit must be positive")
        return value

    @field_validator("disabled_providers", mode="before")
    def _parse_disabled_providers(cls, value: object) -> Tuple[str, ...]:
        if value is None or value == "":
            return ()
        if isinstance(value, (list, tuple)):
            return tuple(str(item).strip().lower() for item in value if str(item).strip())
        if isinstance(value, str):
            parts: Iterable[str] = (part.strip().lower() for part in value.split(","))
            return tuple(part for part in parts if part)
        raise TypeError("disabled_providers must be provided as a comma-separated string or list")

    def provider_enabled(self, name: str) -> bool:
        if name.lower() in self.disabled_providers:
            return False
        return bool(getattr(self, f"{name.lower()}_enabled", False))

    def ensure_directories(self) -> None:
        """Create directories that must exist at runtime."""
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)
