"""TOML run profiles: stay preferences plus per-run settings overrides."""
from __future__ import annotations

import re
from datetime import date, timedelta
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator

try:  # pragma: no cover - Python 3.11+ ships tomllib
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    try:
        import tomli as tomllib  # type: ignore[no-redef]
    except ModuleNotFoundError as exc:  # pragma: no cover
        raise RuntimeError(
            "Run configuration loading requires 'tomllib' (Python >=3.11) or the 'tomli' package."
        ) from exc

from stay_advisor.advisory.preferences import SearchPreferences, coerce_string_list
from stay_advisor.core.errors import InvalidPreferencesError

if TYPE_CHECKING:  # pragma: no cover
    from stay_advisor.config.settings import Settings

_RELATIVE_DATE = re.compile(r"^(?P<count>\d+)\s*(?P<unit>[dDwWmM])$")


class PreferencesSection(BaseModel):
    """Stay preferences decoded from the run config."""

    areas: list[str] = Field(default_factory=list)
    country: Optional[str] = None
    check_in: Optional[str] = Field(
        default=None, description="ISO 8601 date or relative offset such as '+14d'"
    )
    check_out: Optional[str] = None
    nights: Optional[int] = Field(default=None, ge=1)
    budget_min: Optional[float] = Field(default=None, ge=0)
    budget_max: Optional[float] = Field(default=None, ge=0)
    stars: Optional[int] = Field(default=None, ge=1, le=5)
    amenities: list[str] = Field(default_factory=list)
    guests: Optional[int] = Field(default=None, ge=1)
    currency: Optional[str] = None

    @field_validator("areas", mode="before")
    @classmethod
    def _coerce_areas(cls, value: object) -> list[str]:
        return coerce_string_list(value)

    @field_validator("amenities", mode="before")
    @classmethod
    def _coerce_amenities(cls, value: object) -> list[str]:
        return coerce_string_list(value)


class ConferenceSection(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    max_distance_km: Optional[float] = Field(default=None, gt=0)


class EngineSection(BaseModel):
    result_limit: Optional[int] = Field(default=None, ge=1)
    acceptance_threshold: Optional[float] = None
    relaxed_acceptance_threshold: Optional[float] = None
    log_level: Optional[str] = None
    output_dir: Optional[str] = None


class ProvidersSection(BaseModel):
    cozycozy: Optional[bool] = None
    makemytrip: Optional[bool] = None
    inventory: Optional[bool] = None
    inventory_path: Optional[str] = None
    cozycozy_auth_token: Optional[str] = None


class RunConfig(BaseModel):
    """Top-level configuration decoded from TOML."""

    profile: str = Field(default="default", description="Human label used for logging")
    title: Optional[str] = None
    notes: Optional[str] = None
    preferences: PreferencesSection = Field(default_factory=PreferencesSection)
    conference: Optional[ConferenceSection] = None
    engine: EngineSection = Field(default_factory=EngineSection)
    providers: ProvidersSection = Field(default_factory=ProvidersSection)

    @classmethod
    def load(cls, path: Path) -> "RunConfig":
        """Load a config from a TOML file."""
        data = tomllib.loads(path.read_text())
        return cls.model_validate(data)

    # Public API -----------------------------------------------------------------

    def apply_to(self, settings: "Settings", *, base_dir: Optional[Path] = None) -> None:
        """Apply overrides to an existing Settings instance."""
        self._apply_engine(settings, base_dir)
        self._apply_providers(settings, base_dir)

    def build_preferences(self, *, today: Optional[date] = None) -> SearchPreferences:
        """Validated preferences; raises ``InvalidPreferencesError`` on bad input."""
        try:
            payload = self.preferences_payload(today=today)
        except ValueError as exc:
            raise InvalidPreferencesError([str(exc)]) from exc
        return SearchPreferences.parse(payload)

    def preferences_payload(self, *, today: Optional[date] = None) -> dict[str, object]:
        section = self.preferences
        payload: dict[str, object] = {"target_areas": section.areas}
        check_in = _parse_date(section.check_in, today=today) if section.check_in else None
        if check_in is not None:
            payload["check_in"] = check_in
            if section.check_out:
                payload["check_out"] = _parse_date(section.check_out, today=today)
            else:
                payload["check_out"] = check_in + timedelta(days=section.nights or 1)
        optional = {
            "country": section.country,
            "budget_min": section.budget_min,
            "budget_max": section.budget_max,
            "preferred_star_rating": section.stars,
            "guests": section.guests,
            "currency": section.currency,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        if section.amenities:
            payload["required_amenities"] = section.amenities

        conference = self.conference
        if conference and conference.name:
            payload["conference"] = {
                "name": conference.name,
                "address": conference.address,
                "latitude": conference.latitude,
                "longitude": conference.longitude,
            }
        if conference and conference.max_distance_km is not None:
            payload["max_distance_from_conference_km"] = conference.max_distance_km
        return payload

    # Internal helpers -----------------------------------------------------------

    def _apply_engine(self, settings: "Settings", base_dir: Optional[Path]) -> None:
        engine = self.engine
        if engine.result_limit is not None:
            settings.result_limit = engine.result_limit
        if engine.acceptance_threshold is not None:
            settings.acceptance_threshold = engine.acceptance_threshold
        if engine.relaxed_acceptance_threshold is not None:
            settings.relaxed_acceptance_threshold = engine.relaxed_acceptance_threshold
        if engine.log_level:
            settings.log_level = engine.log_level
        if engine.output_dir:
            settings.output_dir = _resolve_path(engine.output_dir, base_dir)

    def _apply_providers(self, settings: "Settings", base_dir: Optional[Path]) -> None:
        providers = self.providers
        if providers.cozycozy is not None:
            settings.cozycozy_enabled = providers.cozycozy
        if providers.makemytrip is not None:
            settings.makemytrip_enabled = providers.makemytrip
        if providers.inventory is not None:
            settings.inventory_enabled = providers.inventory
        if providers.inventory_path:
            settings.inventory_path = _resolve_path(providers.inventory_path, base_dir)
        if providers.cozycozy_auth_token:
            settings.cozycozy_auth_token = providers.cozycozy_auth_token


def _resolve_path(raw: str, base_dir: Optional[Path]) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute() and base_dir:
        return (base_dir / path).resolve()
    return path


def _parse_date(value: str, *, today: Optional[date] = None) -> date:
    """Parse an ISO date or a relative offset such as ``+14d`` or ``today+2w``."""
    base = today or date.today()
    text = value.strip()
    lowered = text.lower()
    if lowered == "today":
        return base
    if lowered.startswith("today+"):
        text = f"+{text.split('+', 1)[1]}"
        lowered = text.lower()
    if lowered.startswith("+"):
        match = _RELATIVE_DATE.match(lowered[1:])
        if not match:
            raise ValueError(
                f"Unsupported relative date format '{value}'. Use forms like '+14d', '+2w', '+1m'."
            )
        count = int(match.group("count"))
        unit = match.group("unit").lower()
        if unit == "d":
            delta = timedelta(days=count)
        elif unit == "w":
            delta = timedelta(weeks=count)
        else:
            # Months are 30-day blocks.
            delta = timedelta(days=30 * count)
        return base + delta
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(
            f"Invalid date '{value}'. Provide ISO format (YYYY-MM-DD) or a relative offset."
        ) from exc


__all__ = ["RunConfig"]
