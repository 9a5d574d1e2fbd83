"""Validated search preferences for one recommendation run."""
from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from stay_advisor.core.errors import InvalidPreferencesError
from stay_advisor.hotels.models import Coordinates
from stay_advisor.hotels.normalizer import normalize_amenity
from stay_advisor.services.base import ProviderFilters, StayWindow

FALLBACK_BUDGET_MIN = 20000.0
FALLBACK_BUDGET_MAX = 30000.0


def coerce_string_list(value: object) -> list[str]:
    if value in (None, "", ()):
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, Iterable):
        result: list[str] = []
        for item in value:
            text = str(item).strip() if item is not None else ""
            if text:
                result.append(text)
        return result
    raise TypeError("Expected string or list of strings")


class ConferenceVenue(BaseModel):
    """Event venue the client wants to stay close to."""

    model_config = ConfigDict(frozen=True)

    name: str
    address: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def _validate_coordinate_pair(self) -> "ConferenceVenue":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("conference latitude and longitude must be given together")
        return self

    @property
    def coordinates(self) -> Optional[Coordinates]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class SearchPreferences(BaseModel):
    """Client stay preferences.

    Build instances through :meth:`parse` to get :class:`InvalidPreferencesError`
    instead of a raw pydantic ``ValidationError``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    target_areas: list[str] = Field(min_length=1)
    country: Optional[str] = None
    check_in: date
    check_out: date
    budget_min: float = Field(default=0.0, ge=0)
    budget_max: Optional[float] = Field(default=None, description="None means no upper bound")
    preferred_star_rating: int = Field(default=3, ge=1, le=5)
    required_amenities: list[str] = Field(default_factory=list)
    conference: Optional[ConferenceVenue] = None
    max_distance_from_conference_km: float = Field(default=10.0, gt=0)
    guests: int = Field(default=2, ge=1)
    currency: str = "INR"

    @field_validator("target_areas", mode="before")
    @classmethod
    def _coerce_target_areas(cls, value: object) -> list[str]:
        return coerce_string_list(value)

    @field_validator("required_amenities", mode="before")
    @classmethod
    def _normalize_amenities(cls, value: object) -> list[str]:
        amenities: list[str] = []
        for item in coerce_string_list(value):
            normalized = normalize_amenity(item)
            if normalized and normalized not in amenities:
                amenities.append(normalized)
        return amenities

    @field_validator("conference", mode="before")
    @classmethod
    def _coerce_conference(cls, value: object) -> object:
        if value in (None, "", {}):
            return None
        if isinstance(value, str):
            return {"name": value}
        return value

    @field_validator("budget_max", mode="before")
    @classmethod
    def _open_budget_max(cls, value: object) -> object:
        if value in (None, "", 0, "inf", "Infinity"):
            return None
        if isinstance(value, float) and value == float("inf"):
            return None
        return value

    @model_validator(mode="after")
    def _validate_ranges(self) -> "SearchPreferences":
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        if self.budget_max is not None and self.budget_max < self.budget_min:
            raise ValueError("budget_max must not be below budget_min")
        return self

    @classmethod
    def parse(cls, data: "SearchPreferences | Mapping[str, Any]") -> "SearchPreferences":
        if isinstance(data, cls):
            return data
        if not isinstance(data, Mapping):
            raise InvalidPreferencesError([f"expected a mapping, got {type(data).__name__}"])
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            reasons = []
            for error in exc.errors():
                location = ".".join(str(part) for part in error.get("loc", ()))
                message = error.get("msg", "invalid value")
                reasons.append(f"{location}: {message}" if location else message)
            raise InvalidPreferencesError(reasons) from exc

    @property
    def primary_area(self) -> str:
        return self.target_areas[0]

    @property
    def secondary_areas(self) -> list[str]:
        return list(self.target_areas[1:])

    @property
    def stay(self) -> StayWindow:
        return StayWindow(check_in=self.check_in, check_out=self.check_out)

    @property
    def has_conference(self) -> bool:
        return self.conference is not None

    @property
    def has_conference_coordinates(self) -> bool:
        return self.conference is not None and self.conference.coordinates is not None

    @property
    def budget_midpoint(self) -> float:
        """Midpoint used to price fallback hotels.

        An unset or zero bound is replaced by 20000 for the minimum and 30000
        for the maximum.
        """
        low = self.budget_min or FALLBACK_BUDGET_MIN
        high = self.budget_max or FALLBACK_BUDGET_MAX
        return (low + high) / 2

    def provider_filters(self) -> ProviderFilters:
        return ProviderFilters(
            price_min=self.budget_min,
            price_max=self.budget_max,
            min_star_rating=self.preferred_star_rating,
            amenities=list(self.required_amenities),
            currency=self.currency,
            country=self.country,
        )


__all__ = ["ConferenceVenue", "SearchPreferences", "coerce_string_list"]
