from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from stay_advisor.config.run_config import RunConfig
from stay_advisor.config.settings import Settings
from stay_advisor.core.errors import InvalidPreferencesError

_TODAY = date(2025, 1, 10)

_CONFIG = """
profile = "delegates"

[preferences]
areas = ["Mumbai", "Navi Mumbai"]
country = "India"
check_in = "+14d"
nights = 3
budget_min = 20000
budget_max = 30000
stars = 4
amenities = "WiFi, Pool"

[conference]
name = "Jio World Centre"
latitude = 19.0653
longitude = 72.8630
max_distance_km = 5

[engine]
result_limit = 5
acceptance_threshold = 40
output_dir = "out"

[providers]
makemytrip = false
inventory_path = "catalogue/hotels.json"
"""


def _write(tmp_path: Path, text: str = _CONFIG) -> Path:
    path = tmp_path / "run.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_and_build_preferences(tmp_path: Path) -> None:
    config = RunConfig.load(_write(tmp_path))

    prefs = config.build_preferences(today=_TODAY)

    assert config.profile == "delegates"
    assert prefs.target_areas == ["Mumbai", "Navi Mumbai"]
    assert prefs.check_in == date(2025, 1, 24)
    assert prefs.check_out == date(2025, 1, 27)
    assert prefs.preferred_star_rating == 4
    assert prefs.required_amenities == ["wifi", "pool"]
    assert prefs.conference is not None
    assert prefs.conference.name == "Jio World Centre"
    assert prefs.has_conference_coordinates is True
    assert prefs.max_distance_from_conference_km == 5


def test_apply_to_overrides_settings_relative_to_config_dir(tmp_path: Path) -> None:
    config = RunConfig.load(_write(tmp_path))
    settings = Settings(_env_file=None)

    config.apply_to(settings, base_dir=tmp_path)

    assert settings.result_limit == 5
    assert settings.acceptance_threshold == 40
    assert settings.makemytrip_enabled is False
    assert settings.cozycozy_enabled is True
    assert settings.output_dir == (tmp_path / "out").resolve()
    assert settings.inventory_path == (tmp_path / "catalogue/hotels.json").resolve()


@pytest.mark.parametrize(
    "check_in, check_out, expected_in, expected_out",
    [
        ("today", "+2d", date(2025, 1, 10), date(2025, 1, 12)),
        ("today+1w", None, date(2025, 1, 17), date(2025, 1, 18)),
        ("+1m", "2025-02-15", date(2025, 2, 9), date(2025, 2, 15)),
        ("2025-06-01", "2025-06-05", date(2025, 6, 1), date(2025, 6, 5)),
    ],
)
def test_date_forms(check_in, check_out, expected_in, expected_out) -> None:
    preferences = {"areas": ["Goa"], "check_in": check_in}
    if check_out:
        preferences["check_out"] = check_out
    config = RunConfig.model_validate({"preferences": preferences})

    prefs = config.build_preferences(today=_TODAY)

    assert (prefs.check_in, prefs.check_out) == (expected_in, expected_out)


def test_bad_relative_date_is_invalid_preferences() -> None:
    config = RunConfig.model_validate({"preferences": {"areas": ["Goa"], "check_in": "+3y"}})

    with pytest.raises(InvalidPreferencesError) as excinfo:
        config.build_preferences(today=_TODAY)

    assert "+3y" in excinfo.value.reasons[0]


def test_missing_areas_is_invalid_preferences() -> None:
    config = RunConfig.model_validate({"preferences": {"check_in": "2025-06-01", "nights": 2}})

    with pytest.raises(InvalidPreferencesError):
        config.build_preferences(today=_TODAY)
