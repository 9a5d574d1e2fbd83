from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from pydantic import ValidationError

from stay_advisor.config.settings import Settings
from stay_advisor.services import CozyCozyClient, InventoryClient, MakeMyTripClient, build_adapters


def test_environment_overrides_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ADVISOR_RESULT_LIMIT", "7")
    monkeypatch.setenv("ADVISOR_COZYCOZY_RATE_LIMIT_MS", "250")
    monkeypatch.setenv("ADVISOR_DISABLED_PROVIDERS", "MakeMyTrip, inventory")

    settings = Settings(_env_file=None)

    assert settings.result_limit == 7
    assert settings.cozycozy_rate_limit_ms == 250
    assert settings.disabled_providers == ("makemytrip", "inventory")
    assert settings.provider_enabled("cozycozy") is True
    assert settings.provider_enabled("makemytrip") is False
    assert settings.provider_enabled("unknown") is False


def test_result_limit_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, result_limit=0)


def test_paths_are_expanded() -> None:
    settings = Settings(_env_file=None, inventory_path="~/hotels.json")

    assert settings.inventory_path == Path.home() / "hotels.json"


def test_ensure_directories_creates_log_and_output_dirs(tmp_path: Path) -> None:
    settings = Settings(_env_file=None, log_dir=tmp_path / "logs", output_dir=tmp_path / "out")

    settings.ensure_directories()

    assert (tmp_path / "logs").is_dir()
    assert (tmp_path / "out").is_dir()


@pytest.mark.asyncio
async def test_build_adapters_follows_enabled_flags() -> None:
    async with httpx.AsyncClient() as client:
        everything = build_adapters(Settings(_env_file=None), client=client)
        only_inventory = build_adapters(
            Settings(_env_file=None, cozycozy_enabled=False, disabled_providers=["makemytrip"]), client=client
        )
        nothing = build_adapters(
            Settings(_env_file=None, cozycozy_enabled=False, makemytrip_enabled=False, inventory_enabled=False)
        )

    assert [type(adapter) for adapter in everything] == [CozyCozyClient, MakeMyTripClient, InventoryClient]
    assert [adapter.name for adapter in only_inventory] == ["inventory"]
    assert nothing == []


def test_adapters_carry_their_own_rate_gates() -> None:
    settings = Settings(_env_file=None, cozycozy_rate_limit_ms=1500, makemytrip_rate_limit_ms=2000)

    cozy, mmt, _ = build_adapters(settings)

    assert cozy.gate is not mmt.gate
    assert cozy.gate.min_interval_s == 1.5
    assert mmt.gate.min_interval_s == 2.0
