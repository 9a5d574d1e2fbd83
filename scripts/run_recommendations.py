"""Entry point for manual recommendation runs."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from stay_advisor.advisory import RecommendationEngine, SearchPreferences
from stay_advisor.config.run_config import RunConfig
from stay_advisor.config.settings import Settings
from stay_advisor.core.errors import InvalidPreferencesError
from stay_advisor.core.logging import configure_logging
from stay_advisor.hotels.models import RecommendationResult
from stay_advisor.storage.json_writer import JsonStore

PROVIDERS = ("cozycozy", "makemytrip", "inventory")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate ranked hotel recommendations")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=(
            "Path to a TOML run configuration file "
            "(defaults to config/run_config.toml when present)"
        ),
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        help="Ignore config/run_config.toml even if it exists",
    )
    parser.add_argument("--area", action="append", dest="areas", help="Target area (repeatable)")
    parser.add_argument("--country", default=None)
    parser.add_argument("--check-in", default=None, help="Check-in date (YYYY-MM-DD)")
    parser.add_argument("--nights", type=int, default=None)
    parser.add_argument("--budget-min", type=float, default=None)
    parser.add_argument("--budget-max", type=float, default=None)
    parser.add_argument("--stars", type=int, default=None, help="Preferred star rating (1-5)")
    parser.add_argument("--amenity", action="append", dest="amenities", help="Required amenity (repeatable)")
    parser.add_argument("--guests", type=int, default=None)
    parser.add_argument("--conference-name", default=None)
    parser.add_argument("--conference-lat", type=float, default=None)
    parser.add_argument("--conference-lon", type=float, default=None)
    parser.add_argument("--max-distance", type=float, default=None, help="Max km from the conference venue")
    parser.add_argument("--limit", type=int, default=None, help="Maximum recommendations to return")
    parser.add_argument("--output", default=None, help="Output filename under the output directory")
    parser.add_argument("--log-level", default=None)
    for provider in PROVIDERS:
        parser.add_argument(
            f"--no-{provider}",
            action="store_true",
            help=f"Disable the {provider} provider for this run",
        )
    parser.add_argument(
        "--override",
        action="append",
        metavar="KEY=VALUE",
        help="Override a Settings attribute (repeatable). Values accept JSON literals.",
    )
    return parser


def _decode_override(value: str) -> object:
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        pass
    lower = value.strip().lower()
    if lower in {"true", "false"}:
        return lower == "true"
    try:
        return float(value)
    except ValueError:
        return value


def _apply_overrides(settings: Settings, overrides: dict[str, object]) -> None:
    for key, raw in overrides.items():
        if not hasattr(settings, key):
            logging.getLogger(__name__).warning("Ignoring unknown override '%s'", key)
            continue
        setattr(settings, key, raw)
        logging.getLogger(__name__).info("Override: set %s=%r", key, raw)


def _cli_preferences(args: argparse.Namespace, base: dict[str, object]) -> dict[str, object]:
    payload = dict(base)
    if args.areas:
        payload["target_areas"] = args.areas
    if args.check_in:
        check_in = date.fromisoformat(args.check_in)
        payload["check_in"] = check_in
        payload["check_out"] = check_in + timedelta(days=args.nights or 1)
    elif args.nights and isinstance(payload.get("check_in"), date):
        payload["check_out"] = payload["check_in"] + timedelta(days=args.nights)  # type: ignore[operator]
    if "check_in" not in payload:
        check_in = date.today() + timedelta(days=14)
        payload["check_in"] = check_in
        payload["check_out"] = check_in + timedelta(days=args.nights or 1)

    simple = {
        "country": args.country,
        "budget_min": args.budget_min,
        "budget_max": args.budget_max,
        "preferred_star_rating": args.stars,
        "guests": args.guests,
        "max_distance_from_conference_km": args.max_distance,
    }
    payload.update({key: value for key, value in simple.items() if value is not None})
    if args.amenities:
        payload["required_amenities"] = args.amenities
    if args.conference_name:
        payload["conference"] = {
            "name": args.conference_name,
            "latitude": args.conference_lat,
            "longitude": args.conference_lon,
        }
    return payload


def _print_summary(result: RecommendationResult) -> None:
    print(
        f"{len(result)} recommendations from {result.total_candidates} candidates"
        + (" (fallback)" if result.used_fallback else "")
    )
    for position, item in enumerate(result.recommendations, start=1):
        hotel = item.hotel
        price = hotel.best_price
        price_text = f"{price:,.0f} {hotel.currency or ''}".strip() if price else "n/a"
        platform = hotel.best_platform or "-"
        print(f"{position:>2}. {item.relevance_score:6.2f}  {hotel.name}  [{price_text} via {platform}]")
    failed = [outcome for outcome in result.provider_outcomes if not outcome.ok]
    for outcome in failed:
        print(f"    ! {outcome.provider} ({outcome.area}): {outcome.error}")


async def run(settings: Settings, preferences: SearchPreferences, *, limit: Optional[int], output: str) -> Path:
    engine = RecommendationEngine(settings)
    try:
        result = await engine.generate(preferences, limit=limit)
    finally:
        await engine.aclose()
    store = JsonStore(settings.output_dir)
    path = await store.write_result(result, filename=output)
    _print_summary(result)
    logging.getLogger(__name__).info("Wrote %s recommendations to %s", len(result), path)
    return path


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    settings = Settings()
    config_path: Optional[Path] = None
    run_config: Optional[RunConfig] = None

    if not args.no_config:
        if args.config:
            config_path = args.config
            if not config_path.exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")
        else:
            default_path = Path("config/run_config.toml")
            if default_path.exists():
                config_path = default_path

    if config_path:
        run_config = RunConfig.load(config_path)
        run_config.apply_to(settings, base_dir=config_path.parent)

    for provider in PROVIDERS:
        if getattr(args, f"no_{provider}"):
            setattr(settings, f"{provider}_enabled", False)
    if args.log_level:
        settings.log_level = args.log_level
    if args.override:
        overrides: dict[str, object] = {}
        for entry in args.override:
            if "=" not in entry:
                parser.error(f"Override must be in KEY=VALUE form (got '{entry}')")
            key, value = entry.split("=", 1)
            overrides[key.strip()] = _decode_override(value.strip())
        _apply_overrides(settings, overrides)

    configure_logging(settings.log_level, settings.log_dir)
    settings.ensure_directories()
    logger = logging.getLogger(__name__)
    if run_config:
        suffix = f" ({run_config.title})" if run_config.title else ""
        logger.info("Loaded run profile '%s'%s from %s", run_config.profile, suffix, config_path)

    if args.limit is not None and args.limit <= 0:
        parser.error("--limit must be positive")

    try:
        base = run_config.preferences_payload() if run_config else {}
        payload = _cli_preferences(args, base)
        payload.setdefault("guests", settings.default_guest_count)
        preferences = SearchPreferences.parse(payload)
    except InvalidPreferencesError as exc:
        for reason in exc.reasons:
            print(f"invalid preferences: {reason}", file=sys.stderr)
        return 2
    except ValueError as exc:
        print(f"invalid preferences: {exc}", file=sys.stderr)
        return 2

    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    output = args.output or f"recommendations-{stamp}.json"
    asyncio.run(run(settings, preferences, limit=args.limit, output=output))
    return 0


if __name__ == "__main__":
    sys.exit(main())
