"""Print canonical hotel records for a captured provider response."""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from stay_advisor.core.logging import configure_logging
from stay_advisor.hotels import CanonicalHotelRecord, build_hotel_records


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Normalize a saved provider payload")
    parser.add_argument("payload", type=Path, help="JSON file captured from a provider response")
    parser.add_argument("--provider", default="capture", help="Provider name to tag records with")
    parser.add_argument("--area", default=None, help="Search area used as the default city")
    parser.add_argument("--currency", default="INR")
    parser.add_argument("--log-level", default="INFO")
    return parser


def main() -> None:
    args = build_parser().parse_args()
    configure_logging(args.log_level, Path("data/logs"))
    payload = json.loads(args.payload.read_text(encoding="utf-8"))
    records = build_hotel_records(
        payload,
        provider=args.provider,
        default_currency=args.currency,
        search_area=args.area,
    )
    logging.getLogger(__name__).info("Normalized %s records from %s", len(records), args.payload)
    print(json.dumps(CanonicalHotelRecord.from_iterable(records), indent=2, default=str))


if __name__ == "__main__":
    main()
