"""Collapse duplicate hotel listings gathered from several providers."""
from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List

from stay_advisor.hotels.models import CanonicalHotelRecord

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def dedupe_key(record: CanonicalHotelRecord) -> str:
    """Lowercased hotel name with all whitespace removed.

    The key carries no city or country, so same-named hotels in different
    cities collapse into one record.
    """
    return _WHITESPACE.sub("", record.name.lower())


def dedupe(records: Iterable[CanonicalHotelRecord]) -> List[CanonicalHotelRecord]:
    """Keep the first record per key and union later duplicates' offers into it.

    Output preserves order of first appearance.
    """
    kept: Dict[str, CanonicalHotelRecord] = {}
    duplicates = 0
    for record in records:
        key = dedupe_key(record)
        existing = kept.get(key)
        if existing is None:
            kept[key] = record
            continue
        duplicates += 1
        added = existing.merge_offers(record)
        logger.debug(
            "Merged duplicate '%s' from %s into %s (%s new offers)",
            record.name,
            record.source,
            existing.source,
            added,
        )
    if duplicates:
        logger.info("Collapsed %s duplicate listings into %s hotels", duplicates, len(kept))
    return list(kept.values())


__all__ = ["dedupe", "dedupe_key"]
