"""JSON persistence helpers."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from stay_advisor.hotels.models import RecommendationResult


class JsonStore:
    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    async def write(
        self,
        data: Iterable[dict[str, object]],
        *,
        filename: str,
        subdir: str | None = None,
        metadata: Optional[dict[str, object]] = None,
    ) -> Path:
        target_dir = self.root / subdir if subdir else self.root
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / filename
        serialisable: dict[str, object] = {
            "generated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
        if metadata:
            serialisable.update(metadata)
        serialisable["items"] = list(data)
        path.write_text(json.dumps(serialisable, indent=2, default=str))
        return path

    async def write_result(
        self,
        result: RecommendationResult,
        *,
        filename: str,
        subdir: str | None = None,
    ) -> Path:
        payload = result.to_dict()
        items = payload.pop("recommendations")
        return await self.write(items, filename=filename, subdir=subdir, metadata=payload)  # type: ignore[arg-type]


__all__ = ["JsonStore"]
