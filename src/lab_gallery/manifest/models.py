from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ManifestEntry:
    name: str
    title: str
    description: str
    last_modified: Optional[str]   # ISO-8601 UTC, e.g. 2026-01-16T08:30:00.000Z
    size: int                      # KB
    screenshot: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "lastModified": self.last_modified,
            "size": self.size,
            "screenshot": self.screenshot,
        }

    def summary(self) -> Dict[str, Any]:
        """The shape returned by GET /api/files (no screenshot)."""
        d = self.to_dict()
        d.pop("screenshot")
        return d


def round_half_up(x: float) -> int:
    return int(x + 0.5) if x >= 0 else -int(-x + 0.5)


def size_kb(n_bytes: int) -> int:
    return round_half_up(n_bytes / 1024)


def iso_utc(ts: float) -> str:
    d = dt.datetime.fromtimestamp(ts, tz=dt.timezone.utc)
    return d.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return iso_utc(dt.datetime.now(tz=dt.timezone.utc).timestamp())


def parse_iso(s: str) -> dt.datetime:
    # fromisoformat() only accepts "Z" from 3.11 on
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return dt.datetime.fromisoformat(s)
