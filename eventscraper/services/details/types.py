from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RefreshCandidate:
    id: int
    name: str
    website: str
    platform: str
    location: str | None = None
