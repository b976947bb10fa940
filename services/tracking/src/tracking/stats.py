"""Per-frame statistics reported alongside the track list."""
from __future__ import annotations

import time
from typing import Iterable

from tracking.tracker import Track


class FrameRateMeter:
    """Instantaneous frame rate from the interval between consecutive ticks."""

    def __init__(self) -> None:
        self._last: float | None = None

    def tick(self, now: float | None = None) -> float:
        """Record a frame at ``now`` (seconds, monotonic) and return the rate."""
        if now is None:
            now = time.monotonic()
        last, self._last = self._last, now
        if last is None or now <= last:
            return 0.0
        return float(round(1.0 / (now - last)))


def describe_track(track: Track) -> str:
    """One-line summary, e.g. ``ID:3 person (87%)``."""
    return f"ID:{track.id} {track.label} ({round(track.score * 100)}%)"


def label_counts(tracks: Iterable[Track]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for track in tracks:
        counts[track.label] = counts.get(track.label, 0) + 1
    return counts
