"""Greedy nearest-centroid multi-object tracker.

Each call to ``Tracker.update`` takes the detections of one frame and returns
the live track list:

1. Every detection, in input order, is compared against the tracks that were
   live at the start of the call. Tracks created in this call are not
   candidates, but tracks already matched in this call are, and they are
   compared at the box the earlier detection just wrote into them. The first
   track whose centroid lies strictly closer than ``match_distance`` takes the
   detection's box, label and score and its age resets to 0. Unmatched
   detections start new tracks.
2. Tracks that matched nothing age by one frame and are kept while
   ``age < max_age``.

There is no motion model and no global assignment; ids are never reused.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from tracking_shared.logging import get_logger

from tracking.config import ASSOCIATION_NEAREST_FIT, TrackerConfig

log = get_logger(__name__)


@dataclass(frozen=True)
class Box:
    """Axis-aligned box in frame pixel coordinates."""

    x: float
    y: float
    width: float
    height: float

    @property
    def centroid(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)


@dataclass(frozen=True)
class Detection:
    """One detector observation for a single frame (no track ID)."""

    box: Box
    label: str
    score: float


@dataclass
class Track:
    """A persistent identity; mutated in place by the tracker every frame."""

    id: int
    box: Box
    label: str
    score: float
    age: int = 0  # frames since the last matching detection


def centroid_distance(a: Box, b: Box) -> float:
    ax, ay = a.centroid
    bx, by = b.centroid
    return math.hypot(ax - bx, ay - by)


class Tracker:
    """Assigns stable ids to per-frame detections.

    Not thread-safe: one caller drives ``update`` once per frame. Use one
    instance per camera so id spaces stay independent.

    Args:
        config: Source of ``max_age``, ``match_distance`` and ``association``.
            Keyword arguments override the corresponding config values.
    """

    def __init__(
        self,
        config: TrackerConfig | None = None,
        *,
        max_age: int | None = None,
        match_distance: float | None = None,
        association: str | None = None,
    ) -> None:
        cfg = config or TrackerConfig()
        if max_age is not None or match_distance is not None or association is not None:
            cfg = TrackerConfig(
                max_age=cfg.max_age if max_age is None else max_age,
                match_distance=cfg.match_distance if match_distance is None else match_distance,
                association=cfg.association if association is None else association,
                min_score=cfg.min_score,
            )
        self.max_age = cfg.max_age
        self.match_distance = cfg.match_distance
        self.association = cfg.association
        self._next_id = 0
        self._tracks: dict[int, Track] = {}

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def tracks(self) -> list[Track]:
        """Live tracks in their current iteration order."""
        return list(self._tracks.values())

    def __len__(self) -> int:
        return len(self._tracks)

    def update(self, detections: Iterable[Detection]) -> list[Track]:
        """Advance the tracker by one frame and return the live tracks.

        Output order: matched and new tracks in detection order, then tracks
        carried over without a match in their previous relative order.

        The returned ``Track`` objects are the tracker's own and are mutated
        by later calls; copy them to keep a per-frame record.
        """
        previous = tuple(self._tracks.values())
        updated: dict[int, Track] = {}

        for det in detections:
            track = self._associate(det, previous)
            if track is not None:
                track.box = det.box
                track.label = det.label
                track.score = det.score
                track.age = 0
                updated[track.id] = track
                continue

            track = Track(id=self._next_id, box=det.box, label=det.label, score=det.score)
            updated[track.id] = track
            self._next_id += 1
            log.debug("track_created", track_id=track.id, label=track.label)

        for track in previous:
            if track.id in updated:
                continue
            track.age += 1
            if track.age < self.max_age:
                updated[track.id] = track
            else:
                log.debug("track_expired", track_id=track.id, label=track.label)

        self._tracks = updated
        return list(updated.values())

    def _associate(self, det: Detection, candidates: tuple[Track, ...]) -> Track | None:
        if self.association == ASSOCIATION_NEAREST_FIT:
            best: Track | None = None
            best_dist = self.match_distance
            for track in candidates:
                dist = centroid_distance(track.box, det.box)
                if dist < best_dist:
                    best, best_dist = track, dist
            return best

        for track in candidates:
            if centroid_distance(track.box, det.box) < self.match_distance:
                return track
        return None
