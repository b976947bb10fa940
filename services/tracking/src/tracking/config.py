"""Tracking service configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass, field

from tracking_shared.events.publisher import GROUP_TRACKING

ASSOCIATION_FIRST_FIT = "first_fit"
ASSOCIATION_NEAREST_FIT = "nearest_fit"
ASSOCIATIONS = (ASSOCIATION_FIRST_FIT, ASSOCIATION_NEAREST_FIT)


@dataclass(frozen=True)
class TrackerConfig:
    """Tracker tunables plus the stream settings of the per-camera pipeline."""

    # Association
    max_age: int = 30               # update cycles a track survives unmatched
    match_distance: float = 100.0   # centroid distance, same units as box coords
    association: str = ASSOCIATION_FIRST_FIT
    min_score: float = 0.5          # detections below this never reach the tracker

    camera_ids: list[str] = field(default_factory=list)
    redis_url: str = "redis://localhost:6379/0"

    # Stream settings
    consumer_group: str = GROUP_TRACKING
    consumer_name: str = "tracking-0"
    read_batch: int = 10
    block_ms: int = 500
    stream_maxlen: int = 1000

    # Throughput logging interval (frames)
    log_interval: int = 100

    def __post_init__(self) -> None:
        if self.association not in ASSOCIATIONS:
            raise ValueError(
                f"unknown association strategy {self.association!r}; "
                f"expected one of {', '.join(ASSOCIATIONS)}"
            )


def build_config(settings) -> TrackerConfig:
    """Build TrackerConfig from shared tracking_shared.settings.Settings."""
    consumer_name = os.environ.get("TRACKING_CONSUMER_NAME", "tracking-0")
    return TrackerConfig(
        max_age=settings.tracker_max_age,
        match_distance=settings.tracker_match_distance,
        association=settings.tracker_association,
        min_score=settings.tracker_min_score,
        camera_ids=settings.camera_id_list,
        redis_url=settings.redis_url,
        consumer_name=consumer_name,
    )
