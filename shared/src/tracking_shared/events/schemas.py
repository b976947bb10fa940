"""Pydantic v2 event schemas for the tracking Redis Streams.

Stream naming convention: {domain}:{camera_id}
  detections:cam-01    per-frame detector output, before identity assignment
  tracks:cam-01        per-frame tracker output with stable track IDs

These models are the strict ingress boundary: the tracker itself accepts any
box, so negative sizes and out-of-range scores are rejected here.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class BoundingBox(_FrozenModel):
    """Axis-aligned box in frame pixel coordinates (top-left corner + size)."""

    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)


# ── Detector → Tracking ───────────────────────────────────────────────────────

class DetectedObject(_FrozenModel):
    box: BoundingBox
    label: str = Field(description="Free-form class name, e.g. 'person'")
    score: float = Field(ge=0.0, le=1.0, description="Detector confidence [0,1]")


class DetectionFrame(_FrozenModel):
    """All detections produced for one video frame.

    Stream: detections:{camera_id}
    """

    camera_id: str
    timestamp_ns: int = Field(default=0, description="Monotonic nanosecond timestamp")
    frame_seq: int = Field(default=0, description="Frame counter per camera")
    detections: list[DetectedObject] = Field(default_factory=list)


# ── Tracking → Renderers / Reporters ──────────────────────────────────────────

class TrackedObject(_FrozenModel):
    track_id: int = Field(description="Tracker-local integer ID, unique per camera")
    box: BoundingBox
    label: str
    score: float
    age: int = Field(description="Consecutive frames without a matching detection")


class TrackFrameEvent(_FrozenModel):
    """The tracker's authoritative track list after one frame.

    Stream: tracks:{camera_id}
    Published once per processed detection frame.
    """

    camera_id: str
    timestamp_ns: int
    frame_seq: int
    fps: float = Field(default=0.0, description="Instantaneous processing rate")
    tracks: list[TrackedObject] = Field(default_factory=list)

    @property
    def object_count(self) -> int:
        return len(self.tracks)
