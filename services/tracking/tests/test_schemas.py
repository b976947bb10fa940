"""Ingress validation, settings, config and frame statistics."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from tracking.config import TrackerConfig, build_config
from tracking.stats import FrameRateMeter, describe_track, label_counts
from tracking.tracker import Box, Track
from tracking_shared.events.publisher import GROUP_TRACKING
from tracking_shared.events.schemas import BoundingBox, DetectedObject, DetectionFrame
from tracking_shared.settings import Settings


# ── Schemas ───────────────────────────────────────────────────────────────────

def test_detection_frame_parses_json():
    frame = DetectionFrame.model_validate_json(
        '{"camera_id": "cam-01", "frame_seq": 3, "detections": ['
        '{"box": {"x": 1, "y": 2, "width": 3, "height": 4}, "label": "cup", "score": 0.7}]}'
    )
    assert frame.timestamp_ns == 0
    assert frame.detections[0].box == BoundingBox(x=1, y=2, width=3, height=4)


@pytest.mark.parametrize("field", ["width", "height"])
def test_negative_box_dimension_rejected(field):
    dims = {"x": 0, "y": 0, "width": 10, "height": 10}
    dims[field] = -1
    with pytest.raises(ValidationError):
        BoundingBox(**dims)


@pytest.mark.parametrize("score", [-0.01, 1.01])
def test_score_outside_unit_interval_rejected(score):
    with pytest.raises(ValidationError):
        DetectedObject(box=BoundingBox(x=0, y=0, width=1, height=1), label="cat", score=score)


def test_schemas_are_frozen():
    box = BoundingBox(x=0, y=0, width=1, height=1)
    with pytest.raises(ValidationError):
        box.x = 5


# ── Settings / config ─────────────────────────────────────────────────────────

def test_settings_read_tracker_env(monkeypatch):
    monkeypatch.setenv("TRACKER_MAX_AGE", "12")
    monkeypatch.setenv("TRACKER_MATCH_DISTANCE", "42.5")
    monkeypatch.setenv("CAMERA_IDS", "cam-01, cam-02,")
    s = Settings(_env_file=None)
    assert s.tracker_max_age == 12
    assert s.tracker_match_distance == 42.5
    assert s.camera_id_list == ["cam-01", "cam-02"]


def test_settings_reject_zero_max_age(monkeypatch):
    monkeypatch.setenv("TRACKER_MAX_AGE", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_build_config_from_settings(monkeypatch):
    monkeypatch.setenv("TRACKER_ASSOCIATION", "nearest_fit")
    monkeypatch.setenv("TRACKER_MIN_SCORE", "0.3")
    cfg = build_config(Settings(_env_file=None))
    assert cfg.association == "nearest_fit"
    assert cfg.min_score == 0.3
    assert cfg.max_age == 30


def test_build_config_rejects_unknown_association(monkeypatch):
    monkeypatch.setenv("TRACKER_ASSOCIATION", "greedy")
    with pytest.raises(ValueError, match="greedy"):
        build_config(Settings(_env_file=None))


def test_config_defaults():
    cfg = TrackerConfig()
    assert (cfg.max_age, cfg.match_distance, cfg.association) == (30, 100.0, "first_fit")
    assert cfg.consumer_group == GROUP_TRACKING == "tracking-workers"


# ── Stats ─────────────────────────────────────────────────────────────────────

def test_frame_rate_meter():
    meter = FrameRateMeter()
    assert meter.tick(1.0) == 0.0
    assert meter.tick(1.1) == 10.0
    assert meter.tick(1.1) == 0.0  # zero interval


def test_describe_track():
    track = Track(id=3, box=Box(0, 0, 1, 1), label="person", score=0.874)
    assert describe_track(track) == "ID:3 person (87%)"


def test_label_counts_in_first_seen_order():
    tracks = [
        Track(id=i, box=Box(0, 0, 1, 1), label=label, score=1.0)
        for i, label in enumerate(["dog", "cat", "dog"])
    ]
    assert list(label_counts(tracks).items()) == [("dog", 2), ("cat", 1)]
