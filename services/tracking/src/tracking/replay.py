#!/usr/bin/env python3
"""Replay recorded detections through the tracker without Redis.

Reads one DetectionFrame JSON object per line and writes one TrackFrameEvent
JSON object per line.

Usage:
    tracking-replay detections.jsonl --output tracks.jsonl

    # Or as a filter, with a tighter match radius:
    cat detections.jsonl | tracking-replay - --match-distance 60
"""
from __future__ import annotations

import argparse
import sys
from contextlib import ExitStack

from pydantic import ValidationError

from tracking_shared.events.schemas import DetectionFrame
from tracking_shared.logging import configure_logging, get_logger

from tracking.config import ASSOCIATIONS, TrackerConfig
from tracking.pipeline import TrackingPipeline
from tracking.stats import describe_track

log = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    defaults = TrackerConfig()
    parser = argparse.ArgumentParser(description="Replay detection frames through the tracker")
    parser.add_argument("input", help="JSON-lines file of detection frames, or '-' for stdin")
    parser.add_argument("--output", "-o", help="Output JSON-lines path (default: stdout)")
    parser.add_argument("--camera-id", default="cam-01", help="Camera to replay (default: cam-01)")
    parser.add_argument("--max-age", type=int, default=defaults.max_age)
    parser.add_argument("--match-distance", type=float, default=defaults.match_distance)
    parser.add_argument("--min-score", type=float, default=defaults.min_score)
    parser.add_argument("--association", choices=ASSOCIATIONS, default=defaults.association)
    parser.add_argument("--log-level", default="WARNING")
    return parser


def replay(lines, out, pipeline: TrackingPipeline) -> int:
    """Feed JSON lines (bytes or str) through ``pipeline``.

    Returns the number of invalid lines. Each line is decoded on its own, so a
    line that is not UTF-8 is reported and skipped like any other bad frame.
    """
    errors = 0
    for lineno, line in enumerate(lines, start=1):
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as exc:
                errors += 1
                print(f"line {lineno}: not valid UTF-8: {exc}", file=sys.stderr)
                continue
        line = line.strip()
        if not line:
            continue
        try:
            frame = DetectionFrame.model_validate_json(line)
        except ValidationError as exc:
            errors += 1
            print(f"line {lineno}: invalid detection frame: {exc}", file=sys.stderr)
            continue
        if frame.camera_id != pipeline.camera_id:
            log.debug("replay_frame_skipped", line=lineno, camera_id=frame.camera_id)
            continue
        event = pipeline.process(frame)
        out.write(event.model_dump_json() + "\n")
    return errors


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("console", args.log_level, stream=sys.stderr)

    if args.max_age < 1:
        print("Error: --max-age must be at least 1", file=sys.stderr)
        return 2
    if args.match_distance <= 0:
        print("Error: --match-distance must be greater than 0", file=sys.stderr)
        return 2
    if not 0.0 <= args.min_score <= 1.0:
        print("Error: --min-score must be between 0 and 1", file=sys.stderr)
        return 2

    config = TrackerConfig(
        max_age=args.max_age,
        match_distance=args.match_distance,
        association=args.association,
        min_score=args.min_score,
        camera_ids=[args.camera_id],
    )
    pipeline = TrackingPipeline(args.camera_id, config)

    with ExitStack() as stack:
        if args.input == "-":
            src = sys.stdin.buffer
        else:
            try:
                src = stack.enter_context(open(args.input, "rb"))
            except OSError as exc:
                print(f"Error: cannot open input: {exc}", file=sys.stderr)
                return 2
        out = sys.stdout
        if args.output:
            out = stack.enter_context(open(args.output, "w", encoding="utf-8"))
        errors = replay(src, out, pipeline)

    tracker = pipeline.tracker
    print(
        f"Done. {pipeline.frame_count} frames, {tracker.next_id} ids assigned, "
        f"{len(tracker)} live tracks",
        file=sys.stderr,
    )
    for track in tracker.tracks:
        print(f"  {describe_track(track)}", file=sys.stderr)

    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
