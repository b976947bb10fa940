"""Tracking pipeline: consume detections → filter → track → publish.

For each camera:
1. XREADGROUP from `detections:{camera_id}` (consumer group: tracking-workers)
2. Decode DetectionFrame
3. Drop detections below the confidence threshold, run Tracker.update
4. Publish one TrackFrameEvent to `tracks:{camera_id}`
5. XACK the processed message
"""
from __future__ import annotations

import time

import redis.asyncio as aioredis

from tracking_shared.events.publisher import (
    ack,
    detections_stream,
    ensure_consumer_group,
    publish,
    read_group,
    tracks_stream,
)
from tracking_shared.events.schemas import (
    BoundingBox,
    DetectionFrame,
    TrackedObject,
    TrackFrameEvent,
)
from tracking_shared.logging import bind_camera, get_logger

from tracking.config import TrackerConfig
from tracking.stats import FrameRateMeter, label_counts
from tracking.tracker import Box, Detection, Track, Tracker

log = get_logger(__name__)


def _to_detections(frame: DetectionFrame, min_score: float) -> list[Detection]:
    return [
        Detection(
            box=Box(x=d.box.x, y=d.box.y, width=d.box.width, height=d.box.height),
            label=d.label,
            score=d.score,
        )
        for d in frame.detections
        if d.score >= min_score
    ]


def _to_tracked(track: Track) -> TrackedObject:
    b = track.box
    return TrackedObject(
        track_id=track.id,
        box=BoundingBox(x=b.x, y=b.y, width=b.width, height=b.height),
        label=track.label,
        score=track.score,
        age=track.age,
    )


class TrackingPipeline:
    """Runs the tracking pipeline for a single camera.

    Args:
        camera_id: Camera identifier (used for stream names).
        config: Tracking configuration.
        tracker: Tracker to drive. A fresh one is built from ``config`` when
            omitted; never share one tracker between cameras.
    """

    def __init__(
        self,
        camera_id: str,
        config: TrackerConfig,
        tracker: Tracker | None = None,
    ) -> None:
        self._camera_id = camera_id
        self._cfg = config
        self._tracker = tracker if tracker is not None else Tracker(config)
        self._meter = FrameRateMeter()
        self._in_stream = detections_stream(camera_id)
        self._out_stream = tracks_stream(camera_id)
        self._frame_count = 0
        self._t_start = time.monotonic()

    @property
    def camera_id(self) -> str:
        return self._camera_id

    @property
    def tracker(self) -> Tracker:
        return self._tracker

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def process(self, frame: DetectionFrame, now: float | None = None) -> TrackFrameEvent:
        """Track one frame of detections and build the outgoing event."""
        if frame.camera_id != self._camera_id:
            raise ValueError(
                f"frame for camera {frame.camera_id!r} sent to pipeline {self._camera_id!r}"
            )

        detections = _to_detections(frame, self._cfg.min_score)
        tracks = self._tracker.update(detections)
        fps = self._meter.tick(now)
        self._frame_count += 1

        if self._frame_count % self._cfg.log_interval == 0:
            elapsed = time.monotonic() - self._t_start
            log.info(
                "pipeline_throughput",
                frames=self._frame_count,
                fps=round(self._frame_count / elapsed, 1) if elapsed > 0 else 0,
                tracks=len(tracks),
                labels=label_counts(tracks),
                next_track_id=self._tracker.next_id,
            )

        return TrackFrameEvent(
            camera_id=self._camera_id,
            timestamp_ns=frame.timestamp_ns,
            frame_seq=frame.frame_seq,
            fps=fps,
            tracks=[_to_tracked(t) for t in tracks],
        )

    async def run(self, redis: aioredis.Redis) -> None:
        """Main loop: processes detection frames until cancelled."""
        bind_camera(self._camera_id)
        await ensure_consumer_group(redis, self._in_stream, self._cfg.consumer_group)

        log.info(
            "pipeline_starting",
            in_stream=self._in_stream,
            out_stream=self._out_stream,
            max_age=self._tracker.max_age,
            match_distance=self._tracker.match_distance,
            association=self._tracker.association,
        )

        while True:
            messages = await read_group(
                redis,
                self._in_stream,
                self._cfg.consumer_group,
                self._cfg.consumer_name,
                count=self._cfg.read_batch,
                block_ms=self._cfg.block_ms,
            )

            for msg_id, msg_data in messages:
                try:
                    await self._process_message(redis, msg_id, msg_data)
                except Exception as exc:
                    log.error(
                        "pipeline_frame_error",
                        msg_id=msg_id,
                        error=str(exc),
                    )
                    # Still ACK so a malformed frame is not redelivered forever
                    await ack(redis, self._in_stream, self._cfg.consumer_group, msg_id)

    async def _process_message(
        self, redis: aioredis.Redis, msg_id: str, msg_data: dict
    ) -> None:
        frame = DetectionFrame.model_validate_json(msg_data.get("data", ""))
        event = self.process(frame)
        await publish(redis, self._out_stream, event, maxlen=self._cfg.stream_maxlen)
        await ack(redis, self._in_stream, self._cfg.consumer_group, msg_id)
