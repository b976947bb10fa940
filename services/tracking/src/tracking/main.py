"""Tracking service entry point."""
from __future__ import annotations

import asyncio
import signal

import redis.asyncio as aioredis

from tracking_shared.logging import configure_logging, get_logger
from tracking_shared.settings import settings

from tracking.config import build_config
from tracking.pipeline import TrackingPipeline

log = get_logger(__name__)


async def run() -> None:
    configure_logging(settings.log_format, settings.log_level)
    config = build_config(settings)

    log.info(
        "tracking_service_starting",
        cameras=config.camera_ids,
        max_age=config.max_age,
        match_distance=config.match_distance,
        association=config.association,
        min_score=config.min_score,
    )

    redis = aioredis.from_url(config.redis_url, decode_responses=False)

    # One pipeline, and therefore one tracker and id space, per camera
    pipelines = [TrackingPipeline(cam_id, config) for cam_id in config.camera_ids]

    loop = asyncio.get_running_loop()

    def _shutdown(sig, frame):
        log.info("shutdown_signal_received", signal=sig)
        for task in asyncio.all_tasks(loop):
            task.cancel()

    signal.signal(signal.SIGTERM, _shutdown)
    signal.signal(signal.SIGINT, _shutdown)

    try:
        await asyncio.gather(*[p.run(redis) for p in pipelines])
    except asyncio.CancelledError:
        pass
    finally:
        await redis.aclose()
        log.info("tracking_service_stopped")


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
