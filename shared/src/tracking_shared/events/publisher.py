"""Redis Streams publisher and consumer helpers."""
from __future__ import annotations

from redis.asyncio import Redis
from redis.exceptions import ResponseError

from tracking_shared.events.schemas import _FrozenModel

# Stream name templates
STREAM_DETECTIONS = "detections:{camera_id}"
STREAM_TRACKS = "tracks:{camera_id}"

# Consumer group names
GROUP_TRACKING = "tracking-workers"


def detections_stream(camera_id: str) -> str:
    return STREAM_DETECTIONS.format(camera_id=camera_id)


def tracks_stream(camera_id: str) -> str:
    return STREAM_TRACKS.format(camera_id=camera_id)


async def publish(
    redis: Redis,
    stream: str,
    event: _FrozenModel,
    maxlen: int = 1000,
) -> str:
    """Serialize a Pydantic event and XADD it to a Redis Stream.

    Args:
        redis: Async Redis client.
        stream: Stream name.
        event: A frozen Pydantic model instance.
        maxlen: Approximate max stream length (MAXLEN ~).

    Returns:
        The Redis message ID of the newly added entry.
    """
    payload = {"data": event.model_dump_json()}
    msg_id = await redis.xadd(stream, payload, maxlen=maxlen, approximate=True)
    return msg_id.decode() if isinstance(msg_id, bytes) else msg_id


async def ensure_consumer_group(
    redis: Redis,
    stream: str,
    group: str,
) -> None:
    """Create a consumer group if it does not exist, creating the stream too."""
    try:
        await redis.xgroup_create(stream, group, id="0", mkstream=True)
    except ResponseError as exc:
        # BUSYGROUP: the group already exists
        if "BUSYGROUP" not in str(exc):
            raise


async def read_group(
    redis: Redis,
    stream: str,
    group: str,
    consumer: str,
    count: int = 10,
    block_ms: int = 1000,
) -> list[tuple[str, dict]]:
    """Read new messages for ``consumer`` from a consumer group.

    Returns a list of (message_id, data_dict) tuples with keys and values
    decoded to ``str``.
    """
    results = await redis.xreadgroup(
        groupname=group,
        consumername=consumer,
        streams={stream: ">"},
        count=count,
        block=block_ms,
    )
    if not results:
        return []
    messages = []
    for _stream, entries in results:
        for msg_id, fields in entries:
            messages.append((_decode(msg_id), {_decode(k): _decode(v) for k, v in fields.items()}))
    return messages


async def ack(redis: Redis, stream: str, group: str, *msg_ids: str) -> None:
    """Acknowledge processed messages."""
    await redis.xack(stream, group, *msg_ids)


def _decode(value):
    return value.decode() if isinstance(value, bytes) else value
