from __future__ import annotations

import itertools
import json
import os
import logging

import redis

from .schema import EventEnvelope
from .metrics import get_events_total, get_events_dropped_total


STREAM_EVENTS = os.getenv("EVENTS_STREAM", "crowdledger.events")
STREAM_DLQ = os.getenv("EVENTS_DLQ", "crowdledger.dlq")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

log = logging.getLogger("crowdledger.events")


def _get_redis(url: str | None = None):
    return redis.Redis.from_url(url or REDIS_URL, decode_responses=True, socket_connect_timeout=0.5)


def to_line(env: EventEnvelope) -> str:
    return json.dumps(env.model_dump(), separators=(",", ":"))


class EventBus:
    """Publishes ledger events to Redis Streams and logs a JSON line for Loki.

    Publishing is best-effort: Redis failures are swallowed so that a
    committed ledger operation is never reported as failed.
    """

    def __init__(
        self,
        redis_url: str | None = None,
        stream: str | None = None,
        dlq: str | None = None,
        redis_enabled: bool = True,
    ):
        self.redis_url = redis_url or REDIS_URL
        self.stream = stream or STREAM_EVENTS
        self.dlq = dlq or STREAM_DLQ
        self.redis_enabled = redis_enabled
        self._sequence = itertools.count(1)

    def next_sequence(self) -> int:
        return next(self._sequence)

    def publish(self, env: EventEnvelope) -> None:
        try:
            get_events_total().labels(env.event.event_type).inc()
        except Exception:
            pass

        line = to_line(env)
        if self.redis_enabled:
            try:
                r = _get_redis(self.redis_url)
                r.xadd(self.stream, {"json": line})
            except Exception:
                try:
                    # best-effort DLQ
                    r = _get_redis(self.redis_url)
                    r.xadd(self.dlq, {"json": line})
                except Exception:
                    get_events_dropped_total().inc()
        # Always log for Loki ingestion
        log.info(line)

    def __call__(self, event) -> None:
        """Adapter so the bus can be handed to Ledger(publisher=...).

        Ledger events carry their commit sequence; events built elsewhere
        are numbered by the bus.
        """
        seq = event.sequence or self.next_sequence()
        self.publish(EventEnvelope(correlation_id=f"project:{event.project_id}", sequence=seq, event=event))


def publish(env: EventEnvelope) -> None:
    """Publish with the module-level defaults taken from the environment."""
    EventBus().publish(env)


def ensure_group(group: str, stream: str | None = None) -> None:
    try:
        r = _get_redis()
        # Create the group if it doesn't exist
        r.xgroup_create(name=stream or STREAM_EVENTS, groupname=group, id="$", mkstream=True)
    except Exception as e:
        if "BUSYGROUP" in str(e):
            return
        raise


def consume(group: str, consumer: str, block_ms: int = 15000, stream: str | None = None):
    """Generator yielding (id, json_str) from a Redis Stream consumer group.

    Yields None when a read times out. Caller is responsible for XACK.
    """
    name = stream or STREAM_EVENTS
    r = _get_redis()
    ensure_group(group, name)
    while True:
        resp = r.xreadgroup(group, consumer, {name: ">"}, count=100, block=block_ms)
        if not resp:
            yield None
            continue
        # resp is list[(stream, [(id, {field:value}), ...])]
        for _stream, entries in resp:
            for msg_id, fields in entries:
                yield (msg_id, fields.get("json", ""))
