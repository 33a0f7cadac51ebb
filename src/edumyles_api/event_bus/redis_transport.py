"""Redis pub/sub transport.

Each ``RedisTransport`` owns one ``redis.asyncio`` client. A Redis connection
in subscribe mode cannot publish, so the bus duplicates the transport for every
subscription; the duplicate runs a ``PubSub`` reader task until its listener is
closed.
"""

import asyncio
import contextlib
from typing import Any

import redis.asyncio as redis
from loguru import logger

from .transport import Listener, MessageCallback, Transport


def _redacted(url: str) -> str:
    """Strip credentials from a Redis URL for logging."""
    return url.split("@")[-1]


class RedisListener(Listener):
    """A subscribed ``PubSub`` plus the task reading from it."""

    def __init__(self, pubsub: redis.client.PubSub, channel: str, task: asyncio.Task):
        self._pubsub = pubsub
        self._channel = channel
        self._task = task
        self.closed = False

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        try:
            await self._pubsub.unsubscribe(self._channel)
        finally:
            await self._pubsub.aclose()
        logger.debug(f"Redis listener on {self._channel} closed")


class RedisTransport(Transport):
    """Transport backed by Redis ``PUBLISH`` / ``SUBSCRIBE``."""

    def __init__(self, url: str, **client_options: Any):
        self.url = url
        self._client_options = client_options
        self._client: redis.Redis | None = None
        self._listeners: list[RedisListener] = []

    def _require_client(self) -> redis.Redis:
        if self._client is None:
            raise ConnectionError(f"Redis transport not connected: {_redacted(self.url)}")
        return self._client

    async def connect(self) -> None:
        client = redis.from_url(self.url, encoding="utf-8", decode_responses=True, **self._client_options)
        try:
            await client.ping()
        except Exception as e:
            logger.error(f"Redis connection failed: redis_url={_redacted(self.url)}, error={e}, error_type={type(e).__name__}")
            await client.aclose()
            raise
        self._client = client
        logger.info(f"Redis connected: redis_url={_redacted(self.url)}")

    async def disconnect(self) -> None:
        for listener in self._listeners:
            await listener.close()
        self._listeners.clear()
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection closed")

    async def ping(self) -> None:
        await self._require_client().ping()

    async def publish(self, channel: str, payload: str) -> None:
        receivers = await self._require_client().publish(channel, payload)
        logger.trace(f"Published on {channel} to {receivers} listeners")

    def duplicate(self) -> "RedisTransport":
        return RedisTransport(self.url, **self._client_options)

    async def subscribe(self, channel: str, on_message: MessageCallback) -> Listener:
        pubsub = self._require_client().pubsub(ignore_subscribe_messages=True)

        async def _dispatch(message: dict[str, Any]) -> None:
            await on_message(message["data"])

        def _on_reader_error(error: BaseException, _pubsub: redis.client.PubSub) -> None:
            logger.error(f"Redis listener on {channel} failed: {error}")

        await pubsub.subscribe(**{channel: _dispatch})
        task = asyncio.create_task(pubsub.run(exception_handler=_on_reader_error))
        listener = RedisListener(pubsub, channel, task)
        self._listeners.append(listener)
        logger.debug(f"Redis listener on {channel} started")
        return listener
