"""Retry and backoff for event delivery.

``RetryingHandler`` decorates any handler (plain async function or
``EventHandler``) with the retry loop used for every subscription:

- attempts for one delivery run strictly one after another
- the delay before retry ``n`` is ``min(max_backoff_delay, 1000ms * multiplier ** (n - 1))``
- once ``max_retries`` is exceeded the last error is logged and re-raised

The sleep function is injectable so tests can observe delays without waiting.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

from .core import EventHandler, T_Handler, invoke_handler
from .models import Event, RetryPolicy

BASE_DELAY_MS = 1000
DEFAULT_BACKOFF_MULTIPLIER = 2
DEFAULT_MAX_BACKOFF_DELAY_MS = 30000

SleepFunc = Callable[[float], Awaitable[Any]]


def calculate_backoff_delay(attempt: int, retry_policy: RetryPolicy | None = None) -> float:
    """Return the delay in milliseconds before retry number ``attempt`` (1-based).

    Without a policy the delay is a flat ``BASE_DELAY_MS``. A zero multiplier or
    zero maximum falls back to the defaults. Growth beyond the float range
    is capped at the maximum like any other large delay.
    """
    if retry_policy is None:
        return BASE_DELAY_MS

    multiplier = retry_policy.backoff_multiplier or DEFAULT_BACKOFF_MULTIPLIER
    max_delay = retry_policy.max_backoff_delay or DEFAULT_MAX_BACKOFF_DELAY_MS

    try:
        delay = BASE_DELAY_MS * multiplier ** (attempt - 1)
    except OverflowError:
        return max_delay
    return min(delay, max_delay)


class RetryingHandler(EventHandler):
    """Wrap a handler with the subscription retry policy."""

    def __init__(self, handler: T_Handler, retry_policy: RetryPolicy | None = None, sleep: SleepFunc = asyncio.sleep):
        self.handler = handler
        self.retry_policy = retry_policy
        self._sleep = sleep

    @property
    def max_retries(self) -> int:
        return self.retry_policy.max_retries if self.retry_policy else 0

    async def handle(self, event: Event) -> None:
        attempt = 0
        max_retries = self.max_retries

        while True:
            try:
                await invoke_handler(self.handler, event)
                return
            except Exception as e:
                attempt += 1

                if attempt > max_retries:
                    logger.error(f"Event handler failed after all retries: event_id={event.id}, type={event.type}, attempt={attempt}, error={e!r}")
                    raise

                delay = calculate_backoff_delay(attempt, self.retry_policy)
                logger.warning(f"Event handler failed, retrying: event_id={event.id}, attempt={attempt}, delay={delay}ms, error={e}")
                await self._sleep(delay / 1000)


async def handle_event_with_retry(
    handler: T_Handler,
    event: Event,
    retry_policy: RetryPolicy | None = None,
    sleep: SleepFunc = asyncio.sleep,
) -> None:
    """Deliver ``event`` to ``handler`` retrying per ``retry_policy``.

    Raises:
        Exception: The handler's last error once the retry budget is exhausted.
    """
    await RetryingHandler(handler, retry_policy, sleep=sleep).handle(event)
