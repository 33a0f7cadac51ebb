"""Tests for retry and backoff of event delivery."""

from datetime import UTC, datetime

import pytest

from edumyles_api.event_bus import Event, RetryingHandler, RetryPolicy, calculate_backoff_delay, handle_event_with_retry


def make_event() -> Event:
    return Event(id="e-1", type="user.login", source="auth", tenant_id="t1", timestamp=datetime.now(UTC))


@pytest.mark.parametrize(
    "attempt,expected",
    [
        (1, 1000),
        (2, 2000),
        (3, 4000),
        (4, 8000),
        (5, 10000),
        (9, 10000),
    ],
)
def test_backoff_grows_exponentially_up_to_max(attempt: int, expected: int):
    policy = RetryPolicy(max_retries=10, backoff_multiplier=2, max_backoff_delay=10000)
    assert calculate_backoff_delay(attempt, policy) == expected


def test_backoff_without_policy_is_flat():
    assert calculate_backoff_delay(1) == 1000
    assert calculate_backoff_delay(5) == 1000


def test_backoff_zero_values_fall_back_to_defaults():
    """A zero multiplier or maximum uses 2 and 30000ms."""
    policy = RetryPolicy(max_retries=10, backoff_multiplier=0, max_backoff_delay=0)
    assert calculate_backoff_delay(3, policy) == 4000
    assert calculate_backoff_delay(10, policy) == 30000


def test_backoff_fractional_multiplier():
    policy = RetryPolicy(max_retries=3, backoff_multiplier=1.5)
    assert calculate_backoff_delay(3, policy) == 2250


@pytest.mark.parametrize("attempt,multiplier", [(1025, 2), (1100, 2), (400, 10)])
def test_backoff_past_float_range_is_capped(attempt: int, multiplier: float):
    policy = RetryPolicy(max_retries=2000, backoff_multiplier=multiplier)
    assert calculate_backoff_delay(attempt, policy) == 30000


class TestRetryingHandler:
    """The retry loop around a single delivery."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt_does_not_sleep(self, sleep):
        calls = []

        async def handler(event: Event) -> None:
            calls.append(event)

        await handle_event_with_retry(handler, make_event(), RetryPolicy(max_retries=3), sleep=sleep)

        assert len(calls) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_exhaustion_reraises_last_error(self, sleep):
        attempts = []

        async def handler(event: Event) -> None:
            attempts.append(event)
            raise ValueError(f"attempt {len(attempts)}")

        retrying = RetryingHandler(handler, RetryPolicy(max_retries=2), sleep=sleep)
        with pytest.raises(ValueError, match="attempt 3"):
            await retrying(make_event())

        assert len(attempts) == 3
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_no_policy_means_single_attempt(self, sleep):
        def handler(event: Event) -> None:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await handle_event_with_retry(handler, make_event(), sleep=sleep)
        assert sleep.delays == []

    def test_max_retries_must_not_be_negative(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_retries=-1)

    @pytest.mark.asyncio
    async def test_long_retry_budget_is_used_in_full(self, sleep):
        """Attempts beyond the float range of the backoff still wait the maximum delay."""
        attempts = []

        async def handler(event: Event) -> None:
            attempts.append(event)
            raise ValueError(f"attempt {len(attempts)}")

        retrying = RetryingHandler(handler, RetryPolicy(max_retries=1100, max_backoff_delay=5000), sleep=sleep)
        with pytest.raises(ValueError, match="attempt 1101"):
            await retrying(make_event())

        assert len(sleep.delays) == 1100
        assert sleep.delays[-1] == 5.0

    @pytest.mark.parametrize("field", ["backoff_multiplier", "max_backoff_delay"])
    def test_backoff_settings_must_not_be_negative(self, field: str):
        with pytest.raises(ValueError):
            RetryPolicy(max_retries=1, **{field: -1})
