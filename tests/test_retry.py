"""Retry helper behaviour."""

from __future__ import annotations

import pytest

from veeloo.utils import retry as retry_module
from veeloo.utils.retry import retry_async


class Flaky(Exception):
    pass


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(retry_module.asyncio, "sleep", fake_sleep)
    return delays


@pytest.mark.asyncio
async def test_retries_listed_errors_with_linear_backoff(no_sleep):
    attempts = []

    async def operation():
        attempts.append(1)
        if len(attempts) < 3:
            raise Flaky("try again")
        return "done"

    result = await retry_async(operation, retry_on=(Flaky,), base_delay=0.5)

    assert result == "done"
    assert no_sleep == [0.5, 1.0]


@pytest.mark.asyncio
async def test_other_errors_are_not_retried(no_sleep):
    attempts = []

    async def operation():
        attempts.append(1)
        raise ValueError("fatal")

    with pytest.raises(ValueError):
        await retry_async(operation, retry_on=(Flaky,))

    assert len(attempts) == 1
    assert no_sleep == []


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts(no_sleep):
    async def operation():
        raise Flaky("still down")

    with pytest.raises(Flaky):
        await retry_async(operation, retry_on=(Flaky,), max_attempts=2)

    assert len(no_sleep) == 1
