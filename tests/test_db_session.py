"""Tests for DbSessionMiddleware behavior."""

from __future__ import annotations

import pytest

from veeloo.bot.middlewares.db_session import DbSessionMiddleware


class RecordingSession:
    def __init__(self) -> None:
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True


class DummyDatabase:
    def __init__(self, session):
        self._session = session

    def session(self):
        class _Wrapper:
            def __init__(self, session):
                self.session = session

            async def __aenter__(self):
                return self.session

            async def __aexit__(self, exc_type, exc, tb):
                return False

        return _Wrapper(self._session)


@pytest.mark.asyncio
async def test_db_session_middleware_commits():
    session = RecordingSession()
    middleware = DbSessionMiddleware(DummyDatabase(session))

    async def handler(event, data):
        assert data["session"] is session
        return "ok"

    result = await middleware(handler, object(), {})

    assert result == "ok"
    assert session.committed is True
    assert session.rolled_back is False


@pytest.mark.asyncio
async def test_db_session_middleware_rolls_back():
    session = RecordingSession()
    middleware = DbSessionMiddleware(DummyDatabase(session))

    async def handler(event, data):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await middleware(handler, object(), {})

    assert session.rolled_back is True
    assert session.committed is False
