"""Shared pytest fixtures for database-backed service tests."""

from __future__ import annotations

import pytest_asyncio
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from veeloo.db.base import Base
from veeloo.db.models.core import User


class _AsyncNestedTransaction:
    def __init__(self, sync_session) -> None:
        self._sync = sync_session
        self._transaction = None

    async def __aenter__(self):
        self._transaction = self._sync.begin_nested()
        self._transaction.__enter__()
        return self._transaction

    async def __aexit__(self, exc_type, exc, tb):
        return self._transaction.__exit__(exc_type, exc, tb)


class _AsyncSessionWrapper:
    def __init__(self, sync_session) -> None:
        self._sync = sync_session

    async def execute(self, *args, **kwargs):
        return self._sync.execute(*args, **kwargs)

    async def get(self, *args, **kwargs):
        return self._sync.get(*args, **kwargs)

    def add(self, obj) -> None:
        self._sync.add(obj)

    def add_all(self, objs) -> None:
        self._sync.add_all(objs)

    def begin_nested(self):
        return _AsyncNestedTransaction(self._sync)

    async def flush(self) -> None:
        self._sync.flush()

    async def commit(self) -> None:
        self._sync.commit()

    async def rollback(self) -> None:
        self._sync.rollback()

    async def close(self) -> None:
        self._sync.close()


def _sqlite_engine(url: str, **kwargs):
    """SQLite engine whose transactions and SAVEPOINTs behave like a server's.

    pysqlite starts transactions lazily and never before a SAVEPOINT, so
    nested rollbacks would leak writes. Emitting ``BEGIN`` ourselves restores
    the expected semantics.
    """

    engine = create_engine(url, future=True, **kwargs)

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    return engine


@pytest_asyncio.fixture
async def session():
    engine = _sqlite_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    sync_session = SessionLocal()
    try:
        yield _AsyncSessionWrapper(sync_session)
    finally:
        sync_session.close()
        engine.dispose()


@pytest_asyncio.fixture
async def session_pair(tmp_path):
    """Two sessions on separate connections to one file-backed database."""

    engine = _sqlite_engine(f"sqlite:///{tmp_path / 'veeloo.db'}")
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    first, second = SessionLocal(), SessionLocal()
    try:
        yield _AsyncSessionWrapper(first), _AsyncSessionWrapper(second)
    finally:
        first.close()
        second.close()
        engine.dispose()


@pytest_asyncio.fixture
async def make_user(session):
    counter = {"next": 1000}

    async def _make(plan: str | None = "free", username: str | None = None, **kwargs) -> User:
        counter["next"] += 1
        user = User(
            telegram_id=counter["next"],
            username=username or f"user{counter['next']}",
            plan=plan,
            language_code=kwargs.pop("language_code", "en"),
            **kwargs,
        )
        session.add(user)
        await session.flush()
        return user

    return _make
