"""
Pytest configuration and shared fixtures for the analytics tests.

Redis is replaced by fakeredis, the database by in-memory SQLite, and the
dramatiq broker by a StubBroker so that nothing reaches real services.
"""

import os

os.environ.setdefault("API_PASSWORD", "test-password")

from contextlib import asynccontextmanager  # noqa: E402
from datetime import date  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

import dramatiq  # noqa: E402
import fakeredis  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from dramatiq.brokers.stub import StubBroker  # noqa: E402
from fastapi.requests import Request  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

import api  # noqa: E402, F401  installs the Redis broker, replaced below

stub_broker = StubBroker()
dramatiq.set_broker(stub_broker)

from analytics import keys, tasks  # noqa: E402
from db import models  # noqa: E402, F401
from db.enums import CommentStatus, ContentStatus  # noqa: E402
from db.models import Comment, Content  # noqa: E402
from db.redis_database import REDIS_ASYNC_CLIENT, redis_circuit_breaker  # noqa: E402



@pytest_asyncio.fixture
async def fake_redis(monkeypatch):
    """In-memory Redis behind the shared RedisWrapper."""
    client = fakeredis.FakeAsyncRedis()
    monkeypatch.setattr(REDIS_ASYNC_CLIENT, "client", client)
    redis_circuit_breaker.reset()
    yield client
    await client.flushall()
    await client.aclose()
    redis_circuit_breaker.reset()


@pytest.fixture
def enqueue_mock(monkeypatch):
    """Capture lifetime view count messages instead of queueing them."""
    send = MagicMock()
    monkeypatch.setattr(tasks.increment_content_view_count, "send", send)
    return send


@pytest.fixture
def frozen_day(monkeypatch):
    """Pin "today" so tests never straddle midnight."""
    day = date(2026, 3, 14)
    monkeypatch.setattr(keys, "today", lambda now=None: day)
    return day


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(db_engine):
    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def background_session(db_engine, monkeypatch):
    """Point the jobs' own sessions at the test database."""

    @asynccontextmanager
    async def _background_session():
        async with AsyncSession(db_engine, expire_on_commit=False) as session:
            yield session

    monkeypatch.setattr("analytics.rollup.get_background_session", _background_session)
    monkeypatch.setattr("analytics.tasks.get_background_session", _background_session)
    return _background_session


@pytest.fixture
def make_content(session):
    """Factory for committed content rows."""

    async def _make_content(
        title: str,
        *,
        status: ContentStatus = ContentStatus.PUBLISHED,
        view_count: int = 0,
        deleted: bool = False,
    ) -> Content:
        content = Content(
            title=title,
            slug=title.lower().replace(" ", "-"),
            status=status,
            view_count=view_count,
        )
        if deleted:
            content.deleted_at = content.created_at
        session.add(content)
        await session.commit()
        await session.refresh(content)
        return content

    return _make_content


@pytest.fixture
def make_comment(session):
    async def _make_comment(content: Content, status: CommentStatus = CommentStatus.PENDING) -> Comment:
        comment = Comment(content_id=content.id, status=status)
        session.add(comment)
        await session.commit()
        return comment

    return _make_comment


@pytest.fixture
def make_request():
    """Factory for bare Starlette requests with the given headers and peer."""

    def _make_request(headers: dict | None = None, client: tuple | None = ("10.0.0.9", 51000)) -> Request:
        scope = {
            "type": "http",
            "method": "POST",
            "path": "/api/v1/content/1/views",
            "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
            "client": client,
        }
        return Request(scope)

    return _make_request
