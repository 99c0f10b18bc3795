"""Shared test fixtures for all test groups."""

import os
import uuid
from unittest.mock import AsyncMock

import fakeredis.aioredis
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from solarops.db import Base, build_engine
from solarops.db.models.phase_record import PhaseRecord
from solarops.db.models.project import Project
from solarops.schemas.projects import CreateClientRequest
from solarops.services.notifier import BroadcastNotifier
from solarops.services.project_service import ProjectService
from solarops.services.project_store import ProjectStore
from solarops.services.transition_engine import TransitionEngine

# Set TEST_DATABASE_URL to run the store tests against PostgreSQL
_TEST_DB_URL = os.getenv("TEST_DATABASE_URL")


def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'solarops_test.db'}"


@pytest.fixture
async def engine(tmp_path) -> AsyncEngine:
    """Async engine with a freshly created schema."""
    engine = build_engine(_TEST_DB_URL or sqlite_url(tmp_path))

    # Import all models so metadata is populated
    import solarops.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis():
    """Provide fakeredis instance with decode_responses=True."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.fixture
def recording_redis():
    """Redis stand-in whose publish calls can be inspected."""
    redis = AsyncMock()
    redis.publish = AsyncMock(return_value=1)
    return redis


@pytest.fixture
def notifier(recording_redis) -> BroadcastNotifier:
    return BroadcastNotifier(recording_redis, channel="system")


@pytest.fixture
def project_service(db_session, notifier) -> ProjectService:
    return ProjectService(db_session, notifier)


@pytest.fixture
def transition_engine(db_session, notifier) -> TransitionEngine:
    return TransitionEngine(ProjectStore(db_session), notifier)


@pytest.fixture
async def project_id(project_service, recording_redis) -> uuid.UUID:
    """A freshly registered client's project, with publish history cleared."""
    created = await project_service.create_client(
        CreateClientRequest(name="Maria Souza", phone="+55 11 90000-0000", city="Campinas", state="SP"),
        created_by="user-admin-1",
        actor_role="ADMIN",
    )
    recording_redis.publish.reset_mock()
    return uuid.UUID(created.project_id)


@pytest.fixture
def read_committed(session_factory):
    """Read a project and its phase records through a separate session."""

    async def _read(project_id: uuid.UUID) -> tuple[Project, dict[str, PhaseRecord]]:
        async with session_factory() as session:
            project = (await session.execute(select(Project).where(Project.id == project_id))).scalar_one()
            records = (
                await session.execute(select(PhaseRecord).where(PhaseRecord.project_id == project_id))
            ).scalars().all()
            return project, {record.phase: record for record in records}

    return _read
