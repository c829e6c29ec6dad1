"""
CONFIG STORE TESTS

SystemConfigRepository and AnalysisRunRepository against a throwaway
SQLite database.
"""
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from database import create_tables
from exceptions import ConfigPersistenceError
from infrastructure.analysis_runs import AnalysisRunRepository
from infrastructure.config_store import SystemConfigRepository

pytestmark = pytest.mark.asyncio(loop_scope="function")


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'config.db'}")
    await create_tables(bind=engine)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def repository(session_factory):
    return SystemConfigRepository(session_factory)


class TestSystemConfigRepository:

    async def test_upsert_then_get(self, repository):
        entry = await repository.upsert("agent.autonomous_mode", "false", "kill switch", "system")

        assert entry.key == "agent.autonomous_mode"
        assert entry.updated_at is not None

        fetched = await repository.get("agent.autonomous_mode")
        assert fetched.value == "false"
        assert fetched.description == "kill switch"
        assert fetched.updated_by == "system"

    async def test_get_missing_returns_none(self, repository):
        assert await repository.get("agent.nope") is None

    async def test_upsert_overwrites_existing(self, repository):
        await repository.upsert("k", "1", "first", "a")
        await repository.upsert("k", "2", "second", "b")

        entries = await repository.get_all()
        assert len(entries) == 1
        assert (entries[0].value, entries[0].description, entries[0].updated_by) == ("2", "second", "b")

    async def test_update_existing(self, repository):
        await repository.upsert("k", "1", "desc", "a")

        entry = await repository.update("k", "2", "b")

        assert entry.value == "2"
        assert entry.updated_by == "b"
        assert entry.description == "desc"

    async def test_update_missing_returns_none(self, repository):
        assert await repository.update("never-set", "1", "a") is None
        assert await repository.get_all() == []

    async def test_get_all_ordered_by_key(self, repository):
        for key in ("b", "c", "a"):
            await repository.upsert(key, "v", None, "t")

        assert [entry.key for entry in await repository.get_all()] == ["a", "b", "c"]

    async def test_listeners_see_committed_writes(self, repository):
        seen = []
        repository.add_listener(lambda entry: seen.append((entry.key, entry.value)))

        await repository.upsert("k", "1", None, "a")
        await repository.update("k", "2", "a")
        await repository.update("missing", "3", "a")

        assert seen == [("k", "1"), ("k", "2")]

    async def test_database_error_becomes_persistence_error(self, tmp_path):
        # tables never created
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        repository = SystemConfigRepository(async_sessionmaker(bind=engine, class_=AsyncSession))
        seen = []
        repository.add_listener(seen.append)

        with pytest.raises(ConfigPersistenceError) as exc:
            await repository.upsert("k", "1", None, "a")
        with pytest.raises(ConfigPersistenceError):
            await repository.get_all()

        assert exc.value.details == {"operation": "upsert", "key": "k"}
        assert exc.value.cause is not None
        assert seen == []
        await engine.dispose()


class TestAnalysisRunRepository:

    async def test_start_and_finish(self, session_factory):
        runs = AnalysisRunRepository(session_factory)

        run_id = await runs.start("heuristic", "scheduler")
        await runs.finish(run_id, "completed", {"evaluated": 3, "autonomous": 1, "savings_executed": 5_000_000})

        [run] = await runs.recent()
        assert run.id == run_id
        assert run.status == "completed"
        assert run.triggered_by == "scheduler"
        assert run.evaluated == 3
        assert run.savings_executed == 5_000_000
        assert run.finished_at is not None

    async def test_finish_unknown_run_is_ignored(self, session_factory):
        runs = AnalysisRunRepository(session_factory)
        await runs.finish("missing", "failed", {}, error_message="boom")
        assert await runs.recent() == []
