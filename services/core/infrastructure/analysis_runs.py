"""
Analysis run history - one row per resource analysis cycle
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from exceptions import ConfigPersistenceError
from infrastructure.uow import UnitOfWork
from logging_config import get_logger
from models import AnalysisRun, utcnow

logger = get_logger(__name__)


class AnalysisRunRepository:
    """Start/finish bookkeeping for AnalysisCycle runs"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        if session_factory is None:
            from database import AsyncSessionLocal
            session_factory = AsyncSessionLocal
        self._session_factory = session_factory

    async def start(self, method: str, triggered_by: str) -> str:
        try:
            async with UnitOfWork(self._session_factory) as uow:
                run = AnalysisRun(method=method, triggered_by=triggered_by, status="running")
                uow.session.add(run)
                await uow.session.flush()
                return run.id
        except SQLAlchemyError as e:
            logger.error("analysis_run_write_failed", operation="start", error=str(e))
            raise ConfigPersistenceError("analysis_run_start", cause=e) from e

    async def finish(
        self,
        run_id: str,
        status: str,
        counters: dict,
        error_message: Optional[str] = None
    ) -> None:
        try:
            async with UnitOfWork(self._session_factory) as uow:
                run = await uow.session.get(AnalysisRun, run_id)
                if run is None:
                    logger.warning("analysis_run_missing", run_id=run_id)
                    return
                run.status = status
                run.finished_at = utcnow()
                run.error_message = error_message
                for name, value in counters.items():
                    setattr(run, name, value)
        except SQLAlchemyError as e:
            logger.error("analysis_run_write_failed", operation="finish", run_id=run_id, error=str(e))
            raise ConfigPersistenceError("analysis_run_finish", cause=e) from e

    async def recent(self, limit: int = 20) -> List[AnalysisRun]:
        try:
            async with UnitOfWork(self._session_factory) as uow:
                stmt = select(AnalysisRun).order_by(AnalysisRun.started_at.desc()).limit(limit)
                return list((await uow.session.execute(stmt)).scalars().all())
        except SQLAlchemyError as e:
            logger.error("analysis_run_read_failed", error=str(e))
            raise ConfigPersistenceError("analysis_run_recent", cause=e) from e
