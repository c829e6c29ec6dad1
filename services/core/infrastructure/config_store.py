"""
CONFIG STORE - Persisted key/value agent configuration

Repository over the `system_config` table. Every successful write is
published to registered listeners (the ConfigCache registers its
invalidate hook here), so a cache fed by this repository cannot drift
from the table.

Usage:
    from infrastructure.config_store import SystemConfigRepository

    repo = SystemConfigRepository()
    entry = await repo.upsert("agent.autonomous_mode", "false", "kill switch", "system")
    entries = await repo.get_all()
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from exceptions import ConfigPersistenceError
from infrastructure.uow import UnitOfWork
from logging_config import get_logger, log_config_change
from models import SystemConfig, utcnow

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConfigEntry:
    """Detached view of one system_config row"""
    key: str
    value: str
    description: Optional[str]
    updated_by: str
    updated_at: datetime

    @classmethod
    def from_row(cls, row: SystemConfig) -> "ConfigEntry":
        return cls(
            key=row.key,
            value=row.value,
            description=row.description,
            updated_by=row.updated_by,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "value": self.value,
            "description": self.description,
            "updated_by": self.updated_by,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


WriteListener = Callable[[ConfigEntry], None]


class SystemConfigRepository:
    """
    CRUD over system_config.

    SQLAlchemy failures surface as ConfigPersistenceError; nothing is
    retried here. Listeners run only after the transaction commits.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        if session_factory is None:
            from database import AsyncSessionLocal
            session_factory = AsyncSessionLocal
        self._session_factory = session_factory
        self._listeners: List[WriteListener] = []

    def add_listener(self, listener: WriteListener) -> None:
        """Register a callback invoked with each committed entry"""
        self._listeners.append(listener)

    def _notify(self, entry: ConfigEntry) -> None:
        for listener in self._listeners:
            listener(entry)

    async def get_all(self) -> List[ConfigEntry]:
        try:
            async with UnitOfWork(self._session_factory) as uow:
                stmt = select(SystemConfig).order_by(SystemConfig.key)
                rows = (await uow.session.execute(stmt)).scalars().all()
                return [ConfigEntry.from_row(row) for row in rows]
        except SQLAlchemyError as e:
            logger.error("config_read_failed", operation="get_all", error=str(e))
            raise ConfigPersistenceError("get_all", cause=e) from e

    async def get(self, key: str) -> Optional[ConfigEntry]:
        try:
            async with UnitOfWork(self._session_factory) as uow:
                row = await self._get_row(uow.session, key)
                return ConfigEntry.from_row(row) if row else None
        except SQLAlchemyError as e:
            logger.error("config_read_failed", operation="get", key=key, error=str(e))
            raise ConfigPersistenceError("get", key=key, cause=e) from e

    async def upsert(
        self,
        key: str,
        value: str,
        description: Optional[str],
        updated_by: str
    ) -> ConfigEntry:
        """Insert the key, or overwrite value/description/updated_by if it exists"""
        previous = None
        try:
            async with UnitOfWork(self._session_factory) as uow:
                row = await self._get_row(uow.session, key)
                if row is None:
                    row = SystemConfig(
                        key=key,
                        value=value,
                        description=description,
                        updated_by=updated_by,
                    )
                    uow.session.add(row)
                else:
                    previous = row.value
                    row.value = value
                    row.description = description
                    row.updated_by = updated_by
                    row.updated_at = utcnow()
                await uow.session.flush()
                entry = ConfigEntry.from_row(row)
        except SQLAlchemyError as e:
            logger.error("config_write_failed", operation="upsert", key=key, error=str(e))
            raise ConfigPersistenceError("upsert", key=key, cause=e) from e

        log_config_change(key, value, updated_by, previous=previous)
        self._notify(entry)
        return entry

    async def update(self, key: str, value: str, updated_by: str) -> Optional[ConfigEntry]:
        """Overwrite an existing key; returns None if the key was never set"""
        try:
            async with UnitOfWork(self._session_factory) as uow:
                row = await self._get_row(uow.session, key)
                if row is None:
                    return None
                previous = row.value
                row.value = value
                row.updated_by = updated_by
                row.updated_at = utcnow()
                await uow.session.flush()
                entry = ConfigEntry.from_row(row)
        except SQLAlchemyError as e:
            logger.error("config_write_failed", operation="update", key=key, error=str(e))
            raise ConfigPersistenceError("update", key=key, cause=e) from e

        log_config_change(key, value, updated_by, previous=previous)
        self._notify(entry)
        return entry

    @staticmethod
    async def _get_row(session: AsyncSession, key: str) -> Optional[SystemConfig]:
        stmt = select(SystemConfig).where(SystemConfig.key == key)
        return (await session.execute(stmt)).scalar_one_or_none()
