"""
MODE STATE - Autonomous / Prod / Simulation operating modes

Three independent persisted flags. Only Prod Mode is time-bounded:
enabling it records `agent.prod_mode_activated_at`, and it reads as off
once PROD_MODE_DURATION_SECONDS have elapsed, without an explicit
disable. Expiry is computed at read time from the stored timestamp; the
scheduler additionally calls revert_expired_prod_mode() so the stored
flag catches up.

Writes go to the store first. The cache is invalidated only after a
write succeeds, so a failed write leaves the last persisted state
visible.

Usage:
    manager = ModeStateManager(repository, cache)

    state = await manager.set_prod_mode(True, actor="admin")
    state.prod_mode_time_remaining          # 30
    await manager.get_time_remaining()      # 0 once the window elapsed
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from agent_settings import (
    CONFIG_DESCRIPTIONS,
    KEY_AUTONOMOUS_MODE,
    KEY_PROD_MODE,
    KEY_PROD_MODE_ACTIVATED_AT,
    KEY_SIMULATION_MODE,
    PROD_MODE_DURATION_SECONDS,
    SYSTEM_ACTOR,
)
from autonomy.config_cache import ConfigCache
from autonomy.config_values import format_bool, format_timestamp, parse_bool, parse_timestamp
from exceptions import ConfigValidationError
from infrastructure.config_store import ConfigEntry
from logging_config import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ConfigWriter(Protocol):
    async def update(self, key: str, value: str, updated_by: str) -> Optional[ConfigEntry]: ...

    async def upsert(
        self, key: str, value: str, description: Optional[str], updated_by: str
    ) -> ConfigEntry: ...


async def persist_value(
    store: ConfigWriter,
    cache: ConfigCache,
    key: str,
    value: str,
    actor: str
) -> ConfigEntry:
    """Write one key (creating it if absent), then invalidate the cache"""
    entry = await store.update(key, value, actor)
    if entry is None:
        entry = await store.upsert(key, value, CONFIG_DESCRIPTIONS.get(key), actor)
    cache.invalidate()
    return entry


def require_actor(actor) -> str:
    if not isinstance(actor, str) or not actor.strip():
        raise ConfigValidationError("updated_by", actor, "must be a non-empty string")
    return actor.strip()


@dataclass(frozen=True)
class ModeState:
    prod_mode_enabled: bool
    prod_mode_activated_at: Optional[datetime]
    prod_mode_duration_seconds: int
    prod_mode_time_remaining: int
    autonomous_mode_enabled: bool
    simulation_mode_enabled: bool

    def to_dict(self) -> dict:
        return {
            "prod_mode": self.prod_mode_enabled,
            "prod_mode_activated_at": (
                self.prod_mode_activated_at.isoformat() if self.prod_mode_activated_at else None
            ),
            "prod_mode_duration_seconds": self.prod_mode_duration_seconds,
            "prod_mode_time_remaining": self.prod_mode_time_remaining,
            "autonomous_mode": self.autonomous_mode_enabled,
            "simulation_mode": self.simulation_mode_enabled,
        }


class ModeStateManager:
    """Persisted mode flags with a lazily expiring Prod Mode window"""

    def __init__(
        self,
        store: ConfigWriter,
        cache: ConfigCache,
        clock: Clock = utc_now,
        prod_mode_duration_seconds: int = PROD_MODE_DURATION_SECONDS
    ):
        if isinstance(prod_mode_duration_seconds, bool) or not isinstance(prod_mode_duration_seconds, int) \
                or prod_mode_duration_seconds < 1:
            raise ConfigValidationError(
                "prod_mode_duration_seconds", prod_mode_duration_seconds, "must be a positive integer"
            )
        self._store = store
        self._cache = cache
        self._clock = clock
        self.prod_mode_duration_seconds = prod_mode_duration_seconds

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_mode_state(self) -> ModeState:
        values = await self._cache.snapshot()

        stored_prod = parse_bool(KEY_PROD_MODE, values.get(KEY_PROD_MODE), False)
        activated_at = parse_timestamp(KEY_PROD_MODE_ACTIVATED_AT, values.get(KEY_PROD_MODE_ACTIVATED_AT))
        remaining = self._time_remaining(stored_prod, activated_at)

        return ModeState(
            prod_mode_enabled=remaining > 0,
            prod_mode_activated_at=activated_at if remaining > 0 else None,
            prod_mode_duration_seconds=self.prod_mode_duration_seconds,
            prod_mode_time_remaining=remaining,
            autonomous_mode_enabled=parse_bool(KEY_AUTONOMOUS_MODE, values.get(KEY_AUTONOMOUS_MODE), False),
            simulation_mode_enabled=parse_bool(KEY_SIMULATION_MODE, values.get(KEY_SIMULATION_MODE), False),
        )

    async def get_time_remaining(self) -> int:
        """Seconds left in the Prod Mode window; 0 means off"""
        return (await self.get_mode_state()).prod_mode_time_remaining

    async def is_prod_mode_active(self) -> bool:
        return await self.get_time_remaining() > 0

    def _time_remaining(self, stored_enabled: bool, activated_at: Optional[datetime]) -> int:
        if not stored_enabled or activated_at is None:
            return 0
        elapsed = int((self._clock() - activated_at).total_seconds())
        return max(0, self.prod_mode_duration_seconds - max(0, elapsed))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def set_prod_mode(self, enabled: bool, actor: str) -> ModeState:
        """
        Turn Prod Mode on (restarting the window) or off.

        The activation timestamp is written before the flag, so a failure
        between the two writes leaves the flag off.
        """
        if not isinstance(enabled, bool):
            raise ConfigValidationError("enabled", enabled, "must be a boolean")
        actor = require_actor(actor)

        if enabled:
            activated_at = self._clock()
            await persist_value(
                self._store, self._cache, KEY_PROD_MODE_ACTIVATED_AT, format_timestamp(activated_at), actor
            )
            await persist_value(self._store, self._cache, KEY_PROD_MODE, format_bool(True), actor)
            logger.info(
                "prod_mode_enabled",
                actor=actor,
                window_seconds=self.prod_mode_duration_seconds
            )
        else:
            await persist_value(self._store, self._cache, KEY_PROD_MODE, format_bool(False), actor)
            logger.info("prod_mode_disabled", actor=actor)

        return await self.get_mode_state()

    async def set_autonomous_mode(self, enabled: bool, actor: str) -> ModeState:
        return await self._set_flag(KEY_AUTONOMOUS_MODE, "autonomous_mode", enabled, actor)

    async def set_simulation_mode(self, enabled: bool, actor: str) -> ModeState:
        return await self._set_flag(KEY_SIMULATION_MODE, "simulation_mode", enabled, actor)

    async def revert_expired_prod_mode(self, actor: str = SYSTEM_ACTOR) -> bool:
        """Persist the off flag if the window elapsed; True if a revert was written"""
        stored = parse_bool(KEY_PROD_MODE, await self._cache.get(KEY_PROD_MODE), False)
        if not stored:
            return False
        if await self.get_time_remaining() > 0:
            return False

        await persist_value(self._store, self._cache, KEY_PROD_MODE, format_bool(False), actor)
        logger.info("prod_mode_auto_reverted", actor=actor, window_seconds=self.prod_mode_duration_seconds)
        return True

    async def _set_flag(self, key: str, name: str, enabled: bool, actor: str) -> ModeState:
        if not isinstance(enabled, bool):
            raise ConfigValidationError("enabled", enabled, "must be a boolean")
        actor = require_actor(actor)

        await persist_value(self._store, self._cache, key, format_bool(enabled), actor)
        logger.info(f"{name}_{'enabled' if enabled else 'disabled'}", actor=actor)
        return await self.get_mode_state()
