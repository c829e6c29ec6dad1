"""
AGENT CONFIG SERVICE - Typed agent configuration over the config store

Composes the ConfigCache, the policy evaluator and the ModeStateManager:

- initialize_defaults(): seed missing keys at startup
- get_policy_config() / get_agent_config(): typed reads through the cache
- can_execute_autonomously() / evaluate(): eligibility for one recommendation
- setters for thresholds and modes (validated before any write)

Usage:
    repository = SystemConfigRepository()
    service = AgentConfigService.create(repository)

    await service.initialize_defaults()
    if await service.can_execute_autonomously(candidate):
        await executor.execute(recommendation)
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol

from agent_settings import (
    CONFIG_DEFAULTS,
    DEFAULT_APPROVAL_REQUIRED_ABOVE_SAVINGS,
    DEFAULT_AUTO_EXECUTE_TYPES,
    DEFAULT_AUTONOMOUS_MODE,
    DEFAULT_MAX_AUTONOMOUS_RISK_LEVEL,
    KEY_APPROVAL_REQUIRED_ABOVE_SAVINGS,
    KEY_AUTO_EXECUTE_TYPES,
    KEY_AUTONOMOUS_MODE,
    KEY_MAX_AUTONOMOUS_RISK_LEVEL,
    KEY_PROD_MODE,
    KEY_PROD_MODE_ACTIVATED_AT,
    KEY_SIMULATION_MODE,
    PROD_MODE_DURATION_SECONDS,
    RISK_LEVEL_MAX,
    RISK_LEVEL_MIN,
    SYSTEM_ACTOR,
)
from autonomy.config_cache import ConfigCache
from autonomy.config_values import (
    format_bool,
    format_list,
    format_number,
    format_timestamp,
    parse_bool,
    parse_int,
    parse_list,
    parse_number,
    parse_timestamp,
)
from autonomy.mode_state import Clock, ModeState, ModeStateManager, persist_value, require_actor, utc_now
from autonomy.policy_evaluator import (
    EvaluationResult,
    PolicyConfig,
    RecommendationCandidate,
    evaluate,
    normalize_types,
    require_number,
    validate_candidate,
)
from exceptions import ConfigValidationError, CorruptConfigValue
from infrastructure.config_store import ConfigEntry
from logging_config import get_logger

logger = get_logger(__name__)

# PolicyConfig field -> stored key
POLICY_FIELD_KEYS = {
    "autonomous_mode_enabled": KEY_AUTONOMOUS_MODE,
    "max_autonomous_risk_level": KEY_MAX_AUTONOMOUS_RISK_LEVEL,
    "approval_required_above_savings": KEY_APPROVAL_REQUIRED_ABOVE_SAVINGS,
    "auto_execute_types": KEY_AUTO_EXECUTE_TYPES,
}

BOOL_KEYS = (KEY_AUTONOMOUS_MODE, KEY_PROD_MODE, KEY_SIMULATION_MODE)


class ConfigStore(Protocol):
    async def get_all(self) -> List[ConfigEntry]: ...

    async def get(self, key: str) -> Optional[ConfigEntry]: ...

    async def upsert(
        self, key: str, value: str, description: Optional[str], updated_by: str
    ) -> ConfigEntry: ...

    async def update(self, key: str, value: str, updated_by: str) -> Optional[ConfigEntry]: ...

    def add_listener(self, listener) -> None: ...


@dataclass(frozen=True)
class AgentConfig:
    """Everything the dashboard shows on the agent configuration page"""
    policy: PolicyConfig
    modes: ModeState

    def to_dict(self) -> dict:
        return {
            "autonomous_mode": self.policy.autonomous_mode_enabled,
            "max_autonomous_risk_level": self.policy.max_autonomous_risk_level,
            "approval_required_above_savings": self.policy.approval_required_above_savings,
            "auto_execute_types": sorted(self.policy.auto_execute_types),
            "prod_mode": self.modes.prod_mode_enabled,
            "prod_mode_time_remaining": self.modes.prod_mode_time_remaining,
            "prod_mode_duration_seconds": self.modes.prod_mode_duration_seconds,
            "simulation_mode": self.modes.simulation_mode_enabled,
        }


class AgentConfigService:
    """Agent configuration backed by an injected store and cache"""

    def __init__(self, store: ConfigStore, cache: ConfigCache, mode_state: ModeStateManager):
        self._store = store
        self._cache = cache
        self.mode_state = mode_state

    @classmethod
    def create(
        cls,
        store: ConfigStore,
        clock: Clock = utc_now,
        prod_mode_duration_seconds: int = PROD_MODE_DURATION_SECONDS
    ) -> "AgentConfigService":
        """Wire a fresh cache to `store` (invalidated on every store write)"""
        cache = ConfigCache(store)
        store.add_listener(cache.on_store_write)
        mode_state = ModeStateManager(
            store, cache, clock=clock, prod_mode_duration_seconds=prod_mode_duration_seconds
        )
        return cls(store, cache, mode_state)

    @property
    def cache(self) -> ConfigCache:
        return self._cache

    async def initialize_defaults(self) -> List[str]:
        """Create each default key that is absent; returns the keys created"""
        created = []
        for key, (value, description) in CONFIG_DEFAULTS.items():
            if await self._store.get(key) is None:
                await self._store.upsert(key, value, description, SYSTEM_ACTOR)
                created.append(key)
        self._cache.invalidate()
        logger.info("agent_config_defaults_initialized", created=created)
        return created

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_policy_config(self) -> PolicyConfig:
        values = await self._cache.snapshot()
        try:
            return self._build_policy_config(values)
        except ConfigValidationError as e:
            # parsed, but out of range: the stored row is bad, not the caller
            field = e.details["field"]
            raise CorruptConfigValue(
                POLICY_FIELD_KEYS.get(field, field), e.details["value"], e.details["reason"]
            ) from e

    @staticmethod
    def _build_policy_config(values: dict) -> PolicyConfig:
        return PolicyConfig(
            autonomous_mode_enabled=parse_bool(
                KEY_AUTONOMOUS_MODE, values.get(KEY_AUTONOMOUS_MODE), DEFAULT_AUTONOMOUS_MODE
            ),
            max_autonomous_risk_level=parse_number(
                KEY_MAX_AUTONOMOUS_RISK_LEVEL,
                values.get(KEY_MAX_AUTONOMOUS_RISK_LEVEL),
                DEFAULT_MAX_AUTONOMOUS_RISK_LEVEL,
            ),
            approval_required_above_savings=parse_int(
                KEY_APPROVAL_REQUIRED_ABOVE_SAVINGS,
                values.get(KEY_APPROVAL_REQUIRED_ABOVE_SAVINGS),
                DEFAULT_APPROVAL_REQUIRED_ABOVE_SAVINGS,
            ),
            auto_execute_types=frozenset(
                parse_list(values.get(KEY_AUTO_EXECUTE_TYPES), DEFAULT_AUTO_EXECUTE_TYPES)
            ),
        )

    async def get_agent_config(self) -> AgentConfig:
        policy = await self.get_policy_config()
        modes = await self.mode_state.get_mode_state()
        return AgentConfig(policy=policy, modes=modes)

    async def evaluate(self, candidate: RecommendationCandidate) -> EvaluationResult:
        validate_candidate(candidate)
        config = await self.get_policy_config()
        result = evaluate(candidate, config)
        logger.debug(
            "autonomy_evaluated",
            type=candidate.type,
            risk_level=candidate.risk_level,
            projected_annual_savings=candidate.projected_annual_savings,
            eligible=result.eligible,
            reasons=list(result.reasons)
        )
        return result

    async def can_execute_autonomously(self, candidate: RecommendationCandidate) -> bool:
        return (await self.evaluate(candidate)).eligible

    # ------------------------------------------------------------------
    # Threshold setters
    # ------------------------------------------------------------------

    async def set_max_autonomous_risk_level(self, risk_level: float, actor: str) -> PolicyConfig:
        return await self.update_thresholds(actor, max_autonomous_risk_level=risk_level)

    async def set_approval_required_above_savings(self, amount: int, actor: str) -> PolicyConfig:
        return await self.update_thresholds(actor, approval_required_above_savings=amount)

    async def set_auto_execute_types(self, types: Iterable[str], actor: str) -> PolicyConfig:
        return await self.update_thresholds(actor, auto_execute_types=types)

    async def update_thresholds(
        self,
        actor: str,
        max_autonomous_risk_level: Optional[float] = None,
        approval_required_above_savings: Optional[int] = None,
        auto_execute_types: Optional[Iterable[str]] = None
    ) -> PolicyConfig:
        """
        Validate every supplied threshold, then persist them.

        Nothing is written unless all supplied values are valid.
        """
        writes = []
        if max_autonomous_risk_level is not None:
            require_number(
                "max_autonomous_risk_level",
                max_autonomous_risk_level,
                minimum=RISK_LEVEL_MIN,
                maximum=RISK_LEVEL_MAX
            )
            writes.append((KEY_MAX_AUTONOMOUS_RISK_LEVEL, format_number(max_autonomous_risk_level)))
        if approval_required_above_savings is not None:
            amount = approval_required_above_savings
            require_number("approval_required_above_savings", amount, minimum=0)
            if amount != int(amount):
                raise ConfigValidationError(
                    "approval_required_above_savings", amount, "must be an integer-scaled amount"
                )
            writes.append((KEY_APPROVAL_REQUIRED_ABOVE_SAVINGS, str(int(amount))))
        if auto_execute_types is not None:
            normalized = normalize_types("auto_execute_types", auto_execute_types)
            if not normalized:
                # an empty stored list reads back as the defaults
                raise ConfigValidationError(
                    "auto_execute_types",
                    [],
                    "must name at least one type; disable autonomous mode instead"
                )
            writes.append((KEY_AUTO_EXECUTE_TYPES, format_list(normalized)))
        if not writes:
            raise ConfigValidationError("thresholds", None, "at least one threshold is required")
        actor = require_actor(actor)

        for key, value in writes:
            await persist_value(self._store, self._cache, key, value, actor)
        logger.info("agent_thresholds_updated", actor=actor, keys=[key for key, _ in writes])
        return await self.get_policy_config()

    # ------------------------------------------------------------------
    # Mode setters
    # ------------------------------------------------------------------

    async def set_autonomous_mode(self, enabled: bool, actor: str) -> ModeState:
        return await self.mode_state.set_autonomous_mode(enabled, actor)

    async def set_prod_mode(self, enabled: bool, actor: str) -> ModeState:
        return await self.mode_state.set_prod_mode(enabled, actor)

    async def set_simulation_mode(self, enabled: bool, actor: str) -> ModeState:
        return await self.mode_state.set_simulation_mode(enabled, actor)

    def invalidate_cache(self) -> None:
        """For writers that bypass the repository (raw SQL, other processes)"""
        self._cache.invalidate()


def validate_stored_value(key: str, value: str) -> str:
    """
    Check a raw value written straight to an agent.* key and return its
    canonical stored form.

    Rejects (ConfigValidationError) anything get_policy_config() or the
    mode reads would later refuse as corrupt. Other keys pass through.
    """
    raw = value.strip()
    if not raw:
        raise ConfigValidationError("value", value, "must be a non-empty string")
    try:
        if key in BOOL_KEYS:
            return format_bool(parse_bool(key, raw, False))
        if key == KEY_MAX_AUTONOMOUS_RISK_LEVEL:
            level = parse_number(key, raw, DEFAULT_MAX_AUTONOMOUS_RISK_LEVEL)
            require_number("value", level, minimum=RISK_LEVEL_MIN, maximum=RISK_LEVEL_MAX)
            return raw
        if key == KEY_APPROVAL_REQUIRED_ABOVE_SAVINGS:
            amount = parse_int(key, raw, DEFAULT_APPROVAL_REQUIRED_ABOVE_SAVINGS)
            require_number("value", amount, minimum=0)
            return str(amount)
        if key == KEY_AUTO_EXECUTE_TYPES:
            return format_list(normalize_types("value", raw.split(",")))
        if key == KEY_PROD_MODE_ACTIVATED_AT:
            return format_timestamp(parse_timestamp(key, raw))
    except CorruptConfigValue as e:
        raise ConfigValidationError("value", value, e.details["reason"]) from e
    return raw
