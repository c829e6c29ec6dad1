"""
AGENT CONFIG SERVICE TESTS

Defaults, typed reads through the cache, threshold setters and
eligibility checks against the persisted configuration.
"""
import pytest

from autonomy.policy_evaluator import RecommendationCandidate
from exceptions import ConfigPersistenceError, ConfigValidationError, CorruptConfigValue
from fakes import FakeConfigStore

pytestmark = pytest.mark.asyncio(loop_scope="function")


def resize(risk=3.0, savings=5_000_000, type="resize"):
    return RecommendationCandidate(type=type, risk_level=risk, projected_annual_savings=savings)


class TestDefaults:

    async def test_empty_store_resolves_to_defaults(self, service):
        policy = await service.get_policy_config()

        assert policy.autonomous_mode_enabled is False
        assert policy.max_autonomous_risk_level == 5.0
        assert policy.approval_required_above_savings == 10_000_000
        assert policy.auto_execute_types == frozenset({"resize", "storage-class"})

    async def test_initialize_defaults_seeds_missing_keys(self, service, store):
        created = await service.initialize_defaults()

        assert "agent.autonomous_mode" in created
        assert store.value("agent.autonomous_mode") == "false"
        assert store.value("agent.max_autonomous_risk_level") == "5.0"
        assert store.value("agent.approval_required_above_savings") == "10000000"
        assert store.value("agent.auto_execute_types") == "resize,storage-class"
        assert store.value("agent.prod_mode") == "false"
        assert store.entries["agent.autonomous_mode"].updated_by == "system"
        assert store.entries["agent.autonomous_mode"].description

    async def test_initialize_defaults_keeps_existing_values(self, autonomous_service, autonomous_store):
        created = await autonomous_service.initialize_defaults()

        assert "agent.autonomous_mode" not in created
        assert autonomous_store.value("agent.autonomous_mode") == "true"

    async def test_initialize_defaults_twice_creates_nothing(self, service):
        await service.initialize_defaults()
        assert await service.initialize_defaults() == []


class TestEligibility:

    async def test_default_deny_on_fresh_store(self, service):
        assert await service.can_execute_autonomously(resize()) is False

    async def test_reference_configuration(self, autonomous_service):
        assert await autonomous_service.can_execute_autonomously(resize(3.0)) is True
        assert await autonomous_service.can_execute_autonomously(resize(8.0)) is False
        assert await autonomous_service.can_execute_autonomously(resize(1.0, 100, "terminate")) is False

    async def test_evaluate_reports_reasons(self, autonomous_service):
        result = await autonomous_service.evaluate(resize(9.0, 20_000_000))
        assert result.to_dict() == {
            "eligible": False,
            "reasons": ["risk_above_threshold", "savings_above_threshold"],
        }

    async def test_evaluation_served_from_cache(self, autonomous_service, autonomous_store):
        for _ in range(5):
            await autonomous_service.can_execute_autonomously(resize())
        assert autonomous_store.get_all_calls == 1

    async def test_kill_switch_takes_effect_immediately(self, autonomous_service):
        assert await autonomous_service.can_execute_autonomously(resize()) is True

        await autonomous_service.set_autonomous_mode(False, "admin")

        assert await autonomous_service.can_execute_autonomously(resize()) is False

    async def test_direct_store_write_invalidates_through_listener(self, autonomous_service, autonomous_store):
        assert await autonomous_service.can_execute_autonomously(resize(7.0)) is False

        await autonomous_store.update("agent.max_autonomous_risk_level", "8", "dba")

        assert await autonomous_service.can_execute_autonomously(resize(7.0)) is True


class TestThresholdSetters:

    async def test_set_max_risk_level(self, autonomous_service, autonomous_store):
        policy = await autonomous_service.set_max_autonomous_risk_level(7.5, "admin")

        assert policy.max_autonomous_risk_level == 7.5
        assert autonomous_store.value("agent.max_autonomous_risk_level") == "7.5"
        assert autonomous_store.entries["agent.max_autonomous_risk_level"].updated_by == "admin"

    async def test_set_savings_threshold(self, autonomous_service, autonomous_store):
        policy = await autonomous_service.set_approval_required_above_savings(2_500_000, "admin")

        assert policy.approval_required_above_savings == 2_500_000
        assert autonomous_store.value("agent.approval_required_above_savings") == "2500000"

    async def test_set_auto_execute_types(self, autonomous_service, autonomous_store):
        policy = await autonomous_service.set_auto_execute_types(["storage-class", "resize", "schedule"], "admin")

        assert policy.auto_execute_types == frozenset({"resize", "schedule", "storage-class"})
        assert autonomous_store.value("agent.auto_execute_types") == "resize,schedule,storage-class"

    async def test_setter_creates_missing_key(self, service, store):
        await service.set_max_autonomous_risk_level(2.0, "admin")
        assert store.value("agent.max_autonomous_risk_level") == "2.0"
        assert store.entries["agent.max_autonomous_risk_level"].description

    @pytest.mark.parametrize("kwargs,field", [
        ({"max_autonomous_risk_level": 101}, "max_autonomous_risk_level"),
        ({"max_autonomous_risk_level": -1}, "max_autonomous_risk_level"),
        ({"approval_required_above_savings": -5}, "approval_required_above_savings"),
        ({"approval_required_above_savings": 10.5}, "approval_required_above_savings"),
        ({"auto_execute_types": ["resize", ""]}, "auto_execute_types"),
        ({"auto_execute_types": []}, "auto_execute_types"),
        ({}, "thresholds"),
    ])
    async def test_invalid_thresholds_write_nothing(self, autonomous_service, autonomous_store, kwargs, field):
        with pytest.raises(ConfigValidationError) as exc:
            await autonomous_service.update_thresholds("admin", **kwargs)
        assert exc.value.details["field"] == field
        assert autonomous_store.writes == []

    async def test_batch_update_is_all_or_nothing(self, autonomous_service, autonomous_store):
        with pytest.raises(ConfigValidationError):
            await autonomous_service.update_thresholds(
                "admin",
                max_autonomous_risk_level=6.0,
                approval_required_above_savings=-1,
            )
        assert autonomous_store.value("agent.max_autonomous_risk_level") == "5.0"

    async def test_persistence_failure_propagates(self, autonomous_service, autonomous_store):
        await autonomous_service.get_policy_config()
        autonomous_store.fail_writes = True

        with pytest.raises(ConfigPersistenceError):
            await autonomous_service.set_max_autonomous_risk_level(9.0, "admin")

        assert (await autonomous_service.get_policy_config()).max_autonomous_risk_level == 5.0


class TestCorruptValues:
    """Stored values that cannot be parsed are a server-side problem"""

    @pytest.mark.parametrize("key,value", [
        ("agent.autonomous_mode", "yes"),
        ("agent.max_autonomous_risk_level", "high"),
        ("agent.max_autonomous_risk_level", "250"),
        ("agent.approval_required_above_savings", "12.5"),
        ("agent.approval_required_above_savings", "nan"),
    ])
    async def test_corrupt_value_raises(self, clock, key, value):
        from autonomy.agent_config import AgentConfigService

        service = AgentConfigService.create(FakeConfigStore({key: value}), clock=clock)
        with pytest.raises(CorruptConfigValue):
            await service.get_policy_config()

    async def test_out_of_range_value_names_stored_key(self, clock):
        from autonomy.agent_config import AgentConfigService

        store = FakeConfigStore({"agent.max_autonomous_risk_level": "250"})
        service = AgentConfigService.create(store, clock=clock)

        with pytest.raises(CorruptConfigValue) as exc:
            await service.get_policy_config()
        assert exc.value.details["key"] == "agent.max_autonomous_risk_level"


class TestAgentConfigSnapshot:

    async def test_agent_config_snapshot(self, autonomous_service):
        await autonomous_service.set_prod_mode(True, "admin")

        data = (await autonomous_service.get_agent_config()).to_dict()

        assert data == {
            "autonomous_mode": True,
            "max_autonomous_risk_level": 5.0,
            "approval_required_above_savings": 10_000_000,
            "auto_execute_types": ["resize", "storage-class"],
            "prod_mode": True,
            "prod_mode_time_remaining": 30,
            "prod_mode_duration_seconds": 30,
            "simulation_mode": False,
        }
