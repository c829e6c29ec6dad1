"""
Pytest Configuration and Fixtures

In-memory config store, controllable clock and a wired AgentConfigService.
"""
import os
import sys

import pytest

# Add services/core to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'services', 'core'))
sys.path.insert(0, os.path.dirname(__file__))

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

from autonomy.agent_config import AgentConfigService  # noqa: E402
from fakes import FakeClock, FakeConfigStore  # noqa: E402


@pytest.fixture
def store() -> FakeConfigStore:
    return FakeConfigStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service(store, clock) -> AgentConfigService:
    return AgentConfigService.create(store, clock=clock, prod_mode_duration_seconds=30)


@pytest.fixture
def autonomous_store() -> FakeConfigStore:
    """Store seeded with the reference autonomous configuration"""
    return FakeConfigStore({
        "agent.autonomous_mode": "true",
        "agent.max_autonomous_risk_level": "5.0",
        "agent.approval_required_above_savings": "10000000",
        "agent.auto_execute_types": "resize,storage-class",
    })


@pytest.fixture
def autonomous_service(autonomous_store, clock) -> AgentConfigService:
    return AgentConfigService.create(autonomous_store, clock=clock, prod_mode_duration_seconds=30)
