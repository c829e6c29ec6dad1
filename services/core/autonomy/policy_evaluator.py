"""
POLICY EVALUATOR - Autonomous Execution Eligibility

Decides whether a cost-optimization recommendation may be executed
without human approval. Pure, deterministic rule evaluation:

- Kill switch: autonomous mode off -> every recommendation needs approval
- Risk:        risk_level > max_autonomous_risk_level -> approval
- Savings:     projected_annual_savings > approval_required_above_savings -> approval
- Type:        type not in auto_execute_types -> approval

All checks are AND-combined; any single failing check vetoes autonomous
execution. Values equal to a threshold pass.

Usage:
    from autonomy.policy_evaluator import PolicyConfig, RecommendationCandidate, can_execute_autonomously

    config = PolicyConfig(
        autonomous_mode_enabled=True,
        max_autonomous_risk_level=5.0,
        approval_required_above_savings=10_000_000,
        auto_execute_types=frozenset({"resize", "storage-class"}),
    )
    candidate = RecommendationCandidate(type="resize", risk_level=3.0, projected_annual_savings=5_000_000)

    can_execute_autonomously(candidate, config)  # True
"""
import math
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Tuple

from agent_settings import (
    DEFAULT_APPROVAL_REQUIRED_ABOVE_SAVINGS,
    DEFAULT_AUTO_EXECUTE_TYPES,
    DEFAULT_AUTONOMOUS_MODE,
    DEFAULT_MAX_AUTONOMOUS_RISK_LEVEL,
    RISK_LEVEL_MAX,
    RISK_LEVEL_MIN,
)
from exceptions import ConfigValidationError

# Failing-check names reported in EvaluationResult.reasons
AUTONOMOUS_MODE_DISABLED = "autonomous_mode_disabled"
RISK_ABOVE_THRESHOLD = "risk_above_threshold"
SAVINGS_ABOVE_THRESHOLD = "savings_above_threshold"
TYPE_NOT_ALLOWED = "type_not_allowed"


def require_number(field_name: str, value, minimum: float = None, maximum: float = None) -> float:
    """Reject bools, non-numbers, NaN/inf and out-of-range values"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigValidationError(field_name, value, "must be a number")
    if math.isnan(value) or math.isinf(value):
        raise ConfigValidationError(field_name, value, "must be a finite number")
    if minimum is not None and value < minimum:
        raise ConfigValidationError(field_name, value, f"must be >= {minimum:g}")
    if maximum is not None and value > maximum:
        raise ConfigValidationError(field_name, value, f"must be <= {maximum:g}")
    return value


def require_bool(field_name: str, value) -> bool:
    if not isinstance(value, bool):
        raise ConfigValidationError(field_name, value, "must be a boolean")
    return value


def normalize_types(field_name: str, types: Iterable[str]) -> FrozenSet[str]:
    """Strip and deduplicate type tags; empty tags are rejected"""
    if isinstance(types, str):
        raise ConfigValidationError(field_name, types, "must be a collection of strings")
    result = set()
    for tag in types:
        if not isinstance(tag, str) or not tag.strip():
            raise ConfigValidationError(field_name, tag, "type tags must be non-empty strings")
        if "," in tag:
            raise ConfigValidationError(field_name, tag, "type tags cannot contain commas")
        result.add(tag.strip())
    return frozenset(result)


@dataclass(frozen=True)
class PolicyConfig:
    """Thresholds for autonomous execution. Validated on construction."""
    autonomous_mode_enabled: bool = DEFAULT_AUTONOMOUS_MODE
    max_autonomous_risk_level: float = DEFAULT_MAX_AUTONOMOUS_RISK_LEVEL
    approval_required_above_savings: int = DEFAULT_APPROVAL_REQUIRED_ABOVE_SAVINGS
    auto_execute_types: FrozenSet[str] = field(
        default_factory=lambda: frozenset(DEFAULT_AUTO_EXECUTE_TYPES)
    )

    def __post_init__(self):
        require_bool("autonomous_mode_enabled", self.autonomous_mode_enabled)
        require_number(
            "max_autonomous_risk_level",
            self.max_autonomous_risk_level,
            minimum=RISK_LEVEL_MIN,
            maximum=RISK_LEVEL_MAX,
        )
        require_number("approval_required_above_savings", self.approval_required_above_savings, minimum=0)
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(
            self,
            "auto_execute_types",
            normalize_types("auto_execute_types", self.auto_execute_types),
        )

    def to_dict(self) -> dict:
        return {
            "autonomous_mode_enabled": self.autonomous_mode_enabled,
            "max_autonomous_risk_level": self.max_autonomous_risk_level,
            "approval_required_above_savings": self.approval_required_above_savings,
            "auto_execute_types": sorted(self.auto_execute_types),
        }


@dataclass(frozen=True)
class RecommendationCandidate:
    """
    Read-only projection of a stored recommendation: the three fields
    the evaluator needs. Construction validates them.
    """
    type: str
    risk_level: float
    projected_annual_savings: int

    def __post_init__(self):
        validate_candidate(self)


@dataclass(frozen=True)
class EvaluationResult:
    """Derived decision; recomputed on every call, never persisted"""
    eligible: bool
    reasons: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"eligible": self.eligible, "reasons": list(self.reasons)}


def validate_candidate(candidate: RecommendationCandidate) -> None:
    if not isinstance(candidate.type, str) or not candidate.type.strip():
        raise ConfigValidationError("type", candidate.type, "must be a non-empty string")
    require_number("risk_level", candidate.risk_level, minimum=RISK_LEVEL_MIN, maximum=RISK_LEVEL_MAX)
    require_number("projected_annual_savings", candidate.projected_annual_savings, minimum=0)


def evaluate(candidate: RecommendationCandidate, config: PolicyConfig) -> EvaluationResult:
    """
    Evaluate every check and report the failing ones.

    Returns immediately when autonomous mode is off; the other checks
    are all reported so callers can show why approval is needed.
    """
    if not config.autonomous_mode_enabled:
        return EvaluationResult(eligible=False, reasons=(AUTONOMOUS_MODE_DISABLED,))

    reasons = []
    if candidate.risk_level > config.max_autonomous_risk_level:
        reasons.append(RISK_ABOVE_THRESHOLD)
    if candidate.projected_annual_savings > config.approval_required_above_savings:
        reasons.append(SAVINGS_ABOVE_THRESHOLD)
    if candidate.type not in config.auto_execute_types:
        reasons.append(TYPE_NOT_ALLOWED)

    return EvaluationResult(eligible=not reasons, reasons=tuple(reasons))


def can_execute_autonomously(candidate: RecommendationCandidate, config: PolicyConfig) -> bool:
    """True only if the recommendation passes every autonomous-execution check"""
    return evaluate(candidate, config).eligible
