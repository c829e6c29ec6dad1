"""
ANALYSIS CYCLE - Periodic resource analysis and recommendation dispatch

One cycle:
1. Pick the analyzer: AI while Prod Mode is active, heuristics otherwise
2. Collect recommendations
3. For each: execute autonomously if eligible, else route for approval

A failed execution or approval request is counted and the cycle moves
on; anything else that escapes marks the run failed and is re-raised.

Analyzers, executor and approval router are injected; the defaults
below do nothing beyond logging so an unconfigured deployment can run
the schedule safely.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from autonomy.policy_evaluator import RecommendationCandidate
from exceptions import ConfigValidationError
from logging_config import get_logger

logger = get_logger(__name__)

METHOD_AI = "ai"
METHOD_HEURISTIC = "heuristic"


@dataclass
class Recommendation:
    """A stored cost-optimization recommendation"""
    id: str
    resource_id: str
    type: str
    title: str
    risk_level: float
    projected_annual_savings: int
    projected_monthly_savings: int = 0

    def candidate(self) -> RecommendationCandidate:
        """Read-only projection for the policy evaluator (validates fields)"""
        return RecommendationCandidate(
            type=self.type,
            risk_level=self.risk_level,
            projected_annual_savings=self.projected_annual_savings,
        )


class RecommendationAnalyzer(Protocol):
    async def analyze(self) -> List[Recommendation]: ...


class OptimizationExecutor(Protocol):
    async def execute(self, recommendation: Recommendation) -> None: ...


class ApprovalRouter(Protocol):
    async def request_approval(self, recommendation: Recommendation) -> None: ...


class NullAnalyzer:
    """Analyzer used until a real one is wired in"""

    def __init__(self, name: str = METHOD_HEURISTIC):
        self.name = name

    async def analyze(self) -> List[Recommendation]:
        logger.debug("null_analyzer_called", analyzer=self.name)
        return []


class DryRunExecutor:
    """Logs what would have been executed"""

    async def execute(self, recommendation: Recommendation) -> None:
        logger.info(
            "optimization_dry_run",
            recommendation_id=recommendation.id,
            resource_id=recommendation.resource_id,
            type=recommendation.type
        )


class LoggingApprovalRouter:
    async def request_approval(self, recommendation: Recommendation) -> None:
        logger.info(
            "approval_requested",
            recommendation_id=recommendation.id,
            resource_id=recommendation.resource_id,
            type=recommendation.type,
            projected_annual_savings=recommendation.projected_annual_savings
        )


@dataclass
class CycleReport:
    method: str
    triggered_by: str
    evaluated: int = 0
    autonomous: int = 0
    routed_for_approval: int = 0
    failed: int = 0
    skipped_invalid: int = 0
    savings_executed: int = 0
    run_id: Optional[str] = None
    executed_ids: List[str] = field(default_factory=list)

    def counters(self) -> dict:
        return {
            "evaluated": self.evaluated,
            "autonomous": self.autonomous,
            "routed_for_approval": self.routed_for_approval,
            "failed": self.failed,
            "skipped_invalid": self.skipped_invalid,
            "savings_executed": self.savings_executed,
        }

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "method": self.method,
            "triggered_by": self.triggered_by,
            **self.counters(),
        }


class AnalysisCycle:
    """Runs one analysis pass against the current agent configuration"""

    def __init__(
        self,
        service,
        heuristic_analyzer: RecommendationAnalyzer = None,
        ai_analyzer: RecommendationAnalyzer = None,
        executor: OptimizationExecutor = None,
        approvals: ApprovalRouter = None,
        run_history=None
    ):
        self.service = service
        self.heuristic_analyzer = heuristic_analyzer or NullAnalyzer(METHOD_HEURISTIC)
        self.ai_analyzer = ai_analyzer or NullAnalyzer(METHOD_AI)
        self.executor = executor or DryRunExecutor()
        self.approvals = approvals or LoggingApprovalRouter()
        self.run_history = run_history

    async def run(self, triggered_by: str = "system") -> CycleReport:
        prod_mode = await self.service.mode_state.is_prod_mode_active()
        method = METHOD_AI if prod_mode else METHOD_HEURISTIC
        analyzer = self.ai_analyzer if prod_mode else self.heuristic_analyzer

        report = CycleReport(method=method, triggered_by=triggered_by)
        if self.run_history is not None:
            report.run_id = await self.run_history.start(method, triggered_by)

        logger.info("analysis_cycle_started", method=method, triggered_by=triggered_by, run_id=report.run_id)

        try:
            recommendations = await analyzer.analyze()
            for recommendation in recommendations:
                await self._dispatch(recommendation, report)
        except Exception as e:
            logger.error("analysis_cycle_failed", method=method, run_id=report.run_id, error=str(e))
            if self.run_history is not None:
                await self.run_history.finish(report.run_id, "failed", report.counters(), error_message=str(e))
            raise

        if self.run_history is not None:
            await self.run_history.finish(report.run_id, "completed", report.counters())

        logger.info("analysis_cycle_completed", **report.to_dict())
        return report

    async def _dispatch(self, recommendation: Recommendation, report: CycleReport) -> None:
        try:
            candidate = recommendation.candidate()
        except ConfigValidationError as e:
            report.skipped_invalid += 1
            logger.warning(
                "recommendation_skipped_invalid",
                recommendation_id=recommendation.id,
                field=e.details.get("field"),
                reason=e.details.get("reason")
            )
            return

        report.evaluated += 1
        if not await self.service.can_execute_autonomously(candidate):
            try:
                await self.approvals.request_approval(recommendation)
            except Exception as e:
                report.failed += 1
                logger.error(
                    "approval_request_failed",
                    recommendation_id=recommendation.id,
                    resource_id=recommendation.resource_id,
                    error=str(e)
                )
                return
            report.routed_for_approval += 1
            return

        try:
            await self.executor.execute(recommendation)
        except Exception as e:
            report.failed += 1
            logger.error(
                "autonomous_execution_failed",
                recommendation_id=recommendation.id,
                resource_id=recommendation.resource_id,
                error=str(e)
            )
            return

        report.autonomous += 1
        report.savings_executed += recommendation.projected_annual_savings
        report.executed_ids.append(recommendation.id)
        logger.info(
            "autonomous_execution_completed",
            recommendation_id=recommendation.id,
            resource_id=recommendation.resource_id,
            type=recommendation.type
        )
