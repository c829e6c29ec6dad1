"""
AGENT CONFIG API ENDPOINTS

Thin adapters over AgentConfigService.

Endpoints:
- GET  /api/agent-config - Typed agent configuration + mode state
- POST /api/agent-config/autonomous-mode - Toggle the kill switch
- POST /api/agent-config/prod-mode - Toggle Prod Mode (auto-reverts)
- POST /api/agent-config/simulation-mode - Toggle simulation mode
- PUT  /api/agent-config/thresholds - Update risk / savings / type thresholds
- POST /api/agent-config/evaluate - Would this recommendation auto-execute?
- POST /api/mode/prod - Toggle Prod Mode (dashboard indicator)
- GET  /api/mode/prod - Poll Prod Mode countdown
- POST /api/analysis/run - Run one analysis cycle now
- GET  /api/analysis/runs - Recent analysis runs, newest first
"""
from typing import List

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_agent_config_service, get_analysis_cycle, get_run_history
from api.errors import map_exception_to_http
from autonomy.agent_config import AgentConfigService
from autonomy.analysis_cycle import AnalysisCycle
from autonomy.policy_evaluator import RecommendationCandidate
from exceptions import BaseConfigException
from infrastructure.analysis_runs import AnalysisRunRepository
from schemas import (
    AgentConfigResponse,
    AnalysisRunRecord,
    AnalysisRunResponse,
    EvaluateRequest,
    EvaluateResponse,
    ModeToggleRequest,
    ProdModeStatusResponse,
    ThresholdsUpdateRequest,
)

router = APIRouter(prefix="/api", tags=["agent-config"])


async def _agent_config(service: AgentConfigService) -> dict:
    return (await service.get_agent_config()).to_dict()


@router.get("/agent-config", response_model=AgentConfigResponse)
async def get_agent_config(service: AgentConfigService = Depends(get_agent_config_service)):
    try:
        return await _agent_config(service)
    except BaseConfigException as e:
        raise map_exception_to_http(e)


@router.post("/agent-config/autonomous-mode", response_model=AgentConfigResponse)
async def set_autonomous_mode(
    payload: ModeToggleRequest,
    service: AgentConfigService = Depends(get_agent_config_service)
):
    try:
        await service.set_autonomous_mode(payload.enabled, payload.updated_by)
        return await _agent_config(service)
    except BaseConfigException as e:
        raise map_exception_to_http(e)


@router.post("/agent-config/prod-mode", response_model=AgentConfigResponse)
async def set_prod_mode(
    payload: ModeToggleRequest,
    service: AgentConfigService = Depends(get_agent_config_service)
):
    try:
        await service.set_prod_mode(payload.enabled, payload.updated_by)
        return await _agent_config(service)
    except BaseConfigException as e:
        raise map_exception_to_http(e)


@router.post("/agent-config/simulation-mode", response_model=AgentConfigResponse)
async def set_simulation_mode(
    payload: ModeToggleRequest,
    service: AgentConfigService = Depends(get_agent_config_service)
):
    try:
        await service.set_simulation_mode(payload.enabled, payload.updated_by)
        return await _agent_config(service)
    except BaseConfigException as e:
        raise map_exception_to_http(e)


@router.put("/agent-config/thresholds", response_model=AgentConfigResponse)
async def update_thresholds(
    payload: ThresholdsUpdateRequest,
    service: AgentConfigService = Depends(get_agent_config_service)
):
    try:
        await service.update_thresholds(
            payload.updated_by,
            max_autonomous_risk_level=payload.max_autonomous_risk_level,
            approval_required_above_savings=payload.approval_required_above_savings,
            auto_execute_types=payload.auto_execute_types,
        )
        return await _agent_config(service)
    except BaseConfigException as e:
        raise map_exception_to_http(e)


@router.post("/agent-config/evaluate", response_model=EvaluateResponse)
async def evaluate_recommendation(
    payload: EvaluateRequest,
    service: AgentConfigService = Depends(get_agent_config_service)
):
    """Dry-run the autonomy checks; nothing is executed"""
    try:
        candidate = RecommendationCandidate(
            type=payload.type,
            risk_level=payload.risk_level,
            projected_annual_savings=payload.projected_annual_savings,
        )
        return (await service.evaluate(candidate)).to_dict()
    except BaseConfigException as e:
        raise map_exception_to_http(e)


# =============================================================================
# Prod Mode indicator
# =============================================================================

async def _prod_mode_status(service: AgentConfigService) -> dict:
    state = await service.mode_state.get_mode_state()
    return {
        "prod_mode": state.prod_mode_enabled,
        "time_remaining": state.prod_mode_time_remaining,
        "duration_seconds": state.prod_mode_duration_seconds,
    }


@router.get("/mode/prod", response_model=ProdModeStatusResponse)
async def get_prod_mode(service: AgentConfigService = Depends(get_agent_config_service)):
    try:
        return await _prod_mode_status(service)
    except BaseConfigException as e:
        raise map_exception_to_http(e)


@router.post("/mode/prod", response_model=ProdModeStatusResponse)
async def toggle_prod_mode(
    payload: ModeToggleRequest,
    service: AgentConfigService = Depends(get_agent_config_service)
):
    try:
        await service.set_prod_mode(payload.enabled, payload.updated_by)
        return await _prod_mode_status(service)
    except BaseConfigException as e:
        raise map_exception_to_http(e)


# =============================================================================
# Analysis
# =============================================================================

@router.post("/analysis/run", response_model=AnalysisRunResponse)
async def run_analysis(cycle: AnalysisCycle = Depends(get_analysis_cycle)):
    """Run one analysis cycle synchronously and return its counters"""
    try:
        report = await cycle.run(triggered_by="api")
        return report.to_dict()
    except BaseConfigException as e:
        raise map_exception_to_http(e)


@router.get("/analysis/runs", response_model=List[AnalysisRunRecord])
async def list_analysis_runs(
    limit: int = Query(20, ge=1, le=100),
    run_history: AnalysisRunRepository = Depends(get_run_history)
):
    try:
        return [AnalysisRunRecord.model_validate(run) for run in await run_history.recent(limit)]
    except BaseConfigException as e:
        raise map_exception_to_http(e)
