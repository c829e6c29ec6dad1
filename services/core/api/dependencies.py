"""
FastAPI dependencies: services wired once at startup and kept on app.state
"""
from fastapi import Request

from autonomy.agent_config import AgentConfigService
from autonomy.analysis_cycle import AnalysisCycle
from infrastructure.analysis_runs import AnalysisRunRepository
from infrastructure.config_store import SystemConfigRepository


def get_agent_config_service(request: Request) -> AgentConfigService:
    return request.app.state.agent_config_service


def get_config_repository(request: Request) -> SystemConfigRepository:
    return request.app.state.config_repository


def get_analysis_cycle(request: Request) -> AnalysisCycle:
    return request.app.state.analysis_cycle


def get_run_history(request: Request) -> AnalysisRunRepository:
    return request.app.state.run_history
