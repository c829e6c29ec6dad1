"""
AUTONOMY MODULE - Autonomous execution of cost-optimization recommendations

Components:
- PolicyEvaluator: pure eligibility rules (kill switch, risk, savings, type)
- ConfigCache: read-through cache over the config store
- ModeStateManager: autonomous / prod / simulation flags, Prod Mode window
- AgentConfigService: typed configuration + evaluation facade
- AnalysisCycle: periodic analysis and recommendation dispatch
"""
from autonomy.policy_evaluator import (
    PolicyConfig,
    RecommendationCandidate,
    EvaluationResult,
    evaluate,
    can_execute_autonomously,
)
from autonomy.config_cache import ConfigCache
from autonomy.mode_state import ModeState, ModeStateManager
from autonomy.agent_config import AgentConfig, AgentConfigService
from autonomy.analysis_cycle import AnalysisCycle, CycleReport, Recommendation

__all__ = [
    'PolicyConfig',
    'RecommendationCandidate',
    'EvaluationResult',
    'evaluate',
    'can_execute_autonomously',
    'ConfigCache',
    'ModeState',
    'ModeStateManager',
    'AgentConfig',
    'AgentConfigService',
    'AnalysisCycle',
    'CycleReport',
    'Recommendation',
]
