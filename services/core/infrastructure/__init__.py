# Infrastructure Layer
from .uow import UnitOfWork
from .config_store import (
    ConfigEntry,
    SystemConfigRepository
)
from .analysis_runs import AnalysisRunRepository
