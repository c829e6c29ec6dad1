from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr
from typing import Optional, List, Union
from datetime import datetime

from agent_settings import SYSTEM_ACTOR

# JSON numbers only: "5" or true are rejected rather than coerced
Number = Union[StrictInt, StrictFloat]

# =============================================================================
# Agent configuration
# =============================================================================

class ModeToggleRequest(BaseModel):
    enabled: StrictBool
    updated_by: StrictStr = Field(default=SYSTEM_ACTOR, max_length=255)

class ThresholdsUpdateRequest(BaseModel):
    max_autonomous_risk_level: Optional[Number] = None
    approval_required_above_savings: Optional[Number] = None
    auto_execute_types: Optional[List[StrictStr]] = None
    updated_by: StrictStr = Field(max_length=255)

class EvaluateRequest(BaseModel):
    type: StrictStr
    risk_level: Number
    projected_annual_savings: Number

class EvaluateResponse(BaseModel):
    eligible: bool
    reasons: List[str]

class AgentConfigResponse(BaseModel):
    autonomous_mode: bool
    max_autonomous_risk_level: float
    approval_required_above_savings: int
    auto_execute_types: List[str]
    prod_mode: bool
    prod_mode_time_remaining: int
    prod_mode_duration_seconds: int
    simulation_mode: bool

class ProdModeStatusResponse(BaseModel):
    prod_mode: bool
    time_remaining: int
    duration_seconds: int

# =============================================================================
# Raw system configuration (admin)
# =============================================================================

class SystemConfigCreate(BaseModel):
    key: StrictStr = Field(min_length=1, max_length=255)
    value: StrictStr = Field(min_length=1)
    description: Optional[StrictStr] = None
    updated_by: StrictStr = Field(min_length=1, max_length=255)

class SystemConfigUpdate(BaseModel):
    value: StrictStr = Field(min_length=1)
    updated_by: StrictStr = Field(default=SYSTEM_ACTOR, min_length=1, max_length=255)

class SystemConfigResponse(BaseModel):
    key: str
    value: str
    description: Optional[str] = None
    updated_by: str
    updated_at: Optional[datetime] = None
    class Config: from_attributes = True

# =============================================================================
# Analysis
# =============================================================================

class AnalysisRunResponse(BaseModel):
    run_id: Optional[str] = None
    method: str
    triggered_by: str
    evaluated: int
    autonomous: int
    routed_for_approval: int
    failed: int
    skipped_invalid: int
    savings_executed: int

class AnalysisRunRecord(BaseModel):
    id: str
    method: str
    status: str
    triggered_by: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    evaluated: int = 0
    autonomous: int = 0
    routed_for_approval: int = 0
    failed: int = 0
    skipped_invalid: int = 0
    savings_executed: int = 0
    error_message: Optional[str] = None
    class Config: from_attributes = True
