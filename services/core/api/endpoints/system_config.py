"""
SYSTEM CONFIG API ENDPOINTS

Raw key/value administration of the system_config table. Writes go
through SystemConfigRepository, whose listeners invalidate the agent
config cache.

Endpoints:
- GET  /api/system-config - List all entries
- GET  /api/system-config/{key} - One entry
- POST /api/system-config - Create or overwrite an entry
- PUT  /api/system-config/{key} - Update an existing entry
"""
import math
from typing import List

from fastapi import APIRouter, Depends

from agent_settings import CONFIG_DESCRIPTIONS, NUMERIC_KEY_MARKERS
from api.dependencies import get_config_repository
from api.errors import map_exception_to_http
from autonomy.agent_config import validate_stored_value
from autonomy.mode_state import require_actor
from exceptions import BaseConfigException, ConfigNotFound, ConfigValidationError
from infrastructure.config_store import SystemConfigRepository
from schemas import SystemConfigCreate, SystemConfigResponse, SystemConfigUpdate

router = APIRouter(prefix="/api/system-config", tags=["system-config"])


def validate_config_value(key: str, value: str) -> str:
    """
    agent.* keys get their typed checks; other keys naming a risk level
    or savings amount must hold a non-negative number
    """
    if key in CONFIG_DESCRIPTIONS:
        return validate_stored_value(key, value)
    value = value.strip()
    if not value:
        raise ConfigValidationError("value", value, "must be a non-empty string")
    if any(marker in key for marker in NUMERIC_KEY_MARKERS):
        try:
            number = float(value)
        except ValueError:
            raise ConfigValidationError("value", value, "invalid numeric value")
        if math.isnan(number) or math.isinf(number) or number < 0:
            raise ConfigValidationError("value", value, "invalid numeric value")
    return value


@router.get("", response_model=List[SystemConfigResponse])
async def list_system_config(repository: SystemConfigRepository = Depends(get_config_repository)):
    try:
        return [entry.to_dict() for entry in await repository.get_all()]
    except BaseConfigException as e:
        raise map_exception_to_http(e)


@router.get("/{key}", response_model=SystemConfigResponse)
async def get_system_config(key: str, repository: SystemConfigRepository = Depends(get_config_repository)):
    try:
        entry = await repository.get(key)
        if entry is None:
            raise ConfigNotFound(key)
        return entry.to_dict()
    except BaseConfigException as e:
        raise map_exception_to_http(e)


@router.post("", response_model=SystemConfigResponse)
async def set_system_config(
    payload: SystemConfigCreate,
    repository: SystemConfigRepository = Depends(get_config_repository)
):
    try:
        key = payload.key.strip()
        if not key:
            raise ConfigValidationError("key", payload.key, "must be a non-empty string")
        value = validate_config_value(key, payload.value)
        actor = require_actor(payload.updated_by)
        entry = await repository.upsert(key, value, payload.description, actor)
        return entry.to_dict()
    except BaseConfigException as e:
        raise map_exception_to_http(e)


@router.put("/{key}", response_model=SystemConfigResponse)
async def update_system_config(
    key: str,
    payload: SystemConfigUpdate,
    repository: SystemConfigRepository = Depends(get_config_repository)
):
    try:
        value = validate_config_value(key, payload.value)
        actor = require_actor(payload.updated_by)
        entry = await repository.update(key, value, actor)
        if entry is None:
            raise ConfigNotFound(key)
        return entry.to_dict()
    except BaseConfigException as e:
        raise map_exception_to_http(e)
