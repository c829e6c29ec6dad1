from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agent_settings import ALLOWED_ORIGINS, LOG_FILE, LOG_JSON, LOG_LEVEL, SCHEDULER_ENABLED
from api.endpoints.agent_config import router as agent_config_router
from api.endpoints.system_config import router as system_config_router
from api.middleware import LoggingMiddleware
from autonomy.agent_config import AgentConfigService
from autonomy.analysis_cycle import AnalysisCycle
from database import close_db_connections, create_tables
from infrastructure.analysis_runs import AnalysisRunRepository
from infrastructure.config_store import SystemConfigRepository
from logging_config import get_logger, setup_logging
from scheduler import start_scheduler, stop_scheduler

setup_logging(level=LOG_LEVEL, log_file=LOG_FILE, json_logs=LOG_JSON)
logger = get_logger(__name__)

app = FastAPI(title="FinOps Autonomy Core")

# SECURITY: Limit CORS to specific origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,  # Only whitelisted origins
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)

app.include_router(agent_config_router)
app.include_router(system_config_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are a 400 with field detail, like domain validation"""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "reason": error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "error": {
                    "code": "ConfigValidationError",
                    "message": "Invalid request",
                    "details": {"errors": errors}
                }
            }
        }
    )


def build_services(target: FastAPI, session_factory=None) -> AgentConfigService:
    """Wire repository, cache, service and analysis cycle onto app.state"""
    repository = SystemConfigRepository(session_factory)
    service = AgentConfigService.create(repository)
    run_history = AnalysisRunRepository(session_factory)
    cycle = AnalysisCycle(service, run_history=run_history)

    target.state.config_repository = repository
    target.state.agent_config_service = service
    target.state.analysis_cycle = cycle
    target.state.run_history = run_history
    return service


@app.on_event("startup")
async def startup():
    await create_tables()
    service = build_services(app)
    await service.initialize_defaults()
    if SCHEDULER_ENABLED:
        start_scheduler(service, app.state.analysis_cycle)
    logger.info("system_online", scheduler_enabled=SCHEDULER_ENABLED)


@app.on_event("shutdown")
async def shutdown():
    stop_scheduler()
    await close_db_connections()
    logger.info("system_shutdown")


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
