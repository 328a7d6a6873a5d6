import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import WorkflowRequestError
from app.core.logging import configure_logging
from app.schemas.workflow import WorkflowRunRequest, WorkflowRunResult
from app.services.health import collect_health
from app.services.history_store import HistoryStore
from app.services.providers import LLMCaller
from app.services.step_executor import StepExecutor
from app.services.structured_output import StructuredOutputValidator
from app.services.workflow_engine import WorkflowEngine
from app.workflows.agents import agent_catalog

logger = logging.getLogger(__name__)


def build_engine(settings: Settings, history: Optional[HistoryStore] = None) -> WorkflowEngine:
    """Wire caller -> validator -> executor -> engine from settings."""
    llm = LLMCaller(settings.provider_config())
    validator = StructuredOutputValidator(
        llm,
        max_attempts=settings.LLM_MAX_ATTEMPTS,
        backoff_base_seconds=settings.LLM_RETRY_BACKOFF_SECONDS,
    )
    executor = StepExecutor(validator, clean_text_delay_seconds=settings.CLEAN_TEXT_DELAY_SECONDS)
    return WorkflowEngine(executor, history=history)


# --- LIFESPAN ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup report and graceful shutdown"""
    settings: Settings = app.state.settings
    provider = settings.configured_provider()
    if provider == "missing_key":
        logger.warning("⚠️ No provider API key configured, running in MOCK mode")
    else:
        logger.info("✅ Primary provider: %s", provider)
    logger.info("🗄️ History store: %s (%s)", app.state.history.path, await app.state.history.status())
    yield
    logger.info("🛑 Shutting down gracefully...")


def create_app(settings: Settings = default_settings) -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Compose and run linear pipelines of text-processing agents",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS MIDDLEWARE
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"], # Allow all for local dev
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    history = HistoryStore(settings.HISTORY_FILE, max_entries=settings.HISTORY_MAX_ENTRIES)
    app.state.settings = settings
    app.state.history = history
    app.state.engine = build_engine(settings, history)

    app.add_api_route("/api/workflow/run", run_workflow, methods=["POST"], response_model=WorkflowRunResult)
    app.add_api_route("/api/workflow/{run_id}", get_workflow_run, methods=["GET"], response_model=WorkflowRunResult)
    app.add_api_route("/api/history", get_history, methods=["GET"], response_model=List[WorkflowRunResult])
    app.add_api_route("/api/health", health_check, methods=["GET"])
    app.add_api_route("/api/agents", list_agents, methods=["GET"])
    return app


# --- API ENDPOINTS ---

async def run_workflow(body: WorkflowRunRequest, request: Request):
    """Run the pipeline and return the full result, including failed steps."""
    engine: WorkflowEngine = request.app.state.engine
    try:
        return await engine.run(body.steps or [], body.input_text or "")
    except WorkflowRequestError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        logger.exception("Workflow execution error: %s", e)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


async def get_workflow_run(run_id: str, request: Request):
    """Get a recent run by ID"""
    run = request.app.state.engine.get_run(run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Run not found")
    return run


async def get_history(request: Request):
    """Stored runs, most recent first"""
    return await request.app.state.history.list()


async def health_check(request: Request):
    """Backend, history store and provider status"""
    return await collect_health(request.app.state.settings, request.app.state.history)


async def list_agents():
    """Available step types for building a pipeline"""
    return agent_catalog()


app = create_app()
