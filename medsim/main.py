"""
MedSim Guard Main Application
- Serves the LLM API behind the shared rate limiter, retries and error reporting.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from medsim.api.routes import router as api_router
from medsim.config import settings
from medsim.core.error_handlers import register_error_handlers
from medsim.core.llm.ollama_client import OllamaClient
from medsim.core.resilience.factory import build_orchestrator, build_rate_limiter
from medsim.logging_config import setup_logging

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the shared rate limiter for the lifetime of the app"""
    rate_limiter = build_rate_limiter(settings)
    orchestrator = build_orchestrator(rate_limiter, settings)

    app.state.rate_limiter = rate_limiter
    app.state.orchestrator = orchestrator
    app.state.llm_client = OllamaClient(orchestrator)
    yield


app = FastAPI(
    title="MedSim Guard",
    description="Resilient gateway to the medical simulation language model",
    version="0.1.0",
    lifespan=lifespan,
)

# Register error handlers
register_error_handlers(app)

app.include_router(api_router)
