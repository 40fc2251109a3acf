from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ats_scorer.middleware.error_handlers import (
    ExceptionHandlerMiddleware,
    PerformanceMiddleware,
    RequestLoggingMiddleware,
)
from ats_scorer.models.scoring_settings import ScoringSettings
from ats_scorer.routers import parse, runs, score
from ats_scorer.services.db import create_client, init_indexes
from ats_scorer.services.llm_client import OllamaClient
from ats_scorer.services.report_renderer import MarkdownReportRenderer
from ats_scorer.services.run_store import ScoreRunStore
from ats_scorer.services.scoring import ScoringService, utc_timestamp
from ats_scorer.utils.config import load_settings
from ats_scorer.utils.logging_config import configure_for_environment, get_logger

# Configure logging first
configure_for_environment()
logger = get_logger(__name__)

API_VERSION = "1.0.0"


def create_app(settings: Optional[ScoringSettings] = None, db=None) -> FastAPI:
    """Build the API. ``settings`` and ``db`` default to the environment and a motor connection."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("ATS Scorer API starting up...")
        cfg = settings or load_settings()

        client = None
        database = db
        if database is None:
            client, database = create_client(cfg.database)

        llm_client = OllamaClient(cfg.llm) if cfg.llm.enabled else None
        if llm_client is None:
            logger.info("LLM extraction disabled; documents are normalized by heuristics only")

        app.state.settings = cfg
        app.state.scoring_service = ScoringService(cfg, llm_client)
        app.state.run_store = ScoreRunStore(database, cfg.stats_period_days)
        app.state.report_renderer = MarkdownReportRenderer()

        logger.info("Initializing database indexes...")
        await init_indexes(database)
        logger.info("ATS Scorer API startup completed")

        yield

        logger.info("ATS Scorer API shutting down...")
        if client is not None:
            client.close()
        logger.info("ATS Scorer API shutdown completed")

    app = FastAPI(title="ATS Scorer API", version=API_VERSION, lifespan=lifespan)

    # Last added runs first; the exception handler wraps the logging middlewares
    app.add_middleware(PerformanceMiddleware, slow_request_threshold=2.0)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ExceptionHandlerMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    @app.head("/")
    async def root():
        """Root endpoint - handles both GET and HEAD requests for health checks"""
        return {"message": "Welcome to the ATS Scorer API", "version": API_VERSION, "status": "ok"}

    @app.get("/health")
    @app.head("/health")
    async def health_check():
        return {"status": "healthy", "timestamp": utc_timestamp()}

    app.include_router(score.router, prefix="/api/score", tags=["score"])
    app.include_router(parse.router, prefix="/api/parse", tags=["parse"])
    app.include_router(runs.router, prefix="/api/runs", tags=["runs"])
    return app


app = create_app()
