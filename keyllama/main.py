import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.endpoints import chat, telemetry
from .config import Settings
from .logging_config import setup_logging
from .services.ai_orchestrator.prompts import get_scoring_template
from .services.ai_orchestrator.scorer import LLMScorer
from .services.session_engine.tracker import SessionTracker

logger = logging.getLogger(__name__)


def build_tracker(settings: Settings) -> SessionTracker:
    """One tracker per editing session, wired to the configured scorer."""
    scorer = LLMScorer(api_key=settings.api_key, model=settings.model, base_url=settings.base_url)
    return SessionTracker(scorer=scorer, prompt_template=get_scoring_template(settings.prompt))


def create_app(tracker: Optional[SessionTracker] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Session start
        app.state.tracker = tracker or build_tracker(settings)
        logger.info("Session tracker started")

        yield

        # Session end: final analysis + report
        session_tracker: SessionTracker = app.state.tracker
        if settings.analyze_on_shutdown:
            analysis = await session_tracker.request_analysis()
            session_tracker.print_summary(analysis=analysis)
        logger.info("Session tracker stopped")

    app = FastAPI(title="Keyllama Backend", version="1.0.0", lifespan=lifespan)

    # CORS for the editor webview
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(telemetry.router)
    app.include_router(chat.router)

    @app.get("/")
    async def root():
        return {"message": "Keyllama Backend API", "version": "1.0.0"}

    @app.get("/health")
    async def health():
        return {"status": "healthy", "service": "keyllama"}

    return app
