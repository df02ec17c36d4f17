"""
wager-sim application entry point.
FastAPI app exposing the game engines to a UI, with crash rounds ticking
on the event loop.
"""

import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

# Add parent directory to path so imports work when running directly
if __name__ == "__main__":
    sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wager_sim.config import settings
from wager_sim.core.logger import get_logger, init_logging
from wager_sim.core.persistence import FileStore
from wager_sim.core.scheduler import CrashScheduler
from wager_sim.core.session import SessionCoordinator
from wager_sim.routers import api

# Initialize logging first
init_logging(
    level=settings.logging.level,
    log_to_file=settings.logging.log_to_file,
    formatter=settings.logging.formatter,
    log_file_path=settings.paths.get_log_path(),
)
logger = get_logger("main")


def create_app(
    coordinator: Optional[SessionCoordinator] = None,
    start_scheduler: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    if coordinator is None:
        coordinator = SessionCoordinator.from_store(
            FileStore(settings.paths.get_state_path()), config=settings
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler = None
        if start_scheduler:
            scheduler = CrashScheduler(coordinator, settings.crash.tick_interval_ms)
            scheduler.start()
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.shutdown()

    app = FastAPI(
        title=settings.server.name,
        docs_url="/docs" if settings.server.debug else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.coordinator = coordinator

    # CORS middleware (for development)
    if settings.server.debug:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(api.router, prefix="/api")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        detail = str(exc) if settings.server.debug else "An unexpected error occurred."
        return JSONResponse(status_code=500, content={"detail": detail})

    logger.info(f"Application '{settings.server.name}' initialized")
    return app


# ==================== Main Entry Point ====================

if __name__ == "__main__":
    logger.info(f"Starting server on {settings.server.host}:{settings.server.port}")
    uvicorn.run(
        create_app(),
        host=settings.server.host,
        port=settings.server.port,
    )
