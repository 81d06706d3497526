"""FastAPI application — entry point for the persuasion console."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from client.factory import get_backend, reset_backend
from config import settings
from console import Console
from dashboard import dashboard_router
from routes import router, set_console

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    logger.info("=" * 70)
    logger.info("Cognitive Persuasion Engine console - Starting Up")
    logger.info("=" * 70)
    logger.info("Backend mode: %s", settings.backend_mode)
    logger.info("API base URL: %s", settings.api_base_url)

    console = Console(get_backend())
    set_console(console)

    if settings.backend_mode != "mock":
        user = await console.auth.restore()
        if user is not None:
            logger.info("Restored login for %s", user.email)

    logger.info("Console running on http://localhost:%d", settings.port)
    yield

    # Shutdown
    logger.info("Closing console...")
    await console.close()
    set_console(None)
    reset_backend()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Cognitive Persuasion Engine",
    description="Console for the multi-agent persuasion backend",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(dashboard_router)
app.include_router(router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=True)
