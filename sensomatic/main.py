"""Sens-O-Matic: coordinate spontaneous meetups with friends."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from sensomatic.core.config import settings
from sensomatic.core.errors import register_exception_handlers
from sensomatic.core.scheduler import shutdown_scheduler, start_scheduler
from sensomatic.routes import groups, pings, responses, users


def configure_logging() -> None:
    """Send all service logs to <log_dir>/latest.log."""
    log_dir = Path(settings.log_dir).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        filename=str(log_dir / "latest.log"),
    )


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the hangout sweeper for as long as the app is serving."""
    logger.info(f"Starting {settings.app_name}")
    start_scheduler()
    yield
    shutdown_scheduler()
    logger.info(f"{settings.app_name} shut down")


app = FastAPI(
    title=settings.app_name,
    description="API for coordinating spontaneous meetups with friends",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

for module in (users, groups, pings, responses):
    app.include_router(module.router)


@app.get("/", include_in_schema=False)
async def root(request: Request):
    """Send visitors to the interactive API docs."""
    return RedirectResponse(f"{request.scope.get('root_path', '')}/docs")


@app.get("/health")
async def health():
    return {"status": "healthy", "app": settings.app_name}


def run():
    """Serve the app with uvicorn on the configured host and port."""
    uvicorn.run(app, host=settings.host, port=settings.port)
