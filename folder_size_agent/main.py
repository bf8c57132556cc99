import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request

from .api import folder_size
from .dependencies import get_api_client, get_result_cache, get_scheduler, get_settings
from .logging_config import setup_logging
from .services.folder_size.result_cache import ResultCache
from .services.folder_size.scheduler import FolderSizeScheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    settings = get_settings()
    setup_logging(settings)

    config_info = settings.config_file_info
    logging.info(f"Configuration loaded from: {config_info['active_config_file']}")
    logging.info(f"Running on hostname: {config_info['hostname']}")

    logging.info("Folder Size Agent starting up...")
    logging.info(f"DSM appliance: {settings.dsm_url}")
    logging.info(
        f"Measuring {settings.shared_folder_path} against "
        f"{settings.max_size_tb}TB ({settings.max_size_bytes} bytes)"
    )

    scheduler = get_scheduler()
    await scheduler.start_scheduling()

    yield

    logging.info("Folder Size Agent shutting down...")
    await scheduler.stop_scheduling()
    get_api_client().close()
    logging.info("All background tasks stopped")


app = FastAPI(
    title="Folder Size Agent",
    description="Measures a Synology shared folder and serves its size for dashboards",
    version="0.1.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logging.info(
        f"Incoming request: {request.method} {request.url.path}",
        extra={
            "operation": "http_request",
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        },
    )

    response = await call_next(request)

    logging.info(
        f"Response: {response.status_code}",
        extra={
            "operation": "http_response",
            "status_code": response.status_code,
            "path": request.url.path,
        },
    )

    return response


app.include_router(folder_size.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Folder Size Agent is running"}


@app.get("/health")
async def health(
    result_cache: ResultCache = Depends(get_result_cache),
    scheduler: FolderSizeScheduler = Depends(get_scheduler),
):
    """Detailed health check including the last run."""
    return {
        "status": "healthy",
        "service": "folder-size-agent",
        "scheduler_running": scheduler.is_running,
        "run_in_progress": scheduler.run_in_progress,
        **result_cache.get_status(),
    }


def run() -> None:
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")


if __name__ == "__main__":
    run()
