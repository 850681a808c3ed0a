"""
Stitcher API - Vertical Video Assembly
FastAPI Backend Entry Point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stitcher import __version__
from stitcher.api import jobs, uploads
from stitcher.api.deps import get_job_queue, get_job_store
from stitcher.core.config import settings
from stitcher.core.database import init_db
from stitcher.core.exceptions import QueueError, StoreError
from stitcher.core.logging_config import configure_logging
from stitcher.services.job_queue import JobQueue
from stitcher.services.job_store import JobStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    configure_logging()
    logger.info("Starting Stitcher API...")
    init_db()
    if not settings.USE_LOCAL_STORAGE and not settings.object_store_configured:
        logger.warning("Object storage env vars are missing. Uploads will fail until configured.")
    yield
    logger.info("Shutting down Stitcher API...")


app = FastAPI(
    title="Stitcher API",
    description="Asynchronous vertical video assembly from timed images and an audio track",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(jobs.router, prefix="/api/v1/jobs", tags=["Jobs"])
app.include_router(uploads.router, prefix="/api/v1", tags=["Uploads"])

# Paths used by existing clients
app.add_api_route(
    "/create-video",
    jobs.create_job,
    methods=["POST"],
    response_model=jobs.JobSubmitResponse,
    status_code=202,
    tags=["Jobs"],
)
app.add_api_route(
    "/job-status/{job_id}",
    jobs.get_job_status,
    methods=["GET"],
    response_model=jobs.JobStatusResponse,
    response_model_exclude_none=True,
    tags=["Jobs"],
)
app.add_api_route(
    "/upload-image",
    uploads.upload_image,
    methods=["POST"],
    response_model=uploads.UploadImageResponse,
    tags=["Uploads"],
)


@app.get("/health", tags=["Health"])
def health_check(
    store: JobStore = Depends(get_job_store),
    queue: JobQueue = Depends(get_job_queue),
):
    """
    Health check endpoint for monitoring.
    Pings the job database and Redis.
    """
    status = {
        "status": "healthy",
        "version": __version__,
        "services": {}
    }

    try:
        store.ping()
        status["services"]["database"] = "ok"
    except StoreError as e:
        status["services"]["database"] = f"error: {e}"
        status["status"] = "unhealthy"

    try:
        status["services"]["queue_depth"] = queue.length()
        status["services"]["redis"] = "ok"
    except QueueError as e:
        status["services"]["redis"] = f"error: {e}"
        status["status"] = "unhealthy"

    code = 200 if status["status"] == "healthy" else 500
    return JSONResponse(status_code=code, content=status)


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": "Stitcher API - Vertical Video Assembly",
        "docs": "/docs",
        "health": "/health",
    }


def run():
    """Serve the API with uvicorn on settings.PORT."""
    import uvicorn
    uvicorn.run("stitcher.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
