"""
Application entry point with database pool and Redis lifecycle management.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from mentor_match.config import settings
from mentor_match.db.pool import db_pool
from mentor_match.features.mentorship.api.router import router as mentorship_router
from mentor_match.infrastructure.observability.logging import get_logger, log_request, setup_logging
from mentor_match.routes import health
from mentor_match.services.redis_client import fast_redis

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""
    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    startup_tasks = []

    try:
        logger.info("Initializing database pool")
        await db_pool.initialize()
        startup_tasks.append("database_pool")
    except Exception as e:
        logger.error("Failed to initialize services", error=str(e), completed_tasks=startup_tasks)
        raise

    # Redis only backs the recommendation lock; requests retry the connection lazily
    logger.info("Initializing Redis connection")
    try:
        await fast_redis.initialize()
        startup_tasks.append("redis")
    except RuntimeError as e:
        logger.warning("Redis unavailable at startup, continuing without it", error=str(e))

    logger.info("Startup complete", services=startup_tasks)

    yield

    logger.info("Application shutting down")

    # Redis first, then the pool (may have active connections)
    await fast_redis.close()
    await db_pool.close()

    logger.info("All services closed")


app = FastAPI(
    title="Mentor Match",
    description="Mentor recommendations and mentorship request lifecycle",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(mentorship_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.time() - start_time) * 1000, 2),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
