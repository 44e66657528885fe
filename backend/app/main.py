import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from tortoise.contrib.fastapi import register_tortoise

from app.core.config import settings
from app.api import health, sale_router
from app.api.errors import register_error_handlers
from app.workers.sale_closer import sale_closer_loop

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    worker_task = None
    if settings.auto_terminate:
        worker_task = asyncio.create_task(sale_closer_loop())
        logger.info("Started sale closer worker")
    yield
    if worker_task is not None:
        worker_task.cancel()
        try:
            await worker_task
        except asyncio.CancelledError:
            pass


app = FastAPI(
    title=settings.app_name,
    description="""
    StageSale API: staged token sale

    This API provides endpoints for:
    - Reading the current stage (price, hard cap, sold, discount) and the schedule
    - Allocating tokens against the current stage's hard cap (owner only)
    - Moving stage dates that have not been reached yet (owner only)
    - Terminating the sale and burning unsold tokens (owner only)
    - Transferring or renouncing ownership (owner only)

    ## Signed requests

    Owner-only endpoints take a JSON body with `issued_at` and two headers:
    `X-Caller` (base58 public key) and `X-Signature` (base58 ed25519
    signature of the raw body).
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers
app.include_router(health.router)
app.include_router(sale_router.router, prefix=settings.api_v1_prefix)


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "api": f"{settings.api_v1_prefix}/sale",
    }


# Register Tortoise ORM with FastAPI
register_tortoise(
    app,
    config=settings.tortoise_config,
    generate_schemas=True,
    add_exception_handlers=True,
)
