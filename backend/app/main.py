import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import engine
from app.middleware.exceptions import register_exception_handlers
from app.routers import concierge, health, onboarding, workflows
from app.utils.cache import close_redis

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release the Redis pool and database engine on shutdown."""
    logger.info(f"Storefront onboarding API starting ({settings.environment})")
    try:
        yield
    finally:
        await close_redis()
        await engine.dispose()
        logger.info("Storefront onboarding API stopped")


app = FastAPI(
    title="Storefront Onboarding",
    description="AI-assisted store onboarding: workflow tracking and draft approval",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(onboarding.router, prefix="/api/onboarding", tags=["onboarding"])
app.include_router(concierge.router, prefix="/api/concierge", tags=["concierge"])
app.include_router(workflows.router, prefix="/api/workflows", tags=["workflows"])
