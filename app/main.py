import logging

from app.config import LOG_LEVEL

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from contextlib import asynccontextmanager  # noqa: E402

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from app.api.base import api_router  # noqa: E402
from app.api.errors import register_exception_handlers  # noqa: E402
from app.config import ALLOWED_ORIGINS, NOTE_STORE_BACKEND  # noqa: E402
from app.db.session import dispose_engine  # noqa: E402
from app.middleware.rate_limit import create_rate_limiter  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the rate limiter (and DB pool, if any) for the life of the process"""
    rate_limiter = create_rate_limiter()
    await rate_limiter.start()
    app.state.rate_limiter = rate_limiter
    logger.info(f"Kloud Notes backend started (note store: {NOTE_STORE_BACKEND})")
    try:
        yield
    finally:
        await rate_limiter.close()
        await dispose_engine()
        logger.info("Kloud Notes backend stopped")


app = FastAPI(
    title="Kloud Notes API",
    description="Backend API for Kloud Notes - short-lived shareable notes with optional password protection",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials="*" not in ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include all API routes
app.include_router(api_router)


@app.get("/")
def read_root():
    return {
        "message": "Kloud Notes API",
        "docs": "/docs",
        "version": "1.0.0"
    }
