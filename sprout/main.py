"""
Sprout Backend - Main Application

FastAPI application over a pluggable record store.
Seeds the demo user at startup when the store is empty.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sprout.config import settings
from sprout.api.routes import router
from sprout.api.dependencies import get_store
from sprout.database import init_db
from sprout.errors import register_exception_handlers
from sprout.services.seed import seed_demo_data

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def prepare_storage() -> None:
    """Create tables (SQL backend) and seed demo data."""
    if settings.STORAGE_BACKEND == "sql":
        logger.info("Initializing database...")
        init_db()

    if not settings.SEED_DEMO_DATA:
        return

    stores = get_store()
    store = next(stores)
    try:
        seed_demo_data(store)
    finally:
        stores.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: prepare storage on startup.
    """
    # Startup
    logger.info(f"Starting Sprout Backend ({settings.STORAGE_BACKEND} storage)...")

    try:
        prepare_storage()
        app.state.storage_ready = True
        logger.info("Storage initialized successfully")
    except Exception as e:
        logger.error(f"Storage initialization failed: {e}")
        app.state.storage_ready = False

    yield

    # Shutdown
    logger.info("Shutting down Sprout Backend...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    app = FastAPI(
        title=settings.API_TITLE,
        version=settings.API_VERSION,
        description="Gamified habit tracking: habits, XP, plant growth, goals and rewards",
        lifespan=lifespan,
    )

    # CORS middleware for frontend integration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include API routes
    app.include_router(router)

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": settings.API_TITLE,
            "version": settings.API_VERSION,
            "status": "running",
            "storage_backend": settings.STORAGE_BACKEND,
            "storage_ready": getattr(app.state, "storage_ready", False),
        }

    return app


app = create_app()
