"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cinetime_server import __version__
from cinetime_server.api import episodes_router, maintenance_router, watchlist_router
from cinetime_server.api.deps import init_services
from cinetime_server.core.config import settings
from cinetime_server.core.exceptions import (
    CatalogError,
    NotFoundError,
    StoreUnavailable,
    ValidationError,
)
from cinetime_server.database import init_db
from cinetime_server.services.consistency import ConsistencyEngine
from cinetime_server.services.episode_store import EpisodeStore
from cinetime_server.services.maintenance import MaintenanceScheduler
from cinetime_server.services.reconciler import OrphanReconciler
from cinetime_server.services.show_store import ShowStore
from cinetime_server.services.statistics import StatisticsService
from cinetime_server.services.tmdb_client import TMDBClient

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Service instances
episode_store = EpisodeStore()
show_store = ShowStore()
consistency_engine = ConsistencyEngine(episode_store, show_store)
reconciler = OrphanReconciler(episode_store, show_store)
statistics = StatisticsService(show_store, episode_store)
maintenance_scheduler = MaintenanceScheduler(reconciler)

# Episode writes recompute their show after committing
episode_store.set_recompute_hook(consistency_engine.recompute_show_safely)

# Initialize TMDB client if API key is configured
tmdb_client = None
if settings.tmdb_api_key:
    logger.info("TMDB API key configured, initializing client")
    tmdb_client = TMDBClient(settings.tmdb_api_key)
else:
    logger.warning("TMDB API key not configured, catalog metadata lookup will be disabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(f"Starting Cinetime Server v{__version__}")

    logger.info("Initializing database...")
    await init_db()

    init_services(
        episode_store,
        show_store,
        consistency_engine,
        reconciler,
        statistics,
        tmdb_client,
    )
    await maintenance_scheduler.start()

    logger.info(f"Server ready on {settings.host}:{settings.port}")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await maintenance_scheduler.stop()
    if tmdb_client:
        await tmdb_client.close()


app = FastAPI(
    title="Cinetime Server",
    description="Personal movie and TV watch tracking server",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(watchlist_router)
app.include_router(episodes_router)
app.include_router(maintenance_router)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
    logger.error(f"Store unavailable during {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.get("/")
async def root() -> dict:
    """Root endpoint with server info."""
    return {
        "name": "Cinetime Server",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "tmdb": tmdb_client is not None,
        "scheduled_reconciliation": maintenance_scheduler.enabled,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cinetime_server.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
