import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from directory_app.config import settings
from directory_app.api.v1 import entries, redirect
from directory_app.dependencies import get_diagnostics_queue
from directory_app.diagnostics.strategies import QueueStrategy
from directory_app.diagnostics.worker import DiagnosticsWorker
from directory_app.logging_config import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the diagnostics worker next to the API for the app's lifetime"""
    configure_logging()
    worker = None
    worker_task = None

    if settings.diagnostics_worker_enabled:
        queue = app.dependency_overrides.get(get_diagnostics_queue, get_diagnostics_queue)()
        worker = DiagnosticsWorker(queue=queue)
        worker_task = asyncio.create_task(worker.start())

    yield

    if worker_task is not None:
        worker.stop()
        worker_task.cancel()
        try:
            await worker_task
        except asyncio.CancelledError:
            pass


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="A link directory with hit counting built with FastAPI",
    debug=settings.debug,
    lifespan=lifespan,
)


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
async def health_check(diagnostics: QueueStrategy = Depends(get_diagnostics_queue)):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "store_backend": settings.store_backend,
        "pending_failures": await diagnostics.get_queue_length(settings.diagnostics_queue_name),
    }


######## Include routers
app.include_router(entries.router, prefix="/api/v1")
app.include_router(entries.categories_router, prefix="/api/v1")
app.include_router(redirect.router)
