from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import asyncio
import time
import uuid
from bloodbank.core.config import settings
from bloodbank.core.logging import logger
from bloodbank.core.exceptions import (
    DataStoreUnavailable,
    data_store_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler
)
from bloodbank.api.v1.api import api_router
from bloodbank.database.database import SessionLocal, init_db
from bloodbank.services.data_store import session_store
from bloodbank.services.inventory_feed import (
    InventoryChangeFeed,
    InventoryMonitor,
    InventoryPoller,
    log_stock_alerts,
)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Blood Bank Eligibility and Availability API",
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)

inventory_feed = InventoryChangeFeed()
app.state.inventory_monitor = None
app.state.inventory_poller = None
_poller_task = None

# Add exception handlers
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(DataStoreUnavailable, data_store_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    request_id = str(uuid.uuid4())

    # Add request ID to request state
    request.state.request_id = request_id

    logger.info(
        f"Request: {request.method} {request.url}",
        extra={"request_id": request_id}
    )

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(
        f"Response: {response.status_code} - {process_time:.3f}s",
        extra={"request_id": request_id}
    )

    response.headers["X-Request-ID"] = request_id
    return response

# Include API routes
app.include_router(api_router, prefix="/api/v1")

@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    global _poller_task

    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    if not settings.INVENTORY_FEED_ENABLED:
        logger.info("Inventory change feed disabled")
        return

    # ORM commits in this process fire the feed directly; the poller catches everyone else
    inventory_feed.attach(SessionLocal)
    monitor = InventoryMonitor(inventory_feed, session_store, on_refresh=log_stock_alerts)
    monitor.start()
    app.state.inventory_monitor = monitor
    logger.info(f"Inventory monitor started with {len(monitor.snapshot)} blood type(s)")

    poller = InventoryPoller(inventory_feed, session_store, settings.INVENTORY_POLL_INTERVAL)
    app.state.inventory_poller = poller
    _poller_task = asyncio.create_task(poller.start())

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown."""
    global _poller_task

    poller = app.state.inventory_poller
    if poller is not None:
        poller.stop()
        app.state.inventory_poller = None
    if _poller_task is not None:
        _poller_task.cancel()
        _poller_task = None

    monitor = app.state.inventory_monitor
    if monitor is not None:
        monitor.stop()
        app.state.inventory_monitor = None
    inventory_feed.detach()
    logger.info("Application shutting down")

@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "environment": settings.ENVIRONMENT,
        "docs": "/docs" if settings.DEBUG else "disabled"
    }

@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT
    }
