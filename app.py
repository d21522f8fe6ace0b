"""Main FastAPI application entry point for NotifyDo."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from config.settings import settings
from config.database import database
from config.logging_utils import setup_logging, log_success
from api.errors import register_exception_handlers
from api.routers.users import router as users_router
from api.routers.tasks import router as tasks_router
from services.auth_service import create_email_index
from services.task_service import create_task_indexes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    setup_logging()
    await database.connect()
    log_success(f"Connected to MongoDB: {settings.DATABASE_NAME}", prefix="DB")
    await create_email_index()
    await create_task_indexes()
    logger.info("Database indexes created")
    yield
    await database.disconnect()
    logger.info("Disconnected from MongoDB")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Personal task management API",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(users_router)
app.include_router(tasks_router)


@app.get("/", response_class=PlainTextResponse)
async def root():
    """Plain-text banner for quick manual checks."""
    return f"{settings.APP_NAME} API is running"


@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    db_healthy = await database.health_check()
    return {
        "status": "healthy" if db_healthy else "unhealthy",
        "database": "connected" if db_healthy else "disconnected"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
