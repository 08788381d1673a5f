"""
ganttlink - dependency constraint resolution for Gantt chart drags.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ganttlink.exceptions import register_exception_handlers
from ganttlink.logging_config import get_logger, setup_logging
from ganttlink.routes import graph, resolve

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting ganttlink API...")
    yield
    logger.info("Shutting down ganttlink API...")


app = FastAPI(
    title="ganttlink",
    description="Stateless dependency constraint resolution for Gantt chart drags",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(resolve.router, prefix="/resolve", tags=["Resolve"])
app.include_router(graph.router, prefix="/graph", tags=["Graph"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
