"""
Gantt - interactive Gantt chart engine with critical path scheduling.
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager

from gantt.config import get_settings
from gantt.engine import GanttEngine
from gantt.routes import tasks, dependencies, resources, chart
from gantt.exceptions import register_exception_handlers
from gantt.logging_config import setup_logging, get_logger

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting Gantt API...")
    app.state.engine = GanttEngine.from_settings(get_settings())
    logger.info("Engine initialized")
    yield
    logger.info("Shutting down Gantt API...")
    app.state.engine.close()


app = FastAPI(
    title="Gantt",
    description="Interactive Gantt chart engine with critical path scheduling",
    version="0.1.0",
    lifespan=lifespan,
)

# Register custom exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
app.include_router(dependencies.router, prefix="/dependencies", tags=["Dependencies"])
app.include_router(resources.router, prefix="/resources", tags=["Resources"])
app.include_router(chart.router, prefix="/chart", tags=["Chart"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
