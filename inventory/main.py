from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging

from inventory.config import get_settings
from inventory.database import get_database
from inventory.notifier import ChangeNotifier
from inventory.services.provider import InventoryProvider
from inventory.api import products, health

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_provider() -> InventoryProvider:
    """Build the provider shared by every request."""
    return InventoryProvider(
        database=get_database(),
        notifier=ChangeNotifier(),
        authority=settings.CONTENT_AUTHORITY,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Starting up application...")

    provider = getattr(app.state, "provider", None) or create_provider()
    provider.open()
    app.state.provider = provider
    logger.info(f"Serving {provider.content_uri}")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    provider.close()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    A small inventory catalog for book-like products.

    - **Catalog**: list, create, edit and delete products
    - **Sale**: sell one unit of a product with a single call
    - **Sample data**: insert a dummy product or clear the catalog
    """,
    version="1.0.0",
    lifespan=lifespan
)

# Include API routers
app.include_router(health.router, prefix="/api/v1")
app.include_router(products.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health"
    }
