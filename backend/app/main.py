"""
MinkenWorld Storefront - Backend API
Catalog listings, cart and shopping assistant for the MinkenWorld marketplace
"""
from contextlib import asynccontextmanager
from pathlib import Path
import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from app.api import cart, catalog, chat, messaging, products
from app.connectors.medusa_connector import get_connector
from app.core.config import settings
from app.core.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(f"Application startup: commerce backend at {settings.MEDUSA_BACKEND_URL}")
    if not settings.assistant_configured:
        logger.warning("ANTHROPIC_API_KEY not set; shopping assistant disabled")
    yield
    logger.info("Application shutdown")


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(products.router, prefix="/api/v1/products", tags=["Products"])
app.include_router(catalog.router)
app.include_router(cart.router)
app.include_router(messaging.router)

# Claude shopping assistant
app.include_router(chat.router)


@app.get("/")
async def root():
    """Root endpoint - API status"""
    return {
        "message": f"{settings.SITE_NAME} Storefront API",
        "status": "online",
        "version": settings.API_VERSION,
        "base_url": settings.BASE_URL
    }


@app.get("/health")
async def health():
    """Health check endpoint for monitoring - tests commerce backend connectivity"""
    backend = await get_connector().health()

    return {
        "status": "healthy" if backend.get("success") else "degraded",
        "service": "storefront-api",
        "version": settings.API_VERSION,
        "commerce_backend": backend,
        "assistant_configured": settings.assistant_configured,
        "messaging_configured": settings.messaging_configured
    }
