import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.database import init_db
from app.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
)
from app.logging_config import setup_logging
from app.routers.auth import router as auth_router
from app.routers.categories import router as categories_router
from app.routers.products import router as products_router
from app.routers.images import router as images_router
from app.routers.admin_categories import router as admin_categories_router
from app.routers.admin_products import router as admin_products_router
from app.routers.admin_migration import router as admin_migration_router

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, create tables and seed demo data on startup."""
    setup_logging(settings.log_level)
    logger.info(f"Starting up ({settings.environment})... Initializing database")
    init_db()
    if settings.seed_on_startup:
        from app.seed import run_seed
        run_seed()
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="Catalog API",
    description="Storefront and back-office catalog: categories, products, images",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error envelope
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include routers
app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(categories_router, prefix=settings.api_prefix)
app.include_router(products_router, prefix=settings.api_prefix)
app.include_router(admin_categories_router, prefix=settings.api_prefix)
app.include_router(admin_products_router, prefix=settings.api_prefix)
app.include_router(admin_migration_router, prefix=settings.api_prefix)
app.include_router(images_router)


@app.get("/")
def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": "Catalog API",
        "version": "1.0.0"
    }
