"""
Product Catalog API - FastAPI Application

CRUD, search, filtering, pagination and statistics over product records.
Write endpoints are guarded by an optional static API key.
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
import logging
import time

from .config import Settings, settings as default_settings
from .db.init_db import create_engine, create_session_factory, describe_url, initialize_database
from .exceptions import CatalogError, classify_error
from .security import ApiKeyGate
from .api.products import router as products_router

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

ENDPOINTS = {
    "getAllProducts": "GET /api/products",
    "getProduct": "GET /api/products/:id",
    "createProduct": "POST /api/products",
    "updateProduct": "PUT /api/products/:id",
    "deleteProduct": "DELETE /api/products/:id",
    "searchProducts": "GET /api/products/search/name?q=query",
    "getStats": "GET /api/products/stats/summary",
}

AVAILABLE_ROUTES = [
    "GET /",
    "GET /api/products",
    "GET /api/products/:id",
    "POST /api/products",
    "PUT /api/products/:id",
    "DELETE /api/products/:id",
    "GET /api/products/search/name?q=query",
    "GET /api/products/stats/summary",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: create missing tables
    - Shutdown: dispose the connection pool
    """
    app_settings: Settings = app.state.settings

    logger.info("Starting product catalog API...")
    logger.info(f"Environment: {app_settings.environment}")
    logger.info(f"Record store: {describe_url(app_settings.database_url)}")

    try:
        await initialize_database(app.state.engine)
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    logger.info("Server startup complete")

    yield

    logger.info("Shutting down product catalog API...")
    await app.state.engine.dispose()


def _error_response(request: Request, exc: Exception) -> JSONResponse:
    """Single boundary where every handled exception becomes a response."""
    status_code, body = classify_error(exc, production=request.app.state.settings.is_production)

    if status_code >= 500:
        logger.error(f"Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    else:
        logger.warning(f"{request.method} {request.url.path} -> {status_code}: {body.get('error')}")

    return JSONResponse(status_code=status_code, content=body)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to values read from the environment

    Returns:
        App with its own engine, session factory and API key gate on app.state
    """
    settings = settings or default_settings

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    app = FastAPI(
        title="Product Catalog API",
        description="CRUD, search, filtering and statistics for a product catalog",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = create_engine(settings)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.api_key_gate = ApiKeyGate(settings.api_key)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        # Unhandled errors propagate past this point and become a 500
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(f"{request.method} {request.url.path} {status_code} {elapsed_ms:.1f}ms")

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        return _error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error_response(request, exc)

    @app.exception_handler(ValidationError)
    async def model_validation_handler(request: Request, exc: ValidationError):
        return _error_response(request, exc)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        return _error_response(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def route_not_found_handler(request: Request, exc: StarletteHTTPException):
        """Unmatched paths and methods get the route listing."""
        if exc.status_code not in (404, 405):
            return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
        return JSONResponse(
            status_code=404,
            content={
                "error": "Route not found",
                "message": f"The route {request.method} {request.url.path} does not exist on this server",
                "availableRoutes": AVAILABLE_ROUTES,
            }
        )

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception):
        return _error_response(request, exc)

    @app.get("/")
    async def root():
        """Service description."""
        return {
            "message": "Welcome to the Product API!",
            "endpoints": ENDPOINTS,
            "note": "API key required for POST, PUT, DELETE operations in x-api-key header",
        }

    app.include_router(products_router, prefix="/api/products", tags=["Products"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "catalog_api.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=not default_settings.is_production,
        log_level=default_settings.log_level.lower()
    )
