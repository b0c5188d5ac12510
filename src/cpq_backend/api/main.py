import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse, Response

from cpq_backend.api.demo_api import router as demo_router
from cpq_backend.config.settings import Settings, get_settings
from cpq_backend.engine import Catalog, PricingEngine
from cpq_backend.errors import CPQError
from cpq_backend.services.quote_service import QuoteStore
from cpq_backend.utils.logger import setup_logging

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

FEATURES = {
    "enterprise_licenses": ["Starter (10 users)", "Growth (50 users)", "Scale (200 users)", "Unlimited"],
    "ai_addons": ["AI Assistant", "AI Analytics", "AI Security"],
    "discounts": {
        "volume": "20% at $50K, 30% at $100K annual value",
        "multi_year": "15% for 2+ years, 25% for 3+ years",
        "customer_tier": "10% for startup customers",
    },
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    logger.info("CPQ Backend starting on port %d...", settings.port)
    logger.info("Enterprise Licenses: Starter, Growth, Scale, Unlimited")
    logger.info("AI Add-ons: Assistant, Analytics, Security")
    logger.info("Discounts: Volume (20%/30%), Multi-year (15%/25%), Startup (10%)")
    yield
    logger.info("CPQ Backend stopped with %d quotes in memory", app.state.quotes.count)


def create_app(settings: Optional[Settings] = None, catalog: Optional[Catalog] = None) -> FastAPI:
    """Build the API with its own catalog, pricing engine and quote store."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.service_name,
        description="Demo Configure-Price-Quote backend",
        version=settings.version,
        lifespan=lifespan,
    )

    catalog = catalog or Catalog.load(settings)
    engine = PricingEngine(catalog)
    app.state.settings = settings
    app.state.catalog = catalog
    app.state.engine = engine
    app.state.quotes = QuoteStore(catalog, engine, ttl_days=settings.quote_ttl_days)

    # Permissive CORS on every response; any OPTIONS is a pre-flight
    @app.middleware("http")
    async def cors(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(CPQError)
    async def cpq_error_handler(request: Request, exc: CPQError):
        logger.debug("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.debug("%s %s -> 400 %s", request.method, request.url.path, exc.errors())
        return PlainTextResponse("Invalid request body", status_code=400)

    app.include_router(demo_router)

    @app.get("/")
    async def root():
        return {
            "service": settings.service_name,
            "version": settings.version,
            "status": "running",
            "features": FEATURES,
            "endpoints": {
                "products": "/api/v1/demo/products",
                "pricing": "/api/v1/demo/pricing?sku_id=sku-3&quantity=1&term_months=36",
                "quote": "/api/v1/demo/quote (POST)",
                "quotes": "/api/v1/demo/quotes",
                "health": "/health",
            },
        }

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        }

    return app


app = create_app()
