"""
FastAPI application for the Dialoom booking marketplace
"""
import uvicorn
from collections import defaultdict
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from contextlib import asynccontextmanager

from app.config.redis import close_redis_pool
from app.config.settings import get_settings
from app.core.middleware import correlation_id_middleware, request_logging_middleware
from app.core.monitoring import health_router
from app.webhooks.router import webhook_router
from app.api.v1.router import api_v1_router
from app.utils.my_logging import setup_logging

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_logging()
    print("🚀 Dialoom API starting up...")
    print(f"💳 Stripe webhook at /api/stripe/webhook")
    print(f"❤️  Health check at /health")

    if settings.DEBUG:
        routes_by_tag = defaultdict(list)
        for route in app.routes:
            if isinstance(route, APIRoute):
                tag = route.tags[0] if route.tags else "other"
                for method in route.methods:
                    routes_by_tag[tag].append((method, route.path, route.name))

        print("\n" + "=" * 80)
        print("📋 REGISTERED ROUTES:")
        print("=" * 80)
        for tag, routes in sorted(routes_by_tag.items()):
            print(f"\n[{tag.upper()}]")
            for method, path, name in sorted(routes, key=lambda r: (r[1], r[0])):
                print(f"  {method:8} {path:50} ({name})")
        print("=" * 80 + "\n")

    yield

    # Shutdown
    await close_redis_pool()
    print("🛑 Dialoom API shutting down...")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title="Dialoom API",
        description="Booking, checkout and video calls for the Dialoom expert marketplace",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "PUT"],
        allow_headers=["*"],
    )

    # Registered last runs first: correlation id must be set before logging
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    # Include routers
    app.include_router(webhook_router, prefix="/api/stripe", tags=["webhooks"])
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api", tags=["api"])

    @app.get("/")
    async def root():
        return {
            "service": "Dialoom API",
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "api": "/api/",
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
