from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.config import settings
from app.core.cache import build_cache_registry
from app.core.logging import configure_logging
from app.core.scheduler import start_scheduler, stop_scheduler
from app.endpoints import admin, analytics, institute, user, video, zone
from app.middleware.exceptions import global_exception_handler, http_exception_handler, validation_exception_handler
from app.middleware.logging import RequestLoggingMiddleware


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json"
    )
    app.state.caches = build_cache_registry()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(video.router, prefix="/videos", tags=["Videos"])
    app.include_router(user.router, prefix="/users", tags=["Users"])
    app.include_router(institute.router, prefix="/institutes", tags=["Institutes"])
    app.include_router(zone.router, prefix="/zones", tags=["Zones"])
    app.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
    app.include_router(admin.router, prefix="/admin", tags=["Admin"])

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {
            "status": "healthy",
            "version": settings.VERSION,
            "caches": {cache.name: len(cache) for cache in app.state.caches},
        }

    @app.on_event("startup")
    async def startup_event():
        start_scheduler(app.state.caches)

    @app.on_event("shutdown")
    async def shutdown_event():
        app.state.caches.destroy()
        stop_scheduler()

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
