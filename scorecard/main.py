import logging

from fastapi import FastAPI
from prometheus_client import make_asgi_app

from scorecard.api.v1.api import api_router
from scorecard.core.config import settings
from scorecard.core.logging import configure_logging

configure_logging()

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
    )
    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health")
    def health_check():
        return {"status": "healthy", "environment": settings.ENVIRONMENT.value, "version": settings.VERSION}

    if settings.METRICS_ENABLED:
        app.mount("/metrics", make_asgi_app())

    logger.info(f"🚀 [Startup] {settings.PROJECT_NAME} {settings.VERSION} ({settings.ENVIRONMENT.value})")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("scorecard.main:app", host="0.0.0.0", port=8000, reload=settings.is_development)
