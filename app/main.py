from fastapi import FastAPI

from app.tcg.api import api_router
from app.tcg.core.config import settings
from app.tcg.core.errors import setup_exception_handlers
from app.tcg.core.logging import configure_logging
from app.tcg.middleware.observability import ObservabilityMiddleware
from app.tcg.middleware.trace import TraceIdMiddleware
from app.tcg.openapi import harden_openapi_schema


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.APP_NAME)
    app.add_middleware(TraceIdMiddleware)
    app.add_middleware(ObservabilityMiddleware)
    setup_exception_handlers(app)
    app.include_router(api_router)
    app.openapi = lambda: harden_openapi_schema(app)
    return app


app = create_app()
