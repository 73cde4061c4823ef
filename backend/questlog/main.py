from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from questlog.api.v1.router import api_router
from questlog.core.config import Settings, get_settings
from questlog.core.logging import configure_logging
from questlog.db.init_db import init_db
from questlog.db.session import create_engine_and_sessionmaker

logger = structlog.get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    app_settings = settings or get_settings()
    configure_logging(level=app_settings.log_level, json_output=app_settings.log_json)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine, session_maker = create_engine_and_sessionmaker(
            app_settings.database_url,
            echo=app_settings.database_echo,
        )
        app.state.engine = engine
        app.state.session_maker = session_maker
        app.state.settings = app_settings
        await init_db(engine)
        logger.info(
            "api started",
            app=app_settings.app_name,
            environment=app_settings.environment,
        )
        yield
        await engine.dispose()

    app = FastAPI(title=app_settings.app_name, version=app_settings.app_version, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error", method=request.method, path=request.url.path)
        detail = str(exc) if app_settings.environment == "development" else "Internal server error"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": detail},
        )

    app.include_router(api_router, prefix=app_settings.api_v1_prefix)

    return app


app = create_app()
