from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
from .middleware import RequestLoggingMiddleware
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(
        status_code=exc.status_code, content={"error": error_dict}, headers=exc.headers
    )


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code} - {exc.base_error.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


def configure_logging(ApplicationConfig) -> None:
    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_lifespan(ApplicationConfig):
    """Start the session reaper with the app and stop it on shutdown"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        reaper = None
        if ApplicationConfig.SESSION_CLEANUP_ENABLED:
            from src.app.services.session_reaper import SessionReaper
            from src.depends import unit_of_work_scope

            reaper = SessionReaper(
                unit_of_work_scope,
                ApplicationConfig.CRON_SESSION_CLEANUP,
                revoked_retention=timedelta(days=ApplicationConfig.SESSION_REVOKED_RETENTION_DAYS),
                inactivity=timedelta(days=ApplicationConfig.SESSION_INACTIVITY_DAYS),
            )
            await reaper.start()
        else:
            logger.info("Session cleanup disabled")

        app.state.session_reaper = reaper
        try:
            yield
        finally:
            if reaper is not None:
                await reaper.stop()

    return lifespan


def create_app(ApplicationConfig) -> FastAPI:
    configure_logging(ApplicationConfig)

    app = FastAPI(
        title=f"{ApplicationConfig.APP_NAME} Auth API",
        version="0.1.0",
        lifespan=create_lifespan(ApplicationConfig),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if ApplicationConfig.ENABLE_LOGGING_MIDDLEWARE:
        app.add_middleware(RequestLoggingMiddleware)

    from src.api.routes import auth, health_check

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
