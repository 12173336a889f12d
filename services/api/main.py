import os
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from houseplan.exceptions import HousePlanError
from houseplan.logging_config import setup_logging
from houseplan.settings import get_settings
from services.api.exception_handlers import houseplan_exception_handler
from services.api.routes import router as v1_router


def create_app() -> FastAPI:
    settings = get_settings()

    # Setup structured logging; environment overrides the config file
    json_logging = os.getenv("JSON_LOGGING")
    log_file = os.getenv("LOG_FILE") or settings.logging.file
    setup_logging(
        level=os.getenv("LOG_LEVEL", settings.logging.level),
        json_format=json_logging.lower() in {"true", "1", "yes"} if json_logging else settings.logging.json_format,
        log_file=Path(log_file) if log_file else None,
    )

    app = FastAPI(
        title=settings.api.title,
        version="0.1.0",
        description="Plan normalization, validation, derived walls and roof geometry",
    )

    ui_origin = os.getenv("UI_ORIGIN")
    api_settings = settings.api.model_copy(update={"ui_origin": ui_origin}) if ui_origin else settings.api
    cors_origins = api_settings.cors_origins
    logger.info(f"CORS allowed origins: {cors_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.add_exception_handler(HousePlanError, houseplan_exception_handler)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with the same error body."""
        logger.exception("Unhandled exception", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": type(exc).__name__,
                "message": str(exc),
                "details": {},
            },
        )

    app.include_router(v1_router)

    return app


app = create_app()


__all__ = ["app", "create_app"]
