import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.actions import ACTIONS_PATH_PREFIX, first_validation_message
from app.api.routes.actions_notifications import router as actions_notifications_router
from app.api.routes.actions_profile import router as actions_profile_router
from app.api.routes.actions_tournaments import router as actions_tournaments_router
from app.api.routes.actions_wallet import router as actions_wallet_router
from app.api.routes.health import router as health_router
from app.core.config import get_settings
from app.core.logging import configure_logging


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    if not request.url.path.startswith(ACTIONS_PATH_PREFIX):
        return await request_validation_exception_handler(request, exc)
    return JSONResponse(
        status_code=422,
        content={"success": False, "error": first_validation_message(exc), "data": None},
    )


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, renderer=settings.log_renderer)

    app = FastAPI(
        title="Arena Ace API",
        version="0.1.0",
        docs_url="/docs" if settings.docs_enabled else None,
        redoc_url="/redoc" if settings.docs_enabled else None,
        openapi_url="/openapi.json" if settings.docs_enabled else None,
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(health_router)
    app.include_router(actions_tournaments_router)
    app.include_router(actions_wallet_router)
    app.include_router(actions_notifications_router)
    app.include_router(actions_profile_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
