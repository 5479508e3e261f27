import structlog
from fastapi import Request
from fastapi.responses import JSONResponse

from app.exceptions import AppError

logger = structlog.get_logger()


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.error("request_failed", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(
        status_code=500,
        content={"error": exc.message},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request_crashed", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app):
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
