import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.core.exceptions import PublishError

logger = logging.getLogger(__name__)


async def publish_error_handler(request: Request, exc: PublishError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.status_code, "errors": [exc.message], "data": None}
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PublishError, publish_error_handler)
