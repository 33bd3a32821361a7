from fastapi import FastAPI
from fastapi.responses import JSONResponse

from reposync.main.exceptions import EXCEPTION_MAP
from reposync.main.logging import get_logger
from reposync.server.models.api import GeneralError

logger = get_logger(__name__)


def add_exception_handlers(app: FastAPI):
    for exception, (status_code, error_message, error_code) in EXCEPTION_MAP.items():

        def handler(
            request,
            exc,
            status_code=status_code,
            error_message=error_message,
            error_code=error_code,
        ):
            message = error_message or str(exc)

            if status_code >= 500:
                logger.warning(
                    f"{request.method} {request.url.path} failed: {exc}",
                    extra={"error_code": error_code, "status_code": status_code},
                )

            return JSONResponse(
                status_code=status_code,
                content=GeneralError(
                    message=message, reposync_error_code=error_code
                ).model_dump(),
            )

        app.add_exception_handler(exception, handler)
