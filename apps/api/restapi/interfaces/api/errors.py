import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from restapi.core.errors import AppError, InvalidArgument, NotFound

logger = logging.getLogger("api.errors")


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid')}" if loc else err.get("msg", "invalid"))
    return "; ".join(parts) or "invalid request"


def _from_http_exception(exc: StarletteHTTPException) -> AppError:
    # Routing failures (unknown path, wrong method) raised by the framework.
    kind = {400: InvalidArgument, 404: NotFound}.get(exc.status_code, AppError)
    err = kind(str(exc.detail), message=str(exc.detail).lower())
    err.status_code = exc.status_code
    return err


def to_app_error(exc: Exception) -> AppError:
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, RequestValidationError):
        return InvalidArgument(_describe_validation(exc), message="invalid request")
    if isinstance(exc, StarletteHTTPException):
        return _from_http_exception(exc)
    return AppError(
        "unexpected error, see server logs for details",
        message="internal error",
    )


def error_response(request: Request, exc: Exception) -> JSONResponse:
    err = to_app_error(exc)
    log_extra = {
        "method": request.method,
        "path": request.url.path,
        "code": err.code,
    }
    if err.status_code >= 500:
        if isinstance(exc, (AppError, StarletteHTTPException)):
            logger.error("request failed: %s", err.developer_message, extra=log_extra)
        else:
            logger.exception("unhandled error", extra=log_extra)
    else:
        logger.info("request rejected: %s", err.developer_message, extra=log_extra)
    return JSONResponse(
        status_code=err.status_code,
        content=err.to_dict(),
        headers=getattr(exc, "headers", None),
    )


class ErrorMappingRoute(APIRoute):
    """
    Route class that turns every failure raised by a handler into a JSON
    error body, so nothing reaches the server as an unhandled exception.
    """

    def get_route_handler(self) -> Callable:
        original = super().get_route_handler()

        async def handler(request: Request) -> Response:
            try:
                return await original(request)
            except StarletteHTTPException:
                raise
            except Exception as exc:
                return error_response(request, exc)

        return handler


def register_error_handlers(app: FastAPI) -> None:
    # Covers routes that are not built with ErrorMappingRoute.
    async def _handle(request: Request, exc: Exception) -> JSONResponse:
        return error_response(request, exc)

    app.add_exception_handler(AppError, _handle)
    app.add_exception_handler(RequestValidationError, _handle)
    app.add_exception_handler(StarletteHTTPException, _handle)
