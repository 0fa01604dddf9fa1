from typing import Any, Callable, Coroutine

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from src.platform.exception.exceptions import CustomBaseError, ErrorKind
from src.platform.logging.loguru_io import Logger

# Type alias for exception handlers (compatible with Starlette's expected signature)
ExceptionHandler = Callable[[Request, Exception], Coroutine[Any, Any, Response]]

_HTTP_STATUS_KIND: dict[int, ErrorKind] = {
    status.HTTP_401_UNAUTHORIZED: ErrorKind.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorKind.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorKind.NOT_FOUND,
}


def error_body(*, kind: str, message: str, **extra: Any) -> dict[str, Any]:
    return {'success': False, 'error': kind, 'message': message, **extra}


async def custom_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, CustomBaseError) else CustomBaseError(str(exc), 500)
    return JSONResponse(
        status_code=error.status_code,
        content=error_body(kind=error.kind, message=error.message, retryable=error.retryable),
    )


async def http_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = getattr(exc, 'status_code', status.HTTP_500_INTERNAL_SERVER_ERROR)
    kind = _HTTP_STATUS_KIND.get(status_code, ErrorKind.VALIDATION_FAILED)
    return JSONResponse(
        status_code=status_code,
        content=error_body(kind=kind, message=str(getattr(exc, 'detail', exc))),
    )


async def value_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(kind=ErrorKind.VALIDATION_FAILED, message=str(exc)),
    )


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, RequestValidationError) else RequestValidationError([])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            kind=ErrorKind.VALIDATION_FAILED,
            message='Request validation failed',
            detail=jsonable_encoder(error.errors()),
        ),
    )


async def general_500_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if not getattr(exc, '_has_logged', False):
        Logger.base.opt(exception=exc).error(
            f'💥 [HTTP] Unhandled {type(exc).__name__} on {request.method} {request.url.path}'
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(kind=ErrorKind.INTERNAL_ERROR, message='Internal server error'),
    )


# Exception handler mapping
EXCEPTION_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    CustomBaseError: custom_error_handler,
    StarletteHTTPException: http_error_handler,
    ValueError: value_error_handler,
    RequestValidationError: validation_error_handler,
    Exception: general_500_exception_handler,  # Catch-all for unhandled exceptions
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
