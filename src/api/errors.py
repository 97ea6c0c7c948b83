"""Translate domain errors into HTTP responses.

Every error body has the same shape:
    {"error": {"code": "UNAUTHORIZED", "sub_code": "invalid_credentials", "message": "..."}}
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain.model.errors import DEFAULT_MESSAGES, DomainError, ErrorKind

logger = logging.getLogger(__name__)

VALIDATION_ERROR = "VALIDATION_ERROR"
UNAUTHORIZED = "UNAUTHORIZED"
CONFLICT = "CONFLICT"
NOT_FOUND = "NOT_FOUND"
INTERNAL_ERROR = "INTERNAL_ERROR"
SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

_400 = (status.HTTP_400_BAD_REQUEST, VALIDATION_ERROR)
_401 = (status.HTTP_401_UNAUTHORIZED, UNAUTHORIZED)
_409 = (status.HTTP_409_CONFLICT, CONFLICT)
_500 = (status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)

ERROR_MAP: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.INVALID_CREDENTIALS: _401,
    ErrorKind.SOCIAL_LOGIN_ONLY: _401,
    ErrorKind.EMAIL_ALREADY_EXISTS: _409,
    ErrorKind.INVALID_EMAIL_FORMAT: _400,
    ErrorKind.PASSWORD_TOO_SHORT: _400,
    ErrorKind.PASSWORD_MISSING_UPPER: _400,
    ErrorKind.PASSWORD_MISSING_LOWER: _400,
    ErrorKind.PASSWORD_MISSING_DIGIT: _400,
    ErrorKind.PASSWORD_MISSING_SYMBOL: _400,
    ErrorKind.CREATING_USER: _500,
    ErrorKind.TOKEN_GENERATION: _500,
    ErrorKind.INVALID_ACCESS_TOKEN: _401,
    ErrorKind.INVALID_REFRESH_TOKEN: _401,
    ErrorKind.INVALID_OAUTH_CODE: _400,
    ErrorKind.INVALID_STATE: _400,
    ErrorKind.OAUTH_EXCHANGE: _401,
    ErrorKind.DUPLICATE: _409,
    ErrorKind.NOT_FOUND: (status.HTTP_404_NOT_FOUND, NOT_FOUND),
    ErrorKind.PERSISTENCE: _500,
}

# Kinds rendered as another kind so the response never reveals account state
_PUBLIC_KIND = {
    ErrorKind.SOCIAL_LOGIN_ONLY: ErrorKind.INVALID_CREDENTIALS,
}


def error_body(code: str, sub_code: str | None, message: str) -> dict:
    return {"error": {"code": code, "sub_code": sub_code, "message": message}}


def to_response(exc: DomainError) -> JSONResponse:
    kind = _PUBLIC_KIND.get(exc.kind, exc.kind)
    status_code, code = ERROR_MAP.get(kind, _500)
    headers = {"WWW-Authenticate": "Bearer"} if kind is ErrorKind.INVALID_ACCESS_TOKEN else None
    return JSONResponse(
        status_code=status_code,
        content=error_body(code, kind.value, DEFAULT_MESSAGES[kind]),
        headers=headers,
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    response = to_response(exc)
    if response.status_code >= 500:
        logger.error(
            "Request failed",
            extra={"path": request.url.path, "kind": exc.kind.value},
            exc_info=exc,
        )
    return response


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(VALIDATION_ERROR, "invalid_request", f"Invalid request: {', '.join(fields)}"),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    codes = {
        status.HTTP_401_UNAUTHORIZED: UNAUTHORIZED,
        status.HTTP_404_NOT_FOUND: NOT_FOUND,
        status.HTTP_503_SERVICE_UNAVAILABLE: SERVICE_UNAVAILABLE,
    }
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(codes.get(exc.status_code, "HTTP_ERROR"), None, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(INTERNAL_ERROR, None, "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
