"""
예외 → HTTP 응답 매핑

- InvalidInputError, 요청 형식 오류 → 400
- TransactionNotFoundError → 404
- ConcurrentModificationError → 409
- StoreFailureError → 500 (상세 정보 비노출, 내부 로그만 기록)
- 그 외 예외 → 500
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.errors import (
    ConcurrentModificationError,
    InvalidInputError,
    LedgerError,
    StoreFailureError,
    TransactionNotFoundError,
)

logger = logging.getLogger(__name__)


def _error_response(status_code: int, kind: str, details: list[str] | None = None) -> JSONResponse:
    content: dict[str, object] = {"error": kind}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _format_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return _error_response(400, exc.kind, exc.details)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [_format_validation_error(e) for e in exc.errors()]
    return _error_response(400, InvalidInputError.kind, details or ["Invalid request"])


async def not_found_handler(request: Request, exc: TransactionNotFoundError) -> JSONResponse:
    return _error_response(404, exc.kind, [str(exc)])


async def conflict_handler(request: Request, exc: ConcurrentModificationError) -> JSONResponse:
    return _error_response(409, exc.kind, [str(exc)])


async def store_failure_handler(request: Request, exc: StoreFailureError) -> JSONResponse:
    logger.error(
        f"저장소 오류: {request.method} {request.url.path}",
        extra={"error": str(exc)},
        exc_info=exc,
    )
    return _error_response(500, StoreFailureError.kind)


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    logger.error(
        f"처리되지 않은 도메인 오류: {request.method} {request.url.path}",
        extra={"error": str(exc)},
        exc_info=exc,
    )
    return _error_response(500, "InternalError")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"처리되지 않은 오류: {request.method} {request.url.path}",
        exc_info=exc,
    )
    return _error_response(500, "InternalError")


def register_exception_handlers(app: FastAPI) -> None:
    """FastAPI 앱에 예외 핸들러 등록"""
    app.add_exception_handler(InvalidInputError, invalid_input_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(TransactionNotFoundError, not_found_handler)
    app.add_exception_handler(ConcurrentModificationError, conflict_handler)
    app.add_exception_handler(StoreFailureError, store_failure_handler)
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
