"""Maps ledger/store domain errors to HTTP responses."""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse

from admissions.services.errors import ErrorCode, LedgerError

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.INVALID_GUEST_COUNT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ITEM_TYPE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.EVENT_CLOSED: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_REGISTERED: status.HTTP_404_NOT_FOUND,
    ErrorCode.ALREADY_CHECKED_IN: status.HTTP_409_CONFLICT,
    ErrorCode.CHECK_IN_NOT_OPEN: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_FAVORITED: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_FAVORITED: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_409_CONFLICT)
    headers = None
    if exc.retryable:
        logger.error("%s %s failed transiently: %s", request.method, request.url.path, exc)
        headers = {"Retry-After": "1"}
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": {"code": exc.code.value, "kind": exc.kind.value, "message": exc.message}},
        headers=headers,
    )


EXCEPTION_HANDLERS = {
    LedgerError: ledger_error_handler,
}


def register_exception_handlers(app) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
