import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from minter_service.app.core.errors import ErrorCode, ErrorMessage, mint_timeout, upstream_error
from minter_service.app.core.exceptions import AppException
from minter_service.app.services.handcash_service import HandCashError
from minter_service.app.services.mint_service import MintTimeoutError

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": {
                "code": exc.code,
                "message": exc.message,
                "details": exc.details
            }
        }
    )


async def handcash_error_handler(request: Request, exc: HandCashError):
    logger.error("%s %s: %s", request.method, request.url.path, exc)
    details = {"status": exc.status_code} if exc.status_code else None
    return await app_exception_handler(request, upstream_error(str(exc), details))


async def mint_timeout_handler(request: Request, exc: MintTimeoutError):
    logger.error("%s %s: %s", request.method, request.url.path, exc)
    return await app_exception_handler(request, mint_timeout(exc.order_id))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": ErrorMessage.INTERNAL_ERROR,
                "details": {}
            }
        }
    )
