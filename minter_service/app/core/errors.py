from fastapi import status
from minter_service.app.core.exceptions import AppException


class ErrorCode:
    AUTH_UNAUTHORIZED = "AUTH_UNAUTHORIZED"

    USER_NOT_FOUND = "USER_NOT_FOUND"
    PAYMENT_REQUEST_NOT_FOUND = "PAYMENT_REQUEST_NOT_FOUND"

    WEBHOOK_SIGNATURE_INVALID = "WEBHOOK_SIGNATURE_INVALID"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    INVALID_ATTRIBUTES = "INVALID_ATTRIBUTES"

    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    MINT_TIMEOUT = "MINT_TIMEOUT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorMessage:
    UNAUTHORIZED = "Not authenticated"

    USER_NOT_FOUND = "User not found"
    PAYMENT_REQUEST_NOT_FOUND = "Payment request not found"

    WEBHOOK_SIGNATURE_INVALID = "Invalid webhook signature"
    INVALID_ATTRIBUTES = "attributes must be a JSON array of filters"

    UPSTREAM_ERROR = "HandCash request failed"
    MINT_TIMEOUT = "Mint order did not complete in time"
    INTERNAL_ERROR = "Internal server error"


def bad_request(code: str, message: str, details: dict | None = None):
    return AppException(
        status_code=status.HTTP_400_BAD_REQUEST,
        code=code,
        message=message,
        details=details
    )


def unauthorized(message: str = ErrorMessage.UNAUTHORIZED):
    return AppException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        code=ErrorCode.AUTH_UNAUTHORIZED,
        message=message
    )


def forbidden(code: str, message: str):
    return AppException(
        status_code=status.HTTP_403_FORBIDDEN,
        code=code,
        message=message
    )


def not_found(code: str, message: str):
    return AppException(
        status_code=status.HTTP_404_NOT_FOUND,
        code=code,
        message=message
    )


def upstream_error(message: str = ErrorMessage.UPSTREAM_ERROR, details: dict | None = None):
    return AppException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ErrorCode.UPSTREAM_ERROR,
        message=message,
        details=details
    )


def mint_timeout(order_id: str):
    return AppException(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        code=ErrorCode.MINT_TIMEOUT,
        message=ErrorMessage.MINT_TIMEOUT,
        details={"orderId": order_id}
    )
