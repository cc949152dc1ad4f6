from typing import Dict, Optional
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


def error_response(
    message: str,
    field_errors: Dict[str, str],
    code: int = status.HTTP_422_UNPROCESSABLE_ENTITY,
) -> HTTPException:
    """Return an HTTPException with a consistent structure and log details."""
    logger.error("%s %s", message, field_errors)
    detail = {"message": message, "field_errors": field_errors}
    return HTTPException(status_code=code, detail=detail)


class BookingEngineError(Exception):
    """Base class for domain errors surfaced to API callers.

    ``to_http()`` renders the same ``{"message", "field_errors"}`` detail as
    :func:`error_response`, so routers can simply ``raise exc.to_http()`` or
    let the application-level handler translate it.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed"

    def __init__(
        self,
        message: Optional[str] = None,
        field_errors: Optional[Dict[str, str]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.field_errors = dict(field_errors or {})
        super().__init__(self.message)

    def to_http(self) -> HTTPException:
        return error_response(self.message, self.field_errors, self.status_code)


class ValidationError(BookingEngineError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Validation error"


class CartLimitExceeded(BookingEngineError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Cart limit reached. Maximum 3 services allowed per booking."


class EmptyCart(BookingEngineError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Cart is empty"


class MissingPaymentMethod(BookingEngineError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Payment method required"


class CartItemNotFound(BookingEngineError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Cart item not found"


class OrderNotFound(BookingEngineError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Order not found"


class DecryptionError(BookingEngineError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Unable to decrypt gate code"


class PersistenceError(BookingEngineError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to persist changes"
