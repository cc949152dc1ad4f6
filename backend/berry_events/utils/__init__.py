from .errors import (
    BookingEngineError,
    CartItemNotFound,
    CartLimitExceeded,
    DecryptionError,
    EmptyCart,
    MissingPaymentMethod,
    OrderNotFound,
    PersistenceError,
    ValidationError,
    error_response,
)
