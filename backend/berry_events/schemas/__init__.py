from .pricing import (
    AddOnRead,
    AddOnSuggestIn,
    AddOnSuggestOut,
    BookingDraft,
    BookingSelections,
    HoursEstimateIn,
    HoursEstimateOut,
    PaymentLineItem,
    PaymentPreviewIn,
    PaymentSnapshot,
    PricingQuoteIn,
    PricingResult,
    ServiceRead,
)
from .cart import (
    AddCartItemResponse,
    CartItemCreate,
    CartItemRead,
    CartItemUpdate,
    CartRead,
)
from .order import (
    CheckoutIn,
    CheckoutResponse,
    OrderItemRead,
    OrderRead,
    OrderStatusUpdate,
    PaymentDescriptor,
)
