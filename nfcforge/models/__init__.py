from nfcforge.models.design import (
    ColorScheme,
    ColorSlot,
    Design,
    DesignElement,
    DesignPayload,
    DuplicateElementError,
    ElementKind,
    ElementNotFoundError,
    InvalidColorError,
    InvalidConfigurationError,
    Material,
    NfcChipType,
    UIState,
    new_element,
)
from nfcforge.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    FailureDetail,
    FailureKind,
    KnownError,
    OutcomeType,
    create_known_failure,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from nfcforge.models.order import (
    InvalidStatusTransitionError,
    Order,
    OrderData,
    OrderNotFoundError,
    OrderStatus,
    OrderValidationError,
    PricingMismatchError,
    ShippingInfo,
    ValidatedOrder,
    ValidationCheck,
)
from nfcforge.models.pricing import InvalidQuantityError, PricingDetails, PricingPayload

__all__ = [
    "ApiResponse",
    "ColorScheme",
    "ColorSlot",
    "Design",
    "DesignElement",
    "DesignPayload",
    "DuplicateElementError",
    "ElementKind",
    "ElementNotFoundError",
    "FailureDetail",
    "FailureKind",
    "InvalidColorError",
    "InvalidConfigurationError",
    "InvalidQuantityError",
    "InvalidStatusTransitionError",
    "KnownError",
    "Material",
    "NfcChipType",
    "Order",
    "OrderData",
    "OrderNotFoundError",
    "OrderStatus",
    "OrderValidationError",
    "OutcomeType",
    "PricingDetails",
    "PricingMismatchError",
    "PricingPayload",
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "ShippingInfo",
    "UIState",
    "ValidatedOrder",
    "ValidationCheck",
    "create_known_failure",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
    "new_element",
]
