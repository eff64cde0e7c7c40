"""
Validation — price the cart for a destination before payment.

    from cartflow import validation as V

    validator = V.CheckoutValidator(pricing_service)
    match await validator.validate(address_id, cart):
        case Ok(summary): ...
        case Error(V.ValidationError(kind=V.ValidationErrorKind.EMPTY_CART)): ...
"""

from cartflow.validation._types import (
    ValidationErrorKind,
    ValidationError,
    ValidationRejected,
)
from cartflow.validation._validator import (
    PricingService,
    CheckoutValidator,
    classify,
)

__all__ = (
    "ValidationErrorKind",
    "ValidationError",
    "ValidationRejected",
    "PricingService",
    "CheckoutValidator",
    "classify",
)
