"""
cartflow — checkout orchestration and idempotent payment completion.

    from cartflow import checkout as CO        # ADDRESS → REVIEW → CONFIRMATION
    from cartflow import validation as V       # Pricing before payment
    from cartflow import payment as P          # Single-fire payment widget sessions
    from cartflow import idempotency as I      # One token, at most one order
"""

from cartflow import lift
from cartflow import validation
from cartflow import payment
from cartflow import idempotency
from cartflow import checkout
from cartflow._types import (
    Lazy,
    Fallible,
    DestinationId,
    AuthToken,
    Money,
)
from cartflow._logging import configure_logging
from cartflow.domain import (
    LineItem,
    CartSnapshot,
    OrderSummary,
    PaymentOrder,
    AuthorizationEvent,
    OrderConfirmation,
)
from cartflow.policy import CheckoutPolicy

__version__ = "0.1.0"

__all__ = (
    "lift",
    "validation",
    "payment",
    "idempotency",
    "checkout",
    "Lazy",
    "Fallible",
    "DestinationId",
    "AuthToken",
    "Money",
    "configure_logging",
    "LineItem",
    "CartSnapshot",
    "OrderSummary",
    "PaymentOrder",
    "AuthorizationEvent",
    "OrderConfirmation",
    "CheckoutPolicy",
)
