"""
Checkout — the step machine tying validation, payment and completion together.

    from cartflow import checkout as CO

    machine = CO.CheckoutStateMachine(
        cart=cart,
        validator=V.CheckoutValidator(pricing),
        payment_orders=payment_orders,
        widget=widget,
        guard=I.IdempotentCompletionGuard(completion),
    )

    await machine.confirm_address(address_id)   # ADDRESS → REVIEW
    result = await machine.place_order()        # REVIEW → CONFIRMATION

    match result:
        case Ok(confirmation): ...
        case Error(fault) if fault.retry is CO.RetryOffer.GO_TO_CART: ...
        case Error(fault): ...
"""

from cartflow.checkout._types import (
    CheckoutStep,
    CheckoutRejectionKind,
    CheckoutRejection,
    CheckoutError,
    RetryOffer,
    CheckoutFault,
    CheckoutState,
    CartSource,
    PaymentOrderService,
    CheckoutListener,
)
from cartflow.checkout._machine import (
    SessionFactory,
    CheckoutStateMachine,
)

__all__ = (
    # Types
    "CheckoutStep",
    "CheckoutRejectionKind",
    "CheckoutRejection",
    "CheckoutError",
    "RetryOffer",
    "CheckoutFault",
    "CheckoutState",
    # Collaborators
    "CartSource",
    "PaymentOrderService",
    "CheckoutListener",
    # Machine
    "SessionFactory",
    "CheckoutStateMachine",
)
