"""
Checkout types — steps, faults and the listener surface.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum, auto
from typing import Protocol

from cartflow._types import DestinationId
from cartflow.domain import CartSnapshot, OrderConfirmation, OrderSummary, PaymentOrder
from cartflow.idempotency import CompletionError, CompletionErrorKind
from cartflow.payment import PaymentOutcomeError
from cartflow.validation import ValidationError, ValidationErrorKind


# ═══════════════════════════════════════════════════════════════════════════════
# Step
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutStep(Enum):
    """
    Checkout steps.

    Only moves forward, except an explicit back from REVIEW to ADDRESS.
    CONFIRMATION is terminal.
    """

    ADDRESS = auto()
    REVIEW = auto()
    CONFIRMATION = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Local Rejection
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutRejectionKind(Enum):
    WRONG_STEP = auto()  # Action not available on the current step
    BUSY = auto()  # A payment session or redelivered completion is pending
    SUPERSEDED = auto()  # Validation response for an abandoned request


@dataclass(frozen=True, slots=True)
class CheckoutRejection:
    """Action refused by the state machine without contacting anyone."""

    kind: CheckoutRejectionKind
    message: str


# ═══════════════════════════════════════════════════════════════════════════════
# Fault
# ═══════════════════════════════════════════════════════════════════════════════


type CheckoutError = ValidationError | PaymentOutcomeError | CompletionError | CheckoutRejection


class RetryOffer(Enum):
    """What the shopper is offered after a fault."""

    NONE = auto()
    TRY_AGAIN = auto()  # Place order again, new payment session
    REVALIDATE = auto()  # Confirm an address again
    GO_TO_CART = auto()  # Cart must change before checkout can continue


_VALIDATION_RETRY: dict[ValidationErrorKind, RetryOffer] = {
    ValidationErrorKind.EMPTY_CART: RetryOffer.GO_TO_CART,
    ValidationErrorKind.ADDRESS_INVALID: RetryOffer.REVALIDATE,
    ValidationErrorKind.STALE_PRICING: RetryOffer.GO_TO_CART,
    ValidationErrorKind.UNAVAILABLE: RetryOffer.REVALIDATE,
    ValidationErrorKind.NOT_VALIDATED: RetryOffer.REVALIDATE,
}

_COMPLETION_RETRY: dict[CompletionErrorKind, RetryOffer] = {
    CompletionErrorKind.IN_PROGRESS: RetryOffer.NONE,
    CompletionErrorKind.CART_EMPTIED_CONCURRENTLY: RetryOffer.GO_TO_CART,
    CompletionErrorKind.AUTHORIZATION_REJECTED: RetryOffer.TRY_AGAIN,
    CompletionErrorKind.TRANSIENT: RetryOffer.TRY_AGAIN,
}


@dataclass(frozen=True, slots=True)
class CheckoutFault:
    """
    User-facing error record.

    Note: silent faults (duplicate completion, busy clicks) are returned
    to the caller but never reach the listener.
    """

    error: CheckoutError
    retry: RetryOffer
    silent: bool = False

    @property
    def kind(self) -> Enum:
        return self.error.kind

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def can_retry(self) -> bool:
        return self.retry is not RetryOffer.NONE

    @classmethod
    def of(cls, error: CheckoutError) -> CheckoutFault:
        match error:
            case ValidationError(kind=kind):
                return cls(error, _VALIDATION_RETRY[kind])
            case PaymentOutcomeError():
                return cls(error, RetryOffer.TRY_AGAIN)
            case CompletionError(kind=kind):
                return cls(error, _COMPLETION_RETRY[kind], silent=error.is_silent)
            case CheckoutRejection():
                return cls(error, RetryOffer.NONE, silent=True)
        raise TypeError(f"Not a checkout error: {error!r}")


# ═══════════════════════════════════════════════════════════════════════════════
# Snapshot
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutState:
    """Read-only view of the state machine for rendering."""

    checkout_id: str
    step: CheckoutStep
    destination_id: DestinationId | None
    summary: OrderSummary | None
    confirmation: OrderConfirmation | None
    fault: CheckoutFault | None
    busy: bool
    validating: bool


# ═══════════════════════════════════════════════════════════════════════════════
# Collaborators
# ═══════════════════════════════════════════════════════════════════════════════


class CartSource(Protocol):
    """Latest cart snapshot held by the cart subsystem."""

    def current(self) -> CartSnapshot: ...


class PaymentOrderService(Protocol):
    """
    Creates the gateway order the widget binds the authorization to.

    `reference` is a client-side id for the order attempt.
    """

    async def create_order(
        self, reference: str, amount: Decimal, currency: str
    ) -> PaymentOrder: ...


class CheckoutListener:
    """
    Exit conditions exposed to the surrounding page.

    Subclass and override what you need; defaults do nothing.
    """

    def on_address_confirmed(self, destination_id: DestinationId) -> None:
        pass

    def on_order_summary_ready(self, summary: OrderSummary) -> None:
        pass

    def on_error(self, fault: CheckoutFault) -> None:
        pass

    def on_order_confirmed(self, confirmation: OrderConfirmation) -> None:
        pass


__all__ = (
    "CheckoutStep",
    "CheckoutRejectionKind",
    "CheckoutRejection",
    "CheckoutError",
    "RetryOffer",
    "CheckoutFault",
    "CheckoutState",
    "CartSource",
    "PaymentOrderService",
    "CheckoutListener",
)
