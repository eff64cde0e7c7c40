"""
Checkout validator — one pricing call per address confirmation.
"""

from __future__ import annotations

import logging
from typing import Protocol

from kungfu import LazyCoroResult, Result, Ok, Error

from cartflow import lift as L
from cartflow._types import DestinationId
from cartflow.domain import CartSnapshot, OrderSummary
from cartflow.policy import CheckoutPolicy
from cartflow.validation._types import (
    ValidationError,
    ValidationErrorKind,
    ValidationRejected,
)

logger = logging.getLogger(__name__)


class PricingService(Protocol):
    """
    Prices the shopper's server-side cart for a destination.

    Raises ValidationRejected with a reason; anything else is UNAVAILABLE.
    """

    async def initiate(self, destination_id: DestinationId) -> OrderSummary: ...


def classify(exc: Exception) -> ValidationError:
    if isinstance(exc, ValidationRejected):
        return ValidationError(exc.kind, exc.message)
    return ValidationError.unavailable(
        f"Could not validate checkout: {str(exc) or type(exc).__name__}"
    )


def _check_validity(summary: OrderSummary) -> Result[OrderSummary, ValidationError]:
    if summary.is_valid:
        return Ok(summary)
    return Error(
        ValidationError(
            ValidationErrorKind.STALE_PRICING,
            "Prices or stock changed. Please review your cart",
            summary.warnings,
        )
    )


class CheckoutValidator:
    """
    Produces a fresh OrderSummary or a ValidationError.

    Note: No caching. Every call is a new remote read, since price and
    stock can change between visits.
    """

    def __init__(self, service: PricingService, *, policy: CheckoutPolicy | None = None) -> None:
        self._service = service
        self._policy = policy if policy is not None else CheckoutPolicy()

    def validate(
        self, destination_id: DestinationId, cart: CartSnapshot
    ) -> LazyCoroResult[OrderSummary, ValidationError]:
        if cart.is_empty:
            logger.info("validation skipped for empty cart")
            return L.fail(ValidationError.empty_cart())

        seconds = self._policy.validation_timeout.total_seconds()

        async def execute() -> Result[OrderSummary, ValidationError]:
            logger.info("validating checkout", extra={"destination_id": destination_id})
            result = await L.bounded(
                lambda: self._service.initiate(destination_id),
                seconds=seconds,
                on_error=classify,
                on_timeout=lambda s: ValidationError.unavailable(
                    f"Checkout validation timed out after {s}s"
                ),
            )
            if isinstance(result, Ok):
                result = _check_validity(result.value)
            match result:
                case Error(err):
                    logger.warning(
                        "checkout validation failed",
                        extra={"destination_id": destination_id, "kind": err.kind.name},
                    )
            return result

        return LazyCoroResult(execute)


__all__ = (
    "PricingService",
    "CheckoutValidator",
    "classify",
)
