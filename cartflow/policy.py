"""
Checkout policy — deadlines for request/response collaborators.

The payment widget is user-paced and has no deadline.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta


def _span(seconds: float | None, delta: timedelta | None, default: timedelta) -> timedelta:
    if delta is not None:
        span = delta
    elif seconds is not None:
        span = timedelta(seconds=seconds)
    else:
        return default
    if span.total_seconds() <= 0:
        raise ValueError("timeout must be positive")
    return span


@dataclass(frozen=True, slots=True)
class CheckoutPolicy:
    """
    Checkout deadline configuration.

    Example:
        policy = (
            CheckoutPolicy()
            .with_validation_timeout(seconds=5)
            .with_completion_timeout(seconds=45)
        )

    Note: Immutable — each method returns new CheckoutPolicy.
    """

    validation_timeout: timedelta = timedelta(seconds=10)
    payment_order_timeout: timedelta = timedelta(seconds=10)
    completion_timeout: timedelta = timedelta(seconds=30)

    def with_validation_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> CheckoutPolicy:
        """Deadline for one pricing/validation call."""
        return replace(
            self,
            validation_timeout=_span(seconds, delta, self.validation_timeout),
        )

    def with_payment_order_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> CheckoutPolicy:
        """Deadline for creating the gateway order before the widget opens."""
        return replace(
            self,
            payment_order_timeout=_span(seconds, delta, self.payment_order_timeout),
        )

    def with_completion_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> CheckoutPolicy:
        """
        Deadline for one order completion call.

        A timed out completion is classified TRANSIENT and its token is
        never replayed.
        """
        return replace(
            self,
            completion_timeout=_span(seconds, delta, self.completion_timeout),
        )


__all__ = ("CheckoutPolicy",)
