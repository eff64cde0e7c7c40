"""
Validation types — why a cart could not be priced for a destination.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class ValidationErrorKind(Enum):
    """Kinds of validation errors."""

    EMPTY_CART = auto()
    ADDRESS_INVALID = auto()
    STALE_PRICING = auto()  # Price or stock changed, summary not valid
    UNAVAILABLE = auto()  # Service unreachable or timed out
    NOT_VALIDATED = auto()  # No held summary, confirm address again


@dataclass(frozen=True, slots=True)
class ValidationError:
    """
    Validation failure with an actionable message.

    Never retried automatically.
    """

    kind: ValidationErrorKind
    message: str
    warnings: tuple[str, ...] = ()

    @classmethod
    def empty_cart(cls) -> ValidationError:
        return cls(ValidationErrorKind.EMPTY_CART, "Your cart is empty")

    @classmethod
    def not_validated(cls) -> ValidationError:
        return cls(
            ValidationErrorKind.NOT_VALIDATED,
            "Order summary is missing. Please confirm your address again",
        )

    @classmethod
    def unavailable(cls, message: str) -> ValidationError:
        return cls(ValidationErrorKind.UNAVAILABLE, message)


class ValidationRejected(Exception):
    """
    Raised by a pricing service with a machine-readable reason.

    Anything else raised by the service is treated as UNAVAILABLE.
    """

    def __init__(self, kind: ValidationErrorKind, message: str = "") -> None:
        self.kind = kind
        self.message = message or kind.name.replace("_", " ").lower()
        super().__init__(self.message)


__all__ = (
    "ValidationErrorKind",
    "ValidationError",
    "ValidationRejected",
)
