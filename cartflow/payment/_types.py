"""
Payment session types — normalized widget outcomes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

from cartflow.domain import AuthorizationEvent


# ═══════════════════════════════════════════════════════════════════════════════
# Authorization Outcome
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Authorized:
    event: AuthorizationEvent

    @property
    def token(self) -> str:
        return self.event.token


@dataclass(frozen=True, slots=True)
class Cancelled:
    """Shopper dismissed the widget. Not a failure."""


@dataclass(frozen=True, slots=True)
class LoadFailure:
    reason: str


type AuthorizationOutcome = Authorized | Cancelled | LoadFailure


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Outcome Error
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentOutcomeErrorKind(Enum):
    CANCELLED = auto()
    LOAD_FAILURE = auto()


@dataclass(frozen=True, slots=True)
class PaymentOutcomeError:
    """Non-fatal payment outcome; resumable by placing the order again."""

    kind: PaymentOutcomeErrorKind
    message: str

    @classmethod
    def from_outcome(cls, outcome: Cancelled | LoadFailure) -> PaymentOutcomeError:
        match outcome:
            case Cancelled():
                return cls(PaymentOutcomeErrorKind.CANCELLED, "Payment was cancelled")
            case LoadFailure(reason):
                return cls(PaymentOutcomeErrorKind.LOAD_FAILURE, reason)


# ═══════════════════════════════════════════════════════════════════════════════
# Widget Boundary
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ShopperPrefill:
    """Contact details shown pre-filled in the widget, taken from the chosen address."""

    name: str = ""
    email: str = ""
    contact: str = ""


@dataclass(frozen=True, slots=True)
class WidgetRequest:
    """What the widget is opened with. Amount is in minor units."""

    handle: str
    amount_minor_units: int
    currency: str
    description: str = ""
    merchant_name: str = ""
    prefill: ShopperPrefill = field(default_factory=ShopperPrefill)


@dataclass(frozen=True, slots=True)
class WidgetCallbacks:
    on_success: Callable[[str], None]
    on_dismiss: Callable[[], None]


class WidgetLoadError(Exception):
    """The widget's remote script could not be loaded."""


class PaymentWidget(Protocol):
    """
    Third-party payment widget.

    `load` raises before anything is shown. `open` shows the widget and
    returns; callbacks fire later, possibly more than once and in any order.
    """

    async def load(self) -> None: ...

    def open(self, request: WidgetRequest, callbacks: WidgetCallbacks) -> None: ...


__all__ = (
    "Authorized",
    "Cancelled",
    "LoadFailure",
    "AuthorizationOutcome",
    "PaymentOutcomeErrorKind",
    "PaymentOutcomeError",
    "ShopperPrefill",
    "WidgetRequest",
    "WidgetCallbacks",
    "WidgetLoadError",
    "PaymentWidget",
)
