"""
Payment — single-fire wrapper around the third-party payment widget.

    from cartflow import payment as P

    session = P.PaymentSession(widget)
    outcome = await session.open(order.handle, order.amount, order.currency)

    match outcome:
        case P.Authorized(event): ...
        case P.Cancelled(): ...
        case P.LoadFailure(reason): ...
"""

from cartflow.payment._types import (
    Authorized,
    Cancelled,
    LoadFailure,
    AuthorizationOutcome,
    PaymentOutcomeErrorKind,
    PaymentOutcomeError,
    ShopperPrefill,
    WidgetRequest,
    WidgetCallbacks,
    WidgetLoadError,
    PaymentWidget,
)
from cartflow.payment._amount import (
    DEFAULT_EXPONENT,
    currency_exponent,
    to_minor_units,
)
from cartflow.payment._session import (
    LateAuthorizationHook,
    PaymentSession,
)

__all__ = (
    # Outcomes
    "Authorized",
    "Cancelled",
    "LoadFailure",
    "AuthorizationOutcome",
    "PaymentOutcomeErrorKind",
    "PaymentOutcomeError",
    # Widget boundary
    "ShopperPrefill",
    "WidgetRequest",
    "WidgetCallbacks",
    "WidgetLoadError",
    "PaymentWidget",
    # Amounts
    "DEFAULT_EXPONENT",
    "currency_exponent",
    "to_minor_units",
    # Session
    "LateAuthorizationHook",
    "PaymentSession",
)
