"""
HTTP — storefront gateway adapters built on httpx.

    from cartflow.http import ApiSettings, HttpCheckoutGateway

    settings = ApiSettings()                  # CARTFLOW_* environment
    async with HttpCheckoutGateway.from_settings(settings) as gateway:
        validator = CheckoutValidator(gateway, policy=settings.to_policy())
        guard = IdempotentCompletionGuard(gateway, policy=settings.to_policy())
        machine = CheckoutStateMachine(
            cart=cart,
            validator=validator,
            payment_orders=gateway,
            widget=widget,
            guard=guard,
            merchant_name=settings.merchant_name,
        )
"""

from cartflow.http._settings import ApiSettings
from cartflow.http._clients import (
    INITIATE_PATH,
    PAYMENT_ORDER_PATH,
    COMPLETE_PATH,
    HttpCheckoutGateway,
)

__all__ = (
    "ApiSettings",
    "INITIATE_PATH",
    "PAYMENT_ORDER_PATH",
    "COMPLETE_PATH",
    "HttpCheckoutGateway",
)
