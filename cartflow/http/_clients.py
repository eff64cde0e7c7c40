"""HTTP adapters for the storefront gateway's checkout endpoints.

One ``httpx.AsyncClient`` backs all three checkout collaborators:

- ``initiate``: pricing/validation (``POST /api/v1/checkout/initiate``)
- ``create_order``: gateway payment order (``POST /api/v1/payment/order/create``)
- ``complete_order``: order completion (``POST /api/v1/checkout/complete``)

Business failures are raised as ``ValidationRejected`` / ``CompletionRejected``
with a classified kind. Transport errors and 5xx are raised untouched so the
calling component classifies them as UNAVAILABLE / TRANSIENT. Nothing here
retries: one user action, one request.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

import httpx

from cartflow._logging import CHECKOUT_ID_CTX
from cartflow._types import AuthToken, DestinationId
from cartflow.domain import OrderConfirmation, OrderSummary, PaymentOrder
from cartflow.http._settings import ApiSettings
from cartflow.http._wire import (
    CheckoutSummarySchema,
    CompleteCheckoutRequest,
    CompletionSchema,
    CreatePaymentOrderRequest,
    ErrorSchema,
    InitiateCheckoutRequest,
    PaymentOrderSchema,
)
from cartflow.idempotency import CompletionErrorKind, CompletionRejected
from cartflow.validation import ValidationErrorKind, ValidationRejected

logger = logging.getLogger(__name__)

INITIATE_PATH = "/api/v1/checkout/initiate"
PAYMENT_ORDER_PATH = "/api/v1/payment/order/create"
COMPLETE_PATH = "/api/v1/checkout/complete"

CART_EMPTY_MARKER = "cart is empty"

_VALIDATION_REASONS: dict[str, ValidationErrorKind] = {
    "EMPTY_CART": ValidationErrorKind.EMPTY_CART,
    "ADDRESS_INVALID": ValidationErrorKind.ADDRESS_INVALID,
    "PRICE_OR_STOCK_CHANGED": ValidationErrorKind.STALE_PRICING,
}

_COMPLETION_REASONS: dict[str, CompletionErrorKind] = {
    "CART_EMPTIED_CONCURRENTLY": CompletionErrorKind.CART_EMPTIED_CONCURRENTLY,
    "EMPTY_CART": CompletionErrorKind.CART_EMPTIED_CONCURRENTLY,
    "AUTHORIZATION_REJECTED": CompletionErrorKind.AUTHORIZATION_REJECTED,
    "PAYMENT_VERIFICATION_FAILED": CompletionErrorKind.AUTHORIZATION_REJECTED,
}


# ---------------- Helpers ---------------- #


def _request_headers() -> dict[str, str]:
    """Propagate the checkout id for log correlation on the gateway."""
    checkout_id = CHECKOUT_ID_CTX.get()
    if checkout_id and checkout_id != "-":
        return {"X-Checkout-ID": checkout_id}
    return {}


def _payload(response: httpx.Response) -> Any:
    """Unwrap ``{"data": ...}`` envelopes."""
    body = response.json()
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        return body["data"]
    return body


def _error_body(response: httpx.Response) -> ErrorSchema:
    try:
        data = response.json()
    except ValueError:
        return ErrorSchema(message=response.text or None)
    if isinstance(data, dict):
        if isinstance(data.get("error"), dict):
            data = data["error"]
        return ErrorSchema.model_validate(data)
    return ErrorSchema(message=str(data))


def _is_business_error(response: httpx.Response) -> bool:
    return 400 <= response.status_code < 500


# ---------------- Gateway Client ---------------- #


class HttpCheckoutGateway:
    """Async client implementing PricingService, PaymentOrderService and
    OrderCompletionService over the storefront gateway.

    Args:
        client: Configured ``httpx.AsyncClient`` (base URL, auth, timeout).
            The gateway does not own a client passed in.
        default_currency: Currency assumed when a response omits one.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        owns_client: bool = False,
        default_currency: str = "INR",
    ) -> None:
        self._client = client
        self._owns_client = owns_client
        self._default_currency = default_currency

    @classmethod
    def from_settings(
        cls,
        settings: ApiSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HttpCheckoutGateway:
        headers = {"Content-Type": "application/json"}
        if settings.access_token:
            headers["Authorization"] = f"Bearer {settings.access_token}"
        client = httpx.AsyncClient(
            base_url=settings.base_url,
            headers=headers,
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )
        return cls(client, owns_client=True, default_currency=settings.default_currency)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpCheckoutGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _post(self, path: str, body: dict[str, Any]) -> httpx.Response:
        response = await self._client.post(path, json=body, headers=_request_headers())
        logger.debug("gateway call", extra={"path": path, "status": response.status_code})
        return response

    # ---------------- Pricing ---------------- #

    async def initiate(self, destination_id: DestinationId) -> OrderSummary:
        """Price the shopper's cart for a shipping address.

        Raises:
            ValidationRejected: For 4xx answers (reason-coded or address errors).
            httpx.HTTPError: For transport errors and 5xx.
        """
        request = InitiateCheckoutRequest(shipping_address_id=destination_id)
        response = await self._post(INITIATE_PATH, request.model_dump())

        if _is_business_error(response):
            raise self._validation_rejection(response)
        response.raise_for_status()
        summary = CheckoutSummarySchema.model_validate(_payload(response))
        return summary.to_domain(self._default_currency)

    @staticmethod
    def _validation_rejection(response: httpx.Response) -> Exception:
        error = _error_body(response)
        message = error.message or ""
        kind = _VALIDATION_REASONS.get((error.reason or "").upper())
        if kind is None and CART_EMPTY_MARKER in message.lower():
            kind = ValidationErrorKind.EMPTY_CART
        if kind is None and response.status_code in (403, 404, 422):
            kind = ValidationErrorKind.ADDRESS_INVALID
        if kind is None:
            return httpx.HTTPStatusError(
                f"Checkout validation failed with {response.status_code}",
                request=response.request,
                response=response,
            )
        return ValidationRejected(kind, message)

    # ---------------- Payment Order ---------------- #

    async def create_order(self, reference: str, amount: Decimal, currency: str) -> PaymentOrder:
        """Create the gateway order the payment widget binds to."""
        request = CreatePaymentOrderRequest(order_id=reference, amount=amount, currency=currency)
        response = await self._post(PAYMENT_ORDER_PATH, request.model_dump(mode="json"))
        response.raise_for_status()
        order = PaymentOrderSchema.model_validate(_payload(response))
        return order.to_domain(currency)

    # ---------------- Completion ---------------- #

    async def complete_order(self, destination_id: DestinationId, token: AuthToken) -> OrderConfirmation:
        """Create the order for an authorization token and clear the cart.

        Raises:
            CompletionRejected: CART_EMPTIED_CONCURRENTLY or AUTHORIZATION_REJECTED.
            httpx.HTTPError: Anything else, classified TRANSIENT by the guard.
        """
        request = CompleteCheckoutRequest(
            shipping_address_id=destination_id,
            payment_gateway_transaction_id=token,
        )
        response = await self._post(COMPLETE_PATH, request.model_dump())

        if _is_business_error(response):
            rejection = self._completion_rejection(response)
            if rejection is not None:
                raise rejection
        response.raise_for_status()
        return CompletionSchema.model_validate(_payload(response)).to_domain()

    @staticmethod
    def _completion_rejection(response: httpx.Response) -> CompletionRejected | None:
        error = _error_body(response)
        message = error.message or ""
        kind = _COMPLETION_REASONS.get((error.reason or "").upper())
        if kind is None and CART_EMPTY_MARKER in message.lower():
            kind = CompletionErrorKind.CART_EMPTIED_CONCURRENTLY
        if kind is None and response.status_code == 402:
            kind = CompletionErrorKind.AUTHORIZATION_REJECTED
        if kind is None:
            return None
        return CompletionRejected(kind, message)


__all__ = (
    "INITIATE_PATH",
    "PAYMENT_ORDER_PATH",
    "COMPLETE_PATH",
    "HttpCheckoutGateway",
)
