"""
Checkout domain — cart, priced summary, authorization and confirmation.

All objects are frozen: a new validation produces a new OrderSummary,
it never patches the previous one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from cartflow._types import AuthToken, Money


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LineItem:
    product_id: str
    sku: str
    quantity: int
    unit_price: Money
    total_price: Money
    name: str = ""


@dataclass(frozen=True, slots=True)
class CartSnapshot:
    """
    Cart contents and totals as last fetched.

    Read-only input for checkout. Totals are computed upstream and
    re-validated (never trusted) before payment.
    """

    items: tuple[LineItem, ...]
    subtotal: Money
    discount_amount: Money
    tax_amount: Money
    shipping_cost: Money
    total: Money
    currency: str = "INR"

    @property
    def is_empty(self) -> bool:
        return not self.items or all(item.quantity <= 0 for item in self.items)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @classmethod
    def empty(cls, currency: str = "INR") -> CartSnapshot:
        zero = Decimal("0")
        return cls(
            items=(),
            subtotal=zero,
            discount_amount=zero,
            tax_amount=zero,
            shipping_cost=zero,
            total=zero,
            currency=currency,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Priced Summary
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderSummary:
    """
    Result of one validation call.

    Note: total == subtotal - discount_amount + tax_amount + shipping_cost
    holds server-side. The client never recomputes it.
    """

    items: tuple[LineItem, ...]
    subtotal: Money
    discount_amount: Money
    tax_amount: Money
    shipping_cost: Money
    total: Money
    currency: str = "INR"
    is_valid: bool = True
    warnings: tuple[str, ...] = ()


# ═══════════════════════════════════════════════════════════════════════════════
# Payment
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentOrder:
    """Gateway order created before the widget opens."""

    handle: str
    amount: Money
    currency: str


@dataclass(frozen=True, slots=True)
class AuthorizationEvent:
    """
    One success callback from the payment widget.

    The widget transport may redeliver the same token; the token is the
    deduplication key.
    """

    token: AuthToken
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# ═══════════════════════════════════════════════════════════════════════════════
# Confirmation
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderConfirmation:
    """Terminal artifact of a checkout, held for display only."""

    order_id: str
    order_number: str
    payment_id: str | None = None
    total: Money | None = None
    currency: str | None = None


__all__ = (
    "LineItem",
    "CartSnapshot",
    "OrderSummary",
    "PaymentOrder",
    "AuthorizationEvent",
    "OrderConfirmation",
)
