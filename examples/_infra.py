"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from decimal import Decimal

from cartflow.domain import CartSnapshot, LineItem, OrderConfirmation, OrderSummary, PaymentOrder
from cartflow.idempotency import CompletionErrorKind, CompletionRejected
from cartflow.payment import WidgetCallbacks, WidgetRequest


# Catalog
KURTA = LineItem("p-101", "KRT-M-BLU", 2, Decimal("749.50"), Decimal("1499.00"), "Cotton kurta")
DUPATTA = LineItem("p-207", "DPT-RED", 1, Decimal("399.00"), Decimal("399.00"), "Silk dupatta")


def cart_of(*items: LineItem) -> CartSnapshot:
    subtotal = sum((item.total_price for item in items), Decimal("0"))
    return CartSnapshot(
        items=items,
        subtotal=subtotal,
        discount_amount=Decimal("0"),
        tax_amount=Decimal("0"),
        shipping_cost=Decimal("0"),
        total=subtotal,
    )


# Cart
@dataclass(slots=True)
class Cart:
    snapshot: CartSnapshot = field(default_factory=lambda: cart_of(KURTA, DUPATTA))

    def current(self) -> CartSnapshot:
        return self.snapshot


# Fake storefront backend
@dataclass(slots=True)
class Storefront:
    """Pricing, payment orders and order completion in one process."""

    shipping: dict[str, Decimal] = field(default_factory=lambda: {
        "addr-home": Decimal("0"),
        "addr-office": Decimal("79"),
    })
    cart_cleared: bool = False
    completions: int = 0
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    async def initiate(self, destination_id: str) -> OrderSummary:
        await asyncio.sleep(0.01)
        cart = Cart().current()
        shipping = self.shipping.get(destination_id, Decimal("99"))
        print(f"  [API] initiate checkout for {destination_id}")
        return OrderSummary(
            items=cart.items,
            subtotal=cart.subtotal,
            discount_amount=Decimal("0"),
            tax_amount=Decimal("0"),
            shipping_cost=shipping,
            total=cart.subtotal + shipping,
        )

    async def create_order(self, reference: str, amount: Decimal, currency: str) -> PaymentOrder:
        await asyncio.sleep(0.01)
        return PaymentOrder(handle=f"order_{next(self._ids)}", amount=amount, currency=currency)

    async def complete_order(self, destination_id: str, token: str) -> OrderConfirmation:
        self.completions += 1
        print(f"  [API] complete order with {token} (call #{self.completions})")
        await asyncio.sleep(0.05)
        if self.cart_cleared:
            raise CompletionRejected(CompletionErrorKind.CART_EMPTIED_CONCURRENTLY, "Cart is empty")
        self.cart_cleared = True
        n = next(self._ids)
        return OrderConfirmation(order_id=f"ord_{n}", order_number=f"SF-{20000 + n}")


# Payment widget
class ScriptedWidget:
    """Plays one script per opened session: 'pay', 'pay_twice' or 'close'."""

    def __init__(self, *scripts: str) -> None:
        self.scripts = list(scripts)
        self._tokens = itertools.count(1)

    async def load(self) -> None:
        await asyncio.sleep(0)

    def open(self, request: WidgetRequest, callbacks: WidgetCallbacks) -> None:
        script = self.scripts.pop(0) if self.scripts else "pay"
        print(
            f"  [widget] {request.merchant_name}: {request.amount_minor_units} {request.currency}"
            f" minor units for {request.prefill.name or 'guest'}, script={script}"
        )
        loop = asyncio.get_running_loop()
        token = f"pay_{next(self._tokens)}"
        match script:
            case "pay":
                loop.call_later(0.02, callbacks.on_success, token)
            case "pay_twice":
                loop.call_later(0.02, callbacks.on_success, token)
                loop.call_later(0.02, callbacks.on_success, token)
            case "close":
                loop.call_later(0.02, callbacks.on_dismiss)


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
