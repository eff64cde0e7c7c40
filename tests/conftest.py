"""Shared fakes for checkout tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal

import pytest

from cartflow.checkout import CheckoutListener, CheckoutStateMachine, CheckoutFault
from cartflow.domain import (
    CartSnapshot,
    LineItem,
    OrderConfirmation,
    OrderSummary,
    PaymentOrder,
)
from cartflow.idempotency import (
    CompletionErrorKind,
    CompletionRejected,
    IdempotentCompletionGuard,
    MemoryAttemptTable,
)
from cartflow.payment import WidgetCallbacks, WidgetLoadError, WidgetRequest
from cartflow.validation import CheckoutValidator, ValidationErrorKind, ValidationRejected


# ---------------- Builders ---------------- #


def make_cart(total: str = "1500", *, currency: str = "INR", quantity: int = 1) -> CartSnapshot:
    price = Decimal(total)
    items = (
        (LineItem("p1", "SKU-1", quantity, price, price * quantity, "Kurta"),)
        if quantity > 0
        else ()
    )
    return CartSnapshot(
        items=items,
        subtotal=price,
        discount_amount=Decimal("0"),
        tax_amount=Decimal("0"),
        shipping_cost=Decimal("0"),
        total=price,
        currency=currency,
    )


def make_summary(total: str = "1500", *, currency: str = "INR", is_valid: bool = True) -> OrderSummary:
    price = Decimal(total)
    return OrderSummary(
        items=(LineItem("p1", "SKU-1", 1, price, price, "Kurta"),),
        subtotal=price,
        discount_amount=Decimal("0"),
        tax_amount=Decimal("0"),
        shipping_cost=Decimal("0"),
        total=price,
        currency=currency,
        is_valid=is_valid,
        warnings=() if is_valid else ("Kurta is out of stock",),
    )


# ---------------- Collaborators ---------------- #


@dataclass(slots=True)
class FakeCart:
    snapshot: CartSnapshot = field(default_factory=make_cart)

    def current(self) -> CartSnapshot:
        return self.snapshot

    def empty(self) -> None:
        self.snapshot = CartSnapshot.empty()


@dataclass(slots=True)
class FakePricing:
    """Pricing service; per-destination summaries, rejections and gates."""

    summaries: dict[str, OrderSummary] = field(default_factory=dict)
    rejections: dict[str, ValidationErrorKind] = field(default_factory=dict)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    default: OrderSummary = field(default_factory=make_summary)

    async def initiate(self, destination_id: str) -> OrderSummary:
        self.calls.append(destination_id)
        gate = self.gates.get(destination_id)
        if gate is not None:
            await gate.wait()
        kind = self.rejections.get(destination_id)
        if kind is not None:
            raise ValidationRejected(kind, f"{kind.name} for {destination_id}")
        return self.summaries.get(destination_id, self.default)


@dataclass(slots=True)
class FakePaymentOrders:
    fail: bool = False
    calls: list[tuple[str, Decimal, str]] = field(default_factory=list)

    async def create_order(self, reference: str, amount: Decimal, currency: str) -> PaymentOrder:
        self.calls.append((reference, amount, currency))
        if self.fail:
            raise ConnectionError("payment gateway unreachable")
        return PaymentOrder(handle=f"order_{len(self.calls)}", amount=amount, currency=currency)


class FakeWidget:
    """
    Scripted payment widget.

    Behaviors, consumed one per open:
        "authorize"                 success with a fresh token
        "double"                    same token delivered twice in one tick
        "dismiss"                   dismissal
        "dismiss_then_authorize"    overlapping callbacks
        "fail_load"                 script load failure
        "manual"                    nothing; test fires callbacks itself
    """

    def __init__(self, *behaviors: str, default: str = "authorize") -> None:
        self.behaviors = list(behaviors)
        self.default = default
        self.requests: list[WidgetRequest] = []
        self.tokens: list[str] = []
        self.callbacks: WidgetCallbacks | None = None
        self._current = default

    def _next_token(self) -> str:
        token = f"pay_{len(self.tokens) + 1}"
        self.tokens.append(token)
        return token

    async def load(self) -> None:
        self._current = self.behaviors.pop(0) if self.behaviors else self.default
        if self._current == "fail_load":
            raise WidgetLoadError("Failed to load Razorpay script")

    def open(self, request: WidgetRequest, callbacks: WidgetCallbacks) -> None:
        self.requests.append(request)
        self.callbacks = callbacks
        loop = asyncio.get_running_loop()
        match self._current:
            case "authorize":
                loop.call_soon(callbacks.on_success, self._next_token())
            case "double":
                token = self._next_token()
                loop.call_soon(callbacks.on_success, token)
                loop.call_soon(callbacks.on_success, token)
            case "dismiss":
                loop.call_soon(callbacks.on_dismiss)
            case "dismiss_then_authorize":
                loop.call_soon(callbacks.on_dismiss)
                loop.call_soon(callbacks.on_success, self._next_token())
            case "manual":
                pass
            case other:
                raise AssertionError(f"unknown widget behavior {other!r}")


type CompletionOutcome = CompletionErrorKind | Exception | None


@dataclass(slots=True)
class FakeCompletion:
    """Order completion service; outcomes consumed one per call, None means success."""

    outcomes: list[CompletionOutcome] = field(default_factory=list)
    gate: asyncio.Event | None = None
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def complete_order(self, destination_id: str, token: str) -> OrderConfirmation:
        self.calls.append((destination_id, token))
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.outcomes.pop(0) if self.outcomes else None
        if isinstance(outcome, CompletionErrorKind):
            raise CompletionRejected(outcome)
        if isinstance(outcome, Exception):
            raise outcome
        n = len(self.calls)
        return OrderConfirmation(order_id=f"ord_{n}", order_number=f"ORD-{1000 + n}")


@dataclass(slots=True)
class RecordingListener(CheckoutListener):
    events: list[tuple[str, object]] = field(default_factory=list)

    def on_address_confirmed(self, destination_id: str) -> None:
        self.events.append(("address_confirmed", destination_id))

    def on_order_summary_ready(self, summary: OrderSummary) -> None:
        self.events.append(("summary_ready", summary))

    def on_error(self, fault: CheckoutFault) -> None:
        self.events.append(("error", fault))

    def on_order_confirmed(self, confirmation: OrderConfirmation) -> None:
        self.events.append(("confirmed", confirmation))

    def named(self, name: str) -> list[object]:
        return [payload for event, payload in self.events if event == name]


# ---------------- Harness ---------------- #


@dataclass(slots=True)
class Harness:
    cart: FakeCart
    pricing: FakePricing
    payment_orders: FakePaymentOrders
    widget: FakeWidget
    completion: FakeCompletion
    guard: IdempotentCompletionGuard
    table: MemoryAttemptTable
    listener: RecordingListener
    machine: CheckoutStateMachine

    def network_calls(self) -> int:
        return len(self.pricing.calls) + len(self.payment_orders.calls) + len(self.completion.calls)


type HarnessFactory = Callable[..., Harness]


def build_harness(
    *behaviors: str,
    completion: FakeCompletion | None = None,
    pricing: FakePricing | None = None,
    cart: FakeCart | None = None,
    merchant_name: str = "Storefront",
) -> Harness:
    cart = cart if cart is not None else FakeCart()
    pricing = pricing if pricing is not None else FakePricing()
    payment_orders = FakePaymentOrders()
    widget = FakeWidget(*behaviors)
    completion = completion if completion is not None else FakeCompletion()
    table = MemoryAttemptTable()
    guard = IdempotentCompletionGuard(completion, table=table)
    listener = RecordingListener()
    machine = CheckoutStateMachine(
        cart=cart,
        validator=CheckoutValidator(pricing),
        payment_orders=payment_orders,
        widget=widget,
        guard=guard,
        listener=listener,
        merchant_name=merchant_name,
    )
    return Harness(cart, pricing, payment_orders, widget, completion, guard, table, listener, machine)


@pytest.fixture
def harness() -> HarnessFactory:
    return build_harness
