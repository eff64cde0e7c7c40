"""
Checkout Example — address, review, payment and confirmation.

Run: uv run python examples/checkout_example.py
"""

import logging

from kungfu import Ok, Error

from cartflow import configure_logging
from cartflow import checkout as CO
from cartflow import idempotency as I
from cartflow import payment as P
from cartflow import validation as V
from examples._infra import Cart, ScriptedWidget, Storefront, banner, run


SHOPPER = P.ShopperPrefill(name="Asha Rao", email="asha@example.in", contact="+919800000000")


# ═══════════════════════════════════════════════════════════════════════════════
# Page
# ═══════════════════════════════════════════════════════════════════════════════


class ConsolePage(CO.CheckoutListener):
    def on_order_summary_ready(self, summary) -> None:
        print(f"   review: {len(summary.items)} lines, total {summary.total} {summary.currency}")

    def on_error(self, fault: CO.CheckoutFault) -> None:
        print(f"   error: {fault.kind.name}, offer {fault.retry.name}: {fault.message}")

    def on_order_confirmed(self, confirmation) -> None:
        print(f"   confirmed: {confirmation.order_number}")


def build(*scripts: str) -> tuple[CO.CheckoutStateMachine, Storefront]:
    storefront = Storefront()
    machine = CO.CheckoutStateMachine(
        cart=Cart(),
        validator=V.CheckoutValidator(storefront),
        payment_orders=storefront,
        widget=ScriptedWidget(*scripts),
        guard=I.IdempotentCompletionGuard(storefront),
        listener=ConsolePage(),
        merchant_name="Kurta House",
    )
    return machine, storefront


# ═══════════════════════════════════════════════════════════════════════════════
# Demo
# ═══════════════════════════════════════════════════════════════════════════════


async def main() -> None:
    configure_logging(logging.WARNING)
    banner("Checkout")

    # 1. Shopper changes address, closes the widget once, then pays
    print("\n1. Back, cancel, pay:")
    machine, storefront = build("close", "pay")
    await machine.confirm_address("addr-office")
    machine.back()
    await machine.confirm_address("addr-home", prefill=SHOPPER)
    await machine.place_order()
    match await machine.place_order():
        case Ok(confirmation):
            print(f"   step={machine.step.name}, order={confirmation.order_id}")
        case Error(fault):
            print(f"   unexpected: {fault}")
    print(f"   completion calls: {storefront.completions}")

    # 2. Widget reports the same authorization twice
    print("\n2. Duplicate success callback:")
    machine, storefront = build("pay_twice")
    await machine.confirm_address("addr-home")
    await machine.place_order()
    await machine.drain()
    print(f"   step={machine.step.name}, completion calls: {storefront.completions} (one order!)")

    # 3. Clicking Place Order after confirmation does nothing
    print("\n3. Place order again:")
    before = storefront.completions
    await machine.place_order()
    print(f"   completion calls: {storefront.completions - before} new")


if __name__ == "__main__":
    run(main)
