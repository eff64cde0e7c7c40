"""
Idempotency Example — one authorization token, at most one order.

Run: uv run python examples/idempotency_example.py
"""

import asyncio

from kungfu import Ok, Error

from cartflow import idempotency as I
from examples._infra import Storefront, banner, run


async def main() -> None:
    banner("Completion guard")
    storefront = Storefront()
    guard = I.IdempotentCompletionGuard(storefront)

    # 1. Three callbacks for the same token in the same tick
    print("\n1. Concurrent completions:")
    results = await asyncio.gather(*(guard.complete("pay_1", "addr-home") for _ in range(3)))
    for r in results:
        match r:
            case Ok(confirmation):
                print(f"   ok: {confirmation.order_number}")
            case Error(e):
                print(f"   {e.kind.name} (silent={e.is_silent})")

    # 2. Retry — answered from the attempt table
    print("\n2. Retry (same token):")
    match await guard.complete("pay_1", "addr-home"):
        case Ok(confirmation):
            print(f"   ok: {confirmation.order_number}, from table")
        case Error(e):
            print(f"   error: {e.message}")

    # 3. New token after the cart was cleared by the first order
    print("\n3. Different token:")
    match await guard.complete("pay_2", "addr-home"):
        case Ok(confirmation):
            print(f"   ok: {confirmation.order_number}")
        case Error(e):
            print(f"   {e.kind.name}: {e.message}")

    print(f"\nSummary: {storefront.completions} completion calls for 5 requests")


if __name__ == "__main__":
    run(main)
