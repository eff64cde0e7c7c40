"""
Lift — helpers for turning collaborator calls into LazyCoroResult.

Re-exports from combinators.lift with checkout-specific additions.
"""

from __future__ import annotations

from collections.abc import Callable, Awaitable

from kungfu import LazyCoroResult, Result

from combinators import flow, TimeoutError
from combinators.lift import (
    pure,
    fail,
    catching_async,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout helpers
# ═══════════════════════════════════════════════════════════════════════════════

def from_result[T, E](result: Result[T, E]) -> LazyCoroResult[T, E]:
    """Lift a Result into LazyCoroResult."""
    async def _run() -> Result[T, E]:
        return result
    return LazyCoroResult(_run)


def bounded[T, E](
    call: Callable[[], Awaitable[T]],
    *,
    seconds: float,
    on_error: Callable[[Exception], E],
    on_timeout: Callable[[float], E],
) -> LazyCoroResult[T, E]:
    """
    Run one request/response call with a deadline.

    Exceptions raised by `call` go through `on_error`, an expired deadline
    goes through `on_timeout`. Cancellation is never caught.

    Example:
        summary = await bounded(
            lambda: pricing.initiate(destination_id),
            seconds=policy.validation_timeout.total_seconds(),
            on_error=classify,
            on_timeout=lambda s: ValidationError.unavailable(f"timed out after {s}s"),
        )
    """
    lazy = flow(catching_async(call, on_error=on_error)).timeout(seconds=seconds).compile()

    def widen(err: E | TimeoutError) -> E:
        if isinstance(err, TimeoutError):
            return on_timeout(err.seconds)
        return err

    return lazy.map_err(widen)


__all__ = (
    # From combinators.lift
    "pure",
    "fail",
    "catching_async",
    # Checkout additions
    "from_result",
    "bounded",
)
