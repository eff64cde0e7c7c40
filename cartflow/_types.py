"""
Core types for cartflow.

Re-exports from kungfu + checkout-wide aliases.
"""

from __future__ import annotations

from decimal import Decimal

from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""

type Fallible[T, E] = Lazy[T, E]
"""Lazy computation that can fail with E."""

# ═══════════════════════════════════════════════════════════════════════════════
# Identifiers
# ═══════════════════════════════════════════════════════════════════════════════

type DestinationId = str
"""Id of a shopper-owned shipping address."""

type AuthToken = str
"""Opaque id of one successful payment authorization."""

type Money = Decimal
"""Amount in major currency units."""

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Type aliases
    "Lazy",
    "Fallible",
    "DestinationId",
    "AuthToken",
    "Money",
)
