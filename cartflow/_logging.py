"""
Logging setup — JSON records correlated by checkout id.

    from cartflow import configure_logging

    configure_logging(level=logging.DEBUG)

Every record carries `checkout_id` from the ContextVar bound by the state
machine, or "-" outside a checkout.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from pythonjsonlogger.json import JsonFormatter

CHECKOUT_ID_CTX: ContextVar[str] = ContextVar("checkout_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(checkout_id)s"


class CheckoutIdFilter(logging.Filter):
    """Attach `checkout_id` to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.checkout_id = CHECKOUT_ID_CTX.get()
        return True


@contextmanager
def bind_checkout_id(checkout_id: str) -> Iterator[None]:
    token = CHECKOUT_ID_CTX.set(checkout_id)
    try:
        yield
    finally:
        CHECKOUT_ID_CTX.reset(token)


def configure_logging(
    level: int = logging.INFO,
    *,
    handler: logging.Handler | None = None,
) -> logging.Logger:
    """
    Install a JSON handler on the `cartflow` logger.

    Idempotent: a second call only updates the level.
    """
    logger = logging.getLogger("cartflow")
    logger.setLevel(level)
    if not any(getattr(h, "_cartflow", False) for h in logger.handlers):
        h = handler if handler is not None else logging.StreamHandler()
        h.setFormatter(JsonFormatter(LOG_FORMAT))
        h.addFilter(CheckoutIdFilter())
        h._cartflow = True  # type: ignore[attr-defined]
        logger.addHandler(h)
    return logger


__all__ = (
    "CHECKOUT_ID_CTX",
    "LOG_FORMAT",
    "CheckoutIdFilter",
    "bind_checkout_id",
    "configure_logging",
)
