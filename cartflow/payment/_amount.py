"""
Minor-unit conversion for the payment widget.

The widget takes integer amounts in the smallest currency unit
(paise, cents, fils). The model keeps Decimal major units.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

# ISO 4217 exponents that differ from 2
_EXPONENTS: dict[str, int] = {
    "BIF": 0,
    "CLP": 0,
    "DJF": 0,
    "GNF": 0,
    "ISK": 0,
    "JPY": 0,
    "KMF": 0,
    "KRW": 0,
    "PYG": 0,
    "RWF": 0,
    "UGX": 0,
    "VND": 0,
    "VUV": 0,
    "XAF": 0,
    "XOF": 0,
    "XPF": 0,
    "BHD": 3,
    "IQD": 3,
    "JOD": 3,
    "KWD": 3,
    "LYD": 3,
    "OMR": 3,
    "TND": 3,
}

DEFAULT_EXPONENT = 2


def currency_exponent(currency: str) -> int:
    return _EXPONENTS.get(currency.upper(), DEFAULT_EXPONENT)


def to_minor_units(amount: Decimal | int | str, currency: str) -> int:
    """
    Convert a major-unit amount to integer minor units.

    Example:
        to_minor_units(Decimal("1500.50"), "INR")  # 150050
        to_minor_units(Decimal("1500"), "JPY")     # 1500

    Raises ValueError for negative amounts and for amounts with more
    precision than the currency allows. Nothing is rounded.
    """
    if not currency or len(currency) != 3 or not currency.isalpha():
        raise ValueError(f"Invalid currency code: {currency!r}")
    if isinstance(amount, float):
        raise TypeError("Use Decimal for money, not float")
    try:
        value = Decimal(amount)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise ValueError(f"Negative amount: {amount}")

    minor = value.scaleb(currency_exponent(currency))
    if minor != minor.to_integral_value():
        raise ValueError(f"{amount} {currency.upper()} has a fractional minor unit")
    return int(minor)


__all__ = (
    "DEFAULT_EXPONENT",
    "currency_exponent",
    "to_minor_units",
)
