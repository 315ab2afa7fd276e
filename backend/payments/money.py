"""
Monetary precision helpers.

Every stored or displayed amount passes through ``quantize`` so the order
snapshot, the voucher discount and the Stripe charge agree to the cent.

Key Principles:
1. NEVER use float for money
2. Always quantize Decimals BEFORE converting to minor units
3. Use ROUND_HALF_UP (commercial rounding, what customers see on receipts)
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from django.conf import settings

# Currency minor unit exponents (how many decimal places)
CURRENCY_EXPONENT = {
    "CHF": 2,  # Swiss Franc (rappen)
    "EUR": 2,  # Euro (cents)
    "USD": 2,  # United States Dollar (cents)
    "GBP": 2,  # British Pound (pence)
    "JPY": 0,  # Japanese Yen (no subunit)
}

ZERO = Decimal("0.00")


def default_currency() -> str:
    return getattr(settings, "ORDER_CURRENCY", "CHF")


def currency_exponent(currency: str) -> int:
    """
    Get the number of decimal places for a currency.

    Examples:
        >>> currency_exponent("CHF")
        2
        >>> currency_exponent("JPY")
        0
    """
    return CURRENCY_EXPONENT.get(currency.upper(), 2)


def quantize(amount: Union[Decimal, str, int, float], currency: str = None) -> Decimal:
    """
    Round to currency decimals, half away from zero.

    Examples:
        >>> quantize("10.125")
        Decimal('10.13')
        >>> quantize("10.124")
        Decimal('10.12')
    """
    if isinstance(amount, float):
        # Convert float to string first to avoid precision issues
        amount = str(amount)
    exponent = currency_exponent(currency or default_currency())
    return Decimal(amount).quantize(Decimal(10) ** -exponent, rounding=ROUND_HALF_UP)


def to_minor(amount: Union[Decimal, str, int, float], currency: str = None) -> int:
    """
    Convert to minor units (e.g., rappen) after quantization.

    Examples:
        >>> to_minor("42.50")
        4250
        >>> to_minor("10.125")
        1013
    """
    currency = currency or default_currency()
    quantized = quantize(amount, currency)
    return int((quantized * (10 ** currency_exponent(currency))).to_integral_value())


def from_minor(minor: int, currency: str = None) -> Decimal:
    """
    Convert from minor units to Decimal.

    Examples:
        >>> from_minor(4250)
        Decimal('42.5')
    """
    return Decimal(minor) / (10 ** currency_exponent(currency or default_currency()))
