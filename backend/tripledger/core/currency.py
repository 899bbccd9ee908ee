"""
Currency helpers for minor-unit amounts.

All money handled by the ledger is an integer count of the currency's
smallest denomination (cents for EUR/USD, whole yen for JPY).
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

# ISO 4217 currencies whose minor unit is not 1/100
CURRENCY_EXPONENTS = {
    "BIF": 0, "CLP": 0, "DJF": 0, "GNF": 0, "ISK": 0, "JPY": 0, "KMF": 0,
    "KRW": 0, "PYG": 0, "RWF": 0, "UGX": 0, "VND": 0, "VUV": 0, "XAF": 0,
    "XOF": 0, "XPF": 0,
    "BHD": 3, "IQD": 3, "JOD": 3, "KWD": 3, "LYD": 3, "OMR": 3, "TND": 3,
}
DEFAULT_EXPONENT = 2


def normalize_currency(currency: str) -> str:
    """Upper-case and strip a currency code."""
    return (currency or "").strip().upper()


def currency_exponent(currency: str) -> int:
    """Number of decimal places in the currency's minor unit."""
    return CURRENCY_EXPONENTS.get(normalize_currency(currency), DEFAULT_EXPONENT)


def to_minor_units(amount: Union[Decimal, float, int, str], currency: str) -> int:
    """Convert a major-unit amount (e.g. 12.34 EUR) to minor units (1234)."""
    factor = Decimal(10) ** currency_exponent(currency)
    value = Decimal(str(amount)) * factor
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int, currency: str) -> Decimal:
    """Convert minor units back to a major-unit Decimal."""
    exponent = currency_exponent(currency)
    return Decimal(amount).scaleb(-exponent)


def format_amount(amount: int, currency: str) -> str:
    """Render a minor-unit amount, e.g. ``format_amount(-1050, "EUR") == "-10.50 EUR"``."""
    exponent = currency_exponent(currency)
    major = from_minor_units(amount, currency)
    return f"{major:.{exponent}f} {normalize_currency(currency)}"
