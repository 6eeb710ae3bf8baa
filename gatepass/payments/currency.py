"""
Conversion between major currency units (what customers and the ledger see)
and minor units (what the gateway expects). Nothing else in the codebase
scales amounts.
"""

from decimal import Decimal, ROUND_HALF_UP

from gatepass.exceptions import ValidationError

MINOR_UNITS_PER_MAJOR = {
    "INR": 100,
    "USD": 100,
    "EUR": 100,
    "GBP": 100,
    "JPY": 1,
}


def minor_unit_factor(currency: str) -> int:
    try:
        return MINOR_UNITS_PER_MAJOR[currency.upper()]
    except KeyError:
        raise ValidationError(f"Unsupported currency: {currency}")


def to_minor_units(amount: Decimal, currency: str) -> int:
    """199.50 INR -> 19950 paise"""
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    scaled = (Decimal(amount) * minor_unit_factor(currency)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(scaled)


def from_minor_units(amount: int, currency: str) -> Decimal:
    factor = minor_unit_factor(currency)
    if factor == 1:
        return Decimal(amount)
    return (Decimal(amount) / factor).quantize(Decimal(1) / factor)
