"""
Exact money arithmetic.

Amounts are decimal.Decimal values with two fractional digits.
Floats are refused outright: a value that went through binary
floating point can no longer be trusted to the cent.
"""

from decimal import Decimal, InvalidOperation

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """
    Convert a Decimal, int or numeric string to a cent-quantized Decimal.

    Raises ValueError for floats and anything that is not a finite
    number. Values finer than a cent are rejected rather than rounded.
    """
    if isinstance(value, float):
        raise ValueError("money values must not be floats")
    if isinstance(value, bool):
        raise ValueError("money values must not be booleans")

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if not amount.is_finite():
            raise ValueError(f"amount must be finite, got {amount}")
        quantized = amount.quantize(CENTS)
    except InvalidOperation:
        raise ValueError(f"not a representable amount: {value!r}") from None

    if quantized != amount:
        raise ValueError(f"amount has more than two decimal places: {amount}")

    return quantized
