"""Number coercion helpers."""
from decimal import Decimal, InvalidOperation


def to_decimal(value, default='0') -> Decimal:
    """
    Coerce a stored or user-supplied number to Decimal.

    Floats go through str() so 0.1 stays 0.1. Empty values map to
    ``default``.

    Raises:
        ValueError: if the value is not numeric.
    """
    if value is None or value == '':
        return Decimal(default)
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f'Invalid number: {value!r}')
