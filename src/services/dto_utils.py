"""DTO utilities for service layer.

Provides standardized formatting functions for values placed on order
lists and change narratives, so prices and quantities render the same way
in every notification.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Union


def cost_to_string(value: Union[Decimal, float, int, str, None]) -> str:
    """
    Convert a cost value to a 2-decimal string format.

    Args:
        value: Cost value (Decimal, float, int, str, or None)

    Returns:
        String formatted as "12.34" (2 decimal places).
        Returns "0.00" if value is None.

    Examples:
        >>> cost_to_string(Decimal("12.345"))
        '12.35'
        >>> cost_to_string(12.3)
        '12.30'
        >>> cost_to_string(None)
        '0.00'
    """
    if value is None:
        return "0.00"

    decimal_value = Decimal(str(value))
    rounded = decimal_value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return str(rounded)


def quantity_to_string(value: Union[float, int, None]) -> str:
    """
    Render a quantity without a trailing ".0" for whole numbers.

    Args:
        value: Quantity (None and non-finite values render as "0")

    Returns:
        "700" for 700.0, "0.5" for 0.5, up to 3 decimal places otherwise

    Examples:
        >>> quantity_to_string(700.0)
        '700'
        >>> quantity_to_string(1.25)
        '1.25'
        >>> quantity_to_string(None)
        '0'
    """
    if value is None:
        return "0"
    number = float(value)
    if not math.isfinite(number):
        return "0"
    if number == int(number):
        return str(int(number))
    return f"{number:.3f}".rstrip("0").rstrip(".")
