"""
Operator input coercion

Every amount, percentage and count typed by an operator goes through these
helpers. They never raise: anything that cannot be read as a number is 0.
"""

import math
from typing import Any


def to_number(value: Any) -> float:
    """
    Coerce operator input to a float
    
    Accepts numbers, numeric strings and strings using a decimal comma
    ("12,50"). Blank, non-numeric, NaN and infinite input all become 0.
    
    Args:
        value: Raw input value
        
    Returns:
        Parsed float, or 0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(" ", "").replace(" ", "")
        if not text:
            return 0.0
        text = text.replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
    
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_count(value: Any) -> int:
    """Coerce operator input to an integer count, truncating decimals"""
    return int(to_number(value))
