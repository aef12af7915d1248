"""
Text utilities for product fields read from spreadsheets and forms.
"""

import math
from typing import Any, Optional


def clean_text(value: Any, max_length: int = 255) -> Optional[str]:
    """
    Clean a raw cell or form value for storage.

    - Returns None for None, NaN, and empty/whitespace-only strings
    - Converts numbers to text ("500" for 500.0, so numeric specs survive)
    - Strips whitespace
    - Truncates to max length

    Args:
        value: Raw value (str, number, None, pandas NaN)
        max_length: Maximum characters to keep

    Returns:
        Cleaned text or None
    """
    if value is None:
        return None

    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            value = int(value)

    text = str(value).strip()

    if not text:
        return None

    # Truncate if too long
    if len(text) > max_length:
        text = text[:max_length]

    return text


def first_text(row: dict, keys: tuple[str, ...], default: str = "") -> str:
    """
    Return the first non-empty cleaned value among several column aliases.

    first_text({"货品名称": "", "name": "牛奶"}, ("货品名称", "name")) -> "牛奶"

    Args:
        row: Row mapping (column -> raw value)
        keys: Column names to try, in priority order
        default: Value when every alias is missing or blank

    Returns:
        Cleaned text or default
    """
    for key in keys:
        text = clean_text(row.get(key))
        if text is not None:
            return text
    return default
