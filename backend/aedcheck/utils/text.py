"""
AEDCheck Backend — String Normalization
========================================

What:  Trimming, whitespace collapsing and Korean phone-number formatting.
Why:   Source data mixes empty strings, stray whitespace and phone numbers
       with or without hyphens. Services normalize once on the way in.
"""

import re
from typing import Any, Optional

_WHITESPACE = re.compile(r"\s+")
_NON_DIGIT = re.compile(r"\D")


def normalize_string(value: Any) -> Optional[str]:
    """Trimmed string, or None for None / empty / whitespace-only input."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_whitespace(value: Any) -> Optional[str]:
    """Collapse internal runs of whitespace to one space."""
    text = normalize_string(value)
    if text is None:
        return None
    return _WHITESPACE.sub(" ", text)


def first_present(*values: Any) -> Optional[str]:
    """First value that is a non-blank string, e.g. address → fallback address."""
    for value in values:
        text = normalize_string(value)
        if text is not None:
            return text
    return None


def normalize_phone(value: Any) -> Optional[str]:
    """
    Format a Korean phone number with hyphens.

        "0212345678"    → "02-1234-5678"
        "021234567"     → "02-123-4567"
        "01012345678"   → "010-1234-5678"
        "0311234567"    → "031-123-4567"
        "15881234"      → "1588-1234"

    Returns None when the digit count fits none of these shapes.
    """
    text = normalize_string(value)
    if text is None:
        return None
    digits = _NON_DIGIT.sub("", text)

    if digits.startswith("02"):
        if len(digits) == 9:
            return f"02-{digits[2:5]}-{digits[5:]}"
        if len(digits) == 10:
            return f"02-{digits[2:6]}-{digits[6:]}"
        return None

    if len(digits) == 8 and digits[0] == "1":
        # Nationwide representative numbers (1588-xxxx)
        return f"{digits[:4]}-{digits[4:]}"

    if digits.startswith("0"):
        if len(digits) == 10:
            return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"
        if len(digits) == 11:
            return f"{digits[:3]}-{digits[3:7]}-{digits[7:]}"
    return None
