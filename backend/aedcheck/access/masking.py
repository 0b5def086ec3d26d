"""
AEDCheck Backend — Sensitive Field Masking
===========================================

What:  Redacts phone numbers, email addresses and detailed addresses from
       equipment records when the caller's scope lacks sensitive-data access.
Why:   Health-center and inspector accounts see every AED in their area but
       must not see the personal contact details of each AED's manager.
How:   Pure functions over mappings. Masked output is always a new dict;
       input records are never mutated, so a caller can keep using the
       original list within the same request.

Patterns:
    phone    02-1234-5678           → 02-***-5678
             010-1234-5678          → 010-***-5678
             053-123-4567 (내선 12)  → 053-***-4567
    email    manager@example.com    → man***@example.com
    address  대구광역시 중구 동인동 1  → 대구광역시 중구 동인동 ***

Every masked value contains "***"; a value already containing it is
returned unchanged, which makes masking idempotent.
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from aedcheck.access.scope import AccessScope
from aedcheck.utils.text import normalize_phone

MASK = "***"

PHONE_FIELDS = ("manager_phone", "institution_contact", "contact_phone")
EMAIL_FIELDS = ("manager_email", "email")
ADDRESS_FIELDS = (
    "installation_address",
    "installation_location_address",
    "detailed_address",
)

# Area code, exchange and line number, optionally separated, not embedded
# in a longer digit run. Anything after the line number (an extension) is
# ignored.
_PHONE_PATTERN = re.compile(r"(?<!\d)0\d{1,2}[-.\s]?\d{3,4}[-.\s]?\d{4}(?!\d)")


def _is_masked(value: str) -> bool:
    return MASK in value


def mask_phone(value: Optional[str]) -> Optional[str]:
    if not value or _is_masked(value):
        return value
    match = _PHONE_PATTERN.search(value)
    formatted = normalize_phone(match.group(0)) if match else None
    if formatted is None:
        return MASK
    area, _, line = formatted.split("-")
    return f"{area}-{MASK}-{line}"


def mask_email(value: Optional[str]) -> Optional[str]:
    if not value or _is_masked(value):
        return value
    if "@" not in value:
        return value[:1] + MASK
    local, domain = value.rsplit("@", 1)
    keep = min(3, max(1, len(local) - 1))
    return f"{local[:keep]}{MASK}@{domain}"


def mask_address(value: Optional[str]) -> Optional[str]:
    if not value or _is_masked(value):
        return value
    tokens = value.split()
    if len(tokens) <= 1:
        return MASK
    return " ".join(tokens[:-1] + [MASK])


def mask_record(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a masked copy of a single record."""
    masked = dict(record)
    for name in PHONE_FIELDS:
        if isinstance(masked.get(name), str):
            masked[name] = mask_phone(masked[name])
    for name in EMAIL_FIELDS:
        if isinstance(masked.get(name), str):
            masked[name] = mask_email(masked[name])
    for name in ADDRESS_FIELDS:
        if isinstance(masked.get(name), str):
            masked[name] = mask_address(masked[name])
    return masked


def mask_sensitive_fields(
    records: Sequence[Mapping[str, Any]],
    scope: AccessScope,
) -> List[Any]:
    """
    Mask every record unless the scope may view sensitive data.

    With sensitive-data access the input list itself is returned.
    """
    if scope.can_view_sensitive_data:
        return records if isinstance(records, list) else list(records)
    return [mask_record(record) for record in records]
