# Access-scope core package init
"""
AEDCheck Backend — Access-Scope Core
=====================================

What:  Pure functions deciding what a caller may see and change.
Why:   The only reusable logic in the backend; everything else consumes it.
How:   No I/O, no settings, no shared state. Inputs are profile snapshots,
       outputs are frozen dataclasses.

Module Inventory:
    - roles.py:                  Role enum, role policy table, email-domain rules
    - scope.py:                  resolve_access_scope() → AccessScope
    - filters.py:                build_equipment_filter() → EquipmentFilter
    - masking.py:                mask_sensitive_fields()
    - inspection_permissions.py: check_inspection_permission()
"""

from aedcheck.access.filters import EquipmentFilter, MatchCriterion, build_equipment_filter
from aedcheck.access.inspection_permissions import (
    InspectionPermission,
    check_inspection_permission,
)
from aedcheck.access.masking import mask_sensitive_fields
from aedcheck.access.roles import Role, parse_role
from aedcheck.access.scope import AccessScope, ProfileSnapshot, resolve_access_scope

__all__ = [
    "AccessScope",
    "EquipmentFilter",
    "InspectionPermission",
    "MatchCriterion",
    "ProfileSnapshot",
    "Role",
    "build_equipment_filter",
    "check_inspection_permission",
    "mask_sensitive_fields",
    "parse_role",
    "resolve_access_scope",
]
