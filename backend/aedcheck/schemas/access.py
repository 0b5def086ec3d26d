"""
AEDCheck Backend — Access Scope Schemas
========================================

What:  The caller's resolved scope as returned by GET /api/me/scope.
Why:   The frontend hides menus and filters the caller cannot use; it reads
       the same flags the backend enforces instead of re-deriving them.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class RegionRef(BaseModel):
    code: str
    label: Optional[str] = None
    long_label: Optional[str] = None


class ScopeResponse(BaseModel):
    user_id: Optional[str] = None
    role: Optional[str] = Field(default=None, description="Recognised role, null if unknown")
    role_label: Optional[str] = Field(default=None, description="Korean display name")
    access_level: str = Field(
        description="national, regional, local, assigned or none; none when nothing is visible"
    )
    region: Optional[RegionRef] = Field(
        default=None, description="Province restriction; null means nationwide"
    )
    city_restriction: Optional[str] = None
    device_allowlist: Optional[List[str]] = Field(
        default=None,
        description="Only these equipment serials are visible; empty list means none",
    )
    can_view_sensitive_data: bool
    can_perform_inspection: bool
    can_approve: bool
    can_export_data: bool
    max_result_limit: int
    can_manage_schedules: bool = Field(
        description="May assign devices to temporary inspectors"
    )
    can_manage_users: bool = Field(description="May approve or reject user accounts")
