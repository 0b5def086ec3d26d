"""
AEDCheck Backend — Inspection Schemas
======================================

What:  Request and response contracts for inspections and their approval.
Why:   Each returned inspection carries the caller's permission triple so the
       UI can show or hide edit/delete buttons without a second request.
"""

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

ITEM_STATUSES = ("good", "warning", "bad", "not_checked")
OVERALL_STATUSES = ("pass", "fail", "conditional")


def _check_choice(value: Optional[str], allowed, name: str) -> Optional[str]:
    if value is not None and value not in allowed:
        raise ValueError(f"Invalid {name} '{value}'. Must be one of: {allowed}")
    return value


class _InspectionResults(BaseModel):
    visual_status: Optional[str] = None
    battery_status: Optional[str] = None
    pad_status: Optional[str] = None
    operation_status: Optional[str] = None
    overall_status: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=5000)

    @field_validator("visual_status", "battery_status", "pad_status", "operation_status")
    @classmethod
    def validate_item_status(cls, v: Optional[str]) -> Optional[str]:
        return _check_choice(v, ITEM_STATUSES, "item status")

    @field_validator("overall_status")
    @classmethod
    def validate_overall_status(cls, v: Optional[str]) -> Optional[str]:
        return _check_choice(v, OVERALL_STATUSES, "overall_status")


class InspectionCreate(_InspectionResults):
    equipment_serial: str = Field(min_length=1, max_length=50)
    inspection_date: date


class InspectionUpdate(_InspectionResults):
    """Partial update; only fields present in the request body are applied."""

    inspection_date: Optional[date] = None


class InspectionRejectRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=2000, description="Shown to the inspector")

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("reason must not be blank")
        return v.strip()


class PermissionFlags(BaseModel):
    can_view: bool
    can_edit: bool
    can_delete: bool
    reason: Optional[str] = None


class InspectionResponse(BaseModel):
    id: uuid.UUID
    equipment_serial: str
    inspector_id: uuid.UUID
    inspection_date: date
    region_code: Optional[str] = None
    district_code: Optional[str] = None
    visual_status: Optional[str] = None
    battery_status: Optional[str] = None
    pad_status: Optional[str] = None
    operation_status: Optional[str] = None
    overall_status: Optional[str] = None
    notes: Optional[str] = None
    approval_status: str
    approved_by_id: Optional[uuid.UUID] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    permissions: PermissionFlags

    model_config = {"from_attributes": True}


class InspectionListResponse(BaseModel):
    items: List[InspectionResponse]
    total_count: int
    limit: int
    offset: int
    has_more: bool
