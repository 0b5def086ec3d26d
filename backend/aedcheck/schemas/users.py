"""
AEDCheck Backend — User Administration Schemas
===============================================

What:  Contracts for account approval and device assignment.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class UserApproveRequest(BaseModel):
    role: Optional[str] = Field(
        default=None,
        description="Role to grant, e.g. local_admin. Omitted: the default for the email domain",
    )
    region_code: Optional[str] = Field(
        default=None, description="Region code or label (대구, 대구광역시, DAE)"
    )
    district_code: Optional[str] = Field(
        default=None, description="Gugun name or numeric city code"
    )
    organization_id: Optional[uuid.UUID] = None


class DeviceAssignmentRequest(BaseModel):
    equipment_serials: List[str] = Field(
        description="Full replacement list; an empty list revokes every device",
        max_length=5000,
    )

    @field_validator("equipment_serials")
    @classmethod
    def strip_serials(cls, v: List[str]) -> List[str]:
        cleaned = []
        for serial in v:
            serial = serial.strip()
            if serial and serial not in cleaned:
                cleaned.append(serial)
        return cleaned


class UserProfileResponse(BaseModel):
    id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    role: str
    organization_id: Optional[uuid.UUID] = None
    region_code: Optional[str] = None
    district_code: Optional[str] = None
    account_type: str
    assigned_device_ids: List[str] = Field(default_factory=list)
    is_active: bool
    approved_at: Optional[datetime] = None
    approved_by_id: Optional[uuid.UUID] = None

    model_config = {"from_attributes": True}
