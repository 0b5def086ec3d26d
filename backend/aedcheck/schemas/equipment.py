"""
AEDCheck Backend — Equipment Schemas
=====================================

What:  API contracts for AED equipment lists, detail, nearby search and the
       expiry dashboard.
Why:   Responses are built from already-masked dicts, so the contact fields
       are plain strings here; whether they are masked depends on the
       caller's scope, not on the schema.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class EquipmentResponse(BaseModel):
    equipment_serial: str
    management_number: Optional[str] = None
    installation_institution: Optional[str] = None
    installation_address: Optional[str] = None
    installation_location_address: Optional[str] = None
    installation_position: Optional[str] = None
    sido: Optional[str] = None
    gugun: Optional[str] = None
    jurisdiction_health_center: Optional[str] = None
    jurisdiction_sido: Optional[str] = None
    jurisdiction_gugun: Optional[str] = None
    category_1: Optional[str] = None
    category_2: Optional[str] = None
    category_3: Optional[str] = None
    manufacturer: Optional[str] = None
    model_name: Optional[str] = None
    manager_name: Optional[str] = None
    manager_phone: Optional[str] = Field(default=None, description="Masked without sensitive access")
    manager_email: Optional[str] = Field(default=None, description="Masked without sensitive access")
    institution_contact: Optional[str] = Field(
        default=None, description="Masked without sensitive access"
    )
    battery_expiry_date: Optional[date] = None
    patch_expiry_date: Optional[date] = None
    last_inspection_date: Optional[date] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EquipmentListResponse(BaseModel):
    items: List[EquipmentResponse]
    total_count: int = Field(description="Rows matching scope and filters")
    limit: int = Field(description="Effective page size after clamping to the role limit")
    offset: int
    has_more: bool
    criterion: str = Field(description="address or jurisdiction")


class NearbyEquipmentItem(EquipmentResponse):
    distance_km: float = Field(description="Great-circle distance from the query point")


class NearbyEquipmentResponse(BaseModel):
    items: List[NearbyEquipmentItem]
    latitude: float
    longitude: float
    radius_km: float


class ExpiryCounts(BaseModel):
    expired: int = 0
    expiring_30_days: int = 0


class ExpirySummaryResponse(BaseModel):
    total: int
    battery: ExpiryCounts
    patch: ExpiryCounts
    reference_date: date
    cached: bool = Field(default=False, description="Served from the summary cache")


EXPIRY_FILTERS = ("expired", "expiring_30_days", "valid")


class MatchSignalResponse(BaseModel):
    name: str
    value: float = Field(description="0..100")
    weight: float


class InstitutionMatchResponse(BaseModel):
    equipment_serial: str
    registered_institution: Optional[str] = None
    candidate_name: str
    score: int = Field(description="Weighted 0..100 confidence")
    tier: str = Field(description="auto_match, manual_review or reject")
    name_confidence: str = Field(description="high, medium or low name similarity")
    matched_signals: int
    signals: List[MatchSignalResponse]
