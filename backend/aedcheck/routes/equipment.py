"""
AEDCheck Backend — Equipment Route Handlers
============================================

What:  Read-only equipment endpoints: list, nearby, expiry summary, detail
       and institution-match scoring.
Why:   The registry view used by every role; what each caller sees is
       decided by the equipment service from the caller's scope.
How:   Extract query parameters, delegate to EquipmentService, set headers.

Caching:
    Lists and details are `private, no-store`: contact fields are masked
    per caller and must not be shared by an intermediate cache.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from aedcheck.database import get_db_session
from aedcheck.models.user_profile import UserProfile
from aedcheck.schemas.common import ErrorResponse
from aedcheck.schemas.equipment import (
    EquipmentListResponse,
    EquipmentResponse,
    ExpirySummaryResponse,
    InstitutionMatchResponse,
    NearbyEquipmentResponse,
)
from aedcheck.services.auth_service import get_current_profile
from aedcheck.services.cache import TTLCache
from aedcheck.services.equipment_service import equipment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/equipment", tags=["Equipment"])

_ERRORS = {
    400: {"description": "Invalid filter", "model": ErrorResponse},
    401: {"description": "Not authenticated", "model": ErrorResponse},
    403: {"description": "Outside the caller's scope", "model": ErrorResponse},
}


def get_summary_cache(request: Request) -> TTLCache:
    """The application's expiry-summary cache (created in create_app)."""
    return request.app.state.summary_cache


@router.get(
    "",
    response_model=EquipmentListResponse,
    responses=_ERRORS,
    summary="List equipment inside the caller's scope",
    description=(
        "Filters by address or by jurisdiction. sido/gugun may only narrow the "
        "caller's own region; requesting another region returns 403. `limit` is "
        "clamped to the role's result limit."
    ),
)
async def list_equipment(
    response: Response,
    criterion: str = Query(description="'address' or 'jurisdiction'"),
    sido: str | None = Query(default=None, description="Region code or label (DAE, 대구)"),
    gugun: str | None = Query(default=None, description="Gugun name or numeric city code"),
    category_1: str | None = Query(default=None, description="Installation category"),
    expiry: str | None = Query(
        default=None, description="'expired', 'expiring_30_days' or 'valid'"
    ),
    limit: int = Query(default=50, ge=1, le=10000),
    offset: int = Query(default=0, ge=0),
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> EquipmentListResponse:
    result = await equipment_service.list_equipment(
        db=db,
        profile=profile,
        criterion=criterion,
        sido=sido,
        gugun=gugun,
        category_1=category_1,
        expiry=expiry,
        limit=limit,
        offset=offset,
    )
    response.headers["X-Total-Count"] = str(result.total_count)
    response.headers["Cache-Control"] = "private, no-store"
    return result


@router.get(
    "/nearby",
    response_model=NearbyEquipmentResponse,
    responses=_ERRORS,
    summary="Equipment near a point, nearest first",
)
async def find_nearby(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    radius_km: float = Query(default=2.0, gt=0, le=50),
    limit: int = Query(default=50, ge=1, le=500),
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> NearbyEquipmentResponse:
    return await equipment_service.find_nearby(
        db=db,
        profile=profile,
        latitude=latitude,
        longitude=longitude,
        radius_km=radius_km,
        limit=limit,
    )


@router.get(
    "/summary",
    response_model=ExpirySummaryResponse,
    responses=_ERRORS,
    summary="Battery and patch expiry counts inside the caller's scope",
)
async def expiry_summary(
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
    cache: TTLCache = Depends(get_summary_cache),
) -> ExpirySummaryResponse:
    return await equipment_service.expiry_summary(db=db, profile=profile, cache=cache)


@router.get(
    "/{serial}",
    response_model=EquipmentResponse,
    responses={
        **_ERRORS,
        404: {"description": "Equipment not found", "model": ErrorResponse},
    },
    summary="One piece of equipment",
)
async def get_equipment(
    serial: str,
    response: Response,
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> EquipmentResponse:
    result = await equipment_service.get_equipment(db=db, profile=profile, serial=serial)
    response.headers["Cache-Control"] = "private, no-store"
    return result


@router.get(
    "/{serial}/institution-match",
    response_model=InstitutionMatchResponse,
    responses={
        **_ERRORS,
        404: {"description": "Equipment not found", "model": ErrorResponse},
    },
    summary="Score a candidate institution against the device's registered one",
)
async def match_institution(
    serial: str,
    name: str = Query(min_length=1, max_length=200, description="Candidate institution name"),
    address: str | None = Query(default=None, max_length=500),
    region: str | None = Query(default=None, description="Region code or label"),
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> InstitutionMatchResponse:
    return await equipment_service.match_institution(
        db=db, profile=profile, serial=serial, name=name, address=address, region=region
    )
