"""
AEDCheck Backend — User Administration Routes
==============================================

What:  Account approval and device assignment for administrators.
Who:   master and emergency-center admins approve accounts; they and
       local_admin assign devices to temporary inspectors.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aedcheck.database import get_db_session
from aedcheck.models.user_profile import UserProfile
from aedcheck.schemas.common import ErrorResponse
from aedcheck.schemas.users import (
    DeviceAssignmentRequest,
    UserApproveRequest,
    UserProfileResponse,
)
from aedcheck.services.auth_service import get_current_profile
from aedcheck.services.user_service import user_service

router = APIRouter(prefix="/api/admin/users", tags=["Admin"])

_ERRORS = {
    400: {"description": "Invalid role, region or organization", "model": ErrorResponse},
    401: {"description": "Not authenticated", "model": ErrorResponse},
    403: {"description": "Not permitted", "model": ErrorResponse},
    404: {"description": "User, organization or equipment not found", "model": ErrorResponse},
}


@router.post(
    "/{user_id}/approve",
    response_model=UserProfileResponse,
    responses=_ERRORS,
    summary="Approve a pending account into a role",
)
async def approve_user(
    user_id: UUID,
    payload: UserApproveRequest,
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfileResponse:
    return await user_service.approve_user(
        db=db,
        approver=profile,
        user_id=user_id,
        role=payload.role,
        region_code=payload.region_code,
        district_code=payload.district_code,
        organization_id=payload.organization_id,
    )


@router.put(
    "/{user_id}/devices",
    response_model=UserProfileResponse,
    responses={**_ERRORS, 409: {"description": "Not a temporary inspector", "model": ErrorResponse}},
    summary="Replace a temporary inspector's device list",
)
async def assign_devices(
    user_id: UUID,
    payload: DeviceAssignmentRequest,
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfileResponse:
    return await user_service.assign_devices(
        db=db, approver=profile, user_id=user_id, serials=payload.equipment_serials
    )
