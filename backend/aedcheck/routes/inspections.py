"""
AEDCheck Backend — Inspection Route Handlers
=============================================

What:  Inspection CRUD, the approve / reject workflow and CSV export.
How:   Thin handlers over InspectionService. Every returned inspection
       carries the caller's permission triple (can_view/can_edit/can_delete).
"""

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from aedcheck.database import get_db_session
from aedcheck.models.user_profile import UserProfile
from aedcheck.schemas.common import ErrorResponse
from aedcheck.schemas.inspection import (
    InspectionCreate,
    InspectionListResponse,
    InspectionRejectRequest,
    InspectionResponse,
    InspectionUpdate,
)
from aedcheck.services.auth_service import get_current_profile
from aedcheck.services.inspection_service import inspection_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/inspections", tags=["Inspections"])

_ERRORS = {
    401: {"description": "Not authenticated", "model": ErrorResponse},
    403: {"description": "Not permitted", "model": ErrorResponse},
    404: {"description": "Inspection or equipment not found", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=InspectionListResponse,
    responses=_ERRORS,
    summary="List inspections of devices inside the caller's scope",
)
async def list_inspections(
    response: Response,
    approval_status: str | None = Query(
        default=None, description="submitted, approved, rejected or pending"
    ),
    equipment_serial: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=10000),
    offset: int = Query(default=0, ge=0),
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> InspectionListResponse:
    result = await inspection_service.list_inspections(
        db=db,
        profile=profile,
        approval_status=approval_status,
        limit=limit,
        offset=offset,
        equipment_serial=equipment_serial,
    )
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.post(
    "",
    response_model=InspectionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
    summary="Record a new inspection",
)
async def create_inspection(
    payload: InspectionCreate,
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> InspectionResponse:
    return await inspection_service.create_inspection(db=db, profile=profile, payload=payload)


# Declared before /{inspection_id} so "export" is not parsed as a UUID
@router.get(
    "/export",
    response_class=Response,
    responses={
        200: {"content": {"text/csv": {}}, "description": "CSV download"},
        **_ERRORS,
    },
    summary="Download in-scope inspections as CSV",
)
async def export_inspections(
    approval_status: str | None = Query(default=None),
    limit: int = Query(default=1000, ge=1, le=10000),
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    export = await inspection_service.export_inspections(
        db=db, profile=profile, approval_status=approval_status, limit=limit
    )
    filename = f"aed_inspections_{date.today().isoformat()}.csv"
    return Response(
        # BOM so spreadsheet apps read the Korean text as UTF-8
        content="\ufeff" + export.content,
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "private, no-store",
            "X-Applied-Limit": str(export.applied_limit),
            "X-Role-Max-Limit": str(export.max_result_limit),
            "X-Record-Count": str(export.record_count),
        },
    )


@router.get(
    "/{inspection_id}",
    response_model=InspectionResponse,
    responses=_ERRORS,
    summary="One inspection",
)
async def get_inspection(
    inspection_id: UUID,
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> InspectionResponse:
    return await inspection_service.get_inspection(
        db=db, profile=profile, inspection_id=inspection_id
    )


@router.patch(
    "/{inspection_id}",
    response_model=InspectionResponse,
    responses={**_ERRORS, 409: {"description": "Already approved", "model": ErrorResponse}},
    summary="Edit an inspection",
)
async def update_inspection(
    inspection_id: UUID,
    payload: InspectionUpdate,
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> InspectionResponse:
    return await inspection_service.update_inspection(
        db=db, profile=profile, inspection_id=inspection_id, payload=payload
    )


@router.delete(
    "/{inspection_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_ERRORS,
    summary="Delete an inspection (master only)",
)
async def delete_inspection(
    inspection_id: UUID,
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await inspection_service.delete_inspection(db=db, profile=profile, inspection_id=inspection_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{inspection_id}/approve",
    response_model=InspectionResponse,
    responses={**_ERRORS, 409: {"description": "Not awaiting review", "model": ErrorResponse}},
    summary="Approve a submitted inspection",
)
async def approve_inspection(
    inspection_id: UUID,
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> InspectionResponse:
    return await inspection_service.approve_inspection(
        db=db, profile=profile, inspection_id=inspection_id
    )


@router.post(
    "/{inspection_id}/reject",
    response_model=InspectionResponse,
    responses={**_ERRORS, 409: {"description": "Not awaiting review", "model": ErrorResponse}},
    summary="Reject a submitted inspection with a reason",
)
async def reject_inspection(
    inspection_id: UUID,
    payload: InspectionRejectRequest,
    profile: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session),
) -> InspectionResponse:
    return await inspection_service.reject_inspection(
        db=db, profile=profile, inspection_id=inspection_id, reason=payload.reason
    )
