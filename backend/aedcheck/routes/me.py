"""
AEDCheck Backend — Current User Scope Route
============================================

What:  GET /api/me/scope returns the caller's resolved access scope.
Why:   The frontend builds its region selector and inspection menu from
       the same scope the backend enforces.
"""

from fastapi import APIRouter, Depends

from aedcheck.access.roles import AccessLevel, parse_role, policy_for
from aedcheck.access.scope import resolve_access_scope
from aedcheck.models.user_profile import UserProfile
from aedcheck.regions import get_region_table
from aedcheck.schemas.access import RegionRef, ScopeResponse
from aedcheck.schemas.common import ErrorResponse
from aedcheck.services.auth_service import get_current_profile

router = APIRouter(prefix="/api/me", tags=["Me"])


@router.get(
    "/scope",
    response_model=ScopeResponse,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="The caller's access scope",
)
async def get_my_scope(
    profile: UserProfile = Depends(get_current_profile),
) -> ScopeResponse:
    scope = resolve_access_scope(profile)
    role = parse_role(profile.role)
    policy = policy_for(role)

    region = None
    if scope.region_restriction is not None:
        table = get_region_table()
        region = RegionRef(
            code=scope.region_restriction,
            label=table.label_for(scope.region_restriction),
            long_label=table.long_label_for(scope.region_restriction),
        )

    return ScopeResponse(
        user_id=scope.user_id,
        role=role.value if role else None,
        role_label=policy.label if role else None,
        access_level=(
            AccessLevel.NONE.value if scope.is_deny_all else policy.access_level.value
        ),
        region=region,
        city_restriction=scope.city_restriction,
        device_allowlist=(
            list(scope.device_allowlist) if scope.device_allowlist is not None else None
        ),
        can_view_sensitive_data=scope.can_view_sensitive_data,
        can_perform_inspection=scope.can_perform_inspection,
        can_approve=scope.can_approve,
        can_export_data=scope.can_export_data,
        max_result_limit=scope.max_result_limit,
        can_manage_schedules=policy.can_assign_devices,
        can_manage_users=policy.can_manage_users,
    )
