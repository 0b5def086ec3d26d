"""
AEDCheck Backend — User Administration Service
===============================================

What:  Approves pending accounts into a role and assigns devices to
       temporary inspectors.
Why:   The role, region and district set here are the only inputs of the
       access-scope resolver, so they are validated before being stored:
       a wrong region silently widens or empties someone's scope.
How:   Approver checks come from ROLE_POLICIES (can_manage_users,
       can_assign_devices). Email domain and organization type are checked
       against the granted role. Region inputs are normalized to codes and
       district inputs to gugun names through the region table.
Who:   Called by routes/admin_users.py.

Region resolution order on approval:
    1. explicit region_code / district_code from the request
    2. the organization's region_code / city_code
    3. parsed from the organization name ("대구광역시 수성구 보건소")
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from aedcheck.access.roles import (
    AccountType,
    Role,
    allowed_roles_for_domain,
    organization_type_allowed,
    parse_role,
    policy_for,
    suggest_default_role,
    validate_domain_for_role,
)
from aedcheck.access.scope import resolve_access_scope
from aedcheck.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from aedcheck.models.equipment import Equipment
from aedcheck.models.organization import Organization
from aedcheck.models.user_profile import UserProfile
from aedcheck.schemas.users import UserProfileResponse
from aedcheck.services.equipment_service import EquipmentService, equipment_service
from aedcheck.utils.text import normalize_string

logger = logging.getLogger(__name__)

# Roles an approval may not grant; they are states, not roles
_NON_GRANTABLE = frozenset({Role.PENDING_APPROVAL, Role.EMAIL_VERIFIED, Role.REJECTED})
_REGION_ROLES = frozenset({Role.REGIONAL_ADMIN, Role.LOCAL_ADMIN})


class UserService:
    """Account approval and device assignment."""

    def __init__(self, equipment: Optional[EquipmentService] = None):
        self._equipment = equipment or equipment_service

    async def _load_user(self, db: AsyncSession, user_id: uuid.UUID) -> UserProfile:
        try:
            result = await db.execute(select(UserProfile).where(UserProfile.id == user_id))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not retrieve the user. Please try again.")
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def _load_organization(
        self, db: AsyncSession, organization_id: uuid.UUID
    ) -> Organization:
        try:
            result = await db.execute(
                select(Organization).where(Organization.id == organization_id)
            )
            organization = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching organization %s: %s", organization_id, str(e))
            raise DatabaseError(message="Could not retrieve the organization. Please try again.")
        if organization is None:
            raise NotFoundError(resource="organization", resource_id=str(organization_id))
        return organization

    async def _flush(self, db: AsyncSession, user_id) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error saving user %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not save the user. Please try again.")

    def _resolve_location(
        self,
        role: Role,
        region_code: Optional[str],
        district_code: Optional[str],
        organization: Optional[Organization],
    ) -> Tuple[Optional[str], Optional[str]]:
        table = self._equipment.region_table

        region = None
        if region_code and region_code.strip():
            region = table.normalize_region_code(region_code)
            if region is None:
                raise ValidationError(
                    message=f"Unknown region '{region_code}'", field="region_code"
                )

        district = None
        if district_code and district_code.strip():
            district = table.gugun_for_city_code(district_code)
            if district is None:
                raise ValidationError(
                    message=f"Unknown city code '{district_code}'", field="district_code"
                )

        if organization is not None:
            parsed_region, parsed_gugun = table.region_from_org_name(organization.name)
            if region is None:
                region = table.normalize_region_code(organization.region_code) or parsed_region
            if district is None:
                district = table.gugun_for_city_code(organization.city_code) or parsed_gugun

        if role in _REGION_ROLES and region is None:
            raise ValidationError(
                message=f"A region is required for role {role.value}", field="region_code"
            )
        if role is Role.LOCAL_ADMIN and district is None:
            raise ValidationError(
                message="A district is required for role local_admin", field="district_code"
            )
        if role is not Role.LOCAL_ADMIN:
            # Only local_admin scopes read the district
            district = None
        return region, district

    async def approve_user(
        self,
        db: AsyncSession,
        approver: Any,
        user_id: uuid.UUID,
        role: Optional[str] = None,
        region_code: Optional[str] = None,
        district_code: Optional[str] = None,
        organization_id: Optional[uuid.UUID] = None,
    ) -> UserProfileResponse:
        """
        Grant `role` to a pending account.

        Without a role, the default for the account's email domain is
        granted (emergency_center_admin for nmc.or.kr, local_admin for
        korea.kr, temporary_inspector otherwise).

        Raises:
            PermissionDeniedError: approver cannot manage users, or a
                non-master approver grants master
            ValidationError: unknown role, wrong email domain or
                organization type, missing or unknown region/district
            NotFoundError: unknown user or organization
        """
        if not policy_for(getattr(approver, "role", None)).can_manage_users:
            raise PermissionDeniedError(message="Your account cannot approve users")

        granted = None
        if role is not None:
            granted = parse_role(role)
            if granted is None or granted in _NON_GRANTABLE:
                raise ValidationError(message=f"Role '{role}' cannot be granted", field="role")
            if granted is Role.MASTER and parse_role(approver.role) is not Role.MASTER:
                raise PermissionDeniedError(message="Only a master account can grant master")

        user = await self._load_user(db, user_id)
        if granted is None:
            granted = suggest_default_role(user.email)

        domain_check = validate_domain_for_role(user.email, granted)
        if not domain_check.allowed:
            raise ValidationError(
                message=domain_check.error or "Role not allowed for this email domain",
                field="role",
                context={
                    "suggested_role": (
                        domain_check.suggested_role.value if domain_check.suggested_role else None
                    ),
                    "allowed_roles": [r.value for r in allowed_roles_for_domain(user.email)],
                },
            )

        organization = None
        if organization_id is not None:
            organization = await self._load_organization(db, organization_id)
            if not organization_type_allowed(granted, organization.type):
                raise ValidationError(
                    message=(
                        f"Organization type '{organization.type}' is not allowed "
                        f"for role {granted.value}"
                    ),
                    field="organization_id",
                )

        region, district = self._resolve_location(granted, region_code, district_code, organization)

        user.role = granted.value
        user.region_code = region
        user.district_code = district
        user.organization_id = organization.id if organization is not None else user.organization_id
        user.account_type = (
            AccountType.TEMPORARY.value
            if granted is Role.TEMPORARY_INSPECTOR
            else AccountType.PUBLIC.value
        )
        user.is_active = True
        user.approved_at = datetime.now(timezone.utc)
        user.approved_by_id = approver.id
        await self._flush(db, user.id)

        logger.info(
            "User %s approved as %s (region=%s, district=%s) by %s",
            user.id,
            granted.value,
            region,
            district,
            approver.id,
        )
        return UserProfileResponse.model_validate(user)

    async def assign_devices(
        self,
        db: AsyncSession,
        approver: Any,
        user_id: uuid.UUID,
        serials: Sequence[str],
    ) -> UserProfileResponse:
        """
        Replace a temporary inspector's device allowlist.

        local_admin approvers may only hand out devices inside their own
        scope. Every serial must exist.
        """
        if not policy_for(getattr(approver, "role", None)).can_assign_devices:
            raise PermissionDeniedError(message="Your account cannot assign devices")

        user = await self._load_user(db, user_id)
        if parse_role(user.role) is not Role.TEMPORARY_INSPECTOR:
            raise ConflictError(
                message="Devices can only be assigned to temporary inspectors",
                context={"role": user.role},
            )

        wanted: List[str] = []
        for serial in serials:
            serial = normalize_string(serial)
            if serial is not None and serial not in wanted:
                wanted.append(serial)

        if wanted:
            try:
                result = await db.execute(
                    select(Equipment).where(Equipment.equipment_serial.in_(wanted))
                )
                found = {row.equipment_serial: row for row in result.scalars().all()}
            except SQLAlchemyError as e:
                logger.error("Database error loading devices for assignment: %s", str(e))
                raise DatabaseError(message="Could not load the devices. Please try again.")

            missing = [serial for serial in wanted if serial not in found]
            if missing:
                raise NotFoundError(
                    resource="equipment",
                    resource_id=missing[0],
                    context={"missing_serials": missing},
                )

            scope = resolve_access_scope(approver)
            outside = [s for s in wanted if not self._equipment.covers(scope, found[s])]
            if outside:
                raise PermissionDeniedError(
                    message="Some devices are outside your access scope",
                    context={"equipment_serials": outside},
                )

        # A new list object so the JSONB column is marked dirty
        user.assigned_device_ids = list(wanted)
        await self._flush(db, user.id)

        logger.info(
            "Assigned %d devices to inspector %s by %s", len(wanted), user.id, approver.id
        )
        return UserProfileResponse.model_validate(user)


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
