"""
AEDCheck Backend — Role / Organization Model
=============================================

What:  Static mapping of user role → allowed organization types and
       permission flags, plus the email-domain rules used when approving
       accounts.
Why:   Every access decision starts from the caller's role. Keeping the
       role table in one typed mapping makes adding a role a checked change
       instead of a silently incomplete dict literal.
How:   `Role` is a closed str enum. `ROLE_POLICIES` maps every member to a
       frozen `RolePolicy`; `_check_exhaustive()` runs at import time and
       fails loudly if a role is missing.
Who:   Used by the scope resolver, the user approval service and the
       `/api/me/scope` route.

Role hierarchy (national → local):
    master                            system administrator
    emergency_center_admin            national emergency medical center (@nmc.or.kr)
    regional_emergency_center_admin   provincial emergency medical support center (@nmc.or.kr)
    ministry_admin                    ministry of health, view-only (@korea.kr)
    regional_admin                    province office, view-only (@korea.kr)
    local_admin                       public health center (@korea.kr)
    temporary_inspector               field inspector, assigned devices only
    pending_approval / email_verified / rejected   no access
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class Role(str, Enum):
    MASTER = "master"
    EMERGENCY_CENTER_ADMIN = "emergency_center_admin"
    REGIONAL_EMERGENCY_CENTER_ADMIN = "regional_emergency_center_admin"
    MINISTRY_ADMIN = "ministry_admin"
    REGIONAL_ADMIN = "regional_admin"
    LOCAL_ADMIN = "local_admin"
    TEMPORARY_INSPECTOR = "temporary_inspector"
    PENDING_APPROVAL = "pending_approval"
    EMAIL_VERIFIED = "email_verified"
    REJECTED = "rejected"


class AccountType(str, Enum):
    PUBLIC = "public"
    TEMPORARY = "temporary"


class OrganizationType(str, Enum):
    HEALTH_CENTER = "health_center"
    PROVINCE = "province"
    EMERGENCY_CENTER = "emergency_center"
    MINISTRY = "ministry"


class AccessLevel(str, Enum):
    NATIONAL = "national"
    REGIONAL = "regional"
    LOCAL = "local"
    ASSIGNED = "assigned"
    NONE = "none"


@dataclass(frozen=True)
class RolePolicy:
    """Permission flags and organization constraints for one role."""

    label: str
    access_level: AccessLevel
    organization_types: Tuple[OrganizationType, ...]
    can_view_sensitive_data: bool
    can_approve: bool
    can_perform_inspection: bool
    can_export_data: bool
    can_manage_users: bool
    can_assign_devices: bool
    max_result_limit: int


_ALL_ORG_TYPES = tuple(OrganizationType)

ROLE_POLICIES: Dict[Role, RolePolicy] = {
    Role.MASTER: RolePolicy(
        label="마스터 관리자",
        access_level=AccessLevel.NATIONAL,
        organization_types=_ALL_ORG_TYPES,
        can_view_sensitive_data=True,
        can_approve=True,
        can_perform_inspection=True,
        can_export_data=True,
        can_manage_users=True,
        can_assign_devices=True,
        max_result_limit=10000,
    ),
    Role.EMERGENCY_CENTER_ADMIN: RolePolicy(
        label="중앙응급의료센터",
        access_level=AccessLevel.NATIONAL,
        organization_types=(OrganizationType.EMERGENCY_CENTER,),
        can_view_sensitive_data=True,
        can_approve=True,
        can_perform_inspection=True,
        can_export_data=True,
        can_manage_users=True,
        can_assign_devices=True,
        max_result_limit=10000,
    ),
    Role.REGIONAL_EMERGENCY_CENTER_ADMIN: RolePolicy(
        label="시도응급의료지원센터",
        access_level=AccessLevel.NATIONAL,
        organization_types=(OrganizationType.EMERGENCY_CENTER,),
        can_view_sensitive_data=True,
        can_approve=True,
        can_perform_inspection=True,
        can_export_data=True,
        can_manage_users=True,
        can_assign_devices=True,
        max_result_limit=10000,
    ),
    Role.MINISTRY_ADMIN: RolePolicy(
        label="보건복지부",
        access_level=AccessLevel.NATIONAL,
        organization_types=(OrganizationType.MINISTRY,),
        can_view_sensitive_data=True,
        can_approve=False,
        can_perform_inspection=False,
        can_export_data=True,
        can_manage_users=False,
        can_assign_devices=False,
        max_result_limit=10000,
    ),
    Role.REGIONAL_ADMIN: RolePolicy(
        label="시도청 담당자",
        access_level=AccessLevel.REGIONAL,
        organization_types=(OrganizationType.PROVINCE,),
        can_view_sensitive_data=True,
        can_approve=False,
        can_perform_inspection=False,
        can_export_data=True,
        can_manage_users=False,
        can_assign_devices=False,
        max_result_limit=5000,
    ),
    Role.LOCAL_ADMIN: RolePolicy(
        label="보건소 담당자",
        access_level=AccessLevel.LOCAL,
        organization_types=(OrganizationType.HEALTH_CENTER,),
        can_view_sensitive_data=False,
        can_approve=True,
        can_perform_inspection=True,
        can_export_data=True,
        can_manage_users=False,
        can_assign_devices=True,
        max_result_limit=1000,
    ),
    Role.TEMPORARY_INSPECTOR: RolePolicy(
        label="임시 점검원",
        access_level=AccessLevel.ASSIGNED,
        organization_types=(),
        can_view_sensitive_data=False,
        can_approve=False,
        can_perform_inspection=True,
        can_export_data=False,
        can_manage_users=False,
        can_assign_devices=False,
        max_result_limit=500,
    ),
    Role.PENDING_APPROVAL: RolePolicy(
        label="승인 대기",
        access_level=AccessLevel.NONE,
        organization_types=(),
        can_view_sensitive_data=False,
        can_approve=False,
        can_perform_inspection=False,
        can_export_data=False,
        can_manage_users=False,
        can_assign_devices=False,
        max_result_limit=0,
    ),
    Role.EMAIL_VERIFIED: RolePolicy(
        label="이메일 인증 완료",
        access_level=AccessLevel.NONE,
        organization_types=(),
        can_view_sensitive_data=False,
        can_approve=False,
        can_perform_inspection=False,
        can_export_data=False,
        can_manage_users=False,
        can_assign_devices=False,
        max_result_limit=0,
    ),
    Role.REJECTED: RolePolicy(
        label="승인 거부",
        access_level=AccessLevel.NONE,
        organization_types=(),
        can_view_sensitive_data=False,
        can_approve=False,
        can_perform_inspection=False,
        can_export_data=False,
        can_manage_users=False,
        can_assign_devices=False,
        max_result_limit=0,
    ),
}

# Policy applied to role strings that are not members of Role
DENY_ALL_POLICY = ROLE_POLICIES[Role.REJECTED]


def _check_exhaustive() -> None:
    missing = [role.value for role in Role if role not in ROLE_POLICIES]
    if missing:
        raise RuntimeError(f"ROLE_POLICIES is missing roles: {', '.join(missing)}")


_check_exhaustive()


def parse_role(value) -> Optional[Role]:
    """Return the Role for `value`, or None for anything unrecognised."""
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Role(value.strip())
    except ValueError:
        return None


def policy_for(role) -> RolePolicy:
    """Policy for a role or role string; unknown roles get the deny-all policy."""
    parsed = parse_role(role)
    if parsed is None:
        return DENY_ALL_POLICY
    return ROLE_POLICIES[parsed]


def organization_type_allowed(role, organization_type) -> bool:
    """
    Whether a user with `role` may belong to an organization of this type.

    Roles with no organization constraint (temporary inspectors and the
    unapproved states) accept any organization, including none.
    """
    policy = policy_for(role)
    if not policy.organization_types:
        return True
    try:
        org_type = OrganizationType(organization_type)
    except ValueError:
        return False
    return org_type in policy.organization_types


# ══════════════════════════════════════════════════════════════════════════
# Email domain rules
# ══════════════════════════════════════════════════════════════════════════

NMC_DOMAIN = "nmc.or.kr"
GOVERNMENT_DOMAIN = "korea.kr"

_DOMAIN_ROLES: Dict[str, Tuple[Role, ...]] = {
    NMC_DOMAIN: (Role.EMERGENCY_CENTER_ADMIN, Role.REGIONAL_EMERGENCY_CENTER_ADMIN),
    GOVERNMENT_DOMAIN: (Role.MINISTRY_ADMIN, Role.REGIONAL_ADMIN, Role.LOCAL_ADMIN),
}

_PUBLIC_DOMAIN_ROLES: Tuple[Role, ...] = (
    Role.TEMPORARY_INSPECTOR,
    Role.PENDING_APPROVAL,
    Role.EMAIL_VERIFIED,
)


@dataclass(frozen=True)
class DomainCheck:
    allowed: bool
    error: Optional[str] = None
    suggested_role: Optional[Role] = None


def email_domain(email: Optional[str]) -> Optional[str]:
    if not email or "@" not in email:
        return None
    domain = email.rsplit("@", 1)[1].strip().lower()
    return domain or None


def allowed_roles_for_domain(email: Optional[str]) -> Tuple[Role, ...]:
    """Roles an account with this email address may be granted (master aside)."""
    domain = email_domain(email)
    if domain is None:
        return (Role.PENDING_APPROVAL, Role.EMAIL_VERIFIED)
    if domain in _DOMAIN_ROLES:
        return _DOMAIN_ROLES[domain]
    return (Role.TEMPORARY_INSPECTOR,)


def suggest_default_role(email: Optional[str]) -> Role:
    """Default role offered on the approval screen."""
    domain = email_domain(email)
    if domain == NMC_DOMAIN:
        return Role.EMERGENCY_CENTER_ADMIN
    if domain == GOVERNMENT_DOMAIN:
        return Role.LOCAL_ADMIN
    return Role.TEMPORARY_INSPECTOR


def validate_domain_for_role(email: Optional[str], role) -> DomainCheck:
    """
    Check that `role` may be granted to an account with this email.

    master is allowed for every domain. Government domains only accept
    their own admin roles; every other domain only accepts the inspector
    and unapproved roles.
    """
    domain = email_domain(email)
    if domain is None:
        return DomainCheck(allowed=False, error="유효하지 않은 이메일 주소입니다.")

    parsed = parse_role(role)
    if parsed is None:
        return DomainCheck(allowed=False, error=f"알 수 없는 역할입니다: {role}")

    if parsed is Role.MASTER:
        return DomainCheck(allowed=True)

    if domain == NMC_DOMAIN:
        if parsed in _DOMAIN_ROLES[NMC_DOMAIN]:
            return DomainCheck(allowed=True)
        return DomainCheck(
            allowed=False,
            error="@nmc.or.kr 도메인은 응급센터 관리자 역할만 가능합니다.",
            suggested_role=Role.REGIONAL_EMERGENCY_CENTER_ADMIN,
        )

    if domain == GOVERNMENT_DOMAIN:
        if parsed in _DOMAIN_ROLES[GOVERNMENT_DOMAIN]:
            return DomainCheck(allowed=True)
        return DomainCheck(
            allowed=False,
            error="@korea.kr 도메인은 보건복지부/시도/보건소 관리자 역할만 가능합니다.",
            suggested_role=Role.LOCAL_ADMIN,
        )

    if parsed in _PUBLIC_DOMAIN_ROLES:
        return DomainCheck(allowed=True)
    return DomainCheck(
        allowed=False,
        error=f"비정부 도메인(@{domain})은 임시 점검원 역할만 가능합니다.",
        suggested_role=Role.TEMPORARY_INSPECTOR,
    )
