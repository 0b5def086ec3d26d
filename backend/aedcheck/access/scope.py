"""
AEDCheck Backend — Access-Scope Resolver
=========================================

What:  Maps a user profile to the AccessScope describing which equipment and
       inspection rows (and which fields) the caller may see or modify.
Why:   Every equipment and inspection endpoint is a consumer of this one
       decision. Keeping it a pure function makes it testable in isolation
       and safe to call concurrently.
How:   `resolve_access_scope()` evaluates the role rules top to bottom; the
       first matching rule builds the scope. Malformed input never raises: it
       falls through to the most restrictive (deny-all) scope.
Who:   Called once per request by the services layer.
When:  Computed fresh from the caller's profile on every request. Never cached.

Rules (first match wins):
    1. master, emergency_center_admin, regional_emergency_center_admin
       → unrestricted, sensitive data visible, may approve
    2. ministry_admin   → unrestricted read scope, sensitive data visible
    3. regional_admin   → region restriction only (whole province)
    4. local_admin      → region + city restriction, approves own jurisdiction
    5. temporary_inspector → device allowlist only; region/city ignored
    6. anything else    → deny-all (empty allowlist)

Scope shapes:
    region_restriction  city_restriction  device_allowlist   meaning
    None                None              None               national
    "DAE"               None              None               one province
    "DAE"               "중구"             None               one district
    None                None              ("11-0010656",)    listed devices
    None                None              ()                 nothing
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from aedcheck.access.roles import Role, parse_role, policy_for
from aedcheck.utils.text import normalize_string


@dataclass(frozen=True)
class ProfileSnapshot:
    """
    Immutable copy of the UserProfile fields the resolver reads.

    The ORM model can be passed to the resolver directly; this snapshot is
    for callers (tests, background jobs) that have no session.
    """

    id: Optional[str] = None
    role: Optional[str] = None
    region_code: Optional[str] = None
    district_code: Optional[str] = None
    account_type: Optional[str] = None
    assigned_device_ids: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AccessScope:
    """Derived, request-local description of what a caller may access."""

    region_restriction: Optional[str] = None
    city_restriction: Optional[str] = None
    device_allowlist: Optional[Tuple[str, ...]] = None
    can_view_sensitive_data: bool = False
    can_perform_inspection: bool = False
    can_approve: bool = False
    can_export_data: bool = False
    max_result_limit: int = 0
    role: Optional[Role] = None
    user_id: Optional[str] = None

    @property
    def is_unrestricted(self) -> bool:
        return (
            self.device_allowlist is None
            and self.region_restriction is None
            and self.city_restriction is None
        )

    @property
    def is_deny_all(self) -> bool:
        return self.device_allowlist is not None and len(self.device_allowlist) == 0

    def can_access_device(
        self,
        equipment_serial: Optional[str],
        sido_code: Optional[str] = None,
        gugun: Optional[str] = None,
    ) -> bool:
        """
        Check a single record against this scope.

        `sido_code` must already be a region code (not a display label);
        `gugun` is compared as-is against the city restriction.
        """
        if self.device_allowlist is not None:
            return equipment_serial is not None and equipment_serial in self.device_allowlist
        if self.region_restriction is not None and sido_code != self.region_restriction:
            return False
        if self.city_restriction is not None and gugun != self.city_restriction:
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role.value if self.role else None,
            "user_id": self.user_id,
            "region_restriction": self.region_restriction,
            "city_restriction": self.city_restriction,
            "device_allowlist": (
                list(self.device_allowlist) if self.device_allowlist is not None else None
            ),
            "can_view_sensitive_data": self.can_view_sensitive_data,
            "can_perform_inspection": self.can_perform_inspection,
            "can_approve": self.can_approve,
            "can_export_data": self.can_export_data,
            "max_result_limit": self.max_result_limit,
        }


_UNRESTRICTED_ROLES = frozenset({
    Role.MASTER,
    Role.EMERGENCY_CENTER_ADMIN,
    Role.REGIONAL_EMERGENCY_CENTER_ADMIN,
})


def _clean_code(value: Any) -> Optional[str]:
    # Empty or whitespace-only codes count as absent
    return normalize_string(value)


def _clean_device_ids(values: Optional[Iterable[Any]]) -> Tuple[str, ...]:
    if not values or isinstance(values, (str, bytes)):
        return ()
    seen = []
    for value in values:
        serial = _clean_code(value)
        if serial is not None and serial not in seen:
            seen.append(serial)
    return tuple(seen)


def _user_id(profile: Any) -> Optional[str]:
    value = getattr(profile, "id", None)
    return str(value) if value is not None else None


def deny_all_scope(role: Optional[Role] = None, user_id: Optional[str] = None) -> AccessScope:
    """The most restrictive scope: zero visible devices, no permissions."""
    return AccessScope(device_allowlist=(), role=role, user_id=user_id)


def resolve_access_scope(profile: Any) -> AccessScope:
    """
    Resolve the AccessScope for a profile.

    `profile` is anything exposing `id`, `role`, `region_code`,
    `district_code` and `assigned_device_ids` attributes (the UserProfile
    model or a ProfileSnapshot). Missing attributes read as None.
    """
    role = parse_role(getattr(profile, "role", None))
    user_id = _user_id(profile)
    if role is None:
        return deny_all_scope(user_id=user_id)

    policy = policy_for(role)
    region_code = _clean_code(getattr(profile, "region_code", None))
    district_code = _clean_code(getattr(profile, "district_code", None))

    if role in _UNRESTRICTED_ROLES or role is Role.MINISTRY_ADMIN:
        return AccessScope(
            can_view_sensitive_data=policy.can_view_sensitive_data,
            can_perform_inspection=policy.can_perform_inspection,
            can_approve=policy.can_approve,
            can_export_data=policy.can_export_data,
            max_result_limit=policy.max_result_limit,
            role=role,
            user_id=user_id,
        )

    if role is Role.REGIONAL_ADMIN or role is Role.LOCAL_ADMIN:
        # A region-bound role without a region code must never become national
        if region_code is None:
            return deny_all_scope(role=role, user_id=user_id)
        return AccessScope(
            region_restriction=region_code,
            city_restriction=district_code if role is Role.LOCAL_ADMIN else None,
            can_view_sensitive_data=policy.can_view_sensitive_data,
            can_perform_inspection=policy.can_perform_inspection,
            can_approve=policy.can_approve,
            can_export_data=policy.can_export_data,
            max_result_limit=policy.max_result_limit,
            role=role,
            user_id=user_id,
        )

    if role is Role.TEMPORARY_INSPECTOR:
        allowlist = _clean_device_ids(getattr(profile, "assigned_device_ids", None))
        return AccessScope(
            device_allowlist=allowlist,
            can_view_sensitive_data=False,
            can_perform_inspection=bool(allowlist),
            can_approve=False,
            can_export_data=policy.can_export_data,
            max_result_limit=policy.max_result_limit,
            role=role,
            user_id=user_id,
        )

    return deny_all_scope(role=role, user_id=user_id)
