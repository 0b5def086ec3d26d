"""
AEDCheck Backend — Inspection Permission Check
===============================================

What:  Decides whether a caller may view, edit or delete one inspection.
Why:   Inspection records are shared evidence; who may change them is a
       compliance question and has to be auditable in one place.
How:   An explicit ordered tuple of PermissionRule entries. The first rule
       whose role set contains the caller's role decides. The last rule
       matches every role (including unknown strings) and grants view only.

Rule table:
    role                                   view  edit                 delete
    master                                 ✓     ✓                    ✓
    emergency_center_admin,
    regional_emergency_center_admin        ✓     ✓                    ✗
    ministry_admin, regional_admin         ✓     ✗ (열람 전용)         ✗
    local_admin                            ✓     same jurisdiction    ✗
    temporary_inspector                    ✓     own inspection       ✗
    anything else                          ✓     ✗                    ✗
"""

from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Optional, Tuple

from aedcheck.access.roles import Role, parse_role


@dataclass(frozen=True)
class InspectionPermission:
    can_view: bool
    can_edit: bool
    can_delete: bool
    reason: Optional[str] = None

    def to_dict(self):
        return {
            "can_view": self.can_view,
            "can_edit": self.can_edit,
            "can_delete": self.can_delete,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class PermissionContext:
    user_id: Optional[str]
    inspector_id: Optional[str]
    user_region_code: Optional[str]
    inspection_region_code: Optional[str]


@dataclass(frozen=True)
class PermissionRule:
    name: str
    # None matches every role, including unrecognised ones
    roles: Optional[FrozenSet[Role]]
    evaluate: Callable[[PermissionContext], InspectionPermission]

    def matches(self, role: Optional[Role]) -> bool:
        return self.roles is None or role in self.roles


def _full_access(ctx: PermissionContext) -> InspectionPermission:
    return InspectionPermission(can_view=True, can_edit=True, can_delete=True)


def _edit_without_delete(ctx: PermissionContext) -> InspectionPermission:
    return InspectionPermission(
        can_view=True,
        can_edit=True,
        can_delete=False,
        reason="점검 기록 삭제는 마스터 관리자만 가능합니다.",
    )


def _view_only_admin(ctx: PermissionContext) -> InspectionPermission:
    return InspectionPermission(
        can_view=True,
        can_edit=False,
        can_delete=False,
        reason="열람 전용 계정입니다.",
    )


def _same_jurisdiction(ctx: PermissionContext) -> InspectionPermission:
    if (
        ctx.user_region_code is not None
        and ctx.inspection_region_code is not None
        and ctx.user_region_code == ctx.inspection_region_code
    ):
        return InspectionPermission(
            can_view=True,
            can_edit=True,
            can_delete=False,
            reason="점검 기록 삭제는 마스터 관리자만 가능합니다.",
        )
    return InspectionPermission(
        can_view=True,
        can_edit=False,
        can_delete=False,
        reason="관할 지역의 점검 기록만 수정할 수 있습니다.",
    )


def _own_inspection(ctx: PermissionContext) -> InspectionPermission:
    if ctx.user_id is not None and ctx.user_id == ctx.inspector_id:
        return InspectionPermission(
            can_view=True,
            can_edit=True,
            can_delete=False,
            reason="점검 기록 삭제는 마스터 관리자만 가능합니다.",
        )
    return InspectionPermission(
        can_view=True,
        can_edit=False,
        can_delete=False,
        reason="본인이 작성한 점검 기록만 수정할 수 있습니다.",
    )


def _view_only(ctx: PermissionContext) -> InspectionPermission:
    return InspectionPermission(
        can_view=True,
        can_edit=False,
        can_delete=False,
        reason="점검 기록을 수정할 권한이 없습니다.",
    )


INSPECTION_PERMISSION_RULES: Tuple[PermissionRule, ...] = (
    PermissionRule("master", frozenset({Role.MASTER}), _full_access),
    PermissionRule(
        "emergency_center",
        frozenset({Role.EMERGENCY_CENTER_ADMIN, Role.REGIONAL_EMERGENCY_CENTER_ADMIN}),
        _edit_without_delete,
    ),
    PermissionRule(
        "view_only_admin",
        frozenset({Role.MINISTRY_ADMIN, Role.REGIONAL_ADMIN}),
        _view_only_admin,
    ),
    PermissionRule("local_admin", frozenset({Role.LOCAL_ADMIN}), _same_jurisdiction),
    PermissionRule(
        "temporary_inspector", frozenset({Role.TEMPORARY_INSPECTOR}), _own_inspection
    ),
    PermissionRule("fallback", None, _view_only),
)


def _as_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def check_inspection_permission(
    role: Any,
    user_id: Any,
    inspector_id: Any,
    user_region_code: Optional[str] = None,
    inspection_region_code: Optional[str] = None,
) -> InspectionPermission:
    """
    Permission triple for one (caller, inspection) pair.

    For local_admin the two region codes are compared exactly, so callers
    pass district-level jurisdiction keys, not province codes.
    """
    parsed = parse_role(role)
    ctx = PermissionContext(
        user_id=_as_id(user_id),
        inspector_id=_as_id(inspector_id),
        user_region_code=_as_id(user_region_code),
        inspection_region_code=_as_id(inspection_region_code),
    )
    for rule in INSPECTION_PERMISSION_RULES:
        if rule.matches(parsed):
            return rule.evaluate(ctx)
    # The fallback rule matches everything
    raise AssertionError("INSPECTION_PERMISSION_RULES has no fallback rule")
