"""
AEDCheck Backend — Inspection Permission Tests
===============================================

What:  Tests for check_inspection_permission() and its rule table.
"""

import uuid

import pytest

from aedcheck.access.inspection_permissions import (
    INSPECTION_PERMISSION_RULES,
    check_inspection_permission,
)


class TestRuleTable:

    def test_last_rule_matches_every_role(self):
        assert INSPECTION_PERMISSION_RULES[-1].roles is None

    def test_rule_order(self):
        names = [rule.name for rule in INSPECTION_PERMISSION_RULES]
        assert names[0] == "master"
        assert names[-1] == "fallback"


class TestCheckInspectionPermission:

    def test_master_full_access(self):
        p = check_inspection_permission("master", "u1", "u2")
        assert (p.can_view, p.can_edit, p.can_delete) == (True, True, True)

    @pytest.mark.parametrize("role", ["emergency_center_admin", "regional_emergency_center_admin"])
    def test_emergency_center_edits_but_cannot_delete(self, role):
        p = check_inspection_permission(role, "u1", "u2")
        assert (p.can_view, p.can_edit, p.can_delete) == (True, True, False)

    @pytest.mark.parametrize("role", ["ministry_admin", "regional_admin"])
    def test_view_only_admins(self, role):
        p = check_inspection_permission(role, "u1", "u1")
        assert (p.can_edit, p.can_delete) == (False, False)
        assert p.reason == "열람 전용 계정입니다."

    def test_local_admin_same_jurisdiction(self):
        p = check_inspection_permission("local_admin", "u1", "u2", "DAE/중구", "DAE/중구")
        assert p.can_edit and not p.can_delete

    @pytest.mark.parametrize(
        "own, target",
        [("DAE/중구", "DAE/수성구"), (None, "DAE/중구"), ("DAE/중구", None), (None, None)],
    )
    def test_local_admin_other_or_unknown_jurisdiction(self, own, target):
        p = check_inspection_permission("local_admin", "u1", "u2", own, target)
        assert p.can_view and not p.can_edit

    def test_temporary_inspector_own_inspection(self):
        user_id = uuid.uuid4()
        p = check_inspection_permission("temporary_inspector", user_id, str(user_id))
        assert p.can_edit and not p.can_delete

    def test_temporary_inspector_other_inspection(self):
        p = check_inspection_permission("temporary_inspector", "u1", "u2")
        assert not p.can_edit
        assert p.reason

    def test_missing_user_id_never_matches_missing_inspector(self):
        p = check_inspection_permission("temporary_inspector", None, None)
        assert not p.can_edit

    @pytest.mark.parametrize("role", ["pending_approval", "rejected", "bogus", None])
    def test_fallback_is_view_only(self, role):
        p = check_inspection_permission(role, "u1", "u1")
        assert p.to_dict() == {
            "can_view": True,
            "can_edit": False,
            "can_delete": False,
            "reason": "점검 기록을 수정할 권한이 없습니다.",
        }
