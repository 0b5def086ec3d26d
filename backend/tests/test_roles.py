"""
AEDCheck Backend — Role Policy & Email Domain Tests
====================================================

What:  Tests for the role policy table and the email-domain rules.
Why:   The policy table feeds the resolver, the menus and the admin
       checks; the domain rules gate who can become an administrator.
"""

import pytest

from aedcheck.access.roles import (
    DENY_ALL_POLICY,
    ROLE_POLICIES,
    Role,
    allowed_roles_for_domain,
    email_domain,
    organization_type_allowed,
    parse_role,
    policy_for,
    suggest_default_role,
    validate_domain_for_role,
)


class TestRolePolicies:

    def test_every_role_has_a_policy(self):
        assert set(ROLE_POLICIES) == set(Role)

    def test_parse_role(self):
        assert parse_role("local_admin") is Role.LOCAL_ADMIN
        assert parse_role(" master ") is Role.MASTER
        assert parse_role(Role.REJECTED) is Role.REJECTED
        assert parse_role("LOCAL_ADMIN") is None
        assert parse_role(None) is None

    def test_unknown_role_gets_deny_all_policy(self):
        policy = policy_for("nope")
        assert policy is DENY_ALL_POLICY
        assert policy.max_result_limit == 0
        assert not policy.can_manage_users

    def test_only_national_admins_manage_users(self):
        managers = {role for role, p in ROLE_POLICIES.items() if p.can_manage_users}
        assert managers == {
            Role.MASTER,
            Role.EMERGENCY_CENTER_ADMIN,
            Role.REGIONAL_EMERGENCY_CENTER_ADMIN,
        }

    def test_local_admin_can_assign_devices(self):
        assert policy_for("local_admin").can_assign_devices
        assert not policy_for("regional_admin").can_assign_devices

    def test_organization_type_rules(self):
        assert organization_type_allowed("local_admin", "health_center")
        assert not organization_type_allowed("local_admin", "ministry")
        assert not organization_type_allowed("local_admin", "bogus")
        # No constraint: any organization, or none
        assert organization_type_allowed("temporary_inspector", "ministry")


class TestEmailDomains:

    def test_email_domain(self):
        assert email_domain("Kim@Korea.KR") == "korea.kr"
        assert email_domain("no-at-sign") is None
        assert email_domain(None) is None

    def test_allowed_roles_for_domain(self):
        assert Role.LOCAL_ADMIN in allowed_roles_for_domain("a@korea.kr")
        assert Role.EMERGENCY_CENTER_ADMIN in allowed_roles_for_domain("a@nmc.or.kr")
        assert allowed_roles_for_domain("a@gmail.com") == (Role.TEMPORARY_INSPECTOR,)
        assert allowed_roles_for_domain("") == (Role.PENDING_APPROVAL, Role.EMAIL_VERIFIED)

    def test_suggest_default_role(self):
        assert suggest_default_role("a@nmc.or.kr") is Role.EMERGENCY_CENTER_ADMIN
        assert suggest_default_role("a@korea.kr") is Role.LOCAL_ADMIN
        assert suggest_default_role("a@naver.com") is Role.TEMPORARY_INSPECTOR

    def test_master_allowed_for_any_domain(self):
        assert validate_domain_for_role("a@gmail.com", "master").allowed

    @pytest.mark.parametrize(
        "email, role, allowed",
        [
            ("a@korea.kr", "local_admin", True),
            ("a@korea.kr", "emergency_center_admin", False),
            ("a@nmc.or.kr", "regional_emergency_center_admin", True),
            ("a@nmc.or.kr", "local_admin", False),
            ("a@gmail.com", "temporary_inspector", True),
            ("a@gmail.com", "local_admin", False),
        ],
    )
    def test_domain_role_matrix(self, email, role, allowed):
        assert validate_domain_for_role(email, role).allowed is allowed

    def test_rejection_carries_message_and_suggestion(self):
        check = validate_domain_for_role("a@gmail.com", "regional_admin")
        assert not check.allowed
        assert "임시 점검원" in check.error
        assert check.suggested_role is Role.TEMPORARY_INSPECTOR

    def test_invalid_email_and_role(self):
        assert not validate_domain_for_role("broken", "master").allowed
        assert not validate_domain_for_role("a@korea.kr", "wizard").allowed
