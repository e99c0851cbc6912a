"""
Tests for principals and the role hierarchy.
"""

import pytest
from pydantic import ValidationError

from veriton_backend.api.exceptions import ForbiddenException, UnauthorizedException
from veriton_backend.permissions.core import require_role
from veriton_backend.permissions.principal import Policy, Principal, Role, RoleHierarchy, role_hierarchy


class TestRoleHierarchy:

    def test_policies_admit_themselves_and_higher_roles(self):
        assert role_hierarchy.get_allowed_roles(Policy.admin_only) == {Role.super_admin, Role.admin}
        assert role_hierarchy.get_allowed_roles(Policy.staff_only) == {Role.super_admin, Role.admin, Role.staff}
        assert role_hierarchy.get_allowed_roles(Policy.student_only) == set(Role)

    def test_each_policy_extends_the_previous_one(self):
        policies = [Policy.admin_only, Policy.staff_only, Policy.principal_only,
                    Policy.teacher_only, Policy.student_only]
        for narrower, wider in zip(policies, policies[1:]):
            assert role_hierarchy.get_allowed_roles(narrower) < role_hierarchy.get_allowed_roles(wider)

    def test_minimum_role_maps_to_policy(self):
        assert role_hierarchy.get_allowed_roles(Role.teacher) == role_hierarchy.get_allowed_roles(Policy.teacher_only)
        assert role_hierarchy.get_allowed_roles(Role.super_admin) == {Role.super_admin}

    @pytest.mark.parametrize("user_role,minimum,expected", [
        (Role.super_admin, Role.admin, True),
        (Role.admin, Role.admin, True),
        (Role.staff, Role.admin, False),
        (Role.principal, Role.teacher, True),
        (Role.teacher, Role.principal, False),
        (Role.student, Role.student, True),
        (Role.student, Role.teacher, False),
        (None, Role.student, False),
    ])
    def test_has_role_permission(self, user_role, minimum, expected):
        assert role_hierarchy.has_role_permission(user_role, minimum) is expected

    def test_rank_orders_roles(self):
        ranks = [role_hierarchy.rank(role) for role in
                 (Role.super_admin, Role.admin, Role.staff, Role.principal, Role.teacher, Role.student)]
        assert ranks == sorted(ranks)

    def test_custom_hierarchy(self):
        hierarchy = RoleHierarchy({Policy.teacher_only: [Role.teacher]})
        assert hierarchy.has_role_permission(Role.teacher, Policy.teacher_only)
        assert not hierarchy.has_role_permission(Role.admin, Policy.teacher_only)


class TestPrincipal:

    def test_anonymous_is_not_authenticated(self):
        principal = Principal.anonymous()
        assert principal.is_authenticated is False
        assert principal.bypasses_scope is False
        assert principal.has_role(Role.student) is False

    def test_super_admin_and_roleless_bypass_scope(self):
        assert Principal(is_authenticated=True, role=Role.super_admin).bypasses_scope
        assert Principal(is_authenticated=True).bypasses_scope

    @pytest.mark.parametrize("role", [Role.admin, Role.staff, Role.principal, Role.teacher, Role.student])
    def test_other_roles_are_scoped(self, role):
        assert not Principal(is_authenticated=True, role=role, school_id="s").bypasses_scope

    def test_principal_is_immutable(self):
        principal = Principal(is_authenticated=True, role=Role.teacher, school_id="s")
        with pytest.raises(ValidationError):
            principal.school_id = "other"

    def test_role_is_parsed_from_its_value(self):
        assert Principal(is_authenticated=True, role="Teacher").role == Role.teacher


class TestRequireRole:

    def test_unauthenticated_is_rejected_as_401(self):
        with pytest.raises(UnauthorizedException) as exc_info:
            require_role(Principal.anonymous(), Role.student)
        assert exc_info.value.status_code == 401

    def test_insufficient_role_is_forbidden(self):
        teacher = Principal(is_authenticated=True, role=Role.teacher, school_id="s")
        with pytest.raises(ForbiddenException) as exc_info:
            require_role(teacher, Role.principal)
        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == {"required": "Principal"}

    def test_sufficient_role_passes(self):
        staff = Principal(is_authenticated=True, role=Role.staff, school_id="s")
        require_role(staff, Role.principal)
        require_role(staff, Policy.staff_only)
