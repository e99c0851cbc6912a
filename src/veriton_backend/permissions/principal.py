from enum import Enum
from typing import Dict, FrozenSet, List, Optional
from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    super_admin = "SuperAdmin"
    admin = "Admin"
    staff = "Staff"
    principal = "Principal"
    teacher = "Teacher"
    student = "Student"


class Policy(str, Enum):
    admin_only = "AdminOnly"
    staff_only = "StaffOnly"
    principal_only = "PrincipalOnly"
    teacher_only = "TeacherOnly"
    student_only = "StudentOnly"


class RoleHierarchy:
    """Manages the school role hierarchy as named policies.

    Each policy lists the roles it admits explicitly, so adding a role only
    touches this table.
    """

    DEFAULT_HIERARCHY: Dict[Policy, List[Role]] = {
        Policy.admin_only: [Role.super_admin, Role.admin],
        Policy.staff_only: [Role.super_admin, Role.admin, Role.staff],
        Policy.principal_only: [Role.super_admin, Role.admin, Role.staff, Role.principal],
        Policy.teacher_only: [Role.super_admin, Role.admin, Role.staff, Role.principal, Role.teacher],
        Policy.student_only: [Role.super_admin, Role.admin, Role.staff, Role.principal, Role.teacher, Role.student],
    }

    # Policy named after the lowest role it admits
    MINIMUM_ROLE_POLICY: Dict[Role, Optional[Policy]] = {
        Role.super_admin: None,
        Role.admin: Policy.admin_only,
        Role.staff: Policy.staff_only,
        Role.principal: Policy.principal_only,
        Role.teacher: Policy.teacher_only,
        Role.student: Policy.student_only,
    }

    def __init__(self, hierarchy: Optional[Dict[Policy, List[Role]]] = None):
        self.hierarchy = hierarchy or self.DEFAULT_HIERARCHY

    def get_allowed_roles(self, minimum: Role | Policy) -> FrozenSet[Role]:
        """Get all roles that meet or exceed the given role or policy"""
        if isinstance(minimum, Policy):
            return frozenset(self.hierarchy.get(minimum, []))

        minimum = Role(minimum)
        policy = self.MINIMUM_ROLE_POLICY.get(minimum)
        if policy is None:
            return frozenset({Role.super_admin})
        return frozenset(self.hierarchy.get(policy, []))

    def has_role_permission(self, user_role: Optional[Role], minimum: Role | Policy) -> bool:
        """Check if user_role satisfies the minimum role or policy"""
        if user_role is None:
            return False
        return Role(user_role) in self.get_allowed_roles(minimum)

    def rank(self, role: Role) -> int:
        """Position in the hierarchy, 0 being the most privileged"""
        return list(Role).index(Role(role))


# Global instance - can be configured at startup
role_hierarchy = RoleHierarchy()


class Principal(BaseModel):
    """Resolved identity, role and scope ids of the current request.

    Immutable; a new principal is resolved for every request.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    is_authenticated: bool = False
    role: Optional[Role] = None
    user_id: Optional[str] = None
    school_id: Optional[str] = None
    teacher_id: Optional[str] = None
    student_id: Optional[str] = None
    grade_id: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls(is_authenticated=False)

    @property
    def bypasses_scope(self) -> bool:
        """SuperAdmin and authenticated role-less principals are not scoped"""
        return self.is_authenticated and (self.role is None or self.role == Role.super_admin)

    def has_role(self, minimum: Role | Policy) -> bool:
        if not self.is_authenticated:
            return False
        return role_hierarchy.has_role_permission(self.role, minimum)
