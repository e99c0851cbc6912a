from typing import Optional
from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.handlers import ScopeHandler
from veriton_backend.permissions.predicates import Hop, Predicate, always, conjoin, field_eq, never
from veriton_backend.permissions.principal import Principal, Role


class TenantScopeHandler(ScopeHandler):
    """Scope handler for kinds that are only pinned to the school"""

    def narrow(self, principal: Principal) -> Predicate:
        return always()


class SchoolScopeHandler(ScopeHandler):
    """The school row itself: a tenant principal sees its own school"""

    tenant_field = "id"

    def narrow(self, principal: Principal) -> Predicate:
        return always()


class CurriculumScopeHandler(ScopeHandler):
    """Scope handler for Grade, Module, Lesson, Exam and Scheduler.

    Students only see rows of their own grade. ``grade_field`` names the
    column holding the grade id; ``grade_via`` is set when the grade is only
    reachable through a parent row (Lesson -> Module). When ``owner_field``
    is set, teachers only see rows they authored or are assigned to.
    """

    def __init__(self, kind: EntityKind, grade_field: str = "grade_id",
                 grade_via: Optional[Hop] = None, owner_field: Optional[str] = None):
        super().__init__(kind)
        self.grade_field = grade_field
        self.grade_via = grade_via
        self.owner_field = owner_field

    def narrow(self, principal: Principal) -> Predicate:
        if principal.role == Role.teacher and self.owner_field is not None:
            if principal.teacher_id is None:
                return never()
            return field_eq(self.owner_field, principal.teacher_id)

        if principal.role == Role.student:
            # Without a grade the curriculum is unknown, never fall back to the whole school
            if principal.student_id is None or principal.grade_id is None:
                return never()
            return field_eq(self.grade_field, principal.grade_id, via=self.grade_via)

        return always()


class StudentScopeHandler(ScopeHandler):
    """Students only ever see their own student record"""

    def narrow(self, principal: Principal) -> Predicate:
        if principal.role != Role.student:
            return always()
        if principal.student_id is None:
            return never()
        return field_eq("id", principal.student_id)


class ResultScopeHandler(ScopeHandler):
    """Students see their own published results; staff roles see all of the school"""

    def narrow(self, principal: Principal) -> Predicate:
        if principal.role != Role.student:
            return always()
        if principal.student_id is None:
            return never()
        return conjoin(
            field_eq("student_id", principal.student_id),
            field_eq("is_published", True),
        )
