"""
Scope engine entry points.

Handlers are registered per entity kind on import; callers use
``build_scope_predicate`` to get the row predicate for a principal and
``require_role`` to gate an operation tier.
"""

import logging
from sqlalchemy.orm import Query, Session

from veriton_backend.api.exceptions import ForbiddenException, UnauthorizedException
from veriton_backend.model import EntityKind, entity_model
from veriton_backend.permissions.handlers import scope_registry
from veriton_backend.permissions.handlers_impl import (
    CurriculumScopeHandler,
    ResultScopeHandler,
    SchoolScopeHandler,
    StudentScopeHandler,
    TenantScopeHandler,
)
from veriton_backend.permissions.predicates import Hop, Predicate
from veriton_backend.permissions.principal import Policy, Principal, Role
from veriton_backend.permissions.query_builders import ScopeQueryBuilder

logger = logging.getLogger(__name__)


def initialize_scope_handlers():
    """Initialize and register all scope handlers"""

    # Tenant root
    scope_registry.register(EntityKind.school, SchoolScopeHandler(EntityKind.school))

    # Curriculum, gated on the student's grade
    scope_registry.register(EntityKind.grade, CurriculumScopeHandler(EntityKind.grade, grade_field="id"))
    scope_registry.register(EntityKind.module, CurriculumScopeHandler(EntityKind.module))
    scope_registry.register(EntityKind.lesson, CurriculumScopeHandler(
        EntityKind.lesson,
        grade_via=Hop(foreign_key="module_id", target=EntityKind.module)
    ))
    scope_registry.register(EntityKind.exam, CurriculumScopeHandler(EntityKind.exam, owner_field="created_by_teacher_id"))
    scope_registry.register(EntityKind.scheduler, CurriculumScopeHandler(EntityKind.scheduler, owner_field="teacher_id"))

    # People
    scope_registry.register(EntityKind.student, StudentScopeHandler(EntityKind.student))
    scope_registry.register(EntityKind.teacher, TenantScopeHandler(EntityKind.teacher))
    scope_registry.register(EntityKind.user, TenantScopeHandler(EntityKind.user))

    # Results and the remaining tenant-scoped kinds
    scope_registry.register(EntityKind.result, ResultScopeHandler(EntityKind.result))
    scope_registry.register(EntityKind.question, TenantScopeHandler(EntityKind.question))
    scope_registry.register(EntityKind.attendance, TenantScopeHandler(EntityKind.attendance))
    scope_registry.register(EntityKind.lesson_completion, TenantScopeHandler(EntityKind.lesson_completion))


def build_scope_predicate(principal: Principal, kind: EntityKind) -> Predicate:
    """Row predicate restricting what ``principal`` may read or write of ``kind``"""
    return scope_registry.build_predicate(principal, kind)


def check_admin(principal: Principal) -> bool:
    """Check if principal bypasses tenant scoping"""
    return principal.bypasses_scope


def require_authenticated(principal: Principal):
    if not principal.is_authenticated:
        raise UnauthorizedException("Authentication required")


def require_role(principal: Principal, minimum: Role | Policy):
    """Gate an operation tier: the principal's role must be ``minimum`` or above"""
    require_authenticated(principal)

    if not principal.has_role(minimum):
        required = minimum.value if hasattr(minimum, "value") else str(minimum)
        logger.info("role %s denied, requires %s",
                    principal.role.value if principal.role else None, required)
        raise ForbiddenException(detail={"required": required})


def scoped_query(principal: Principal, kind: EntityKind, db: Session) -> Query:
    """Query over ``kind`` with the principal's scope already applied"""
    entity = entity_model(kind)
    predicate = build_scope_predicate(principal, kind)
    return ScopeQueryBuilder.filter_query(db.query(entity), predicate, entity)


# Initialize handlers on module import
initialize_scope_handlers()
