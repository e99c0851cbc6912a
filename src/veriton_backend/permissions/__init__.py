"""
Tenant and role scoping for the school backend.

Main components:
- principal: Principal, roles and the role hierarchy
- predicates: backend-neutral row predicates
- handlers: scope handler interface and registry
- handlers_impl: concrete scope handlers per entity kind
- query_builders: compiles predicates into SQLAlchemy clauses
- core: handler registration and role gates
- auth: resolves the principal of a request
"""

from .principal import (
    Principal,
    Role,
    Policy,
    RoleHierarchy,
    role_hierarchy,
)

from .predicates import (
    Predicate,
    AlwaysTrue,
    AlwaysFalse,
    FieldEquals,
    Conjunction,
    Hop,
    always,
    never,
    field_eq,
    conjoin,
    evaluate,
    describe,
)

from .core import (
    build_scope_predicate,
    check_admin,
    require_authenticated,
    require_role,
    scoped_query,
    initialize_scope_handlers,
)

from .auth import (
    get_current_principal,
    principal_from_claims,
    JWTAuthenticator,
)

from .handlers import (
    ScopeHandler,
    ScopeRegistry,
    scope_registry,
)

from .query_builders import ScopeQueryBuilder

__all__ = [
    # Principal and roles
    "Principal",
    "Role",
    "Policy",
    "RoleHierarchy",
    "role_hierarchy",

    # Predicates
    "Predicate",
    "AlwaysTrue",
    "AlwaysFalse",
    "FieldEquals",
    "Conjunction",
    "Hop",
    "always",
    "never",
    "field_eq",
    "conjoin",
    "evaluate",
    "describe",

    # Core scope functions
    "build_scope_predicate",
    "check_admin",
    "require_authenticated",
    "require_role",
    "scoped_query",

    # Authentication
    "get_current_principal",
    "principal_from_claims",
    "JWTAuthenticator",

    # Handlers
    "ScopeHandler",
    "ScopeRegistry",
    "scope_registry",
    "ScopeQueryBuilder",

    # Initialization
    "initialize_scope_handlers",
]
