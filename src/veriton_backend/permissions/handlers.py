import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional
from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.predicates import Predicate, always, conjoin, describe, field_eq, never
from veriton_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)


class ScopeHandler(ABC):
    """Base class for entity-specific scope handlers.

    The base class owns the rules every kind shares: unauthenticated
    principals see nothing, SuperAdmin and role-less principals see
    everything, and everyone else is pinned to their own school. Subclasses
    only narrow that tenant predicate further.
    """

    tenant_field: str = "school_id"

    def __init__(self, kind: EntityKind):
        self.kind = EntityKind(kind)
        self.resource_name = self.kind.value

    def build_predicate(self, principal: Principal) -> Predicate:
        """Build the row predicate for this kind and principal"""
        if not principal.is_authenticated:
            return never()

        if principal.bypasses_scope:
            return always()

        if principal.school_id is None:
            # Tenant-scoped principal without a tenant
            return never()

        return conjoin(self.tenant_predicate(principal), self.narrow(principal))

    def tenant_predicate(self, principal: Principal) -> Predicate:
        return field_eq(self.tenant_field, principal.school_id)

    @abstractmethod
    def narrow(self, principal: Principal) -> Predicate:
        """Ownership rules applied on top of the tenant predicate"""
        pass


class ScopeRegistry:
    """Registry for managing entity scope handlers"""

    _instance = None
    _handlers: Dict[EntityKind, ScopeHandler] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def register(self, kind: EntityKind, handler: ScopeHandler):
        """Register a scope handler for an entity kind"""
        self._handlers[EntityKind(kind)] = handler

    def get_handler(self, kind: EntityKind) -> Optional[ScopeHandler]:
        """Get the scope handler for an entity kind"""
        return self._handlers.get(EntityKind(kind))

    def build_predicate(self, principal: Principal, kind: EntityKind) -> Predicate:
        """Resolve the handler and build the predicate"""
        handler = self.get_handler(kind)
        if handler is None:
            # No handler registered: only unscoped principals get rows
            predicate = always() if principal.bypasses_scope else never()
        else:
            predicate = handler.build_predicate(principal)

        logger.debug("scope %s role=%s school=%s: %s", EntityKind(kind).value,
                     principal.role.value if principal.role else None, principal.school_id, describe(predicate))
        return predicate


# Global registry instance
scope_registry = ScopeRegistry()
