import logging
from typing import Any, Dict, Optional

from veriton_backend.api.exceptions import ForbiddenException, UnprocessableEntityException
from veriton_backend.interface.users import UserInterface
from veriton_backend.model.auth import User
from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.core import require_authenticated, require_role
from veriton_backend.permissions.principal import Principal, Role, role_hierarchy
from veriton_backend.repositories.base import DuplicateError
from veriton_backend.services.base import EntityService, http_errors

logger = logging.getLogger(__name__)


class UserService(EntityService):
    """Accounts. Password, role and active state only change through the
    dedicated transitions below."""

    interface = UserInterface

    def _check_grant(self, principal: Principal, role: Role):
        if principal.bypasses_scope:
            return
        if role_hierarchy.rank(role) < role_hierarchy.rank(principal.role):
            logger.info("role %s may not grant %s", principal.role.value, role.value)
            raise ForbiddenException(detail={"role": role.value, "message": "Cannot grant a role above your own"})

    def before_create(self, principal: Principal, values: Dict[str, Any]):
        self._check_grant(principal, Role(values["role"]))

        if self.db.query(User).filter(User.email == values["email"]).first() is not None:
            raise DuplicateError("user", {"email": values["email"]})

    def before_update(self, principal: Principal, entity: Any, values: Dict[str, Any]):
        current = self._role_of(entity)
        if current is not None:
            self._check_grant(principal, current)

    def _transition(self, principal: Principal, user_id: str, apply, minimum: Role = Role.staff) -> User:
        require_role(principal, minimum)
        with http_errors():
            user = self.store.get_by_id(EntityKind.user, principal, user_id)
            current = self._role_of(user)
            if current is not None:
                self._check_grant(principal, current)
            apply(user)
            return self.store.save(EntityKind.user, user)

    def _role_of(self, user: User) -> Optional[Role]:
        try:
            return Role(user.role)
        except ValueError:
            return None

    def set_role(self, principal: Principal, user_id: str, role: Role) -> User:
        """Change a user's role; nobody can grant a role above their own"""
        require_role(principal, Role.staff)
        role = Role(role)
        self._check_grant(principal, role)
        user = self._transition(principal, user_id, lambda u: u.set_role(role.value))
        logger.info("user %s is now %s", user_id, role.value)
        return user

    def activate(self, principal: Principal, user_id: str) -> User:
        return self._transition(principal, user_id, lambda u: u.activate())

    def deactivate(self, principal: Principal, user_id: str) -> User:
        return self._transition(principal, user_id, lambda u: u.deactivate())

    def toggle_status(self, principal: Principal, user_id: str) -> User:
        return self._transition(principal, user_id, lambda u: u.deactivate() if u.is_active else u.activate())

    def reset_password(self, principal: Principal, user_id: str, password_hash: str) -> User:
        require_role(principal, Role.staff)
        if not password_hash:
            raise UnprocessableEntityException(detail={"errors": [{"field": "password_hash", "message": "Password hash is required"}]})
        return self._transition(principal, user_id, lambda u: u.update_password(password_hash))

    def record_login(self, principal: Principal, user_id: str) -> User:
        """Stamp ``last_login_at``; callers below Staff may only stamp themselves"""
        require_authenticated(principal)
        if not principal.has_role(Role.staff) and principal.user_id != user_id:
            raise ForbiddenException(detail="Cannot record a login for another user")

        with http_errors():
            user = self.store.get_by_id(EntityKind.user, principal, user_id)
            user.record_login()
            return self.store.save(EntityKind.user, user)
