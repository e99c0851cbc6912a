"""
Application services.

A service wraps the entity store for one entity kind: it validates payloads
against the kind's pydantic schemas, gates every operation by role tier,
stamps the tenant and ownership fields, checks referenced parents and turns
repository errors into HTTP-shaped exceptions.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, Union
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from veriton_backend.api.exceptions import repository_error_to_http_exception
from veriton_backend.interface.base import EntityInterface, ListQuery
from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.core import require_role
from veriton_backend.permissions.principal import Principal, Role
from veriton_backend.repositories.base import EntityStore, RepositoryError, ValidationFailedError

logger = logging.getLogger(__name__)

Payload = Union[BaseModel, Mapping[str, Any]]


@contextmanager
def http_errors():
    """Re-raise repository errors as HTTP exceptions"""
    try:
        yield
    except RepositoryError as e:
        raise repository_error_to_http_exception(e) from e


def validation_errors(error: ValidationError) -> List[Dict[str, str]]:
    errors = []
    for item in error.errors():
        field = ".".join(str(part) for part in item.get("loc", ())) or "__root__"
        errors.append({"field": field, "message": item.get("msg", "Invalid value")})
    return errors


def parse_payload(schema: Type[BaseModel], payload: Payload) -> BaseModel:
    if isinstance(payload, schema):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise ValidationFailedError(f"Invalid {schema.__name__} payload", validation_errors(e))


class EntityService:
    """CRUD for one entity kind on behalf of a principal"""

    interface: Type[EntityInterface] = None

    def __init__(self, db: Session, store: Optional[EntityStore] = None):
        self.db = db
        self.store = store or EntityStore(db)

    @property
    def kind(self) -> EntityKind:
        return self.interface.kind

    # Hooks for domain rules

    def before_create(self, principal: Principal, values: Dict[str, Any]):
        pass

    def before_update(self, principal: Principal, entity: Any, values: Dict[str, Any]):
        pass

    # Stamping and reference checks

    def stamp_school(self, principal: Principal, values: Dict[str, Any]):
        if not self.interface.tenant_scoped:
            values.pop("school_id", None)
            return

        supplied = values.get("school_id")
        if principal.bypasses_scope:
            if supplied is None and self.interface.school_required:
                raise ValidationFailedError.for_field("school_id", "School is required")
            return

        if supplied is not None and supplied != principal.school_id:
            raise ValidationFailedError.for_field("school_id", "Rows can only be created for your own school")
        if principal.school_id is None and self.interface.school_required:
            raise ValidationFailedError.for_field("school_id", "School is required")
        values["school_id"] = principal.school_id

    def stamp_owner(self, principal: Principal, values: Dict[str, Any]):
        field = self.interface.owner_field
        if field is None or principal.role != Role.teacher:
            return

        if values.get(field) is None:
            values[field] = principal.teacher_id
        self.check_owner(principal, values)

        column = self.interface.model.__table__.columns[field]
        if values[field] is None and not column.nullable:
            raise ValidationFailedError.for_field(field, "Teacher is required")

    def check_owner(self, principal: Principal, values: Mapping[str, Any]):
        """Teachers cannot hand a row to another teacher"""
        field = self.interface.owner_field
        if field is None or principal.role != Role.teacher or field not in values:
            return
        if values[field] != principal.teacher_id:
            raise ValidationFailedError.for_field(field, "Teachers can only assign themselves")

    def check_parents(self, principal: Principal, values: Mapping[str, Any], school_id: Optional[str]):
        """Referenced rows must be visible to the caller and live in ``school_id``"""
        errors = []
        for field, parent_kind in self.interface.parents.items():
            parent_id = values.get(field)
            if parent_id is None:
                continue

            parent = self.store.get_by_id_optional(parent_kind, principal, parent_id)
            if parent is None:
                errors.append({"field": field, "message": f"{parent_kind.value} not found"})
                continue

            parent_school = getattr(parent, "school_id", None)
            if school_id is not None and parent_school is not None and parent_school != school_id:
                errors.append({"field": field, "message": f"{parent_kind.value} belongs to another school"})

        if errors:
            raise ValidationFailedError(f"Invalid references for {self.kind.value}", errors)

    # Operations

    def list(
        self,
        principal: Principal,
        params: Optional[ListQuery] = None,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Union[str, Sequence[str], None] = None,
    ) -> List[Any]:
        require_role(principal, self.interface.read_role)
        params = params or ListQuery()
        with http_errors():
            return self.store.list(self.kind, principal, extra_filter=filters, order_by=order_by,
                                   limit=params.limit, offset=params.skip)

    def get(self, principal: Principal, entity_id: Any) -> Any:
        require_role(principal, self.interface.read_role)
        with http_errors():
            return self.store.get_by_id(self.kind, principal, entity_id)

    def count(self, principal: Principal, filters: Optional[Mapping[str, Any]] = None) -> int:
        require_role(principal, self.interface.read_role)
        with http_errors():
            return self.store.count(self.kind, principal, extra_filter=filters)

    def prepare_create(self, principal: Principal, payload: Payload) -> Dict[str, Any]:
        """Validated, stamped and reference-checked values for a new row"""
        values = parse_payload(self.interface.create, payload).model_dump()
        self.stamp_school(principal, values)
        self.stamp_owner(principal, values)
        self.before_create(principal, values)
        self.check_parents(principal, values, values.get("school_id"))
        self.store.check_create(self.kind, values)
        return values

    def prepare_update(self, principal: Principal, entity: Any, payload: Payload) -> Dict[str, Any]:
        if self.interface.update is None:
            raise ValidationFailedError(f"{self.kind.value} cannot be updated")

        values = parse_payload(self.interface.update, payload).model_dump(exclude_unset=True)
        self.check_owner(principal, values)
        self.check_parents(principal, values, getattr(entity, "school_id", None))
        self.before_update(principal, entity, values)
        self.store.check_update(self.kind, values)
        return values

    def create(self, principal: Principal, payload: Payload) -> str:
        require_role(principal, self.interface.write_role)
        with http_errors():
            values = self.prepare_create(principal, payload)
            entity_id = self.store.create(self.kind, principal, values)
            logger.info("%s %s created by %s", self.kind.value, entity_id, principal.user_id)
            return entity_id

    def update(self, principal: Principal, entity_id: Any, payload: Payload) -> Any:
        require_role(principal, self.interface.write_role)
        with http_errors():
            if self.interface.update is None:
                raise ValidationFailedError(f"{self.kind.value} cannot be updated")

            entity = self.store.get_by_id(self.kind, principal, entity_id)
            values = self.prepare_update(principal, entity, payload)
            return self.store.update(self.kind, principal, entity_id, values)

    def delete(self, principal: Principal, entity_id: Any) -> bool:
        require_role(principal, self.interface.delete_role)
        with http_errors():
            deleted = self.store.delete(self.kind, principal, entity_id)
            logger.info("%s %s deleted by %s", self.kind.value, entity_id, principal.user_id)
            return deleted
