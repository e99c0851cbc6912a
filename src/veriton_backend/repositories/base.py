"""
Scoped entity store.

One generic store serves every entity kind. Each call receives the principal
explicitly; the scope predicate for (principal, kind) is built by the scope
engine and compiled into the SQL of every read, update and delete, so rows
outside the principal's scope behave exactly like rows that do not exist.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from veriton_backend.model import ENTITY_DEPENDENTS, EntityKind, entity_model
from veriton_backend.model.base import new_id, utcnow
from veriton_backend.permissions.core import build_scope_predicate, require_authenticated
from veriton_backend.permissions.predicates import Predicate, evaluate, from_mapping
from veriton_backend.permissions.principal import Principal
from veriton_backend.permissions.query_builders import ScopeQueryBuilder

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = frozenset({"id", "created_at"})
# A row never changes tenant once created
TENANT_FIELD = "school_id"

ExtraFilter = Union[Predicate, Mapping[str, Any], None]


class RepositoryError(Exception):
    """Base exception for repository operations."""
    pass


class NotFoundError(RepositoryError):
    """Entity is missing or outside the principal's scope."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateError(RepositoryError):
    """Exception raised when attempting to create duplicate entity."""

    def __init__(self, entity_type: str, criteria: Dict[str, Any]):
        super().__init__(f"{entity_type} already exists with criteria: {criteria}")
        self.entity_type = entity_type
        self.criteria = criteria


class ValidationFailedError(RepositoryError):
    """Payload rejected; ``errors`` holds ``{"field", "message"}`` entries."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailedError":
        return cls(f"Invalid value for '{field}'", [{"field": field, "message": message}])


class DependencyConflictError(RepositoryError):
    """Delete blocked because other rows still reference the entity."""

    def __init__(self, entity_type: str, dependents: Dict[str, int]):
        super().__init__(f"{entity_type} is still referenced by {', '.join(sorted(dependents))}")
        self.entity_type = entity_type
        self.dependents = dependents


class EntityStore:
    """
    Generic CRUD over every entity kind with the scope predicate applied.

    ``create`` does not filter by scope; callers stamp ``school_id`` and
    ownership before handing over the payload.
    """

    def __init__(self, db: Session):
        self.db = db

    def _model(self, kind: EntityKind):
        return entity_model(kind)

    def _columns(self, model) -> Dict[str, Any]:
        return {column.key: column for column in inspect(model).columns}

    def _scoped_query(self, kind: EntityKind, principal: Principal) -> Query:
        require_authenticated(principal)
        model = self._model(kind)
        predicate = build_scope_predicate(principal, kind)
        return ScopeQueryBuilder.filter_query(self.db.query(model), predicate, model)

    def _apply_extra_filter(self, query: Query, model, extra_filter: ExtraFilter) -> Query:
        if extra_filter is None:
            return query
        if isinstance(extra_filter, Mapping):
            extra_filter = from_mapping(extra_filter)
        try:
            return ScopeQueryBuilder.filter_query(query, extra_filter, model)
        except ValueError as e:
            raise ValidationFailedError(str(e))

    def _order_clauses(self, model, order_by: Union[str, Sequence[str], None]) -> list:
        if order_by is None:
            return [model.created_at, model.id]
        if isinstance(order_by, str):
            order_by = [order_by]

        clauses = []
        columns = self._columns(model)
        for field in order_by:
            descending = field.startswith("-")
            name = field.lstrip("-")
            if name not in columns:
                raise ValidationFailedError.for_field("order_by", f"Unknown field '{name}'")
            column = getattr(model, name)
            clauses.append(column.desc() if descending else column.asc())
        # Stable pagination
        clauses.append(model.id)
        return clauses

    def _check_fields(self, model, payload: Mapping[str, Any], protected: Iterable[str]):
        columns = self._columns(model)
        errors = []
        for field in payload:
            if field in protected:
                errors.append({"field": field, "message": "Field cannot be changed"})
            elif field not in columns:
                errors.append({"field": field, "message": "Unknown field"})
        if errors:
            raise ValidationFailedError(f"Invalid {model.__tablename__} payload", errors)

    def _unique_criteria(self, model, values: Mapping[str, Any]) -> Dict[str, Any]:
        unique_fields = {column.key for column in inspect(model).columns if column.unique}
        for index in model.__table__.indexes:
            if index.unique:
                unique_fields.update(column.key for column in index.columns)
        criteria = {key: value for key, value in values.items() if key in unique_fields}
        return criteria or dict(values)

    def _commit(self, model, values: Mapping[str, Any], action: str):
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if "unique" in str(e.orig).lower():
                raise DuplicateError(model.__tablename__, self._unique_criteria(model, values))
            logger.info(f"Integrity violation on {action} {model.__tablename__}: {e.orig}")
            raise ValidationFailedError(f"Failed to {action} {model.__tablename__}: constraint violated")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {action} {model.__tablename__}: {e}")
            raise RepositoryError(f"Failed to {action} {model.__tablename__}: {str(e)}")

    def _check_in_scope(self, kind: EntityKind, principal: Principal, entity: Any, payload: Mapping[str, Any]):
        """The changed row must still match the principal's scope predicate"""
        predicate = build_scope_predicate(principal, kind)
        if evaluate(predicate, entity, lambda target, row_id: self.db.get(self._model(target), row_id)):
            return

        self.db.rollback()
        logger.info("update of %s %s would leave the scope of %s", EntityKind(kind).value, entity.id, principal.user_id)
        raise ValidationFailedError(
            f"Update would move {EntityKind(kind).value} out of your scope",
            [{"field": field, "message": "Value would move the row out of your scope"} for field in payload],
        )

    def commit(self, kind: EntityKind, values: Optional[Mapping[str, Any]] = None, action: str = "save"):
        """Commit writes staged with ``commit=False``; rolls back on failure"""
        self._commit(self._model(kind), values or {}, action)

    def list(
        self,
        kind: EntityKind,
        principal: Principal,
        extra_filter: ExtraFilter = None,
        order_by: Union[str, Sequence[str], None] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Any]:
        """
        List rows of ``kind`` visible to ``principal``.

        Args:
            extra_filter: Predicate or mapping of field equalities, combined
                with the scope predicate
            order_by: Field name or names, ``-`` prefix for descending;
                defaults to ``created_at, id``
            limit: Maximum number of results
            offset: Number of results to skip
        """
        model = self._model(kind)
        query = self._apply_extra_filter(self._scoped_query(kind, principal), model, extra_filter)
        query = query.order_by(*self._order_clauses(model, order_by))

        if offset is not None:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        return query.all()

    def get_by_id_optional(self, kind: EntityKind, principal: Principal, entity_id: Any) -> Optional[Any]:
        model = self._model(kind)
        return self._scoped_query(kind, principal).filter(model.id == str(entity_id)).first()

    def get_by_id(self, kind: EntityKind, principal: Principal, entity_id: Any) -> Any:
        """
        Get a visible row by id.

        Raises:
            NotFoundError: If the row is missing or out of scope
        """
        entity = self.get_by_id_optional(kind, principal, entity_id)
        if entity is None:
            raise NotFoundError(EntityKind(kind).value, entity_id)
        return entity

    def count(self, kind: EntityKind, principal: Principal, extra_filter: ExtraFilter = None) -> int:
        model = self._model(kind)
        query = self._apply_extra_filter(self._scoped_query(kind, principal), model, extra_filter)
        return query.count()

    def check_create(self, kind: EntityKind, payload: Mapping[str, Any]):
        self._check_fields(self._model(kind), payload, IMMUTABLE_FIELDS)

    def check_update(self, kind: EntityKind, payload: Mapping[str, Any]):
        model = self._model(kind)
        protected = IMMUTABLE_FIELDS | {TENANT_FIELD} | getattr(model, "__protected_fields__", frozenset())
        self._check_fields(model, payload, protected)

    def create(self, kind: EntityKind, principal: Principal, payload: Mapping[str, Any], commit: bool = True) -> str:
        """
        Insert a new row and return its id.

        With ``commit=False`` the row is only added to the session; call
        ``commit`` once the whole batch is staged.

        Raises:
            ValidationFailedError: Unknown or immutable fields in the payload
            DuplicateError: If the row violates a unique constraint
        """
        require_authenticated(principal)
        model = self._model(kind)
        self.check_create(kind, payload)

        values = dict(payload)
        entity = model(id=new_id(), created_at=utcnow(), **values)
        self.db.add(entity)
        if commit:
            self._commit(model, values, "create")

        logger.debug("created %s %s", model.__tablename__, entity.id)
        return entity.id

    def update(self, kind: EntityKind, principal: Principal, entity_id: Any, payload: Mapping[str, Any],
               commit: bool = True) -> Any:
        """
        Replace the supplied mutable fields of a visible row.

        Raises:
            NotFoundError: If the row is missing or out of scope
            ValidationFailedError: If the payload touches immutable, tenant
                or protected fields, or the changed row would fall outside
                the principal's scope
        """
        entity = self.get_by_id(kind, principal, entity_id)
        model = self._model(kind)
        self.check_update(kind, payload)

        for key, value in payload.items():
            setattr(entity, key, value)
        self._check_in_scope(kind, principal, entity, payload)

        if commit:
            self._commit(model, payload, "update")
            self.db.refresh(entity)
        return entity

    def save(self, kind: EntityKind, entity: Any) -> Any:
        """Persist changes made through an entity's own transition methods"""
        model = self._model(kind)
        self._commit(model, {}, "update")
        self.db.refresh(entity)
        return entity

    def dependents(self, kind: EntityKind, entity_id: Any) -> Dict[str, int]:
        """Count rows referencing ``entity_id``, ignoring scope"""
        found = {}
        for dependent_kind, foreign_key in ENTITY_DEPENDENTS.get(EntityKind(kind), []):
            dependent_model = self._model(dependent_kind)
            count = self.db.query(dependent_model).filter(
                getattr(dependent_model, foreign_key) == str(entity_id)
            ).count()
            if count > 0:
                found[dependent_kind.value] = found.get(dependent_kind.value, 0) + count
        return found

    def delete(self, kind: EntityKind, principal: Principal, entity_id: Any) -> bool:
        """
        Hard-delete a visible row.

        Raises:
            NotFoundError: If the row is missing or out of scope
            DependencyConflictError: If other rows still reference it
        """
        entity = self.get_by_id(kind, principal, entity_id)
        model = self._model(kind)

        dependents = self.dependents(kind, entity.id)
        if dependents:
            logger.info("delete of %s %s blocked by %s", model.__tablename__, entity.id, dependents)
            raise DependencyConflictError(EntityKind(kind).value, dependents)

        self.db.delete(entity)
        self._commit(model, {"id": entity.id}, "delete")
        return True
