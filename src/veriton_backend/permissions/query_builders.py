from typing import Any, Type
from sqlalchemy import and_, false, select, true
from sqlalchemy.orm import Query
from sqlalchemy.sql.elements import ColumnElement
from veriton_backend.model import entity_model
from veriton_backend.permissions.predicates import (
    AlwaysFalse,
    AlwaysTrue,
    Conjunction,
    FieldEquals,
    Predicate,
)


class ScopeQueryBuilder:
    """Translates scope predicates into SQLAlchemy filter clauses"""

    @classmethod
    def column(cls, entity: Type[Any], field: str):
        column = getattr(entity, field, None)
        if column is None:
            raise ValueError(f"{entity.__tablename__} has no column '{field}'")
        return column

    @classmethod
    def compile(cls, predicate: Predicate, entity: Type[Any]) -> ColumnElement:
        """Compile a predicate into a clause over ``entity``"""
        if isinstance(predicate, AlwaysTrue):
            return true()

        if isinstance(predicate, AlwaysFalse):
            return false()

        if isinstance(predicate, Conjunction):
            return and_(*(cls.compile(operand, entity) for operand in predicate.operands))

        if isinstance(predicate, FieldEquals):
            if predicate.via is None:
                return cls.column(entity, predicate.field) == predicate.value

            # Indirect through the parent row, e.g. Lesson.module_id -> Module.grade_id
            target = entity_model(predicate.via.target)
            subquery = select(target.id).where(cls.column(target, predicate.field) == predicate.value)
            return cls.column(entity, predicate.via.foreign_key).in_(subquery)

        raise TypeError(f"Unknown predicate {predicate!r}")

    @classmethod
    def filter_query(cls, query: Query, predicate: Predicate, entity: Type[Any]) -> Query:
        """Apply a predicate to an existing query"""
        if isinstance(predicate, AlwaysTrue):
            return query
        return query.filter(cls.compile(predicate, entity))
