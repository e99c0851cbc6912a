"""
Row predicates produced by the scope engine.

A predicate is a small immutable value: always-true, always-false, a field
equality (optionally read through one foreign-key hop) or a conjunction of
predicates. Store adapters translate it into their own query language; the
SQLAlchemy translation lives in ``query_builders``. ``evaluate`` applies a
predicate to in-memory rows.
"""

from collections.abc import Mapping
from typing import Any, Callable, Literal, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict

from veriton_backend.model.kinds import EntityKind


class Hop(BaseModel):
    """Follow ``foreign_key`` on the row to a row of ``target``"""
    model_config = ConfigDict(frozen=True)

    foreign_key: str
    target: EntityKind


class AlwaysTrue(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["always_true"] = "always_true"


class AlwaysFalse(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["always_false"] = "always_false"


class FieldEquals(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["field_equals"] = "field_equals"

    field: str
    value: Any
    via: Optional[Hop] = None


class Conjunction(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["conjunction"] = "conjunction"

    operands: Tuple["Predicate", ...]


Predicate = Union[AlwaysTrue, AlwaysFalse, FieldEquals, Conjunction]

Conjunction.model_rebuild()

RowLookup = Callable[[EntityKind, Any], Optional[Any]]


def always() -> AlwaysTrue:
    return AlwaysTrue()


def never() -> AlwaysFalse:
    return AlwaysFalse()


def field_eq(field: str, value: Any, via: Optional[Hop] = None) -> FieldEquals:
    return FieldEquals(field=field, value=value, via=via)


def conjoin(*predicates: Predicate) -> Predicate:
    """AND predicates together.

    Nested conjunctions are flattened, always-true operands are dropped and a
    single always-false operand makes the whole conjunction always-false.
    """
    operands = []
    for predicate in predicates:
        if isinstance(predicate, AlwaysFalse):
            return never()
        if isinstance(predicate, AlwaysTrue):
            continue
        if isinstance(predicate, Conjunction):
            operands.extend(predicate.operands)
        else:
            operands.append(predicate)

    if not operands:
        return always()
    if len(operands) == 1:
        return operands[0]
    return Conjunction(operands=tuple(operands))


def from_mapping(filters: Optional[Mapping]) -> Predicate:
    """Turn ``{"field": value, ...}`` into a conjunction of equalities"""
    if not filters:
        return always()
    return conjoin(*(field_eq(key, value) for key, value in filters.items()))


def _read(row: Any, field: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(field)
    return getattr(row, field, None)


def evaluate(predicate: Predicate, row: Any, lookup: Optional[RowLookup] = None) -> bool:
    """Evaluate a predicate against a row (object or mapping).

    ``lookup(kind, id)`` resolves rows for predicates that read through a
    foreign key; it is required only when such a predicate is present.
    """
    if isinstance(predicate, AlwaysTrue):
        return True

    if isinstance(predicate, AlwaysFalse):
        return False

    if isinstance(predicate, Conjunction):
        return all(evaluate(operand, row, lookup) for operand in predicate.operands)

    if isinstance(predicate, FieldEquals):
        source = row
        if predicate.via is not None:
            if lookup is None:
                raise ValueError(f"predicate on '{predicate.field}' needs a row lookup for {predicate.via.target.value}")
            foreign_id = _read(row, predicate.via.foreign_key)
            if foreign_id is None:
                return False
            source = lookup(predicate.via.target, foreign_id)
            if source is None:
                return False
        return _read(source, predicate.field) == predicate.value

    raise TypeError(f"Unknown predicate {predicate!r}")


def describe(predicate: Predicate) -> str:
    """Human readable form, used by the CLI and in log lines"""
    if isinstance(predicate, AlwaysTrue):
        return "TRUE"
    if isinstance(predicate, AlwaysFalse):
        return "FALSE"
    if isinstance(predicate, Conjunction):
        return " AND ".join(describe(operand) for operand in predicate.operands)
    if predicate.via is not None:
        return f"{predicate.via.foreign_key} -> {predicate.via.target.value}.{predicate.field} == {predicate.value!r}"
    return f"{predicate.field} == {predicate.value!r}"
