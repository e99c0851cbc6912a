"""
Tests for compiling scope predicates into SQLAlchemy filters.
"""

import pytest

from veriton_backend.model import Exam, Lesson, Result
from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.core import build_scope_predicate, scoped_query
from veriton_backend.permissions.predicates import Hop, always, conjoin, field_eq, never
from veriton_backend.permissions.query_builders import ScopeQueryBuilder


class TestScopeQueryBuilder:

    def test_always_true_leaves_query_untouched(self, test_db):
        query = test_db.query(Exam)
        assert ScopeQueryBuilder.filter_query(query, always(), Exam) is query

    def test_always_false_returns_no_rows(self, test_db, seed):
        query = ScopeQueryBuilder.filter_query(test_db.query(Exam), never(), Exam)
        assert query.all() == []

    def test_field_equality(self, test_db, seed):
        predicate = conjoin(field_eq("school_id", seed.a.school), field_eq("created_by_teacher_id", seed.a.teacher))
        rows = ScopeQueryBuilder.filter_query(test_db.query(Exam), predicate, Exam).all()
        assert [row.id for row in rows] == [seed.a.exam]

    def test_foreign_key_hop_compiles_to_subquery(self, test_db, seed):
        predicate = field_eq("grade_id", seed.a.grade, via=Hop(foreign_key="module_id", target=EntityKind.module))
        rows = ScopeQueryBuilder.filter_query(test_db.query(Lesson), predicate, Lesson).all()
        assert [row.id for row in rows] == [seed.a.lesson]

    def test_unknown_column_raises(self):
        with pytest.raises(ValueError):
            ScopeQueryBuilder.compile(field_eq("no_such_column", 1), Exam)

    def test_scoped_query_for_student(self, test_db, seed, principals):
        rows = scoped_query(principals.student_a, EntityKind.result, test_db).all()
        assert [row.id for row in rows] == [seed.a.published_result]

    def test_compiled_predicate_matches_in_memory_evaluation(self, test_db, seed, principals):
        from veriton_backend.permissions.predicates import evaluate

        predicate = build_scope_predicate(principals.student_a, EntityKind.result)
        compiled = {row.id for row in ScopeQueryBuilder.filter_query(test_db.query(Result), predicate, Result)}
        evaluated = {row.id for row in test_db.query(Result).all() if evaluate(predicate, row)}
        assert compiled == evaluated
