"""
Tests for the scoped entity store against an in-memory database.
"""

import pytest
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from veriton_backend.api.exceptions import UnauthorizedException
from veriton_backend.model import Exam, Grade, Lesson, Module, Result, Scheduler, Student, entity_model
from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.predicates import field_eq
from veriton_backend.repositories.base import (
    DependencyConflictError,
    DuplicateError,
    EntityStore,
    NotFoundError,
    RepositoryError,
    ValidationFailedError,
)


@pytest.fixture
def store(test_db):
    return EntityStore(test_db)


def ids(rows):
    return {row.id for row in rows}


class TestScopedReads:

    @pytest.mark.parametrize("kind", list(EntityKind))
    def test_super_admin_sees_all_rows(self, store, test_db, seed, principals, kind):
        total = test_db.query(entity_model(kind)).count()
        assert store.count(kind, principals.super_admin) == total
        assert store.count(kind, principals.roleless) == total

    @pytest.mark.parametrize("kind", [EntityKind.grade, EntityKind.teacher, EntityKind.student, EntityKind.module,
                                      EntityKind.lesson, EntityKind.exam, EntityKind.scheduler, EntityKind.result,
                                      EntityKind.attendance, EntityKind.user, EntityKind.question])
    def test_tenant_principal_only_sees_own_school(self, store, seed, principals, kind):
        rows = store.list(kind, principals.admin_a)
        assert rows
        assert all(row.school_id == seed.a.school for row in rows)

    def test_school_list_for_tenant(self, store, seed, principals):
        assert ids(store.list(EntityKind.school, principals.principal_a)) == {seed.a.school}

    def test_student_sees_only_itself(self, store, seed, principals):
        assert ids(store.list(EntityKind.student, principals.student_a)) == {seed.a.student}

    def test_student_curriculum_is_limited_to_grade(self, store, seed, principals):
        student = principals.student_a
        assert ids(store.list(EntityKind.grade, student)) == {seed.a.grade}
        assert ids(store.list(EntityKind.module, student)) == {seed.a.module}
        assert ids(store.list(EntityKind.lesson, student)) == {seed.a.lesson}
        assert ids(store.list(EntityKind.exam, student)) == {seed.a.exam}
        assert ids(store.list(EntityKind.scheduler, student)) == {seed.a.scheduler}

    def test_student_results_are_own_and_published(self, store, seed, principals):
        rows = store.list(EntityKind.result, principals.student_a)
        assert ids(rows) == {seed.a.published_result}
        assert all(row.student_id == seed.a.student and row.is_published for row in rows)

    def test_teacher_schedules_and_exams(self, store, seed, principals):
        teacher = principals.teacher_a
        assert ids(store.list(EntityKind.scheduler, teacher)) == {seed.a.scheduler}
        assert ids(store.list(EntityKind.exam, teacher)) == {seed.a.exam}
        assert store.count(EntityKind.module, teacher) == 2

    def test_staff_see_unpublished_results(self, store, seed, principals):
        rows = store.list(EntityKind.result, principals.principal_a)
        assert seed.a.unpublished_result in ids(rows)

    def test_fail_closed_principals(self, store, principals):
        assert store.list(EntityKind.exam, principals.teacher_without_id) == []
        assert store.list(EntityKind.lesson, principals.student_without_grade) == []
        assert store.list(EntityKind.grade, principals.schoolless_principal) == []

    def test_unauthenticated_raises(self, store, seed, principals):
        with pytest.raises(UnauthorizedException):
            store.list(EntityKind.school, principals.anonymous)
        with pytest.raises(UnauthorizedException):
            store.get_by_id(EntityKind.school, principals.anonymous, seed.a.school)
        with pytest.raises(UnauthorizedException):
            store.create(EntityKind.grade, principals.anonymous, {"school_id": seed.a.school})

    def test_get_by_id_masks_other_tenants(self, store, seed, principals):
        assert store.get_by_id(EntityKind.student, principals.admin_a, seed.a.student).id == seed.a.student
        with pytest.raises(NotFoundError):
            store.get_by_id(EntityKind.student, principals.admin_a, seed.b.student)
        with pytest.raises(NotFoundError):
            store.get_by_id(EntityKind.student, principals.admin_a, "does-not-exist")

    def test_cross_school_scenario(self, store, seed, principals):
        student = principals.student_a
        assert store.list(EntityKind.grade, student, extra_filter={"id": seed.b.grade}) == []
        with pytest.raises(NotFoundError):
            store.get_by_id(EntityKind.student, student, seed.b.student)

    def test_extra_filter_only_narrows(self, store, seed, principals):
        rows = store.list(EntityKind.exam, principals.teacher_a, extra_filter={"grade_id": seed.a.other_grade})
        assert rows == []
        rows = store.list(EntityKind.exam, principals.admin_a, extra_filter=field_eq("grade_id", seed.a.other_grade))
        assert ids(rows) == {seed.a.other_exam}

    def test_extra_filter_on_unknown_field(self, store, seed, principals):
        with pytest.raises(ValidationFailedError):
            store.list(EntityKind.exam, principals.admin_a, extra_filter={"nope": 1})

    def test_ordering_and_pagination(self, store, seed, principals):
        rows = store.list(EntityKind.grade, principals.admin_a, order_by="-grade_name")
        assert [row.grade_name for row in rows] == ["8A", "7A"]

        first = store.list(EntityKind.grade, principals.admin_a, limit=1)
        second = store.list(EntityKind.grade, principals.admin_a, limit=1, offset=1)
        assert len(first) == len(second) == 1
        assert first[0].id != second[0].id

    def test_ordering_on_unknown_field(self, store, seed, principals):
        with pytest.raises(ValidationFailedError) as exc_info:
            store.list(EntityKind.grade, principals.admin_a, order_by="nope")
        assert exc_info.value.errors[0]["field"] == "order_by"


class TestWrites:

    def test_create_assigns_id_and_timestamp(self, store, test_db, seed, principals):
        entity_id = store.create(EntityKind.grade, principals.admin_a, {
            "school_id": seed.a.school, "grade_level": "9", "section": "B", "grade_name": "9B",
        })
        grade = test_db.query(Grade).filter(Grade.id == entity_id).one()
        assert grade.created_at is not None
        assert grade.school_id == seed.a.school

    def test_create_rejects_id(self, store, seed, principals):
        with pytest.raises(ValidationFailedError) as exc_info:
            store.create(EntityKind.grade, principals.admin_a, {"id": "mine", "school_id": seed.a.school})
        assert exc_info.value.errors == [{"field": "id", "message": "Field cannot be changed"}]

    def test_create_duplicate_raises(self, store, seed, principals):
        with pytest.raises(DuplicateError) as exc_info:
            store.create(EntityKind.school, principals.super_admin, {"school_code": "alpha", "name": "Again"})
        assert exc_info.value.criteria == {"school_code": "alpha"}

    def test_create_check_violation_is_validation_error(self, store, seed, principals):
        with pytest.raises(ValidationFailedError):
            store.create(EntityKind.question, principals.admin_a, {
                "school_id": seed.a.school, "exam_id": seed.a.exam, "question_text": "?",
                "option_a": "a", "option_b": "b", "option_c": "c", "option_d": "d", "correct_answer": "E",
            })

    def test_update_replaces_supplied_fields(self, store, seed, principals):
        module = store.update(EntityKind.module, principals.admin_a, seed.a.module, {"name": "Advanced robotics"})
        assert module.name == "Advanced robotics"
        assert module.grade_id == seed.a.grade

    def test_update_rejects_immutable_fields(self, store, seed, principals):
        with pytest.raises(ValidationFailedError):
            store.update(EntityKind.module, principals.admin_a, seed.a.module, {"created_at": None})

    def test_update_rejects_protected_user_fields(self, store, seed, principals):
        with pytest.raises(ValidationFailedError) as exc_info:
            store.update(EntityKind.user, principals.admin_a, seed.a.teacher_user, {"role": "Admin"})
        assert exc_info.value.errors[0]["field"] == "role"

    def test_update_across_tenants_is_not_found(self, store, test_db, seed, principals):
        with pytest.raises(NotFoundError):
            store.update(EntityKind.module, principals.admin_a, seed.b.module, {"name": "Hijacked"})
        assert test_db.query(Module).filter(Module.id == seed.b.module).one().name == "Robotics"

    def test_update_outside_teacher_scope_is_not_found(self, store, seed, principals):
        with pytest.raises(NotFoundError):
            store.update(EntityKind.scheduler, principals.teacher_a, seed.a.other_scheduler, {"is_active": False})

    @pytest.mark.parametrize("principal_name", ["teacher_a", "admin_a", "super_admin"])
    def test_update_cannot_move_row_to_other_school(self, store, test_db, seed, principals, principal_name):
        with pytest.raises(ValidationFailedError) as exc_info:
            store.update(EntityKind.lesson, getattr(principals, principal_name), seed.a.lesson,
                         {"school_id": seed.b.school})
        assert exc_info.value.errors == [{"field": "school_id", "message": "Field cannot be changed"}]
        assert test_db.query(Lesson).filter(Lesson.id == seed.a.lesson).one().school_id == seed.a.school

    def test_update_cannot_leave_own_scope(self, store, test_db, seed, principals):
        with pytest.raises(ValidationFailedError) as exc_info:
            store.update(EntityKind.scheduler, principals.teacher_a, seed.a.scheduler,
                         {"teacher_id": seed.a.other_teacher})
        assert exc_info.value.errors[0]["field"] == "teacher_id"
        assert test_db.query(Scheduler).filter(Scheduler.id == seed.a.scheduler).one().teacher_id == seed.a.teacher

    def test_update_within_scope_of_wider_role(self, store, seed, principals):
        scheduler = store.update(EntityKind.scheduler, principals.admin_a, seed.a.scheduler,
                                 {"teacher_id": seed.a.other_teacher})
        assert scheduler.teacher_id == seed.a.other_teacher

    def test_staged_writes_commit_together(self, store, test_db, seed, principals):
        grade_id = store.create(EntityKind.grade, principals.admin_a, {
            "school_id": seed.a.school, "grade_level": "9", "section": "B", "grade_name": "9B",
        }, commit=False)
        store.update(EntityKind.module, principals.admin_a, seed.a.module, {"name": "Staged"}, commit=False)
        store.commit(EntityKind.grade)

        assert test_db.query(Grade).filter(Grade.id == grade_id).count() == 1
        assert test_db.query(Module).filter(Module.id == seed.a.module).one().name == "Staged"

    def test_rejected_update_discards_staged_rows(self, store, test_db, seed, principals):
        before = test_db.query(Grade).count()
        store.create(EntityKind.grade, principals.admin_a, {
            "school_id": seed.a.school, "grade_level": "9", "section": "B", "grade_name": "9B",
        }, commit=False)
        with pytest.raises(ValidationFailedError):
            store.update(EntityKind.scheduler, principals.teacher_a, seed.a.scheduler,
                         {"teacher_id": seed.a.other_teacher}, commit=False)
        assert test_db.query(Grade).count() == before

    def test_delete_twice(self, store, seed, principals):
        assert store.delete(EntityKind.question, principals.admin_a, seed.a.question) is True
        with pytest.raises(NotFoundError):
            store.delete(EntityKind.question, principals.admin_a, seed.a.question)

    def test_delete_across_tenants_is_not_found(self, store, test_db, seed, principals):
        with pytest.raises(NotFoundError):
            store.delete(EntityKind.result, principals.admin_a, seed.b.published_result)
        assert test_db.query(Result).filter(Result.id == seed.b.published_result).count() == 1

    def test_delete_with_dependents_is_blocked(self, store, test_db, seed, principals):
        with pytest.raises(DependencyConflictError) as exc_info:
            store.delete(EntityKind.module, principals.admin_a, seed.a.module)
        assert exc_info.value.dependents == {"lesson": 1, "exam": 1, "scheduler": 1}
        assert test_db.query(Module).filter(Module.id == seed.a.module).count() == 1

    def test_delete_leaf_rows(self, store, test_db, seed, principals):
        store.delete(EntityKind.scheduler, principals.teacher_a, seed.a.scheduler)
        assert test_db.query(Scheduler).filter(Scheduler.id == seed.a.scheduler).count() == 0

    def test_student_cannot_see_rows_to_delete(self, store, test_db, seed, principals):
        with pytest.raises(NotFoundError):
            store.delete(EntityKind.student, principals.student_a, seed.a.other_student)
        assert test_db.query(Student).filter(Student.id == seed.a.other_student).count() == 1

    def test_dependents_ignore_scope(self, store, seed):
        assert store.dependents(EntityKind.exam, seed.a.exam) == {"question": 1, "result": 2}
        assert store.dependents(EntityKind.lesson, seed.a.lesson) == {}


class TestRowsMatchPredicate:

    def test_lessons_visible_to_student_follow_module_grade(self, store, test_db, seed, principals):
        for lesson in store.list(EntityKind.lesson, principals.student_a):
            module = test_db.query(Module).filter(Module.id == lesson.module_id).one()
            assert module.grade_id == seed.a.grade

    def test_exams_visible_to_student_b(self, store, test_db, seed, principals):
        rows = store.list(EntityKind.exam, principals.student_b)
        assert ids(rows) == {seed.b.exam}
        assert all(isinstance(row, Exam) for row in rows)
        assert all(row.grade_id == seed.b.grade for row in rows)

    def test_lesson_count_matches_list(self, store, seed, principals):
        assert store.count(EntityKind.lesson, principals.student_b) == len(store.list(EntityKind.lesson, principals.student_b))
        assert store.count(EntityKind.lesson, principals.admin_a) == 2


class TestCommitFailures:

    def test_database_error_rolls_back(self, mock_db, principals):
        mock_db.commit.side_effect = SQLAlchemyError("connection lost")
        with pytest.raises(RepositoryError):
            EntityStore(mock_db).create(EntityKind.grade, principals.admin_a, {"school_id": "s"})
        mock_db.rollback.assert_called_once()

    def test_unique_violation_becomes_duplicate(self, mock_db, principals):
        mock_db.commit.side_effect = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: user.email"))
        with pytest.raises(DuplicateError) as exc_info:
            EntityStore(mock_db).create(EntityKind.user, principals.admin_a, {
                "email": "a@example.com", "password_hash": "x", "role": "Teacher",
            })
        assert exc_info.value.criteria == {"email": "a@example.com"}
        mock_db.rollback.assert_called_once()
