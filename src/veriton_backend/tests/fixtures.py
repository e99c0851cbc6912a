"""
Test fixtures for the test suite.

Builds an in-memory SQLite database holding two schools, each with grades,
teachers, students, curriculum, exams and results, plus principals for every
role.
"""

import datetime
import pytest
from decimal import Decimal
from types import SimpleNamespace
from typing import Generator
from unittest.mock import MagicMock, Mock
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from veriton_backend.model import (
    Attendance,
    Base,
    Exam,
    Grade,
    Lesson,
    Module,
    Question,
    Result,
    Scheduler,
    School,
    Student,
    Teacher,
    User,
)
from veriton_backend.model.base import new_id
from veriton_backend.permissions.principal import Principal, Role

ATTENDANCE_DAY = datetime.date(2025, 3, 10)


# Test database setup
@pytest.fixture(scope="function")
def test_db() -> Generator[Session, None, None]:
    """Create a test database session using SQLite in-memory."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# Mock database for simpler tests
@pytest.fixture
def mock_db() -> Mock:
    """Create a mock database session with common query patterns."""
    db = MagicMock(spec=Session)

    query_mock = MagicMock()
    query_mock.filter = MagicMock(return_value=query_mock)
    query_mock.order_by = MagicMock(return_value=query_mock)
    query_mock.limit = MagicMock(return_value=query_mock)
    query_mock.offset = MagicMock(return_value=query_mock)
    query_mock.first = MagicMock(return_value=None)
    query_mock.all = MagicMock(return_value=[])
    query_mock.count = MagicMock(return_value=0)

    db.query = MagicMock(return_value=query_mock)
    db.add = MagicMock()
    db.commit = MagicMock()
    db.refresh = MagicMock()
    db.rollback = MagicMock()

    return db


def _user(db: Session, school_id, email: str, role: Role) -> User:
    user = User(id=new_id(), school_id=school_id, email=email, password_hash="hashed", role=role.value)
    db.add(user)
    return user


def _school(db: Session, code: str) -> SimpleNamespace:
    """One school with two grades, two teachers and a student in each grade"""
    ids = SimpleNamespace()

    school = School(id=new_id(), school_code=code, name=f"School {code}")
    db.add(school)
    ids.school = school.id

    ids.grade = new_id()
    ids.other_grade = new_id()
    db.add_all([
        Grade(id=ids.grade, school_id=school.id, grade_level="7", section="A", grade_name="7A"),
        Grade(id=ids.other_grade, school_id=school.id, grade_level="8", section="A", grade_name="8A"),
    ])

    ids.principal_user = _user(db, school.id, f"principal@{code}.test", Role.principal).id
    ids.teacher_user = _user(db, school.id, f"teacher@{code}.test", Role.teacher).id
    ids.other_teacher_user = _user(db, school.id, f"teacher2@{code}.test", Role.teacher).id
    ids.student_user = _user(db, school.id, f"student@{code}.test", Role.student).id

    ids.teacher = new_id()
    ids.other_teacher = new_id()
    db.add_all([
        Teacher(id=ids.teacher, school_id=school.id, user_id=ids.teacher_user, employee_id="T1",
                first_name="Ada", last_name="Teach", email=f"teacher@{code}.test"),
        Teacher(id=ids.other_teacher, school_id=school.id, user_id=ids.other_teacher_user, employee_id="T2",
                first_name="Bo", last_name="Teach", email=f"teacher2@{code}.test"),
    ])

    ids.student = new_id()
    ids.other_student = new_id()
    db.add_all([
        Student(id=ids.student, school_id=school.id, grade_id=ids.grade, user_id=ids.student_user,
                student_number="S1", roll_no="1", first_name="Sam", last_name="Pupil",
                email=f"sam@{code}.test"),
        Student(id=ids.other_student, school_id=school.id, grade_id=ids.other_grade,
                student_number="S2", roll_no="2", first_name="Kim", last_name="Pupil",
                email=f"kim@{code}.test"),
    ])

    ids.module = new_id()
    ids.other_module = new_id()
    db.add_all([
        Module(id=ids.module, school_id=school.id, grade_id=ids.grade, name="Robotics",
               created_by_teacher_id=ids.teacher),
        Module(id=ids.other_module, school_id=school.id, grade_id=ids.other_grade, name="Electronics",
               created_by_teacher_id=ids.other_teacher),
    ])

    ids.lesson = new_id()
    ids.other_lesson = new_id()
    db.add_all([
        Lesson(id=ids.lesson, school_id=school.id, module_id=ids.module, sub_topic="Motors",
               created_by_teacher_id=ids.teacher),
        Lesson(id=ids.other_lesson, school_id=school.id, module_id=ids.other_module, sub_topic="Circuits",
               created_by_teacher_id=ids.other_teacher),
    ])

    ids.exam = new_id()
    ids.other_exam = new_id()
    db.add_all([
        Exam(id=ids.exam, school_id=school.id, grade_id=ids.grade, module_id=ids.module,
             date=datetime.date(2025, 3, 1), created_by_teacher_id=ids.teacher, title="Robotics quiz",
             total_marks=50),
        Exam(id=ids.other_exam, school_id=school.id, grade_id=ids.other_grade, module_id=ids.other_module,
             date=datetime.date(2025, 3, 2), created_by_teacher_id=ids.other_teacher, title="Circuits quiz",
             total_marks=50),
    ])

    ids.question = new_id()
    db.add(Question(id=ids.question, school_id=school.id, exam_id=ids.exam, question_text="What spins?",
                    option_a="Motor", option_b="Wire", option_c="LED", option_d="Switch", correct_answer="A"))

    ids.scheduler = new_id()
    ids.other_scheduler = new_id()
    db.add_all([
        Scheduler(id=ids.scheduler, school_id=school.id, grade_id=ids.grade, module_id=ids.module,
                  teacher_id=ids.teacher, date=datetime.date(2025, 3, 3),
                  start_time=datetime.time(9, 0), end_time=datetime.time(10, 0)),
        Scheduler(id=ids.other_scheduler, school_id=school.id, grade_id=ids.other_grade, module_id=ids.other_module,
                  teacher_id=ids.other_teacher, date=datetime.date(2025, 3, 3),
                  start_time=datetime.time(11, 0), end_time=datetime.time(12, 0)),
    ])

    ids.published_result = new_id()
    ids.unpublished_result = new_id()
    ids.other_result = new_id()
    db.add_all([
        Result(id=ids.published_result, school_id=school.id, student_id=ids.student, exam_id=ids.exam,
               obtained_marks=Decimal("42"), grade="A", is_published=True),
        Result(id=ids.unpublished_result, school_id=school.id, student_id=ids.student, exam_id=ids.exam,
               obtained_marks=Decimal("30"), grade="C", is_published=False),
        Result(id=ids.other_result, school_id=school.id, student_id=ids.other_student, exam_id=ids.other_exam,
               obtained_marks=Decimal("45"), grade="A", is_published=True),
    ])

    ids.teacher_attendance = new_id()
    ids.student_attendance = new_id()
    db.add_all([
        Attendance(id=ids.teacher_attendance, school_id=school.id, teacher_id=ids.teacher,
                   date=ATTENDANCE_DAY, status="Present"),
        Attendance(id=ids.student_attendance, school_id=school.id, student_id=ids.student,
                   date=ATTENDANCE_DAY, status="Late", remarks="Bus"),
    ])

    return ids


@pytest.fixture
def seed(test_db) -> SimpleNamespace:
    """Two schools, ``a`` and ``b``, with identical layouts"""
    data = SimpleNamespace(a=_school(test_db, "alpha"), b=_school(test_db, "beta"))
    test_db.commit()
    return data


# Principal fixtures for different user types
@pytest.fixture
def principals(seed) -> SimpleNamespace:
    a, b = seed.a, seed.b

    def tenant(role: Role, ids: SimpleNamespace, **extra) -> Principal:
        return Principal(is_authenticated=True, role=role, school_id=ids.school, **extra)

    return SimpleNamespace(
        anonymous=Principal.anonymous(),
        super_admin=Principal(is_authenticated=True, role=Role.super_admin),
        roleless=Principal(is_authenticated=True),
        admin_a=tenant(Role.admin, a),
        staff_a=tenant(Role.staff, a),
        principal_a=tenant(Role.principal, a, user_id=a.principal_user),
        teacher_a=tenant(Role.teacher, a, teacher_id=a.teacher, user_id=a.teacher_user),
        student_a=tenant(Role.student, a, student_id=a.student, grade_id=a.grade, user_id=a.student_user),
        student_b=tenant(Role.student, b, student_id=b.student, grade_id=b.grade, user_id=b.student_user),
        teacher_without_id=tenant(Role.teacher, a),
        student_without_grade=tenant(Role.student, a, student_id=a.student),
        schoolless_principal=Principal(is_authenticated=True, role=Role.principal),
    )
