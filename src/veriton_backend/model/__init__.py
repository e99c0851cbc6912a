from typing import Any, Dict, List, Tuple

from .base import Base, metadata
from .kinds import EntityKind
from .auth import User
from .school import School, Grade, Teacher, Student
from .curriculum import Module, Lesson, Scheduler, LessonCompletion
from .assessment import Exam, Question, Result
from .attendance import Attendance, ATTENDANCE_STATUSES

ENTITY_MODELS: Dict[EntityKind, Any] = {
    EntityKind.school: School,
    EntityKind.grade: Grade,
    EntityKind.teacher: Teacher,
    EntityKind.student: Student,
    EntityKind.module: Module,
    EntityKind.lesson: Lesson,
    EntityKind.scheduler: Scheduler,
    EntityKind.exam: Exam,
    EntityKind.question: Question,
    EntityKind.result: Result,
    EntityKind.attendance: Attendance,
    EntityKind.lesson_completion: LessonCompletion,
    EntityKind.user: User,
}

# Rows that reference a kind; deleting a referenced row is blocked while any exist
ENTITY_DEPENDENTS: Dict[EntityKind, List[Tuple[EntityKind, str]]] = {
    EntityKind.school: [
        (EntityKind.grade, "school_id"),
        (EntityKind.teacher, "school_id"),
        (EntityKind.student, "school_id"),
        (EntityKind.module, "school_id"),
        (EntityKind.user, "school_id"),
    ],
    EntityKind.grade: [
        (EntityKind.student, "grade_id"),
        (EntityKind.module, "grade_id"),
        (EntityKind.exam, "grade_id"),
        (EntityKind.scheduler, "grade_id"),
    ],
    EntityKind.teacher: [
        (EntityKind.exam, "created_by_teacher_id"),
        (EntityKind.scheduler, "teacher_id"),
        (EntityKind.attendance, "teacher_id"),
    ],
    EntityKind.student: [
        (EntityKind.result, "student_id"),
        (EntityKind.attendance, "student_id"),
        (EntityKind.lesson_completion, "student_id"),
    ],
    EntityKind.module: [
        (EntityKind.lesson, "module_id"),
        (EntityKind.exam, "module_id"),
        (EntityKind.scheduler, "module_id"),
    ],
    EntityKind.lesson: [
        (EntityKind.lesson_completion, "lesson_id"),
    ],
    EntityKind.exam: [
        (EntityKind.question, "exam_id"),
        (EntityKind.result, "exam_id"),
    ],
    EntityKind.user: [
        (EntityKind.teacher, "user_id"),
    ],
}


def entity_model(kind: EntityKind) -> Any:
    return ENTITY_MODELS[EntityKind(kind)]


__all__ = [
    'Base',
    'metadata',
    'EntityKind',
    'ENTITY_MODELS',
    'ENTITY_DEPENDENTS',
    'entity_model',
    # Identity
    'User',
    # School structure
    'School',
    'Grade',
    'Teacher',
    'Student',
    # Curriculum
    'Module',
    'Lesson',
    'Scheduler',
    'LessonCompletion',
    # Assessment
    'Exam',
    'Question',
    'Result',
    # Attendance
    'Attendance',
    'ATTENDANCE_STATUSES',
]
