from enum import Enum


class EntityKind(str, Enum):
    """Entity kinds known to the scope engine and the generic store.

    Values match the table names of the mapped models.
    """
    school = "school"
    grade = "grade"
    teacher = "teacher"
    student = "student"
    module = "module"
    lesson = "lesson"
    scheduler = "scheduler"
    exam = "exam"
    question = "question"
    result = "result"
    attendance = "attendance"
    lesson_completion = "lesson_completion"
    user = "user"
