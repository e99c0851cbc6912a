from typing import List
from pydantic import BaseModel
from sqlalchemy.orm import Session

from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.core import require_role
from veriton_backend.permissions.predicates import Hop, field_eq
from veriton_backend.permissions.principal import Principal, Role
from veriton_backend.repositories.base import EntityStore
from veriton_backend.services.base import http_errors


class StudentProgress(BaseModel):
    student_id: str
    name: str
    progress: float


class DashboardStats(BaseModel):
    total_students: int = 0
    total_teachers: int = 0
    total_modules: int = 0
    total_lessons: int = 0
    total_exams: int = 0
    total_results: int = 0
    total_schools: int = 0
    total_grades: int = 0
    total_principals: int = 0
    total_principals_pending: int = 0
    total_teachers_pending: int = 0
    total_students_pending: int = 0
    student_progress: List[StudentProgress] = []


class DashboardService:
    """Counts per entity kind, all taken through the scoped store"""

    def __init__(self, db: Session, store: EntityStore = None):
        self.db = db
        self.store = store or EntityStore(db)

    def student_progress(self, principal: Principal, limit: int = 5) -> List[StudentProgress]:
        """Share of their grade's lessons completed by the most recently added students"""
        students = self.store.list(EntityKind.student, principal, order_by="-created_at", limit=limit)

        progress = []
        for student in students:
            total = self.store.count(EntityKind.lesson, principal, extra_filter=field_eq(
                "grade_id", student.grade_id, via=Hop(foreign_key="module_id", target=EntityKind.module)
            ))
            completed = self.store.count(EntityKind.lesson_completion, principal,
                                         extra_filter={"student_id": student.id})
            progress.append(StudentProgress(
                student_id=student.id,
                name=student.first_name,
                progress=0.0 if total == 0 else round(completed / total * 100, 2),
            ))
        return progress

    def stats(self, principal: Principal) -> DashboardStats:
        require_role(principal, Role.teacher)

        count = self.store.count
        with http_errors():
            return DashboardStats(
                total_students=count(EntityKind.student, principal),
                total_teachers=count(EntityKind.teacher, principal),
                total_modules=count(EntityKind.module, principal),
                total_lessons=count(EntityKind.lesson, principal),
                total_exams=count(EntityKind.exam, principal),
                total_results=count(EntityKind.result, principal),
                total_schools=count(EntityKind.school, principal),
                total_grades=count(EntityKind.grade, principal),
                total_principals=count(EntityKind.user, principal, {"role": Role.principal.value}),
                total_principals_pending=count(EntityKind.user, principal,
                                               {"role": Role.principal.value, "is_active": False}),
                total_teachers_pending=count(EntityKind.teacher, principal, {"is_active": False}),
                total_students_pending=count(EntityKind.student, principal, {"is_active": False}),
                student_progress=self.student_progress(principal),
            )
