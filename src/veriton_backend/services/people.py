from typing import Any, Dict, Optional
from sqlalchemy import func

from veriton_backend.interface.people import StudentInterface, TeacherInterface
from veriton_backend.model.school import Student
from veriton_backend.permissions.principal import Principal
from veriton_backend.repositories.base import DuplicateError
from veriton_backend.services.base import EntityService


class TeacherService(EntityService):
    interface = TeacherInterface


class StudentService(EntityService):
    interface = StudentInterface

    def _check_email(self, school_id: str, email: str, exclude_id: Optional[str] = None):
        query = self.db.query(Student).filter(
            Student.school_id == school_id,
            func.lower(Student.email) == email.lower(),
        )
        if exclude_id is not None:
            query = query.filter(Student.id != exclude_id)
        if query.first() is not None:
            raise DuplicateError("student", {"school_id": school_id, "email": email})

    def before_create(self, principal: Principal, values: Dict[str, Any]):
        self._check_email(values["school_id"], values["email"])

    def before_update(self, principal: Principal, entity: Any, values: Dict[str, Any]):
        if values.get("email") is not None:
            self._check_email(entity.school_id, values["email"], exclude_id=entity.id)
