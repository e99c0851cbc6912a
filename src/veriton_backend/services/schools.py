from typing import Any, Dict, Optional
from sqlalchemy import func

from veriton_backend.interface.schools import GradeInterface, SchoolInterface
from veriton_backend.model.school import School
from veriton_backend.permissions.principal import Principal
from veriton_backend.repositories.base import DuplicateError
from veriton_backend.services.base import EntityService


class SchoolService(EntityService):
    interface = SchoolInterface

    def _check_code(self, school_code: str, exclude_id: Optional[str] = None):
        # School codes are unique across tenants, so this lookup ignores scope
        query = self.db.query(School).filter(func.lower(School.school_code) == school_code.strip().lower())
        if exclude_id is not None:
            query = query.filter(School.id != exclude_id)
        if query.first() is not None:
            raise DuplicateError("school", {"school_code": school_code})

    def before_create(self, principal: Principal, values: Dict[str, Any]):
        self._check_code(values["school_code"])

    def before_update(self, principal: Principal, entity: Any, values: Dict[str, Any]):
        if values.get("school_code") is not None:
            self._check_code(values["school_code"], exclude_id=entity.id)


class GradeService(EntityService):
    interface = GradeInterface
