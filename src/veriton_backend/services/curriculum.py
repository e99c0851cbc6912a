import logging
from typing import Any, Dict, List

from veriton_backend.api.exceptions import ForbiddenException
from veriton_backend.interface.curriculum import (
    LessonCompletionInterface,
    LessonInterface,
    ModuleInterface,
    SchedulerInterface,
    check_time_window,
)
from veriton_backend.model.base import utcnow
from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.core import require_role
from veriton_backend.permissions.principal import Principal, Role
from veriton_backend.repositories.base import ValidationFailedError
from veriton_backend.services.base import EntityService, http_errors

logger = logging.getLogger(__name__)


class ModuleService(EntityService):
    interface = ModuleInterface


class LessonService(EntityService):
    interface = LessonInterface

    def mark_completed(self, principal: Principal, lesson_id: str) -> str:
        """Record that the calling student finished a lesson.

        Marking the same lesson twice returns the existing completion.
        """
        require_role(principal, Role.student)
        if principal.student_id is None:
            raise ForbiddenException(detail="Only students can mark lessons as complete")

        with http_errors():
            lesson = self.store.get_by_id(EntityKind.lesson, principal, lesson_id)

            existing = self.store.list(EntityKind.lesson_completion, principal, extra_filter={
                "student_id": principal.student_id,
                "lesson_id": lesson.id,
            }, limit=1)
            if existing:
                return existing[0].id

            completion_id = self.store.create(EntityKind.lesson_completion, principal, {
                "school_id": lesson.school_id,
                "student_id": principal.student_id,
                "lesson_id": lesson.id,
                "completion_date": utcnow(),
            })
            logger.info("lesson %s completed by student %s", lesson.id, principal.student_id)
            return completion_id

    def completed_lesson_ids(self, principal: Principal) -> List[str]:
        require_role(principal, Role.student)
        if principal.student_id is None:
            return []

        with http_errors():
            completions = self.store.list(EntityKind.lesson_completion, principal,
                                          extra_filter={"student_id": principal.student_id})
        return [completion.lesson_id for completion in completions]


class SchedulerService(EntityService):
    interface = SchedulerInterface

    def before_update(self, principal: Principal, entity: Any, values: Dict[str, Any]):
        try:
            check_time_window(values.get("start_time", entity.start_time), values.get("end_time", entity.end_time))
        except ValueError as e:
            raise ValidationFailedError.for_field("end_time", str(e))


class LessonCompletionService(EntityService):
    interface = LessonCompletionInterface

    def before_create(self, principal: Principal, values: Dict[str, Any]):
        if principal.role == Role.student:
            if values.get("student_id") is None:
                values["student_id"] = principal.student_id
            elif values["student_id"] != principal.student_id:
                raise ValidationFailedError.for_field("student_id", "Students can only complete lessons for themselves")

        if values.get("student_id") is None:
            raise ValidationFailedError.for_field("student_id", "Student is required")
