from typing import Dict

from veriton_backend.model.kinds import EntityKind
from .base import EntityInterface, ListQuery
from .schools import SchoolInterface, GradeInterface
from .people import TeacherInterface, StudentInterface
from .curriculum import ModuleInterface, LessonInterface, SchedulerInterface, LessonCompletionInterface
from .assessment import ExamInterface, QuestionInterface, ResultInterface
from .attendance import AttendanceInterface, AttendanceStatus
from .users import UserInterface

INTERFACES: Dict[EntityKind, EntityInterface] = {
    interface.kind: interface for interface in (
        SchoolInterface,
        GradeInterface,
        TeacherInterface,
        StudentInterface,
        ModuleInterface,
        LessonInterface,
        SchedulerInterface,
        LessonCompletionInterface,
        ExamInterface,
        QuestionInterface,
        ResultInterface,
        AttendanceInterface,
        UserInterface,
    )
}


def entity_interface(kind: EntityKind) -> EntityInterface:
    return INTERFACES[EntityKind(kind)]
