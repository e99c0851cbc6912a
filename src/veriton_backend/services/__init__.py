"""
Application services, one per entity kind.

Each service validates payloads, gates operations by role tier and delegates
to the scoped entity store.
"""

from typing import Dict, Type

from veriton_backend.model.kinds import EntityKind
from .base import EntityService, http_errors, parse_payload
from .schools import SchoolService, GradeService
from .people import TeacherService, StudentService
from .curriculum import ModuleService, LessonService, SchedulerService, LessonCompletionService
from .assessment import ExamService, QuestionService, ResultService
from .attendance import AttendanceService
from .users import UserService
from .dashboard import DashboardService, DashboardStats

SERVICES: Dict[EntityKind, Type[EntityService]] = {
    service.interface.kind: service for service in (
        SchoolService,
        GradeService,
        TeacherService,
        StudentService,
        ModuleService,
        LessonService,
        SchedulerService,
        LessonCompletionService,
        ExamService,
        QuestionService,
        ResultService,
        AttendanceService,
        UserService,
    )
}

__all__ = [
    'EntityService',
    'http_errors',
    'parse_payload',
    'SERVICES',
    'SchoolService',
    'GradeService',
    'TeacherService',
    'StudentService',
    'ModuleService',
    'LessonService',
    'SchedulerService',
    'LessonCompletionService',
    'ExamService',
    'QuestionService',
    'ResultService',
    'AttendanceService',
    'UserService',
    'DashboardService',
    'DashboardStats',
]
