import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from veriton_backend.interface.base import EntityInterface
from veriton_backend.model.curriculum import Lesson, LessonCompletion, Module, Scheduler
from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.principal import Role


class ModuleCreate(BaseModel):
    school_id: Optional[str] = Field(None, description="Owning school, taken from the caller when omitted")
    grade_id: str = Field(description="Grade the module is taught in")
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=4096)
    credits: int = Field(0, ge=0)
    created_by_teacher_id: Optional[str] = None
    is_active: bool = True


class ModuleUpdate(BaseModel):
    grade_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=4096)
    credits: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ModuleInterface(EntityInterface):
    kind = EntityKind.module
    model = Module
    create = ModuleCreate
    update = ModuleUpdate
    read_role = Role.student
    write_role = Role.principal
    delete_role = Role.principal
    parents = {"grade_id": EntityKind.grade, "created_by_teacher_id": EntityKind.teacher}
    owner_field = "created_by_teacher_id"


class LessonCreate(BaseModel):
    school_id: Optional[str] = Field(None, description="Owning school, taken from the caller when omitted")
    module_id: str = Field(description="Module the lesson belongs to")
    sub_topic: str = Field(min_length=1, max_length=255)
    activity: Optional[str] = None
    video_url: Optional[str] = Field(None, max_length=2048)
    diagram_url: Optional[str] = Field(None, max_length=2048)
    code: Optional[str] = None
    procedure: Optional[str] = None
    required_material: Optional[str] = None
    what_you_get: Optional[str] = None
    created_by_teacher_id: Optional[str] = None
    is_active: bool = True


class LessonUpdate(BaseModel):
    module_id: Optional[str] = None
    sub_topic: Optional[str] = Field(None, min_length=1, max_length=255)
    activity: Optional[str] = None
    video_url: Optional[str] = None
    diagram_url: Optional[str] = None
    code: Optional[str] = None
    procedure: Optional[str] = None
    required_material: Optional[str] = None
    what_you_get: Optional[str] = None
    is_active: Optional[bool] = None


class LessonInterface(EntityInterface):
    kind = EntityKind.lesson
    model = Lesson
    create = LessonCreate
    update = LessonUpdate
    read_role = Role.student
    write_role = Role.teacher
    delete_role = Role.teacher
    parents = {"module_id": EntityKind.module, "created_by_teacher_id": EntityKind.teacher}
    owner_field = "created_by_teacher_id"


def check_time_window(start_time: Optional[datetime.time], end_time: Optional[datetime.time]):
    if start_time is not None and end_time is not None and end_time <= start_time:
        raise ValueError('End time must be after start time')


class SchedulerCreate(BaseModel):
    school_id: Optional[str] = Field(None, description="Owning school, taken from the caller when omitted")
    grade_id: str
    module_id: str
    lesson_id: Optional[str] = None
    teacher_id: Optional[str] = Field(None, description="Assigned teacher, defaults to the calling teacher")
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    is_active: bool = True

    @model_validator(mode='after')
    def validate_time_window(self):
        check_time_window(self.start_time, self.end_time)
        return self


class SchedulerUpdate(BaseModel):
    grade_id: Optional[str] = None
    module_id: Optional[str] = None
    lesson_id: Optional[str] = None
    teacher_id: Optional[str] = None
    date: Optional[datetime.date] = None
    start_time: Optional[datetime.time] = None
    end_time: Optional[datetime.time] = None
    is_active: Optional[bool] = None

    @model_validator(mode='after')
    def validate_time_window(self):
        check_time_window(self.start_time, self.end_time)
        return self


class SchedulerInterface(EntityInterface):
    kind = EntityKind.scheduler
    model = Scheduler
    create = SchedulerCreate
    update = SchedulerUpdate
    read_role = Role.student
    write_role = Role.teacher
    delete_role = Role.teacher
    parents = {
        "grade_id": EntityKind.grade,
        "module_id": EntityKind.module,
        "lesson_id": EntityKind.lesson,
        "teacher_id": EntityKind.teacher,
    }
    owner_field = "teacher_id"


class LessonCompletionCreate(BaseModel):
    school_id: Optional[str] = None
    student_id: Optional[str] = Field(None, description="Completing student, defaults to the caller")
    lesson_id: str

    @field_validator('lesson_id')
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError('Lesson id cannot be blank')
        return v


class LessonCompletionInterface(EntityInterface):
    kind = EntityKind.lesson_completion
    model = LessonCompletion
    create = LessonCompletionCreate
    update = None
    read_role = Role.student
    write_role = Role.student
    delete_role = Role.admin
    parents = {"student_id": EntityKind.student, "lesson_id": EntityKind.lesson}
