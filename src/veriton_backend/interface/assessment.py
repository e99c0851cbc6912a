import datetime
from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

from veriton_backend.interface.base import EntityInterface
from veriton_backend.model.assessment import Exam, Question, Result
from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.principal import Role

AnswerOption = Literal["A", "B", "C", "D"]


class ExamCreate(BaseModel):
    school_id: Optional[str] = Field(None, description="Owning school, taken from the caller when omitted")
    grade_id: str
    module_id: str
    date: datetime.date
    created_by_teacher_id: Optional[str] = Field(None, description="Author, defaults to the calling teacher")
    title: Optional[str] = Field(None, max_length=255)
    total_marks: Optional[int] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0)
    is_active: bool = True


class ExamUpdate(BaseModel):
    grade_id: Optional[str] = None
    module_id: Optional[str] = None
    date: Optional[datetime.date] = None
    title: Optional[str] = Field(None, max_length=255)
    total_marks: Optional[int] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None


class ExamInterface(EntityInterface):
    kind = EntityKind.exam
    model = Exam
    create = ExamCreate
    update = ExamUpdate
    read_role = Role.student
    write_role = Role.teacher
    delete_role = Role.teacher
    parents = {
        "grade_id": EntityKind.grade,
        "module_id": EntityKind.module,
        "created_by_teacher_id": EntityKind.teacher,
    }
    owner_field = "created_by_teacher_id"


def _normalize_answer(v):
    if isinstance(v, str):
        return v.strip().upper()
    return v


class QuestionCreate(BaseModel):
    school_id: Optional[str] = Field(None, description="Owning school, taken from the caller when omitted")
    exam_id: str
    question_text: str = Field(min_length=1)
    option_a: str = Field(min_length=1, max_length=1024)
    option_b: str = Field(min_length=1, max_length=1024)
    option_c: str = Field(min_length=1, max_length=1024)
    option_d: str = Field(min_length=1, max_length=1024)
    correct_answer: AnswerOption = Field(description="One of A, B, C or D")
    is_active: bool = True

    @field_validator('correct_answer', mode='before')
    @classmethod
    def normalize_answer(cls, v):
        return _normalize_answer(v)


class QuestionUpdate(BaseModel):
    question_text: Optional[str] = Field(None, min_length=1)
    option_a: Optional[str] = Field(None, min_length=1, max_length=1024)
    option_b: Optional[str] = Field(None, min_length=1, max_length=1024)
    option_c: Optional[str] = Field(None, min_length=1, max_length=1024)
    option_d: Optional[str] = Field(None, min_length=1, max_length=1024)
    correct_answer: Optional[AnswerOption] = None
    is_active: Optional[bool] = None

    @field_validator('correct_answer', mode='before')
    @classmethod
    def normalize_answer(cls, v):
        return _normalize_answer(v)


class QuestionInterface(EntityInterface):
    kind = EntityKind.question
    model = Question
    create = QuestionCreate
    update = QuestionUpdate
    parents = {"exam_id": EntityKind.exam}


class ResultCreate(BaseModel):
    school_id: Optional[str] = Field(None, description="Owning school, taken from the caller when omitted")
    student_id: str
    exam_id: str
    obtained_marks: Decimal = Field(ge=0)
    grade: Optional[str] = Field(None, max_length=8)
    remarks: Optional[str] = None
    is_published: bool = False


class ResultUpdate(BaseModel):
    obtained_marks: Optional[Decimal] = Field(None, ge=0)
    grade: Optional[str] = Field(None, max_length=8)
    remarks: Optional[str] = None
    is_published: Optional[bool] = None


class ResultInterface(EntityInterface):
    kind = EntityKind.result
    model = Result
    create = ResultCreate
    update = ResultUpdate
    parents = {"student_id": EntityKind.student, "exam_id": EntityKind.exam}
