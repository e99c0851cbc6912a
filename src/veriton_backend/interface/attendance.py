import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from veriton_backend.interface.base import EntityInterface
from veriton_backend.model.attendance import Attendance
from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.principal import Role


class AttendanceStatus(str, Enum):
    present = "Present"
    absent = "Absent"
    late = "Late"
    excused = "Excused"


def check_single_subject(teacher_id: Optional[str], student_id: Optional[str]):
    if (teacher_id is None) == (student_id is None):
        raise ValueError('Exactly one of teacher_id or student_id must be set')


class AttendanceCreate(BaseModel):
    school_id: Optional[str] = Field(None, description="Owning school, taken from the caller when omitted")
    date: datetime.date
    status: AttendanceStatus
    remarks: Optional[str] = None
    teacher_id: Optional[str] = None
    student_id: Optional[str] = None

    @model_validator(mode='after')
    def validate_subject(self):
        check_single_subject(self.teacher_id, self.student_id)
        return self

    model_config = ConfigDict(use_enum_values=True)


class AttendanceUpdate(BaseModel):
    date: Optional[datetime.date] = None
    status: Optional[AttendanceStatus] = None
    remarks: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)


class AttendanceEntry(BaseModel):
    """One line of a bulk attendance save; ``id`` set means update"""
    id: Optional[str] = None
    date: datetime.date
    status: AttendanceStatus
    remarks: Optional[str] = None
    teacher_id: Optional[str] = None
    student_id: Optional[str] = None

    @model_validator(mode='after')
    def validate_subject(self):
        check_single_subject(self.teacher_id, self.student_id)
        return self

    model_config = ConfigDict(use_enum_values=True)


class StudentAttendanceLine(BaseModel):
    attendance_id: Optional[str] = None
    student_id: str
    student_name: str
    roll_no: Optional[str] = None
    status: AttendanceStatus
    remarks: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)


class AttendanceRecord(BaseModel):
    id: str
    date: datetime.date
    status: AttendanceStatus
    remarks: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True, from_attributes=True)


class TeacherMonthlyReport(BaseModel):
    teacher_id: str
    month: int
    year: int
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0
    records: List[AttendanceRecord] = []


class AttendanceInterface(EntityInterface):
    kind = EntityKind.attendance
    model = Attendance
    create = AttendanceCreate
    update = AttendanceUpdate
    read_role = Role.teacher
    write_role = Role.teacher
    delete_role = Role.teacher
    parents = {"teacher_id": EntityKind.teacher, "student_id": EntityKind.student}
