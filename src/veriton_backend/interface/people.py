from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from veriton_backend.interface.base import EntityInterface
from veriton_backend.model.kinds import EntityKind
from veriton_backend.model.school import Student, Teacher
from veriton_backend.permissions.principal import Role


class TeacherCreate(BaseModel):
    school_id: Optional[str] = Field(None, description="Owning school, taken from the caller when omitted")
    user_id: str = Field(description="Login account of the teacher")
    employee_id: str = Field(min_length=1, max_length=64)
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=64)
    address: Optional[str] = Field(None, max_length=1024)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=32)
    joining_date: Optional[date] = None
    qualification: Optional[str] = Field(None, max_length=255)
    specialization: Optional[str] = Field(None, max_length=255)
    salary: Optional[Decimal] = Field(None, ge=0)
    profile_picture_url: Optional[str] = Field(None, max_length=2048)
    is_active: bool = True

    @field_validator('email')
    @classmethod
    def lower_email(cls, v):
        return v.lower()


class TeacherUpdate(BaseModel):
    employee_id: Optional[str] = Field(None, min_length=1, max_length=64)
    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    joining_date: Optional[date] = None
    qualification: Optional[str] = None
    specialization: Optional[str] = None
    salary: Optional[Decimal] = Field(None, ge=0)
    profile_picture_url: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator('email')
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v is not None else v


class TeacherInterface(EntityInterface):
    kind = EntityKind.teacher
    model = Teacher
    create = TeacherCreate
    update = TeacherUpdate
    read_role = Role.principal
    write_role = Role.staff
    delete_role = Role.admin
    parents = {"user_id": EntityKind.user}


class StudentCreate(BaseModel):
    school_id: Optional[str] = Field(None, description="Owning school, taken from the caller when omitted")
    grade_id: str = Field(description="Grade the student is enrolled in")
    user_id: Optional[str] = Field(None, description="Login account, if the student has one")
    student_number: str = Field(min_length=1, max_length=64)
    roll_no: Optional[str] = Field(None, max_length=64)
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=64)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=32)
    blood_group: Optional[str] = Field(None, max_length=8)
    address: Optional[str] = Field(None, max_length=1024)
    admission_date: Optional[date] = None
    parent_guardian_name: Optional[str] = Field(None, max_length=255)
    parent_guardian_phone: Optional[str] = Field(None, max_length=64)
    parent_guardian_email: Optional[EmailStr] = None
    emergency_contact: Optional[str] = Field(None, max_length=255)
    profile_picture_url: Optional[str] = Field(None, max_length=2048)
    is_active: bool = True

    @field_validator('email')
    @classmethod
    def lower_email(cls, v):
        return v.lower()


class StudentUpdate(BaseModel):
    grade_id: Optional[str] = None
    user_id: Optional[str] = None
    student_number: Optional[str] = Field(None, min_length=1, max_length=64)
    roll_no: Optional[str] = None
    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    address: Optional[str] = None
    admission_date: Optional[date] = None
    parent_guardian_name: Optional[str] = None
    parent_guardian_phone: Optional[str] = None
    parent_guardian_email: Optional[EmailStr] = None
    emergency_contact: Optional[str] = None
    profile_picture_url: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator('email')
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v is not None else v


class StudentInterface(EntityInterface):
    kind = EntityKind.student
    model = Student
    create = StudentCreate
    update = StudentUpdate
    read_role = Role.teacher
    write_role = Role.teacher
    delete_role = Role.principal
    parents = {"grade_id": EntityKind.grade, "user_id": EntityKind.user}
