from datetime import date
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from veriton_backend.interface.base import EntityInterface
from veriton_backend.model.kinds import EntityKind
from veriton_backend.model.school import Grade, School
from veriton_backend.permissions.principal import Role


def _validate_website(v):
    if v and not (v.startswith('http://') or v.startswith('https://')):
        raise ValueError('URL must start with http:// or https://')
    return v


class SchoolCreate(BaseModel):
    school_code: str = Field(min_length=1, max_length=64, description="Unique school code")
    name: str = Field(min_length=1, max_length=255, description="School name")
    logo_url: Optional[str] = Field(None, max_length=2048)
    address: Optional[str] = Field(None, max_length=1024)
    city: Optional[str] = Field(None, max_length=255)
    state: Optional[str] = Field(None, max_length=255)
    postal_code: Optional[str] = Field(None, max_length=64)
    country: Optional[str] = Field(None, max_length=255)
    contact_email: Optional[EmailStr] = Field(None, description="Contact email address")
    contact_phone: Optional[str] = Field(None, max_length=64)
    principal_name: Optional[str] = Field(None, max_length=255)
    established_date: Optional[date] = None
    website: Optional[str] = Field(None, max_length=2048, description="School website URL")
    is_active: bool = True

    @field_validator('school_code')
    @classmethod
    def normalize_code(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('School code cannot be blank')
        return v

    @field_validator('website')
    @classmethod
    def validate_website(cls, v):
        return _validate_website(v)


class SchoolUpdate(BaseModel):
    school_code: Optional[str] = Field(None, min_length=1, max_length=64)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    logo_url: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    principal_name: Optional[str] = None
    established_date: Optional[date] = None
    website: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator('school_code')
    @classmethod
    def normalize_code(cls, v):
        return v.strip() if v is not None else v

    @field_validator('website')
    @classmethod
    def validate_website(cls, v):
        return _validate_website(v)


class SchoolInterface(EntityInterface):
    kind = EntityKind.school
    model = School
    create = SchoolCreate
    update = SchoolUpdate
    read_role = Role.principal
    write_role = Role.principal
    delete_role = Role.admin
    tenant_scoped = False


class GradeCreate(BaseModel):
    school_id: Optional[str] = Field(None, description="Owning school, taken from the caller when omitted")
    grade_level: str = Field(min_length=1, max_length=32)
    section: str = Field(min_length=1, max_length=32)
    grade_name: str = Field(min_length=1, max_length=255)
    capacity: int = Field(0, ge=0)
    class_teacher_id: Optional[str] = None
    class_room: Optional[str] = Field(None, max_length=255)
    academic_year: Optional[str] = Field(None, max_length=32)
    is_active: bool = True


class GradeUpdate(BaseModel):
    grade_level: Optional[str] = Field(None, min_length=1, max_length=32)
    section: Optional[str] = Field(None, min_length=1, max_length=32)
    grade_name: Optional[str] = Field(None, min_length=1, max_length=255)
    capacity: Optional[int] = Field(None, ge=0)
    class_teacher_id: Optional[str] = None
    class_room: Optional[str] = None
    academic_year: Optional[str] = None
    is_active: Optional[bool] = None


class GradeInterface(EntityInterface):
    kind = EntityKind.grade
    model = Grade
    create = GradeCreate
    update = GradeUpdate
    read_role = Role.student
    write_role = Role.principal
    delete_role = Role.principal
    parents = {"class_teacher_id": EntityKind.teacher}
