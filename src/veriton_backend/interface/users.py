from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from veriton_backend.interface.base import EntityInterface
from veriton_backend.model.auth import User
from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.principal import Role


class UserCreate(BaseModel):
    school_id: Optional[str] = Field(None, description="School of the account, taken from the caller when omitted")
    email: EmailStr = Field(description="Login email, stored lower-cased")
    password_hash: str = Field(min_length=1, description="Already hashed password")
    role: Role = Field(description="Role granted to the account")
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=64)

    @field_validator('email')
    @classmethod
    def lower_email(cls, v):
        return v.strip().lower()

    model_config = ConfigDict(use_enum_values=True)


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=64)

    # Protected, the store rejects updates that set them
    password_hash: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator('email')
    @classmethod
    def lower_email(cls, v):
        return v.strip().lower() if v is not None else v


class UserInterface(EntityInterface):
    kind = EntityKind.user
    model = User
    create = UserCreate
    update = UserUpdate
    read_role = Role.staff
    write_role = Role.staff
    delete_role = Role.admin
    school_required = False
