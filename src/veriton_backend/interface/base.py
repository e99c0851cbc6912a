from abc import ABC
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.principal import Role


class ListQuery(BaseModel):
    skip: Optional[int] = Field(0, ge=0)
    limit: Optional[int] = Field(100, ge=1, le=1000)


class EntityInterface(ABC):
    """Declares what a service needs to know about one entity kind.

    ``parents`` maps foreign-key fields of the payload to the kind they point
    at; referenced rows must be visible to the caller and belong to the same
    school. ``owner_field`` defaults to the calling teacher's id on create.
    """
    kind: EntityKind = None
    model: Any = None
    create: BaseModel = None
    update: BaseModel = None

    read_role: Role = Role.student
    write_role: Role = Role.teacher
    delete_role: Role = Role.teacher

    tenant_scoped: bool = True
    school_required: bool = True
    parents: Dict[str, EntityKind] = {}
    owner_field: Optional[str] = None
