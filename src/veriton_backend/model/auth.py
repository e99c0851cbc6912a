from typing import Optional
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String

from .base import Base, new_id, utcnow


class User(Base):
    """Login identity.

    ``password_hash``, ``role`` and ``is_active`` are only changed through the
    transition methods below; generic updates that touch them are rejected by
    the entity store.
    """
    __tablename__ = 'user'
    __protected_fields__ = frozenset({"password_hash", "role", "is_active", "last_login_at"})

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    school_id = Column(ForeignKey('school.id', ondelete='SET NULL'), index=True)
    email = Column(String(320), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False)
    first_name = Column(String(255))
    last_name = Column(String(255))
    phone = Column(String(64))
    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(DateTime(True))

    def update_password(self, password_hash: str):
        self.password_hash = password_hash

    def set_role(self, role: str):
        self.role = role

    def activate(self):
        self.is_active = True

    def deactivate(self):
        self.is_active = False

    def record_login(self):
        self.last_login_at = utcnow()

    @property
    def full_name(self) -> Optional[str]:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else None
