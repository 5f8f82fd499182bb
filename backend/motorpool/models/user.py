"""User model for principals supplied by the identity provider."""

import uuid
from datetime import datetime
import enum

from sqlalchemy import Boolean, Column, DateTime, String

from motorpool.database import Base


class Role(str, enum.Enum):
    DRIVER = "DRIVER"
    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"

    @property
    def rank(self) -> int:
        return ROLE_HIERARCHY[self]


ROLE_HIERARCHY = {
    Role.DRIVER: 1,
    Role.EMPLOYEE: 2,
    Role.MANAGER: 3,
    Role.ADMIN: 4,
    Role.SUPER_ADMIN: 5,
}

APPROVER_ROLES = (Role.MANAGER, Role.ADMIN, Role.SUPER_ADMIN)


def has_role_or_higher(role: Role, required: Role) -> bool:
    return Role(role).rank >= Role(required).rank


class User(Base):
    """
    Represents a user known to the reservation engine.

    Attributes:
        id: Identity provider subject (string primary key)
        email: Contact address for reservation emails
        display_name: User's full name
        role: One of ``Role``; drives approval and check-in permissions
        is_active: Deactivated users keep their history but cannot book
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, index=True)
    display_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=Role.EMPLOYEE.value)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<User {self.email}>"
