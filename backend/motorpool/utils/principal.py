from dataclasses import dataclass
from typing import Optional

from motorpool.models.user import Role, has_role_or_higher


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as supplied by the identity provider."""
    id: str
    role: Role = Role.EMPLOYEE
    email: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "role", Role(self.role))

    def has_role(self, required: Role) -> bool:
        return has_role_or_higher(self.role, required)

    @property
    def is_approver(self) -> bool:
        return self.has_role(Role.MANAGER)
