import enum
from dataclasses import dataclass


class Role(enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    FACULTY = "faculty"
    STUDENT = "student"
    GUEST = "guest"

    @classmethod
    def parse(cls, value: str):
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return None

    @property
    def is_staff(self) -> bool:
        return self in (Role.ADMIN, Role.MANAGER)


STAFF_ROLES = (Role.ADMIN, Role.MANAGER)


@dataclass(frozen=True)
class Actor:
    """Caller identity as supplied by the session collaborator."""
    id: str
    email: str
    role: Role

    @property
    def is_staff(self) -> bool:
        return self.role.is_staff

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
