from __future__ import annotations

from dataclasses import dataclass

ROLE_USER = "user"
ROLE_ADMIN = "admin"


@dataclass(slots=True, frozen=True)
class Identity:
    """Authenticated caller: user id plus role, as issued by the auth service."""

    user_id: str
    role: str = ROLE_USER
    correlation_id: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
