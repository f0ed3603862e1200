from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy import true
from sqlalchemy.sql.elements import ColumnElement

from leadhub.platform.security.context import Identity


class SubmissionScope(Protocol):
    """Visibility predicate over owned records."""

    def clause(self, owner_column: Any) -> ColumnElement[bool]: ...

    def allows(self, owner_id: str | None) -> bool: ...


@dataclass(slots=True, frozen=True)
class OwnerScope:
    owner_id: str

    def clause(self, owner_column: Any) -> ColumnElement[bool]:
        return owner_column == self.owner_id

    def allows(self, owner_id: str | None) -> bool:
        return owner_id == self.owner_id


@dataclass(slots=True, frozen=True)
class UnrestrictedScope:
    def clause(self, owner_column: Any) -> ColumnElement[bool]:
        return true()

    def allows(self, owner_id: str | None) -> bool:
        return True


def resolve_scope(identity: Identity) -> SubmissionScope:
    if identity.is_admin:
        return UnrestrictedScope()
    return OwnerScope(owner_id=identity.user_id)
