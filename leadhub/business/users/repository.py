from __future__ import annotations

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from leadhub.business.users.models import AppUser
from leadhub.platform.security.repository import BaseRepository


class UserRepository(BaseRepository):
    resource = "user"

    def get(self, session: Session, user_id: str) -> AppUser | None:
        return session.scalar(select(AppUser).where(AppUser.id == user_id))

    def list_by_role(self, session: Session, role: str, *, offset: int, limit: int) -> list[AppUser]:
        stmt: Select[tuple[AppUser]] = (
            select(AppUser)
            .where(AppUser.role == role)
            .order_by(AppUser.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(session.scalars(stmt).all())

    def count_by_role(self, session: Session, role: str) -> int:
        return int(session.scalar(select(func.count()).select_from(AppUser).where(AppUser.role == role)) or 0)

    def get_many(self, session: Session, user_ids: set[str]) -> dict[str, AppUser]:
        if not user_ids:
            return {}
        rows = session.scalars(select(AppUser).where(AppUser.id.in_(user_ids))).all()
        return {row.id: row for row in rows}
