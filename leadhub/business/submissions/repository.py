from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from leadhub.business.submissions.models import Submission
from leadhub.platform.security.repository import BaseRepository
from leadhub.platform.security.scope import SubmissionScope


class SubmissionRepository(BaseRepository):
    resource = "submission"
    owner_column = Submission.__table__.c.user_id

    def scoped_select(self, scope: SubmissionScope) -> Select[tuple[Submission]]:
        return self.apply_scope_query(select(Submission), scope)

    def get(self, session: Session, scope: SubmissionScope, submission_id: uuid.UUID) -> Submission | None:
        stmt = self.scoped_select(scope).where(Submission.id == submission_id)
        return session.scalar(stmt)

    def fetch(self, session: Session, stmt: Select[tuple[Submission]], *, offset: int = 0, limit: int | None = None) -> list[Submission]:
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(session.scalars(stmt).all())

    def count(self, session: Session, stmt: Select[Any]) -> int:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        return int(session.scalar(count_stmt) or 0)

    def add(self, session: Session, submission: Submission) -> Submission:
        session.add(submission)
        session.flush()
        return submission

    def delete(self, session: Session, submission: Submission) -> None:
        session.delete(submission)
        session.flush()
