from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Select
from sqlalchemy.orm import Session

from leadhub.business.submissions.models import Submission
from leadhub.business.submissions.repository import SubmissionRepository
from leadhub.core.responses import Pagination
from leadhub.platform.security.context import Identity
from leadhub.platform.security.scope import resolve_scope


RECENT_LIMIT = 3
DEFAULT_PAGE_SIZE = 10
# Largest LIMIT/OFFSET the store accepts (signed 64-bit).
MAX_ROW_BOUND = 2**63 - 1


def positive_int(value: Any, default: int, maximum: int = MAX_ROW_BOUND) -> int:
    try:
        coerced = int(value)
    except (TypeError, ValueError):
        return default
    if coerced < 1:
        return default
    return min(coerced, maximum)


def page_offset(page: int, limit: int) -> int | None:
    """Row offset of ``page``, or None when the page lies beyond any addressable row."""

    offset = (page - 1) * limit
    return offset if offset <= MAX_ROW_BOUND else None


@dataclass(slots=True)
class SubmissionCriteria:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    recent: bool = False
    user_id: str | None = None
    status: str | None = None
    company_name: str | None = None

    def __post_init__(self) -> None:
        self.page = positive_int(self.page, 1)
        self.limit = positive_int(self.limit, DEFAULT_PAGE_SIZE)


@dataclass(slots=True)
class SubmissionPage:
    items: list[Submission] = field(default_factory=list)
    pagination: Pagination | None = None


@dataclass(slots=True)
class SubmissionQueryService:
    """Scoped, filtered and paginated submission listings.

    Ordering is newest ``submitted_at`` first, then newest ``created_at``.
    Rows that tie on both keep whatever order the store returns them in.
    """

    repository: SubmissionRepository = SubmissionRepository()

    def build_query(self, identity: Identity, criteria: SubmissionCriteria) -> Select[tuple[Submission]]:
        stmt = self.repository.scoped_select(resolve_scope(identity))

        # Caller-supplied filters only narrow the unrestricted admin scope.
        if identity.is_admin:
            if criteria.user_id:
                stmt = stmt.where(Submission.user_id == criteria.user_id)
            if criteria.status:
                stmt = stmt.where(Submission.status == criteria.status)
            if criteria.company_name:
                stmt = stmt.where(Submission.company_name.icontains(criteria.company_name, autoescape=True))

        return stmt.order_by(Submission.submitted_at.desc(), Submission.created_at.desc())

    def list_submissions(self, session: Session, identity: Identity, criteria: SubmissionCriteria) -> SubmissionPage:
        stmt = self.build_query(identity, criteria)

        if criteria.recent:
            return SubmissionPage(items=self.repository.fetch(session, stmt, limit=RECENT_LIMIT), pagination=None)

        offset = page_offset(criteria.page, criteria.limit)
        items = [] if offset is None else self.repository.fetch(session, stmt, offset=offset, limit=criteria.limit)
        total_items = self.repository.count(session, stmt)
        pagination = Pagination(
            current_page=criteria.page,
            total_pages=math.ceil(total_items / criteria.limit),
            total_items=total_items,
        )
        return SubmissionPage(items=items, pagination=pagination)

    def export_rows(self, session: Session, identity: Identity) -> list[Submission]:
        return self.repository.fetch(session, self.build_query(identity, SubmissionCriteria()))


submission_query_service = SubmissionQueryService()
