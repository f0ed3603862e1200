from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, timezone

from opentelemetry import trace
from sqlalchemy import Select, extract, func, select
from sqlalchemy.orm import Session

from leadhub.business.reporting.submissions.schemas import CompanyCount, MonthlyBucket, SubmissionStats
from leadhub.business.submissions.models import Submission
from leadhub.business.submissions.repository import SubmissionRepository
from leadhub.platform.security.scope import SubmissionScope


tracer = trace.get_tracer("leadhub.reporting")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def shift_months(value: datetime, months: int) -> datetime:
    """Move ``value`` by whole calendar months, clamping the day to the target month."""

    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    return start, shift_months(start, 1)


@dataclass(slots=True)
class SubmissionStatsService:
    """Counts and groupings over a scoped submission set.

    Everything is computed from the store at call time. ``top_companies`` ties
    and the order of equal-count groups follow the store's grouping order.
    """

    repository: SubmissionRepository = SubmissionRepository()

    def total_count(self, session: Session, scope: SubmissionScope, *, status: str | None = None) -> int:
        stmt = select(func.count(Submission.id))
        if status is not None:
            stmt = stmt.where(Submission.status == status)
        return self._scalar_int(session, self.repository.apply_scope_query(stmt, scope))

    def unique_company_count(self, session: Session, scope: SubmissionScope) -> int:
        stmt = select(func.count(func.distinct(Submission.company_name)))
        return self._scalar_int(session, self.repository.apply_scope_query(stmt, scope))

    def monthly_submission_count(self, session: Session, scope: SubmissionScope, year: int, month: int) -> int:
        start, end = month_bounds(year, month)
        stmt = select(func.count(Submission.id)).where(
            Submission.submitted_at >= start,
            Submission.submitted_at < end,
        )
        return self._scalar_int(session, self.repository.apply_scope_query(stmt, scope))

    def monthly_trend(
        self,
        session: Session,
        scope: SubmissionScope,
        *,
        months_back: int = 6,
        now: datetime | None = None,
    ) -> list[MonthlyBucket]:
        current = now or utcnow()
        window_start = shift_months(current, -months_back)

        year_expr = extract("year", Submission.submitted_at)
        month_expr = extract("month", Submission.submitted_at)
        stmt = (
            select(year_expr.label("year"), month_expr.label("month"), func.count(Submission.id).label("count"))
            .where(Submission.submitted_at >= window_start, Submission.submitted_at <= current)
            .group_by(year_expr, month_expr)
            .order_by(year_expr.asc(), month_expr.asc())
        )
        with tracer.start_as_current_span("reporting.submissions.monthly_trend") as span:
            span.set_attribute("months_back", months_back)
            rows = session.execute(self.repository.apply_scope_query(stmt, scope)).all()

        return [MonthlyBucket(year=int(year), month=int(month), count=int(count)) for year, month, count in rows]

    def top_companies(self, session: Session, scope: SubmissionScope, *, limit: int = 10) -> list[CompanyCount]:
        count_expr = func.count(Submission.id)
        stmt = (
            select(Submission.company_name, count_expr.label("count"))
            .group_by(Submission.company_name)
            .order_by(count_expr.desc())
            .limit(limit)
        )
        with tracer.start_as_current_span("reporting.submissions.top_companies") as span:
            span.set_attribute("limit", limit)
            rows = session.execute(self.repository.apply_scope_query(stmt, scope)).all()

        return [CompanyCount(company_name=name, count=int(count)) for name, count in rows]

    def submission_summary(
        self,
        session: Session,
        scope: SubmissionScope,
        *,
        now: datetime | None = None,
    ) -> SubmissionStats:
        current = now or utcnow()
        return SubmissionStats(
            total_submissions=self.total_count(session, scope),
            unique_companies=self.unique_company_count(session, scope),
            monthly_submissions=self.monthly_submission_count(session, scope, current.year, current.month),
        )

    @staticmethod
    def _scalar_int(session: Session, stmt: Select[tuple[int]]) -> int:
        return int(session.scalar(stmt) or 0)


submission_stats_service = SubmissionStatsService()
