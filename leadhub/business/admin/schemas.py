from __future__ import annotations

from pydantic import BaseModel

from leadhub.business.reporting.submissions.schemas import CompanyCount, MonthlyBucket, SubmissionStats
from leadhub.business.submissions.schemas import SubmissionRead
from leadhub.business.users.schemas import UserRead, UserSummary
from leadhub.core.responses import Pagination


class UserData(BaseModel):
    user: UserRead


class UserListData(BaseModel):
    users: list[UserRead]
    pagination: Pagination


class UserDetailData(BaseModel):
    user: UserRead
    submissions: list[SubmissionRead]
    stats: SubmissionStats


class AdminSubmissionRead(SubmissionRead):
    user: UserSummary | None = None


class AdminSubmissionListData(BaseModel):
    submissions: list[AdminSubmissionRead]
    pagination: Pagination | None


class DashboardOverview(BaseModel):
    total_users: int
    total_submissions: int
    pending_submissions: int
    approved_submissions: int


class DashboardData(BaseModel):
    overview: DashboardOverview
    monthly_trend: list[MonthlyBucket]
    top_companies: list[CompanyCount]
