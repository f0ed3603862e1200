from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.orm import Session

from leadhub import audit
from leadhub.business.admin.schemas import (
    AdminSubmissionListData,
    AdminSubmissionRead,
    DashboardData,
    DashboardOverview,
    UserDetailData,
    UserListData,
)
from leadhub.business.reporting.submissions.service import SubmissionStatsService
from leadhub.business.submissions.models import Submission
from leadhub.business.submissions.query import (
    DEFAULT_PAGE_SIZE,
    SubmissionCriteria,
    SubmissionQueryService,
    page_offset,
    positive_int,
)
from leadhub.business.submissions.schemas import SubmissionRead, SubmissionStatusUpdate
from leadhub.business.submissions.service import SubmissionService
from leadhub.business.users.models import AppUser
from leadhub.business.users.repository import UserRepository
from leadhub.business.users.schemas import UserRead, UserSummary
from leadhub.core.config import get_settings
from leadhub.core.errors import ForbiddenError, NotFoundError
from leadhub.core.responses import Pagination
from leadhub.metrics import observe_user_activation
from leadhub.platform.security.context import ROLE_ADMIN, ROLE_USER, Identity
from leadhub.platform.security.scope import OwnerScope, UnrestrictedScope


logger = logging.getLogger("leadhub.admin")


@dataclass(slots=True)
class AdminService:
    """Oversight operations over users and their submissions. Admin callers only."""

    users: UserRepository = UserRepository()
    submissions: SubmissionService = field(default_factory=SubmissionService)
    queries: SubmissionQueryService = field(default_factory=SubmissionQueryService)
    stats: SubmissionStatsService = field(default_factory=SubmissionStatsService)

    def list_users(
        self,
        session: Session,
        identity: Identity,
        *,
        page: int | str | None = 1,
        limit: int | str | None = DEFAULT_PAGE_SIZE,
    ) -> UserListData:
        self._require_admin(identity)
        page = positive_int(page, 1)
        limit = positive_int(limit, DEFAULT_PAGE_SIZE)
        offset = page_offset(page, limit)

        rows = [] if offset is None else self.users.list_by_role(session, ROLE_USER, offset=offset, limit=limit)
        total_items = self.users.count_by_role(session, ROLE_USER)
        return UserListData(
            users=[UserRead.model_validate(row) for row in rows],
            pagination=Pagination(
                current_page=page,
                total_pages=math.ceil(total_items / limit),
                total_items=total_items,
            ),
        )

    def get_user_detail(
        self,
        session: Session,
        identity: Identity,
        user_id: str,
        *,
        now: datetime | None = None,
    ) -> UserDetailData:
        self._require_admin(identity)
        user = self._get_user(session, user_id)

        scope = OwnerScope(owner_id=user.id)
        stmt = self.queries.repository.scoped_select(scope).order_by(
            Submission.submitted_at.desc(),
            Submission.created_at.desc(),
        )
        submissions = self.queries.repository.fetch(session, stmt)
        return UserDetailData(
            user=UserRead.model_validate(user),
            submissions=[self.submissions.to_read(item) for item in submissions],
            stats=self.stats.submission_summary(session, scope, now=now),
        )

    def list_submissions(
        self,
        session: Session,
        identity: Identity,
        criteria: SubmissionCriteria,
    ) -> AdminSubmissionListData:
        self._require_admin(identity)
        result = self.queries.list_submissions(session, identity, criteria)
        owners = self.users.get_many(session, {item.user_id for item in result.items})

        items: list[AdminSubmissionRead] = []
        for submission in result.items:
            owner = owners.get(submission.user_id)
            read = AdminSubmissionRead.model_validate(submission)
            read.user = UserSummary.model_validate(owner) if owner is not None else None
            items.append(read)
        return AdminSubmissionListData(submissions=items, pagination=result.pagination)

    def update_submission_status(
        self,
        session: Session,
        identity: Identity,
        submission_id: str | uuid.UUID,
        dto: SubmissionStatusUpdate,
    ) -> SubmissionRead:
        self._require_admin(identity)
        return self.submissions.transition_status(session, identity, submission_id, dto)

    def dashboard_stats(self, session: Session, identity: Identity, *, now: datetime | None = None) -> DashboardData:
        self._require_admin(identity)
        settings = get_settings()
        scope = UnrestrictedScope()

        overview = DashboardOverview(
            total_users=self.users.count_by_role(session, ROLE_USER),
            total_submissions=self.stats.total_count(session, scope),
            pending_submissions=self.stats.total_count(session, scope, status="pending"),
            approved_submissions=self.stats.total_count(session, scope, status="approved"),
        )
        return DashboardData(
            overview=overview,
            monthly_trend=self.stats.monthly_trend(
                session,
                scope,
                months_back=settings.dashboard_trend_months,
                now=now,
            ),
            top_companies=self.stats.top_companies(session, scope, limit=settings.dashboard_top_companies),
        )

    def toggle_user_active(self, session: Session, identity: Identity, user_id: str) -> tuple[UserRead, str]:
        self._require_admin(identity)
        user = self._get_user(session, user_id)
        if user.role == ROLE_ADMIN:
            raise ForbiddenError("Cannot deactivate admin users")

        before = UserRead.model_validate(user).model_dump(mode="json")
        user.is_active = not user.is_active
        session.flush()
        updated = UserRead.model_validate(user)

        audit.record(
            actor_user_id=identity.user_id,
            entity_type="user",
            entity_id=user.id,
            action="toggle_active",
            before=before,
            after=updated.model_dump(mode="json"),
            correlation_id=identity.correlation_id,
        )
        session.commit()
        observe_user_activation(updated.is_active)
        logger.info("user.active_toggled", extra={"user_id": user.id, "status": "active" if updated.is_active else "inactive"})

        message = "User activated successfully" if updated.is_active else "User deactivated successfully"
        return updated, message

    def _get_user(self, session: Session, user_id: str) -> AppUser:
        user = self.users.get(session, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def _require_admin(identity: Identity) -> None:
        if not identity.is_admin:
            raise ForbiddenError("Admin access required")


admin_service = AdminService()
