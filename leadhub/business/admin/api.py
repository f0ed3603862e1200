from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from leadhub.business.admin.schemas import (
    AdminSubmissionListData,
    DashboardData,
    UserData,
    UserDetailData,
    UserListData,
)
from leadhub.business.admin.service import admin_service
from leadhub.business.submissions.api import get_identity
from leadhub.business.submissions.query import SubmissionCriteria
from leadhub.business.submissions.schemas import SubmissionData, SubmissionStatusUpdate
from leadhub.core.database import get_db
from leadhub.core.errors import ForbiddenError
from leadhub.core.responses import ApiResponse
from leadhub.platform.security.context import Identity


def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_admin:
        raise ForbiddenError("Admin access required")
    return identity


router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/users", response_model=ApiResponse[UserListData])
def list_users(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
) -> ApiResponse[UserListData]:
    return ApiResponse(data=admin_service.list_users(db, identity, page=page, limit=limit))


@router.get("/users/{user_id}", response_model=ApiResponse[UserDetailData])
def get_user_detail(
    user_id: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
) -> ApiResponse[UserDetailData]:
    return ApiResponse(data=admin_service.get_user_detail(db, identity, user_id))


@router.patch("/users/{user_id}/toggle-status", response_model=ApiResponse[UserData])
def toggle_user_status(
    user_id: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
) -> ApiResponse[UserData]:
    user, message = admin_service.toggle_user_active(db, identity, user_id)
    return ApiResponse(message=message, data=UserData(user=user))


@router.get("/submissions", response_model=ApiResponse[AdminSubmissionListData])
def list_submissions(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    user_id: str | None = Query(default=None),
    status: str | None = Query(default=None),
    company_name: str | None = Query(default=None),
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
) -> ApiResponse[AdminSubmissionListData]:
    criteria = SubmissionCriteria(
        page=page,
        limit=limit,
        user_id=user_id,
        status=status,
        company_name=company_name,
    )
    return ApiResponse(data=admin_service.list_submissions(db, identity, criteria))


@router.patch("/submissions/{submission_id}/status", response_model=ApiResponse[SubmissionData])
def update_submission_status(
    submission_id: str,
    dto: SubmissionStatusUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
) -> ApiResponse[SubmissionData]:
    submission = admin_service.update_submission_status(db, identity, submission_id, dto)
    return ApiResponse(
        message="Submission status updated successfully",
        data=SubmissionData(submission=submission),
    )


@router.get("/dashboard/stats", response_model=ApiResponse[DashboardData])
def dashboard_stats(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
) -> ApiResponse[DashboardData]:
    return ApiResponse(data=admin_service.dashboard_stats(db, identity))
