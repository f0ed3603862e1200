from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from leadhub.business.reporting.submissions.service import submission_stats_service
from leadhub.business.submissions.export import export_submissions_csv
from leadhub.business.submissions.query import SubmissionCriteria, submission_query_service
from leadhub.business.submissions.schemas import (
    SubmissionCreate,
    SubmissionData,
    SubmissionListData,
    SubmissionUpdate,
)
from leadhub.business.submissions.service import submission_service
from leadhub.context import bind_actor, get_correlation_id
from leadhub.core.auth import AuthUser, get_current_user as get_auth_user
from leadhub.core.database import get_db
from leadhub.core.responses import ApiResponse
from leadhub.platform.security.context import Identity
from leadhub.platform.security.scope import resolve_scope


router = APIRouter(prefix="/api/submissions", tags=["submissions"])
user_router = APIRouter(prefix="/api/user", tags=["user"])


async def get_identity(request: Request, auth_user: AuthUser = Depends(get_auth_user)) -> Identity:
    correlation_id = get_correlation_id() or getattr(request.state, "correlation_id", None)
    bind_actor(auth_user.sub)
    return Identity(user_id=auth_user.sub, role=auth_user.role, correlation_id=correlation_id)


@router.post("", response_model=ApiResponse[SubmissionData], status_code=status.HTTP_201_CREATED)
def create_submission(
    dto: SubmissionCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> ApiResponse[SubmissionData]:
    submission = submission_service.create_submission(db, identity, dto)
    return ApiResponse(message="Submission created successfully", data=SubmissionData(submission=submission))


@router.get("", response_model=ApiResponse[SubmissionListData])
def list_submissions(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    recent: str | None = Query(default=None),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> ApiResponse[SubmissionListData]:
    result = submission_query_service.list_submissions(
        db,
        identity,
        SubmissionCriteria(page=page, limit=limit, recent=recent == "true"),
    )
    stats = submission_stats_service.submission_summary(db, resolve_scope(identity))
    return ApiResponse(
        data=SubmissionListData(
            submissions=[submission_service.to_read(item) for item in result.items],
            stats=stats,
            pagination=result.pagination,
        )
    )


@router.get("/export")
def export_submissions(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> Response:
    content = export_submissions_csv(submission_query_service.export_rows(db, identity))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="submissions.csv"'},
    )


@router.get("/{submission_id}", response_model=ApiResponse[SubmissionData])
def get_submission(
    submission_id: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> ApiResponse[SubmissionData]:
    submission = submission_service.get_submission(db, identity, submission_id)
    return ApiResponse(data=SubmissionData(submission=submission))


@router.put("/{submission_id}", response_model=ApiResponse[SubmissionData])
def update_submission(
    submission_id: str,
    dto: SubmissionUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> ApiResponse[SubmissionData]:
    payload = dto.model_dump(exclude_unset=True)
    submission = submission_service.update_submission(db, identity, submission_id, payload)
    return ApiResponse(message="Submission updated successfully", data=SubmissionData(submission=submission))


@router.delete("/{submission_id}", response_model=ApiResponse[None])
def delete_submission(
    submission_id: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> ApiResponse[None]:
    submission_service.delete_submission(db, identity, submission_id)
    return ApiResponse(message="Submission deleted successfully")


user_router.add_api_route("/submissions", list_submissions, methods=["GET"], response_model=ApiResponse[SubmissionListData])
user_router.add_api_route("/submissions/{submission_id}", get_submission, methods=["GET"], response_model=ApiResponse[SubmissionData])
user_router.add_api_route("/submissions/{submission_id}", update_submission, methods=["PUT"], response_model=ApiResponse[SubmissionData])
user_router.add_api_route("/submissions/{submission_id}", delete_submission, methods=["DELETE"], response_model=ApiResponse[None])
