from leadhub.business.submissions.models import Submission
from leadhub.business.submissions.query import SubmissionCriteria, SubmissionQueryService, submission_query_service
from leadhub.business.submissions.repository import SubmissionRepository
from leadhub.business.submissions.service import SubmissionService, submission_service

__all__ = [
    "Submission",
    "SubmissionCriteria",
    "SubmissionQueryService",
    "SubmissionRepository",
    "SubmissionService",
    "submission_query_service",
    "submission_service",
]
