from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from leadhub import audit, events
from leadhub.business.submissions.models import Submission
from leadhub.business.submissions.repository import SubmissionRepository
from leadhub.business.submissions.schemas import SubmissionCreate, SubmissionRead, SubmissionStatusUpdate
from leadhub.core.errors import ForbiddenError, ForbiddenFieldError, NotFoundError, ValidationError
from leadhub.metrics import observe_status_transition, observe_submission_action
from leadhub.platform.security.context import Identity
from leadhub.platform.security.scope import SubmissionScope, UnrestrictedScope, resolve_scope


logger = logging.getLogger("leadhub.submissions")

REQUIRED_FIELDS = (
    "rep",
    "relevancy",
    "company_name",
    "first_name",
    "last_name",
    "email",
    "phone",
    "whatsapp",
    "tier",
    "volume",
)
LIST_FIELDS = ("partner_details", "target_regions", "lob", "grades")
OPTIONAL_TEXT_FIELDS = ("add_associates", "notes", "business_card_url")
EDITABLE_FIELDS = REQUIRED_FIELDS + LIST_FIELDS + OPTIONAL_TEXT_FIELDS
PROTECTED_FIELDS = frozenset(
    {
        "id",
        "user_id",
        "status",
        "admin_notes",
        "reviewed_by",
        "reviewed_at",
        "submitted_at",
        "created_at",
        "updated_at",
    }
)
ADMIN_NOTES_MAX_LENGTH = 500

_email_adapter = TypeAdapter(EmailStr)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_submission_id(raw: str | uuid.UUID) -> uuid.UUID | None:
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        return None


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def _clean_list(values: list[str] | None) -> list[str]:
    if not values:
        return []
    return [str(item).strip() for item in values]


@dataclass(slots=True)
class SubmissionService:
    """Creation, edits, deletion and review of a single submission."""

    repository: SubmissionRepository = SubmissionRepository()
    entity_type = "submission"
    valid_statuses = ("pending", "approved", "rejected", "in_review")
    valid_relevancy = ("High", "Medium", "Low")

    def create_submission(self, session: Session, identity: Identity, dto: SubmissionCreate) -> SubmissionRead:
        payload = dto.model_dump()
        for field_name in REQUIRED_FIELDS:
            if _is_blank(payload.get(field_name)):
                raise ValidationError(field_name)

        values = self._normalize(payload)
        now = utcnow()
        submission = Submission(
            **values,
            user_id=identity.user_id,
            status="pending",
            admin_notes="",
            submitted_at=now,
            created_at=now,
            updated_at=now,
        )
        self.repository.add(session, submission)
        created = self.to_read(submission)

        audit.record(
            actor_user_id=identity.user_id,
            entity_type=self.entity_type,
            entity_id=str(submission.id),
            action="create",
            before=None,
            after=created.model_dump(mode="json"),
            correlation_id=identity.correlation_id,
        )
        events.publish(
            "submission.created",
            identity.user_id,
            {"submission_id": str(submission.id), "company_name": submission.company_name},
        )
        session.commit()
        observe_submission_action("create")
        logger.info("submission.created", extra={"submission_id": str(created.id), "user_id": identity.user_id})
        return created

    def get_submission(self, session: Session, identity: Identity, submission_id: str | uuid.UUID) -> SubmissionRead:
        return self.to_read(self._get_visible(session, identity, submission_id))

    def update_submission(
        self,
        session: Session,
        identity: Identity,
        submission_id: str | uuid.UUID,
        payload: dict[str, Any],
    ) -> SubmissionRead:
        submission = self._get_visible(session, identity, submission_id)

        protected = [key for key in payload if key in PROTECTED_FIELDS]
        if protected:
            raise ForbiddenFieldError(self.entity_type, protected)

        for field_name in REQUIRED_FIELDS:
            if field_name in payload and _is_blank(payload[field_name]):
                raise ValidationError(field_name)

        changes = {key: value for key, value in payload.items() if key in EDITABLE_FIELDS}
        values = self._normalize(changes)

        before = self.to_read(submission).model_dump(mode="json")
        for key, value in values.items():
            setattr(submission, key, value)
        submission.updated_at = utcnow()
        session.flush()
        updated = self.to_read(submission)

        audit.record(
            actor_user_id=identity.user_id,
            entity_type=self.entity_type,
            entity_id=str(submission.id),
            action="update",
            before=before,
            after=updated.model_dump(mode="json"),
            correlation_id=identity.correlation_id,
        )
        events.publish(
            "submission.updated",
            identity.user_id,
            {"submission_id": str(submission.id), "fields": sorted(values)},
        )
        session.commit()
        observe_submission_action("update")
        logger.info("submission.updated", extra={"submission_id": str(updated.id), "user_id": identity.user_id})
        return updated

    def delete_submission(self, session: Session, identity: Identity, submission_id: str | uuid.UUID) -> None:
        submission = self._get_visible(session, identity, submission_id)
        before = self.to_read(submission).model_dump(mode="json")
        deleted_id = str(submission.id)

        self.repository.delete(session, submission)
        audit.record(
            actor_user_id=identity.user_id,
            entity_type=self.entity_type,
            entity_id=deleted_id,
            action="delete",
            before=before,
            after=None,
            correlation_id=identity.correlation_id,
        )
        events.publish("submission.deleted", identity.user_id, {"submission_id": deleted_id})
        session.commit()
        observe_submission_action("delete")
        logger.info("submission.deleted", extra={"submission_id": deleted_id, "user_id": identity.user_id})

    def transition_status(
        self,
        session: Session,
        identity: Identity,
        submission_id: str | uuid.UUID,
        dto: SubmissionStatusUpdate,
    ) -> SubmissionRead:
        if not identity.is_admin:
            raise ForbiddenError("Admin access required")
        if dto.status not in self.valid_statuses:
            raise ValidationError("status", "Status must be pending, approved, rejected, or in_review")
        notes = dto.admin_notes or ""
        if len(notes) > ADMIN_NOTES_MAX_LENGTH:
            raise ValidationError("admin_notes", f"Admin notes cannot exceed {ADMIN_NOTES_MAX_LENGTH} characters")

        submission = self._get_visible(session, identity, submission_id, scope=UnrestrictedScope())
        previous_status = submission.status
        before = self.to_read(submission).model_dump(mode="json")

        submission.status = dto.status
        submission.admin_notes = notes
        submission.reviewed_by = identity.user_id
        submission.reviewed_at = utcnow()
        session.flush()
        updated = self.to_read(submission)

        audit.record(
            actor_user_id=identity.user_id,
            entity_type=self.entity_type,
            entity_id=str(submission.id),
            action="status_change",
            before=before,
            after=updated.model_dump(mode="json"),
            correlation_id=identity.correlation_id,
        )
        events.publish(
            "submission.status_changed",
            identity.user_id,
            {"submission_id": str(submission.id), "from_status": previous_status, "to_status": dto.status},
        )
        session.commit()
        observe_status_transition(dto.status)
        logger.info(
            "submission.status_changed",
            extra={
                "submission_id": str(submission.id),
                "user_id": identity.user_id,
                "from_status": previous_status,
                "status": dto.status,
            },
        )
        return updated

    def to_read(self, submission: Submission) -> SubmissionRead:
        return SubmissionRead.model_validate(submission)

    def _get_visible(
        self,
        session: Session,
        identity: Identity,
        submission_id: str | uuid.UUID,
        *,
        scope: SubmissionScope | None = None,
    ) -> Submission:
        parsed_id = parse_submission_id(submission_id)
        submission = None
        if parsed_id is not None:
            submission = self.repository.get(session, scope or resolve_scope(identity), parsed_id)
        if submission is None:
            raise NotFoundError("Submission not found")
        return submission

    def _normalize(self, values: dict[str, Any]) -> dict[str, Any]:
        normalized: dict[str, Any] = {}
        for key, value in values.items():
            if key in LIST_FIELDS:
                normalized[key] = _clean_list(value)
            elif key in OPTIONAL_TEXT_FIELDS:
                normalized[key] = "" if value is None else str(value).strip()
            elif key in REQUIRED_FIELDS:
                normalized[key] = str(value).strip()

        if "relevancy" in normalized and normalized["relevancy"] not in self.valid_relevancy:
            raise ValidationError("relevancy", "Relevancy must be High, Medium, or Low")
        if "email" in normalized:
            try:
                _email_adapter.validate_python(normalized["email"])
            except PydanticValidationError as exc:
                raise ValidationError("email", "Please enter a valid email") from exc
            normalized["email"] = normalized["email"].lower()
        return normalized


submission_service = SubmissionService()
