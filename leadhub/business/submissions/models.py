from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from leadhub.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Submission(Base):
    __tablename__ = "submission"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    rep: Mapped[str] = mapped_column(Text, nullable=False)
    relevancy: Mapped[str] = mapped_column(String(16), nullable=False)
    company_name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(Text, nullable=False)
    whatsapp: Mapped[str] = mapped_column(Text, nullable=False)
    tier: Mapped[str] = mapped_column(Text, nullable=False)
    volume: Mapped[str] = mapped_column(Text, nullable=False)

    partner_details: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    target_regions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    lob: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    grades: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    add_associates: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    business_card_url: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", server_default="pending")
    admin_notes: Mapped[str] = mapped_column(String(500), nullable=False, default="", server_default="")
    reviewed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    __table_args__ = (
        Index("ix_submission_user_submitted", "user_id", "submitted_at"),
        Index("ix_submission_company_user", "company_name", "user_id"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
