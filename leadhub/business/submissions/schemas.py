from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from leadhub.business.reporting.submissions.schemas import SubmissionStats
from leadhub.core.responses import Pagination


class SubmissionCreate(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    # Required fields are checked by the lifecycle service so that the first
    # missing one is reported by name, in a fixed order.
    rep: str | None = None
    relevancy: str | None = None
    company_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    whatsapp: str | None = None
    tier: str | None = None
    volume: str | None = None
    partner_details: list[str] = Field(default_factory=list)
    target_regions: list[str] = Field(default_factory=list)
    lob: list[str] = Field(default_factory=list)
    grades: list[str] = Field(default_factory=list)
    add_associates: str = ""
    notes: str = ""
    business_card_url: str = ""


class SubmissionUpdate(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    rep: str | None = None
    relevancy: str | None = None
    company_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    whatsapp: str | None = None
    tier: str | None = None
    volume: str | None = None
    partner_details: list[str] | None = None
    target_regions: list[str] | None = None
    lob: list[str] | None = None
    grades: list[str] | None = None
    add_associates: str | None = None
    notes: str | None = None
    business_card_url: str | None = None


class SubmissionStatusUpdate(BaseModel):
    status: str
    admin_notes: str | None = None


class SubmissionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    rep: str
    relevancy: str
    company_name: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: str
    whatsapp: str
    partner_details: list[str]
    target_regions: list[str]
    lob: list[str]
    grades: list[str]
    tier: str
    volume: str
    add_associates: str
    notes: str
    business_card_url: str
    status: str
    admin_notes: str
    reviewed_by: str | None
    reviewed_at: datetime | None
    submitted_at: datetime
    created_at: datetime
    updated_at: datetime


class SubmissionData(BaseModel):
    submission: SubmissionRead


class SubmissionListData(BaseModel):
    submissions: list[SubmissionRead]
    stats: SubmissionStats
    pagination: Pagination | None
