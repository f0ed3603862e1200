from __future__ import annotations

from pydantic import BaseModel


class SubmissionStats(BaseModel):
    total_submissions: int
    unique_companies: int
    monthly_submissions: int


class MonthlyBucket(BaseModel):
    year: int
    month: int
    count: int


class CompanyCount(BaseModel):
    company_name: str
    count: int
