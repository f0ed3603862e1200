from __future__ import annotations

import csv
import io
from collections.abc import Callable, Iterable

from leadhub.business.submissions.models import Submission


def _joined(values: list[str] | None) -> str:
    return ", ".join(values or [])


EXPORT_COLUMNS: list[tuple[str, Callable[[Submission], str]]] = [
    ("Submission Date", lambda row: row.submitted_at.date().isoformat() if row.submitted_at else ""),
    ("Representative", lambda row: row.rep),
    ("Relevancy", lambda row: row.relevancy),
    ("Company Name", lambda row: row.company_name),
    ("First Name", lambda row: row.first_name),
    ("Last Name", lambda row: row.last_name),
    ("Email", lambda row: row.email),
    ("Phone", lambda row: row.phone),
    ("WhatsApp", lambda row: row.whatsapp),
    ("Partner Details", lambda row: _joined(row.partner_details)),
    ("Target Regions", lambda row: _joined(row.target_regions)),
    ("Line of Business", lambda row: _joined(row.lob)),
    ("Tier", lambda row: row.tier),
    ("Grades", lambda row: _joined(row.grades)),
    ("Volume", lambda row: row.volume),
    ("Additional Associates", lambda row: row.add_associates),
    ("Notes", lambda row: row.notes),
]


def to_export_row(submission: Submission) -> dict[str, str]:
    return {header: getter(submission) for header, getter in EXPORT_COLUMNS}


def export_submissions_csv(submissions: Iterable[Submission]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=[header for header, _ in EXPORT_COLUMNS])
    writer.writeheader()
    for submission in submissions:
        writer.writerow(to_export_row(submission))
    return output.getvalue()
