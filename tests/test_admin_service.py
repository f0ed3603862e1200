from __future__ import annotations

from collections.abc import Generator
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from leadhub import audit
from leadhub.business.admin.service import AdminService
from leadhub.business.submissions.models import Submission
from leadhub.business.submissions.query import SubmissionCriteria
from leadhub.business.submissions.schemas import SubmissionStatusUpdate
from leadhub.business.users.models import AppUser
from leadhub.core.database import Base
from leadhub.core.errors import ForbiddenError, NotFoundError
from leadhub.platform.security.context import Identity


ADMIN = Identity(user_id="admin-1", role="admin")
USER = Identity(user_id="user-1")


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clear_stubs() -> Generator[None, None, None]:
    audit.audit_entries.clear()
    yield
    audit.audit_entries.clear()


def _add_user(session: Session, user_id: str, *, role: str = "user", created_at: datetime | None = None) -> AppUser:
    user = AppUser(
        id=user_id,
        name=f"Name {user_id}",
        email=f"{user_id}@example.com",
        password_hash="hashed",
        role=role,
        created_at=created_at or datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    session.add(user)
    session.flush()
    return user


def _add_submission(
    session: Session,
    *,
    user_id: str,
    company_name: str = "Acme",
    status: str = "pending",
    submitted_at: datetime | None = None,
) -> Submission:
    when = submitted_at or datetime(2024, 2, 10, tzinfo=timezone.utc)
    submission = Submission(
        user_id=user_id,
        rep="Rep",
        relevancy="High",
        company_name=company_name,
        first_name="Ana",
        last_name="Silva",
        email="ana.silva@example.com",
        phone="300",
        whatsapp="301",
        tier="Tier 1",
        volume="20",
        status=status,
        submitted_at=when,
        created_at=when,
        updated_at=when,
    )
    session.add(submission)
    session.flush()
    return submission


def test_non_admin_is_rejected_everywhere(db_session: Session) -> None:
    service = AdminService()

    with pytest.raises(ForbiddenError):
        service.list_users(db_session, USER)
    with pytest.raises(ForbiddenError):
        service.dashboard_stats(db_session, USER)
    with pytest.raises(ForbiddenError):
        service.list_submissions(db_session, USER, SubmissionCriteria())
    with pytest.raises(ForbiddenError):
        service.toggle_user_active(db_session, USER, "user-1")


def test_list_users_excludes_admins_newest_first(db_session: Session) -> None:
    _add_user(db_session, "admin-1", role="admin")
    _add_user(db_session, "user-1", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    _add_user(db_session, "user-2", created_at=datetime(2024, 2, 1, tzinfo=timezone.utc))
    _add_user(db_session, "user-3", created_at=datetime(2024, 3, 1, tzinfo=timezone.utc))
    db_session.commit()

    result = AdminService().list_users(db_session, ADMIN, page=1, limit=2)

    assert [user.id for user in result.users] == ["user-3", "user-2"]
    assert result.pagination.total_items == 3
    assert result.pagination.total_pages == 2
    assert "password_hash" not in result.users[0].model_dump()


def test_user_detail_includes_submissions_and_stats(db_session: Session) -> None:
    _add_user(db_session, "user-1")
    _add_submission(db_session, user_id="user-1", company_name="Acme", submitted_at=datetime(2024, 3, 2, tzinfo=timezone.utc))
    _add_submission(db_session, user_id="user-1", company_name="Globex", submitted_at=datetime(2024, 2, 2, tzinfo=timezone.utc))
    _add_submission(db_session, user_id="user-2", company_name="Hidden")
    db_session.commit()

    detail = AdminService().get_user_detail(
        db_session,
        ADMIN,
        "user-1",
        now=datetime(2024, 3, 15, tzinfo=timezone.utc),
    )

    assert detail.user.id == "user-1"
    assert [item.company_name for item in detail.submissions] == ["Acme", "Globex"]
    assert detail.stats.total_submissions == 2
    assert detail.stats.unique_companies == 2
    assert detail.stats.monthly_submissions == 1


def test_user_detail_missing_user(db_session: Session) -> None:
    with pytest.raises(NotFoundError):
        AdminService().get_user_detail(db_session, ADMIN, "ghost")


def test_list_submissions_attaches_owner_summary(db_session: Session) -> None:
    _add_user(db_session, "user-1")
    _add_submission(db_session, user_id="user-1", company_name="Acme")
    _add_submission(db_session, user_id="orphan", company_name="Globex", submitted_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    db_session.commit()

    result = AdminService().list_submissions(db_session, ADMIN, SubmissionCriteria())

    by_company = {item.company_name: item for item in result.submissions}
    assert by_company["Acme"].user is not None
    assert by_company["Acme"].user.email == "user-1@example.com"
    assert by_company["Globex"].user is None


def test_update_submission_status_delegates_to_transition(db_session: Session) -> None:
    submission = _add_submission(db_session, user_id="user-1")
    db_session.commit()

    updated = AdminService().update_submission_status(
        db_session,
        ADMIN,
        submission.id,
        SubmissionStatusUpdate(status="in_review", admin_notes="Checking volume"),
    )

    assert updated.status == "in_review"
    assert updated.reviewed_by == "admin-1"
    assert updated.admin_notes == "Checking volume"


def test_dashboard_stats(db_session: Session) -> None:
    _add_user(db_session, "admin-1", role="admin")
    _add_user(db_session, "user-1")
    _add_user(db_session, "user-2")
    for _ in range(12):
        _add_submission(db_session, user_id="user-1", company_name="Acme", status="approved")
    for _ in range(3):
        _add_submission(
            db_session,
            user_id="user-2",
            company_name="Globex",
            submitted_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
        )
    db_session.commit()

    dashboard = AdminService().dashboard_stats(db_session, ADMIN, now=datetime(2024, 3, 1, tzinfo=timezone.utc))

    assert dashboard.overview.total_users == 2
    assert dashboard.overview.total_submissions == 15
    assert dashboard.overview.pending_submissions == 3
    assert dashboard.overview.approved_submissions == 12
    assert [(item.company_name, item.count) for item in dashboard.top_companies] == [("Acme", 12), ("Globex", 3)]
    assert [(bucket.year, bucket.month, bucket.count) for bucket in dashboard.monthly_trend] == [
        (2024, 1, 3),
        (2024, 2, 12),
    ]


def test_toggle_user_active_flips_flag(db_session: Session) -> None:
    _add_user(db_session, "user-1")
    db_session.commit()
    service = AdminService()

    user, message = service.toggle_user_active(db_session, ADMIN, "user-1")
    assert user.is_active is False
    assert message == "User deactivated successfully"

    user, message = service.toggle_user_active(db_session, ADMIN, "user-1")
    assert user.is_active is True
    assert message == "User activated successfully"
    assert [entry.action for entry in audit.audit_entries] == ["toggle_active", "toggle_active"]
    assert all("is_active" in entry.changed_fields for entry in audit.audit_entries)


def test_toggle_admin_is_forbidden_and_unchanged(db_session: Session) -> None:
    _add_user(db_session, "admin-2", role="admin")
    db_session.commit()

    with pytest.raises(ForbiddenError):
        AdminService().toggle_user_active(db_session, ADMIN, "admin-2")

    assert db_session.get(AppUser, "admin-2").is_active is True
    assert list(audit.audit_entries) == []


def test_toggle_missing_user(db_session: Session) -> None:
    with pytest.raises(NotFoundError):
        AdminService().toggle_user_active(db_session, ADMIN, "ghost")
