"""
Pytest configuration for the onboarding test suite.

Runs against an in-memory SQLite database; email delivery is captured by the
``outbox`` fixture instead of reaching Mailgun/SendGrid.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ["OTP_BYPASS_ENABLED"] = "true"
os.environ["MAILGUN_API_KEY"] = ""
os.environ["SENDGRID_API_KEY"] = ""

import re

import pytest
from fastapi.testclient import TestClient

from voter_onboarding.database import Base, SessionLocal, engine
from voter_onboarding.main import app
from voter_onboarding.models.admin import Admin
from voter_onboarding.models.approval import ApprovalStatus, PendingApproval
from voter_onboarding.services import notifications
from voter_onboarding.services.auth import create_admin_token, get_password_hash


class Outbox(list):
    """Captured emails as dicts with to/subject/html."""

    def last_otp(self) -> str:
        for message in reversed(self):
            match = re.search(r"\b(\d{6})\b", message["html"])
            if match:
                return match.group(1)
        raise AssertionError("no OTP email captured")

    def subjects(self) -> list[str]:
        return [m["subject"] for m in self]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def outbox(monkeypatch):
    """Successful email transport that records every message."""
    sent = Outbox()

    def fake_send_email(to_email, subject, html_content, text_content=None):
        sent.append({"to": to_email, "subject": subject, "html": html_content})
        return True

    monkeypatch.setattr(notifications, "send_email", fake_send_email)
    return sent


@pytest.fixture
def failing_email(monkeypatch):
    """Email transport that rejects every message."""
    attempts = []

    def fake_send_email(to_email, subject, html_content, text_content=None):
        attempts.append(subject)
        return False

    monkeypatch.setattr(notifications, "send_email", fake_send_email)
    return attempts


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def admin_headers(db):
    admin = Admin(email="admin@voting.demo", hashed_password=get_password_hash("adminpass"), name="Admin")
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return {"Authorization": f"Bearer {create_admin_token(admin.id, admin.email)}"}


@pytest.fixture
def make_pending(db):
    """Factory for pending approval rows."""

    def _make(email="alice@example.com", name="Alice", verified=False, password="pw123", pincode="12345"):
        pending = PendingApproval(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            pincode=pincode,
            status=ApprovalStatus.pending,
            is_verified=verified,
        )
        db.add(pending)
        db.commit()
        db.refresh(pending)
        return pending

    return _make
