"""OTP manager: issue, verify and check one-time email codes.

Codes are stored only as bcrypt hashes with an expiry; the plaintext goes out by
email and is never persisted. Expiry is checked lazily when a code is presented.

When ``otp_bypass_enabled`` is set, ``otp_bypass_code`` verifies any pending
record regardless of its stored OTP. This exists for integration test harnesses
and must be switched off in production deployments.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone

import bcrypt
from sqlalchemy.orm import Session

from voter_onboarding.config import get_settings
from voter_onboarding.exceptions import OtpExpired, OtpMismatch, OtpNoPending
from voter_onboarding.models.approval import PendingApproval
from voter_onboarding.services.notifications import send_otp_email

logger = logging.getLogger("uvicorn.error")

DEFAULT_OTP_SUBJECT = "OTP for Decentralized-Voting System"
RESEND_OTP_SUBJECT = "Resend OTP for Decentralized-Voting System"


def generate_otp() -> str:
    """Uniform 6-digit code in 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _is_bypass(code: str) -> bool:
    settings = get_settings()
    return settings.otp_bypass_enabled and code == settings.otp_bypass_code


def issue_otp(db: Session, pending: PendingApproval, subject: str = DEFAULT_OTP_SUBJECT) -> str:
    """Store a fresh hashed OTP on the record, commit, and email the plaintext. Returns the plaintext."""
    settings = get_settings()
    code = generate_otp()
    pending.otp_code = bcrypt.hashpw(code.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
    pending.otp_expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.otp_expire_minutes)
    db.commit()
    logger.debug("[OTP] Sending OTP to %s: %s", pending.email, code)
    send_otp_email(pending, code, subject, settings.otp_expire_minutes)
    return code


def _matches_stored(pending: PendingApproval, code: str) -> bool:
    if not pending.otp_code:
        raise OtpNoPending()
    if pending.otp_expires_at is None or datetime.now(timezone.utc) > _as_utc(pending.otp_expires_at):
        raise OtpExpired()
    return bcrypt.checkpw(code.encode("utf-8"), pending.otp_code.encode("utf-8"))


def verify_otp(db: Session, pending: PendingApproval, code: str) -> None:
    """Mark the record verified and clear its OTP, or raise OtpNoPending / OtpExpired / OtpMismatch."""
    if not _is_bypass(code) and not _matches_stored(pending, code):
        raise OtpMismatch()
    pending.is_verified = True
    pending.otp_code = None
    pending.otp_expires_at = None
    db.commit()


def check_otp(pending: PendingApproval, code: str) -> bool:
    """Same rules as verify_otp, without touching the record. A wrong code returns False."""
    if _is_bypass(code):
        return True
    return _matches_stored(pending, code)
