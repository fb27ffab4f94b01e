"""Pending registrations awaiting OTP verification and admin decision."""
import enum
import uuid

from sqlalchemy import Column, String, DateTime, Boolean, Enum as SQLEnum
from sqlalchemy.sql import func

from voter_onboarding.database import Base


class ApprovalStatus(str, enum.Enum):
    pending = "Pending"
    accepted = "Accepted"


class PendingApproval(Base):
    __tablename__ = "pending_approvals"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    pincode = Column(String(20), nullable=False)

    status = Column(SQLEnum(ApprovalStatus), default=ApprovalStatus.pending, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    # bcrypt hash of the one-time code; the plaintext is never stored
    otp_code = Column(String(255), nullable=True)
    otp_expires_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
