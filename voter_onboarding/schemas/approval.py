"""Registration, OTP and admin-decision schemas."""
from datetime import datetime

from pydantic import BaseModel, EmailStr, field_validator

from voter_onboarding.models.approval import ApprovalStatus


def _required(value: str, label: str) -> str:
    s = (value or "").strip()
    if not s:
        raise ValueError(f"{label} is required")
    return s


class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    pincode: str

    @field_validator("name", "pincode")
    @classmethod
    def not_blank(cls, v: str, info) -> str:
        return _required(v, info.field_name.capitalize())

    @field_validator("password")
    @classmethod
    def password_present(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class RegisterResponse(BaseModel):
    message: str = "User registered, OTP sent"
    email: str


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str

    @field_validator("otp")
    @classmethod
    def otp_present(cls, v: str) -> str:
        return _required(v, "OTP")


class CheckOtpResponse(BaseModel):
    valid: bool


class ResendOtpRequest(BaseModel):
    email: EmailStr


class MessageResponse(BaseModel):
    message: str


class PendingApprovalResponse(BaseModel):
    """Pending record as shown to admins (no password or OTP hash)."""
    id: str
    name: str
    email: str
    pincode: str
    status: ApprovalStatus
    is_verified: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ApproveResponse(BaseModel):
    message: str = "User approved and notified"
    voter_id: str


class RejectRequest(BaseModel):
    # Optional at the schema level so a missing reason surfaces as MissingReason, not a 422
    reason: str | None = None


class UpdateDetailsRequest(BaseModel):
    name: str | None = None
