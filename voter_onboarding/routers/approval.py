"""Registration, OTP verification and admin approval routes."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from voter_onboarding.database import get_db
from voter_onboarding.dependencies import require_admin
from voter_onboarding.exceptions import (
    AlreadyVerified,
    DuplicateEmail,
    NotFound,
    NotificationFailure,
    NotPending,
)
from voter_onboarding.models.admin import Admin
from voter_onboarding.models.approval import ApprovalStatus, PendingApproval
from voter_onboarding.schemas.approval import (
    ApproveResponse,
    CheckOtpResponse,
    MessageResponse,
    PendingApprovalResponse,
    RegisterRequest,
    RegisterResponse,
    RejectRequest,
    ResendOtpRequest,
    UpdateDetailsRequest,
    VerifyOtpRequest,
)
from voter_onboarding.services import approval as approval_service
from voter_onboarding.services.accounts import email_taken, find_pending_by_email
from voter_onboarding.services.auth import get_password_hash
from voter_onboarding.services.otp import RESEND_OTP_SUBJECT, check_otp, issue_otp, verify_otp

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/approval", tags=["approval"])


def _get_pending_by_email(db: Session, email: str) -> PendingApproval:
    pending = find_pending_by_email(db, email)
    if not pending:
        raise NotFound()
    return pending


@router.post("/register", status_code=201, response_model=RegisterResponse)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    if email_taken(db, data.email):
        raise DuplicateEmail()
    pending = PendingApproval(
        name=data.name,
        email=data.email,
        hashed_password=get_password_hash(data.password),
        pincode=data.pincode,
        status=ApprovalStatus.pending,
        is_verified=False,
    )
    db.add(pending)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateEmail()
    db.refresh(pending)
    try:
        issue_otp(db, pending)
    except NotificationFailure:
        # Without a delivered code the registration can never be verified; let the user retry.
        db.delete(pending)
        db.commit()
        logger.warning("[Approval] OTP email not sent to %s; pending registration removed", data.email)
        raise NotificationFailure("We could not send the OTP email. Please check your email address and try again.")
    return RegisterResponse(email=pending.email)


@router.post("/verify-otp", response_model=MessageResponse)
def verify_user_otp(data: VerifyOtpRequest, db: Session = Depends(get_db)):
    pending = _get_pending_by_email(db, data.email)
    verify_otp(db, pending, data.otp)
    return MessageResponse(message="OTP verified successfully, awaiting admin approval")


@router.post("/check-otp", response_model=CheckOtpResponse)
def check_user_otp(data: VerifyOtpRequest, db: Session = Depends(get_db)):
    """Validate an OTP without consuming it."""
    pending = _get_pending_by_email(db, data.email)
    return CheckOtpResponse(valid=check_otp(pending, data.otp))


@router.post("/resend-otp", response_model=MessageResponse)
def resend_otp(data: ResendOtpRequest, db: Session = Depends(get_db)):
    pending = _get_pending_by_email(db, data.email)
    if pending.status != ApprovalStatus.pending:
        raise NotPending()
    if pending.is_verified:
        raise AlreadyVerified()
    issue_otp(db, pending, subject=RESEND_OTP_SUBJECT)
    return MessageResponse(message="New OTP sent to email")


@router.get("/pending", response_model=list[PendingApprovalResponse])
def list_pending(db: Session = Depends(get_db), admin: Admin = Depends(require_admin)):
    return (
        db.query(PendingApproval)
        .filter(PendingApproval.status == ApprovalStatus.pending)
        .order_by(PendingApproval.created_at)
        .all()
    )


@router.put("/approve/{approval_id}", response_model=ApproveResponse)
def approve_user(approval_id: str, db: Session = Depends(get_db), admin: Admin = Depends(require_admin)):
    user = approval_service.approve(db, approval_id)
    return ApproveResponse(voter_id=user.voter_id)


@router.delete("/reject/{approval_id}", response_model=MessageResponse)
def reject_user(
    approval_id: str,
    data: RejectRequest | None = None,
    db: Session = Depends(get_db),
    admin: Admin = Depends(require_admin),
):
    approval_service.reject(db, approval_id, data.reason if data else None)
    return MessageResponse(message="User rejected, notified, and removed from database")


@router.put("/{account_id}", response_model=MessageResponse)
def update_user_details(
    account_id: str,
    data: UpdateDetailsRequest | None = None,
    db: Session = Depends(get_db),
    admin: Admin = Depends(require_admin),
):
    approval_service.update_details(db, account_id, name=data.name if data else None)
    return MessageResponse(message="User details updated and notified")
