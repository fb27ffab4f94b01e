"""Admin decisions on pending registrations: approve, reject, update details.

Approval provisions the voter's key material and moves the pending record to
Accepted in a single database transaction; the approval email goes out only
after commit and its failure is logged, not raised. Rejection emails the user
before deleting the record, and a failed send leaves the record in place.
"""
import logging

from sqlalchemy.orm import Session

from voter_onboarding.database import transaction
from voter_onboarding.exceptions import (
    MissingReason,
    NotFound,
    NotificationFailure,
    NotPending,
    NotVerified,
    OnboardingError,
    TransactionAborted,
)
from voter_onboarding.models.approval import ApprovalStatus, PendingApproval
from voter_onboarding.models.user import User
from voter_onboarding.services.accounts import find_account
from voter_onboarding.services.crypto import CryptoFields, generate_crypto_fields, generate_voter_id
from voter_onboarding.services.notifications import (
    send_approval_email,
    send_profile_update_email,
    send_rejection_email,
)

logger = logging.getLogger("uvicorn.error")


def _create_user(db: Session, pending: PendingApproval, voter_id: str, fields: CryptoFields) -> User:
    user = User(
        voter_id=voter_id,
        name=pending.name,
        email=pending.email,
        hashed_password=pending.hashed_password,
        pincode=pending.pincode,
        is_verified=True,
        **fields.as_user_columns(),
    )
    db.add(user)
    db.flush()
    return user


def _mark_accepted(db: Session, pending: PendingApproval) -> None:
    pending.status = ApprovalStatus.accepted
    db.flush()


def approve(db: Session, approval_id: str) -> User:
    """Provision and create the User, mark the pending record Accepted, then notify (best effort)."""
    try:
        with transaction(db):
            pending = db.query(PendingApproval).filter(PendingApproval.id == approval_id).first()
            if not pending:
                raise NotFound()
            if not pending.is_verified:
                raise NotVerified()
            if pending.status != ApprovalStatus.pending:
                raise NotPending()
            fields = generate_crypto_fields(pending.hashed_password)
            voter_id = generate_voter_id(db)
            user = _create_user(db, pending, voter_id, fields)
            _mark_accepted(db, pending)
    except OnboardingError:
        raise
    except Exception as e:
        logger.exception("[Approval] Transaction failed for approval_id=%s", approval_id)
        # Driver errors echo the SQL parameters (hashes, ciphertexts); keep them in the log only
        raise TransactionAborted() from e

    logger.info("[Approval] Approved approval_id=%s voter_id=%s", approval_id, user.voter_id)
    try:
        send_approval_email(user, user.voter_id)
    except NotificationFailure as e:
        logger.warning("[Approval] Notification email failed for voter_id=%s: %s", user.voter_id, e)
    return user


def reject(db: Session, approval_id: str, reason: str | None) -> None:
    """Email the rejection, then delete the pending record. A failed email aborts the delete."""
    reason = (reason or "").strip()
    if not reason:
        raise MissingReason()
    pending = db.query(PendingApproval).filter(PendingApproval.id == approval_id).first()
    if not pending:
        raise NotFound()
    if pending.status != ApprovalStatus.pending:
        raise NotPending()
    send_rejection_email(pending, reason)
    db.delete(pending)
    db.commit()
    logger.info("[Approval] Rejected and removed approval_id=%s", approval_id)


def update_details(db: Session, account_id: str, name: str | None = None) -> User | PendingApproval:
    """Rename a pending or approved account (or just touch it) and notify the owner."""
    lookup = find_account(db, account_id)
    if not lookup.found:
        raise NotFound("User not found")
    account = lookup.record
    old_name = account.name
    name = (name or "").strip()
    if name:
        account.name = name
    db.commit()
    try:
        send_profile_update_email(account, old_name=old_name if name else None)
    except NotificationFailure as e:
        logger.warning("[Approval] Profile update email failed for %s account id=%s: %s", lookup.kind.value, account_id, e)
    return account
