"""Lookups that span the pending-approval and user tables."""
import enum
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.orm import Session

from voter_onboarding.models.admin import Admin
from voter_onboarding.models.approval import PendingApproval
from voter_onboarding.models.user import User


class AccountKind(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    not_found = "not_found"


@dataclass
class AccountLookup:
    kind: AccountKind
    record: User | PendingApproval | None = None

    @property
    def found(self) -> bool:
        return self.kind != AccountKind.not_found


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def find_account(db: Session, account_id: str) -> AccountLookup:
    """Resolve an id to an approved user, a pending approval, or nothing (users take precedence)."""
    user = db.query(User).filter(User.id == account_id).first()
    if user:
        return AccountLookup(AccountKind.approved, user)
    pending = db.query(PendingApproval).filter(PendingApproval.id == account_id).first()
    if pending:
        return AccountLookup(AccountKind.pending, pending)
    return AccountLookup(AccountKind.not_found)


def find_pending_by_email(db: Session, email: str) -> PendingApproval | None:
    return db.query(PendingApproval).filter(func.lower(PendingApproval.email) == normalize_email(email)).first()


def email_taken(db: Session, email: str) -> bool:
    """True if any user, pending approval (including accepted tombstones) or admin holds the email."""
    email = normalize_email(email)
    for model in (User, PendingApproval, Admin):
        if db.query(model.id).filter(func.lower(model.email) == email).first() is not None:
            return True
    return False
