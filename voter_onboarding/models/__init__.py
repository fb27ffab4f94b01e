"""
All SQLAlchemy models. Schema is the source of truth for new DBs.
Base.metadata.create_all() creates every table.
"""
from voter_onboarding.models.admin import Admin
from voter_onboarding.models.approval import ApprovalStatus, PendingApproval
from voter_onboarding.models.user import User

__all__ = [
    "Admin",
    "ApprovalStatus",
    "PendingApproval",
    "User",
]
