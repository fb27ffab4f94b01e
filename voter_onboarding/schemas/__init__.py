from voter_onboarding.schemas.admin import AdminLogin, AdminToken
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
