"""Error kinds raised by the onboarding services and rendered by the API."""


class OnboardingError(Exception):
    """Base error. Carries the HTTP status the API answers with."""

    status_code = 400
    detail = "Request could not be processed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.detail
        super().__init__(self.detail)

    @property
    def kind(self) -> str:
        return type(self).__name__


class DuplicateEmail(OnboardingError):
    detail = "Email already exists"


class NotFound(OnboardingError):
    status_code = 404
    detail = "Pending user not found"


class NotVerified(OnboardingError):
    detail = "User has not verified their OTP"


class NotPending(OnboardingError):
    detail = "User is not in pending status"


class AlreadyVerified(OnboardingError):
    detail = "User is already verified"


class OtpNoPending(OnboardingError):
    detail = "No OTP pending for this user"


class OtpExpired(OnboardingError):
    detail = "OTP expired"


class OtpMismatch(OnboardingError):
    detail = "OTP incorrect"


class MissingReason(OnboardingError):
    detail = "Rejection reason is required"


class InvalidCredentials(OnboardingError):
    status_code = 401
    detail = "Invalid email or password"


class CryptoProvisioningError(OnboardingError):
    status_code = 500
    detail = "Could not provision cryptographic fields"


class TransactionAborted(OnboardingError):
    status_code = 500
    detail = "User approval failed"


class NotificationFailure(OnboardingError):
    status_code = 503
    detail = "Notification email could not be sent"
