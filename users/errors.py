"""Error kinds raised by account services.

Each subclass carries the client-facing message and HTTP status it maps to;
``common.responses.api_exception_handler`` turns them into envelopes.
"""

from rest_framework import status


class AccountError(Exception):
    """Raised for account workflow failures caused by the request itself."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingFields(AccountError):
    default_message = "Provide required fields"


class EmailInUse(AccountError):
    default_message = "Email in use"


class InvalidCode(AccountError):
    default_message = "invalid code"


class UserNotRegistered(AccountError):
    default_message = "user not registered"


class AccountInactive(AccountError):
    default_message = "contact to admin"


class InvalidCredentials(AccountError):
    default_message = "check your password"


class EmailNotAvailable(AccountError):
    default_message = "Email not available"


class OtpExpired(AccountError):
    default_message = "OTP is expired"


class InvalidOtp(AccountError):
    default_message = "Invalid OTP"


class InvalidRefreshToken(AccountError):
    """Refresh token missing, revoked, or not matching the stored one."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"


class RefreshTokenExpired(InvalidRefreshToken):
    default_message = "token is expired"
