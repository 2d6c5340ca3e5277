"""Access/refresh token issuing for session cookies.

Thin wrappers over simplejwt so the rest of the app deals in plain strings.
Lifetimes come from ``SIMPLE_JWT`` (short-lived access, long-lived refresh).
"""

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from .errors import RefreshTokenExpired


def issue_token_pair(user) -> tuple[str, str]:
    """Return ``(access, refresh)`` token strings for ``user``."""
    refresh = RefreshToken.for_user(user)
    return str(refresh.access_token), str(refresh)


def issue_access_token(user) -> str:
    return str(AccessToken.for_user(user))


def read_refresh_token(token: str) -> str:
    """Verify a refresh token and return the user id it was issued for.

    Raises RefreshTokenExpired if the signature or expiry check fails.
    """
    try:
        refresh = RefreshToken(token)
    except TokenError as exc:
        raise RefreshTokenExpired() from exc
    return str(refresh[api_settings.USER_ID_CLAIM])
