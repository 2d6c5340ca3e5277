"""JWT authentication reading the access token from a header or a cookie.

Browsers carry the `accessToken` cookie set at login; API clients may send
`Authorization: Bearer <token>` instead. The header wins when both exist.

Cookies ride along on cross-site requests, so a cookie token only counts
when the request also passes Django's CSRF check (the `X-CSRFToken` header
matching the `csrftoken` cookie), as DRF's SessionAuthentication does.
A cookie that fails any check leaves the request anonymous: public endpoints
keep working and protected ones answer 401.
"""

import logging

from django.conf import settings
from drf_spectacular.contrib.rest_framework_simplejwt import SimpleJWTScheme
from rest_framework.authentication import CSRFCheck
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

logger = logging.getLogger("auth")


class CookieJWTAuthentication(JWTAuthentication):
    def authenticate(self, request):
        header = self.get_header(request)
        if header is not None:
            return super().authenticate(request)

        raw_token = request.COOKIES.get(settings.ACCESS_TOKEN_COOKIE)
        if not raw_token:
            return None
        try:
            validated_token = self.get_validated_token(raw_token)
            user = self.get_user(validated_token)
        except AuthenticationFailed as exc:
            # Covers malformed/expired tokens and inactive or deleted users
            logger.debug("Ignoring access token cookie: %s", exc.detail)
            return None

        reason = self.csrf_failure(request)
        if reason:
            logger.info({"action": "cookie_auth", "status": "csrf_failed", "reason": reason})
            return None
        return user, validated_token

    def csrf_failure(self, request) -> str | None:
        """Run Django's CSRF check; return the failure reason or None."""

        def dummy_get_response(request):  # pragma: no cover
            return None

        check = CSRFCheck(dummy_get_response)
        # populates request.META['CSRF_COOKIE'], which is used in process_view()
        check.process_request(request)
        return check.process_view(request, None, (), {})


class CookieJWTScheme(SimpleJWTScheme):
    """OpenAPI description for `CookieJWTAuthentication`."""

    target_class = "users.authentication.CookieJWTAuthentication"
    name = "cookieJwtAuth"
