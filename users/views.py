"""Users app API views.

Endpoints (all answer with the `{message, error, success, data}` envelope):
- register: creates an account and emails a verification link.
- verify-email: confirms the account using the code from that link.
- login: checks credentials, sets `accessToken`/`refreshToken` cookies.
- logout: clears both cookies and the stored refresh token (POST only).
- refresh-token: issues a new access token from the refresh token.
- user-details: returns the current account.
- upload-avatar: stores an image and saves its URL on the account.
- update-profile: partial update of name, email, mobile and password.
- forgot-password: emails a one-time reset code.
- verify-forgot-password-otp: checks the reset code before its expiry.

Views stay thin: parse with a serializer, call a service, wrap the result.
Failures are raised and rendered by `common.responses.api_exception_handler`.
"""

from common.responses import EnvelopeSerializer, envelope
from django.conf import settings
from django.middleware.csrf import get_token
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.decorators import api_view, authentication_classes, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated

from . import services
from .errors import AccountError
from .logging import log_auth_event
from .serializers import (
    AvatarUploadSerializer,
    ForgotPasswordSerializer,
    LoginSerializer,
    RefreshTokenSerializer,
    RegisterSerializer,
    UpdateProfileSerializer,
    UserSerializer,
    VerifyEmailSerializer,
    VerifyOtpSerializer,
)

ENVELOPE_RESPONSES = {
    200: OpenApiResponse(description="Success envelope", response=EnvelopeSerializer),
    400: OpenApiResponse(description="Validation failure", response=EnvelopeSerializer),
    500: OpenApiResponse(description="Unexpected failure", response=EnvelopeSerializer),
}

AUTH_RESPONSES = {
    **ENVELOPE_RESPONSES,
    401: OpenApiResponse(description="Unauthorized", response=EnvelopeSerializer),
}


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": settings.AUTH_COOKIE_SECURE,
        "samesite": settings.AUTH_COOKIE_SAMESITE,
    }


def _set_access_cookie(response, access: str) -> None:
    lifetime = settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"]
    response.set_cookie(
        settings.ACCESS_TOKEN_COOKIE, access, max_age=int(lifetime.total_seconds()), **_cookie_options()
    )


def _set_refresh_cookie(response, refresh: str) -> None:
    lifetime = settings.SIMPLE_JWT["REFRESH_TOKEN_LIFETIME"]
    response.set_cookie(
        settings.REFRESH_TOKEN_COOKIE, refresh, max_age=int(lifetime.total_seconds()), **_cookie_options()
    )


def _clear_session_cookies(response) -> None:
    for name in (settings.ACCESS_TOKEN_COOKIE, settings.REFRESH_TOKEN_COOKIE):
        response.delete_cookie(name, samesite=settings.AUTH_COOKIE_SAMESITE)


def _refresh_token_from(request) -> str | None:
    """Find the refresh token in the cookie, the body, or a Bearer header."""
    token = request.COOKIES.get(settings.REFRESH_TOKEN_COOKIE)
    if token:
        return token
    serializer = RefreshTokenSerializer(data=request.data)
    if serializer.is_valid() and serializer.validated_data.get("refreshToken"):
        return serializer.validated_data["refreshToken"]
    header = request.META.get("HTTP_AUTHORIZATION", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


@extend_schema(tags=["User Endpoints"], request=RegisterSerializer, responses=ENVELOPE_RESPONSES)
@api_view(["POST"])
@permission_classes([AllowAny])
def register(request):
    """Register a new user and send the verification email."""
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        user = services.register_user(**serializer.validated_data)
    except AccountError as exc:
        log_auth_event("register", request, status=type(exc).__name__)
        raise
    log_auth_event("register", request, user=user, status="success")
    return envelope("User registered successfully", UserSerializer(user).data)


@extend_schema(tags=["User Endpoints"], request=VerifyEmailSerializer, responses=ENVELOPE_RESPONSES)
@api_view(["POST"])
@permission_classes([AllowAny])
def verify_email(request):
    """Confirm an email address with the code sent at registration."""
    serializer = VerifyEmailSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        user = services.verify_email(serializer.validated_data["code"])
    except AccountError as exc:
        log_auth_event("verify_email", request, status=type(exc).__name__)
        raise
    log_auth_event("verify_email", request, user=user, status="success")
    return envelope("email verification complete")


@extend_schema(tags=["User Endpoints"], request=LoginSerializer, responses=ENVELOPE_RESPONSES)
@api_view(["POST"])
@permission_classes([AllowAny])
def login(request):
    """Sign in with email and password.

    Sets `accessToken` and `refreshToken` as http-only cookies and returns
    both tokens in the body for non-browser clients. Browsers must echo
    `csrfToken` in the `X-CSRFToken` header on cookie-authenticated writes.
    """
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        user, access, refresh = services.login(**serializer.validated_data)
    except AccountError as exc:
        log_auth_event("login", request, status=type(exc).__name__)
        raise
    log_auth_event("login", request, user=user, status="success")
    response = envelope(
        "logged in successfully",
        {"accessToken": access, "refreshToken": refresh, "csrfToken": get_token(request)},
    )
    _set_access_cookie(response, access)
    _set_refresh_cookie(response, refresh)
    return response


@extend_schema(tags=["User Endpoints"], request=None, responses=AUTH_RESPONSES)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
def logout(request):
    """Sign out: clear session cookies and revoke the stored refresh token."""
    services.logout(request.user)
    log_auth_event("logout", request, user=request.user, status="success")
    response = envelope("logged out successfully")
    _clear_session_cookies(response)
    return response


@extend_schema(tags=["User Endpoints"], request=RefreshTokenSerializer, responses=AUTH_RESPONSES)
@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def refresh_token(request):
    """Issue a new access token from the current refresh token."""
    try:
        user, access = services.refresh_access_token(_refresh_token_from(request))
    except AccountError as exc:
        log_auth_event("token_refresh", request, status=type(exc).__name__)
        raise
    log_auth_event("token_refresh", request, user=user, status="success")
    response = envelope("new access token generated", {"accessToken": access})
    _set_access_cookie(response, access)
    return response


@extend_schema(tags=["User Endpoints"], responses=AUTH_RESPONSES)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
def user_details(request):
    """Return the authenticated user's account."""
    return envelope("user details", UserSerializer(request.user).data)


@extend_schema(tags=["User Endpoints"], request=AvatarUploadSerializer, responses=AUTH_RESPONSES)
@api_view(["PUT", "POST"])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload_avatar(request):
    """Upload a profile image (multipart field `avatar`)."""
    serializer = AvatarUploadSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    url = services.upload_avatar(request.user, serializer.validated_data["avatar"])
    log_auth_event("upload_avatar", request, user=request.user, status="success")
    return envelope("upload profile", {"id": str(request.user.id), "avatar": url})


@extend_schema(tags=["User Endpoints"], request=UpdateProfileSerializer, responses=AUTH_RESPONSES)
@api_view(["PUT", "POST"])
@permission_classes([IsAuthenticated])
def update_profile(request):
    """Update any of name, email, mobile and password; other fields are kept."""
    serializer = UpdateProfileSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        user = services.update_profile(request.user, **serializer.validated_data)
    except AccountError as exc:
        log_auth_event("update_profile", request, user=request.user, status=type(exc).__name__)
        raise
    log_auth_event(
        "update_profile",
        request,
        user=user,
        status="success",
        extra={"fields": sorted(k for k, v in serializer.validated_data.items() if v)},
    )
    return envelope("updated user successfully", UserSerializer(user).data)


@extend_schema(tags=["User Endpoints"], request=ForgotPasswordSerializer, responses=ENVELOPE_RESPONSES)
@api_view(["PUT", "POST"])
@permission_classes([AllowAny])
def forgot_password(request):
    """Email a one-time code for resetting the password."""
    serializer = ForgotPasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        user = services.request_password_otp(serializer.validated_data["email"])
    except AccountError as exc:
        log_auth_event("forgot_password", request, status=type(exc).__name__)
        raise
    log_auth_event("forgot_password", request, user=user, status="sent")
    return envelope("check your email")


@extend_schema(tags=["User Endpoints"], request=VerifyOtpSerializer, responses=ENVELOPE_RESPONSES)
@api_view(["PUT", "POST"])
@permission_classes([AllowAny])
def verify_forgot_password_otp(request):
    """Check a password reset code against the stored code and expiry."""
    serializer = VerifyOtpSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        user = services.verify_password_otp(**serializer.validated_data)
    except AccountError as exc:
        log_auth_event("verify_forgot_password_otp", request, status=type(exc).__name__)
        raise
    log_auth_event("verify_forgot_password_otp", request, user=user, status="success")
    return envelope("verify OTP successful")
