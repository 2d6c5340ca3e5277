"""Account workflows: registration, verification, sessions, profile and recovery.

Views call these functions with already-parsed input. Failures caused by the
request raise `AccountError` subclasses; anything else propagates and is
reported as a 500 by the API exception handler.
"""

import logging
import os
import uuid
from datetime import timedelta
from urllib.parse import urlencode

from django.conf import settings
from django.core.files.storage import default_storage
from django.core.mail import send_mail
from django.db import IntegrityError, transaction
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.crypto import constant_time_compare, get_random_string
from django.utils.html import strip_tags

from .errors import (
    AccountInactive,
    EmailInUse,
    EmailNotAvailable,
    InvalidCode,
    InvalidCredentials,
    InvalidOtp,
    InvalidRefreshToken,
    OtpExpired,
    UserNotRegistered,
)
from .models import User
from .selectors import email_taken, get_user_by_email, get_user_by_id
from .tokens import issue_access_token, issue_token_pair, read_refresh_token

logger = logging.getLogger("storefront.accounts")


def build_frontend_url(path: str, query: dict | None = None) -> str:
    """Construct a full frontend URL for the given path and query.

    Reads `FRONTEND_URL` from settings, trims trailing slashes, and
    attaches query parameters for code-based flows.
    """
    base = (getattr(settings, "FRONTEND_URL", None) or "").rstrip("/")
    url = f"{base}{path}"
    if query:
        url = f"{url}?{urlencode(query)}"
    return url


def _send_templated_email(*, to: str, subject: str, template: str, context: dict) -> None:
    html = render_to_string(template, context)
    send_mail(
        subject=subject,
        message=strip_tags(html).strip(),
        from_email=None,
        recipient_list=[to],
        html_message=html,
    )


def send_verification_email(user: User) -> str:
    """Email the verification link for ``user`` and return the link."""
    link = build_frontend_url("/verify-email", {"code": str(user.id)})
    _send_templated_email(
        to=user.email,
        subject=f"Verify your {settings.APP_NAME} email",
        template="users/emails/verify_email.html",
        context={"name": user.name, "url": link, "app_name": settings.APP_NAME},
    )
    return link


def send_forgot_password_email(user: User, otp: str) -> None:
    """Email the password reset code to ``user``."""
    _send_templated_email(
        to=user.email,
        subject=f"Forgot password from {settings.APP_NAME}",
        template="users/emails/forgot_password.html",
        context={
            "name": user.name,
            "otp": otp,
            "app_name": settings.APP_NAME,
            "ttl_minutes": settings.FORGOT_PASSWORD_OTP_TTL_MINUTES,
        },
    )


def generate_otp(length: int | None = None) -> str:
    """Return a random numeric one-time code."""
    length = length or settings.FORGOT_PASSWORD_OTP_LENGTH
    return get_random_string(length, allowed_chars="0123456789")


def register_user(*, name: str, email: str, password: str) -> User:
    """Create an unverified account and send its verification email.

    The email is best-effort: a delivery failure is logged and the account
    is kept.
    """
    if email_taken(email):
        raise EmailInUse()
    try:
        with transaction.atomic():
            user = User.objects.create_user(email=email, password=password, name=name)
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same email
        raise EmailInUse() from exc

    try:
        send_verification_email(user)
    except Exception:
        logger.exception(
            "users.verification_email_failed",
            extra={"event": "users.verification_email_failed", "user_id": str(user.id)},
        )
    return user


def verify_email(code: str) -> User:
    """Mark the account identified by ``code`` as verified.

    Re-verifying an already verified account is harmless.
    """
    user = get_user_by_id(code)
    if user is None:
        raise InvalidCode()
    user.verify_email = True
    user.save(update_fields=["verify_email", "updated_at"])
    return user


def login(*, email: str, password: str) -> tuple[User, str, str]:
    """Check credentials and open a session.

    Returns ``(user, access_token, refresh_token)``. The refresh token is
    stored on the user so it can be revoked on logout.
    """
    user = get_user_by_email(email)
    if user is None:
        raise UserNotRegistered()
    if not user.is_active:
        raise AccountInactive()
    if not user.check_password(password):
        raise InvalidCredentials()

    access, refresh = issue_token_pair(user)
    user.refresh_token = refresh
    user.last_login = timezone.now()
    user.save(update_fields=["refresh_token", "last_login", "updated_at"])
    return user, access, refresh


def logout(user: User) -> None:
    """Forget the stored refresh token for ``user``."""
    user.refresh_token = ""
    user.save(update_fields=["refresh_token", "updated_at"])


def refresh_access_token(token: str | None) -> tuple[User, str]:
    """Exchange a valid, still-current refresh token for a new access token."""
    if not token:
        raise InvalidRefreshToken()
    user = get_user_by_id(read_refresh_token(token))
    if user is None or not user.is_active:
        raise InvalidRefreshToken()
    if not user.refresh_token or not constant_time_compare(user.refresh_token, token):
        raise InvalidRefreshToken()
    return user, issue_access_token(user)


def upload_avatar(user: User, image) -> str:
    """Store ``image`` in the file storage and save its URL as the avatar."""
    ext = os.path.splitext(getattr(image, "name", "") or "")[1].lower()
    name = default_storage.save(f"avatars/{user.id}/{uuid.uuid4().hex}{ext}", image)
    url = default_storage.url(name)
    user.avatar = url
    user.save(update_fields=["avatar", "updated_at"])
    return url


def update_profile(
    user: User,
    *,
    name: str | None = None,
    email: str | None = None,
    mobile: str | None = None,
    password: str | None = None,
) -> User:
    """Apply a partial profile update.

    Only non-empty values are written; omitted fields keep their value.
    A new password is hashed before it is stored.
    """
    updates = []
    if name:
        user.name = name
        updates.append("name")
    if email and email != user.email:
        if email_taken(email, exclude_id=user.pk):
            raise EmailInUse()
        user.email = email
        updates.append("email")
    if mobile:
        user.mobile = mobile
        updates.append("mobile")
    if password:
        user.set_password(password)
        updates.append("password")

    if updates:
        try:
            with transaction.atomic():
                user.save(update_fields=updates + ["updated_at"])
        except IntegrityError as exc:
            # Another account claimed the email after the check above
            raise EmailInUse() from exc
    return user


def request_password_otp(email: str) -> User:
    """Issue a fresh reset code for ``email`` and send it by email.

    Replaces any code issued earlier.
    """
    user = get_user_by_email(email)
    if user is None:
        raise EmailNotAvailable()

    otp = generate_otp()
    user.forgot_password_otp = otp
    user.forgot_password_expiry = timezone.now() + timedelta(minutes=settings.FORGOT_PASSWORD_OTP_TTL_MINUTES)
    user.save(update_fields=["forgot_password_otp", "forgot_password_expiry", "updated_at"])
    send_forgot_password_email(user, otp)
    return user


def verify_password_otp(*, email: str, otp: str) -> User:
    """Check a reset code; it is valid only before its expiry.

    A successful check consumes the code.
    """
    user = get_user_by_email(email)
    if user is None:
        raise EmailNotAvailable()
    if not user.forgot_password_otp or user.forgot_password_expiry is None:
        raise InvalidOtp()
    if timezone.now() > user.forgot_password_expiry:
        raise OtpExpired()
    if not constant_time_compare(otp, user.forgot_password_otp):
        raise InvalidOtp()

    user.forgot_password_otp = ""
    user.forgot_password_expiry = None
    user.save(update_fields=["forgot_password_otp", "forgot_password_expiry", "updated_at"])
    return user
