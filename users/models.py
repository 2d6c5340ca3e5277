"""User model for account registration, sessions, and password recovery.

The `User` is keyed by an opaque UUID (also used as the email verification
code) and identified for sign-in by its email. Account state lives in
`status`; only active accounts may sign in or authenticate requests.
"""

import uuid

from common.choices import UserRole, UserStatus
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models


class UserManager(BaseUserManager):
    """Manager creating users with hashed passwords."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The email must be set")
        # Email is stored case-sensitively; only surrounding whitespace is dropped.
        user = self.model(email=email.strip(), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("role", UserRole.USER)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", UserRole.ADMIN)
        if extra_fields.get("role") != UserRole.ADMIN:
            raise ValueError("Superuser must have role=ADMIN.")
        return self._create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """Storefront customer account.

    Fields:
    - name: display name.
    - email: unique sign-in identifier.
    - verify_email: set only by the email verification flow.
    - refresh_token: the last refresh token issued; cleared on logout.
    - forgot_password_otp / forgot_password_expiry: outstanding reset code.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=150)
    email = models.EmailField(unique=True)
    avatar = models.URLField(max_length=500, blank=True, default="")
    mobile = models.CharField(max_length=20, blank=True, default="")
    refresh_token = models.TextField(blank=True, default="")
    verify_email = models.BooleanField(default=False)
    status = models.CharField(max_length=16, choices=UserStatus.choices, default=UserStatus.ACTIVE)
    role = models.CharField(max_length=16, choices=UserRole.choices, default=UserRole.USER)
    forgot_password_otp = models.CharField(max_length=12, blank=True, default="")
    forgot_password_expiry = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    EMAIL_FIELD = "email"
    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        indexes = [
            models.Index(fields=["status"], name="users_user_status_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.email

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @property
    def is_staff(self) -> bool:
        return self.role == UserRole.ADMIN

    def save(self, *args, **kwargs):
        """Trim whitespace on contact fields and persist."""
        if self.email:
            self.email = self.email.strip()
        if self.mobile:
            self.mobile = self.mobile.strip()
        super().save(*args, **kwargs)
