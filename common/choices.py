"""Shared enumerations and choices used across apps."""

from django.db import models


class UserStatus(models.TextChoices):
    """Account states; only ACTIVE accounts may sign in."""

    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"
    SUSPENDED = "suspended", "Suspended"


class UserRole(models.TextChoices):
    ADMIN = "admin", "Admin"
    USER = "user", "User"
