"""Read-only queries for user accounts.

Keep lookups here so services and views share one notion of "find a user".
"""

from typing import Optional

from django.core.exceptions import ValidationError

from .models import User


def get_user_by_email(email: str) -> Optional[User]:
    """Return the user holding ``email`` exactly as stored, or None."""

    if not email:
        return None
    return User.objects.filter(email=email.strip()).first()


def get_user_by_id(user_id) -> Optional[User]:
    """Return the user with primary key ``user_id``, or None.

    Malformed identifiers (anything that is not a UUID) yield None.
    """

    if not user_id:
        return None
    try:
        return User.objects.filter(pk=user_id).first()
    except (ValidationError, ValueError):
        return None


def email_taken(email: str, exclude_id=None) -> bool:
    """Return True when another account already uses ``email``."""

    qs = User.objects.filter(email=email.strip())
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    return qs.exists()
