"""Admin registration for the custom User model.

Passwords are shown as their stored hash only; tokens and reset codes are
read-only so moderators cannot forge sessions.
"""

from django.contrib import admin

from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Moderation view: search by name/email, filter by status and role."""

    list_display = (
        "email",
        "name",
        "status",
        "role",
        "verify_email",
        "last_login",
        "created_at",
    )
    list_filter = ("status", "role", "verify_email", "is_superuser")
    search_fields = ("email", "name", "mobile")
    ordering = ("-created_at",)
    readonly_fields = (
        "id",
        "password",
        "refresh_token",
        "forgot_password_otp",
        "forgot_password_expiry",
        "last_login",
        "created_at",
        "updated_at",
    )

    fieldsets = (
        (None, {"fields": ("id", "email", "password")}),
        ("Personal info", {"fields": ("name", "mobile", "avatar", "verify_email")}),
        ("Access", {"fields": ("status", "role", "is_superuser", "groups", "user_permissions")}),
        ("Sessions & recovery", {"fields": ("refresh_token", "forgot_password_otp", "forgot_password_expiry")}),
        ("Important dates", {"fields": ("last_login", "created_at", "updated_at")}),
    )

    filter_horizontal = ("groups", "user_permissions")
