"""Request and response serializers for the account endpoints.

Request serializers are the typed input of each operation. Fields are
declared optional so a missing value is reported with the operation's own
"provide ..." message (see `RequiredFieldsMixin`) rather than per-field errors.

- UserSerializer: public view of an account (no password, tokens, or OTP).
- RegisterSerializer, VerifyEmailSerializer, LoginSerializer, ...: one per action.
"""

from rest_framework import serializers

from .errors import MissingFields
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Account fields safe to return to the account owner."""

    class Meta:
        model = User
        fields = [
            "id",
            "name",
            "email",
            "avatar",
            "mobile",
            "verify_email",
            "status",
            "role",
            "last_login",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RequiredFieldsMixin:
    """Reject the request when any of `required_fields` is empty."""

    required_fields: tuple[str, ...] = ()
    missing_message = "Provide required fields"

    def validate(self, attrs):
        if any(not attrs.get(name) for name in self.required_fields):
            raise MissingFields(self.missing_message)
        return attrs


class RegisterSerializer(RequiredFieldsMixin, serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, trim_whitespace=False)

    required_fields = ("name", "email", "password")
    missing_message = "provide name, email and password"


class VerifyEmailSerializer(RequiredFieldsMixin, serializers.Serializer):
    code = serializers.CharField(required=False, allow_blank=True)

    required_fields = ("code",)
    missing_message = "invalid code"


class LoginSerializer(RequiredFieldsMixin, serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, trim_whitespace=False)

    required_fields = ("email", "password")
    missing_message = "provide email and password"


class RefreshTokenSerializer(serializers.Serializer):
    refreshToken = serializers.CharField(required=False, allow_blank=True)


class AvatarUploadSerializer(RequiredFieldsMixin, serializers.Serializer):
    """Multipart body carrying the image file in the `avatar` field.

    Type and size checks are left to the file storage.
    """

    avatar = serializers.FileField(required=False, allow_empty_file=False)

    required_fields = ("avatar",)
    missing_message = "provide avatar image"


class UpdateProfileSerializer(serializers.Serializer):
    """Partial update; every field is optional and empty values are ignored."""

    name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True)
    mobile = serializers.CharField(required=False, allow_blank=True, max_length=20)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, trim_whitespace=False)


class ForgotPasswordSerializer(RequiredFieldsMixin, serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)

    required_fields = ("email",)
    missing_message = "provide email"


class VerifyOtpSerializer(RequiredFieldsMixin, serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)
    otp = serializers.CharField(required=False, allow_blank=True)

    required_fields = ("email", "otp")
    missing_message = "Provide required fields"
