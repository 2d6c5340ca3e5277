"""Account routes grouped under /api/v1/user/."""

from django.urls import path

from .views import (
    forgot_password,
    login,
    logout,
    refresh_token,
    register,
    update_profile,
    upload_avatar,
    user_details,
    verify_email,
    verify_forgot_password_otp,
)

urlpatterns = [
    path("register/", register, name="register"),
    path("verify-email/", verify_email, name="verify_email"),
    path("login/", login, name="login"),
    path("logout/", logout, name="logout"),
    path("refresh-token/", refresh_token, name="refresh_token"),
    path("user-details/", user_details, name="user_details"),
    path("upload-avatar/", upload_avatar, name="upload_avatar"),
    path("update-profile/", update_profile, name="update_profile"),
    path("forgot-password/", forgot_password, name="forgot_password"),
    path("verify-forgot-password-otp/", verify_forgot_password_otp, name="verify_forgot_password_otp"),
]
