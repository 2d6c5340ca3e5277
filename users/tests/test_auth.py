from common.choices import UserStatus
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from .factories import DEFAULT_PASSWORD, UserFactory

LOGIN_URL = "/api/v1/user/login/"
LOGOUT_URL = "/api/v1/user/logout/"
REFRESH_URL = "/api/v1/user/refresh-token/"
DETAILS_URL = "/api/v1/user/user-details/"
REGISTER_URL = "/api/v1/user/register/"
UPDATE_URL = "/api/v1/user/update-profile/"


class LoginTests(APITestCase):
    def setUp(self):
        self.user = UserFactory(email="jdoe@example.com")

    def login(self, email="jdoe@example.com", password=DEFAULT_PASSWORD):
        return self.client.post(LOGIN_URL, {"email": email, "password": password}, format="json")

    def test_login_unknown_email_returns_not_registered(self):
        resp = self.login(email="nobody@example.com")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "user not registered")

    def test_login_wrong_password_returns_check_password(self):
        resp = self.login(password="wrong-pass")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        body = resp.json()
        self.assertEqual(body["message"], "check your password")
        self.assertFalse(body["success"])
        self.assertNotIn("accessToken", resp.cookies)

    def test_login_missing_fields_returns_400(self):
        resp = self.client.post(LOGIN_URL, {"email": "jdoe@example.com"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "provide email and password")

    def test_login_returns_tokens_and_sets_cookies(self):
        resp = self.login()
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()["data"]
        self.assertTrue(data["accessToken"])
        self.assertTrue(data["refreshToken"])

        for name, value in (("accessToken", data["accessToken"]), ("refreshToken", data["refreshToken"])):
            cookie = resp.cookies[name]
            self.assertEqual(cookie.value, value)
            self.assertTrue(cookie["httponly"])
            self.assertTrue(cookie["secure"])
            self.assertEqual(cookie["samesite"], "None")

        self.user.refresh_from_db()
        self.assertEqual(self.user.refresh_token, data["refreshToken"])
        self.assertIsNotNone(self.user.last_login)

    def test_login_rejects_non_active_account_immediately(self):
        self.user.status = UserStatus.SUSPENDED
        self.user.save()
        resp = self.login()
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "contact to admin")
        self.assertNotIn("accessToken", resp.cookies)
        self.user.refresh_from_db()
        self.assertEqual(self.user.refresh_token, "")


class SessionTests(APITestCase):
    def setUp(self):
        self.user = UserFactory(email="jdoe@example.com")
        resp = self.client.post(
            LOGIN_URL,
            {"email": "jdoe@example.com", "password": DEFAULT_PASSWORD},
            format="json",
        )
        self.tokens = resp.json()["data"]

    def test_user_details_uses_access_cookie(self):
        resp = self.client.get(DETAILS_URL)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()["data"]
        self.assertEqual(data["email"], "jdoe@example.com")
        self.assertNotIn("password", data)
        self.assertNotIn("refresh_token", data)

    def test_user_details_accepts_bearer_header(self):
        self.client.cookies.clear()
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {self.tokens['accessToken']}")
        resp = self.client.get(DETAILS_URL)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

    def test_logout_clears_cookies_and_stored_refresh_token(self):
        resp = self.client.post(LOGOUT_URL)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["message"], "logged out successfully")
        for name in ("accessToken", "refreshToken"):
            self.assertEqual(resp.cookies[name].value, "")
            self.assertEqual(resp.cookies[name]["max-age"], 0)
        self.user.refresh_from_db()
        self.assertEqual(self.user.refresh_token, "")

    def test_logout_requires_authentication(self):
        self.client.cookies.clear()
        resp = self.client.post(LOGOUT_URL)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        body = resp.json()
        self.assertTrue(body["error"])
        self.assertFalse(body["success"])

    def test_refresh_issues_new_access_token(self):
        resp = self.client.post(REFRESH_URL)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        access = resp.json()["data"]["accessToken"]
        self.assertTrue(access)
        self.assertEqual(resp.cookies["accessToken"].value, access)

    def test_refresh_after_logout_is_rejected(self):
        self.client.post(LOGOUT_URL)
        resp = self.client.post(REFRESH_URL, {"refreshToken": self.tokens["refreshToken"]}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp.json()["message"], "Invalid token")

    def test_refresh_with_garbage_token_is_rejected(self):
        self.client.cookies.clear()
        resp = self.client.post(REFRESH_URL, {"refreshToken": "not-a-token"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp.json()["message"], "token is expired")

    def test_refresh_without_token_is_rejected(self):
        self.client.cookies.clear()
        resp = self.client.post(REFRESH_URL)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp.json()["message"], "Invalid token")

    def test_stale_access_cookie_does_not_block_login(self):
        self.client.cookies["accessToken"] = "stale"
        resp = self.client.post(
            LOGIN_URL,
            {"email": "jdoe@example.com", "password": DEFAULT_PASSWORD},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

    def test_cookie_of_suspended_user_is_not_authenticated(self):
        self.user.status = UserStatus.SUSPENDED
        self.user.save()
        resp = self.client.get(DETAILS_URL)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(resp.json()["success"])

    def test_cookie_of_deleted_user_is_not_authenticated(self):
        self.user.delete()
        resp = self.client.get(DETAILS_URL)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_suspended_user_cookie_still_reaches_login(self):
        self.user.status = UserStatus.SUSPENDED
        self.user.save()
        resp = self.client.post(
            LOGIN_URL,
            {"email": "jdoe@example.com", "password": DEFAULT_PASSWORD},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["message"], "contact to admin")

    def test_deleted_user_cookie_still_reaches_register(self):
        self.user.delete()
        resp = self.client.post(
            REGISTER_URL,
            {"name": "Jane", "email": "jane@example.com", "password": "pw123"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertTrue(resp.json()["success"])


class CookieCsrfTests(APITestCase):
    """Cookie sessions only count on writes that carry the CSRF token."""

    def setUp(self):
        self.user = UserFactory(email="jdoe@example.com", name="John")
        self.client = APIClient(enforce_csrf_checks=True)
        resp = self.client.post(
            LOGIN_URL,
            {"email": "jdoe@example.com", "password": DEFAULT_PASSWORD},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.tokens = resp.json()["data"]

    def test_login_issues_csrf_cookie_and_token(self):
        self.assertTrue(self.tokens["csrfToken"])
        self.assertIn("csrftoken", self.client.cookies)

    def test_cross_site_form_post_cannot_change_profile(self):
        resp = self.client.post(
            UPDATE_URL,
            {"email": "evil@example.com", "password": "attacker"},
            format="multipart",
        )
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.user.refresh_from_db()
        self.assertEqual(self.user.email, "jdoe@example.com")
        self.assertTrue(self.user.check_password(DEFAULT_PASSWORD))

    def test_write_with_csrf_header_is_authenticated(self):
        resp = self.client.post(
            UPDATE_URL,
            {"name": "Johnny"},
            format="json",
            HTTP_X_CSRFTOKEN=self.tokens["csrfToken"],
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.name, "Johnny")

    def test_safe_read_needs_no_csrf_header(self):
        resp = self.client.get(DETAILS_URL)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

    def test_bearer_header_needs_no_csrf_header(self):
        self.client.cookies.clear()
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {self.tokens['accessToken']}")
        resp = self.client.post(UPDATE_URL, {"name": "Johnny"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

    def test_logout_rejects_get(self):
        resp = self.client.get(LOGOUT_URL)
        self.assertEqual(resp.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        self.user.refresh_from_db()
        self.assertEqual(self.user.refresh_token, self.tokens["refreshToken"])

    def test_logout_without_csrf_header_keeps_session(self):
        resp = self.client.post(LOGOUT_URL)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.user.refresh_from_db()
        self.assertEqual(self.user.refresh_token, self.tokens["refreshToken"])

    def test_logout_with_csrf_header_succeeds(self):
        resp = self.client.post(LOGOUT_URL, HTTP_X_CSRFTOKEN=self.tokens["csrfToken"])
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.refresh_token, "")
