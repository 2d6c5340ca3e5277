from .base import *  # noqa
from .base import BASE_DIR

DEBUG = False

# Use a local SQLite database for reliability and speed in tests
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "test_db.sqlite3",
    }
}

# Tests inspect django.core.mail.outbox
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# Fast hashing keeps account fixtures cheap
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Avatars go to memory; static files need no manifest
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

FRONTEND_URL = "https://shop.example.com"
