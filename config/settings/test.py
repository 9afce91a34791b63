"""
With these settings, tests run faster.
"""

from .base import *  # noqa
from .base import env

# GENERAL
# ------------------------------------------------------------------------------
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="Q8rG2vTn5LkW0pXs7YbC3mHd9JfA4uZe1NqR6wKoV2iE8tPyB5cMx0lU7hDjS3gF",
)
TEST_RUNNER = "django.test.runner.DiscoverRunner"

# DATABASES
# ------------------------------------------------------------------------------
DATABASES = {"default": env.db("TEST_DATABASE_URL", default="sqlite://:memory:")}

# PASSWORDS
# ------------------------------------------------------------------------------
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# CACHES
# ------------------------------------------------------------------------------
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "",
    }
}

# Member Dashboard
# ------------------------------------------------------------------------------
MEMBER_DASHBOARD_PUBLISH_URL = "https://publish.example.com/api/program/publish"
MEMBER_DASHBOARD_PUBLISH_TOKEN = "test-token"
