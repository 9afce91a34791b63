from .base import *  # noqa
from .base import env

# GENERAL
# ------------------------------------------------------------------------------
DEBUG = True
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="h3Xq9RkT1vZp6NwL4mYc8BsD2fJg7aUe0oIi5KtW3rEy9nQlM1xCvA6bH8dG4sP",
)
ALLOWED_HOSTS = ["localhost", "0.0.0.0", "127.0.0.1"] + env.list("DJANGO_ALLOWED_HOSTS", default=[])
CSRF_TRUSTED_ORIGINS = ["https://*.127.0.0.1"] + env.list("CSRF_TRUSTED_ORIGINS", default=[])

# Member Dashboard
# ------------------------------------------------------------------------------
LOGGING["loggers"]["walletpass"]["level"] = env("WALLETPASS_LOG_LEVEL", default="DEBUG")  # noqa: F405
