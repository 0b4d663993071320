"""
Production settings for ShiftMarket.
Deployed behind a TLS-terminating proxy.
"""

from .base import *  # noqa: F401, F403

DEBUG = False

# The proxy terminates TLS and forwards internally via HTTP.
# Trust the X-Forwarded-Proto header it injects on every request.
SECURE_SSL_REDIRECT = False
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

# Cookie security
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

# HSTS
SECURE_HSTS_SECONDS = 31536000
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True

ALLOWED_HOSTS = env.list(  # noqa: F405
    "ALLOWED_HOSTS",
    default=["shiftmarket.example.com", "localhost"],
)

CSRF_TRUSTED_ORIGINS = env.list(  # noqa: F405
    "CSRF_TRUSTED_ORIGINS",
    default=["https://shiftmarket.example.com"],
)

# Pooled connections; transitions are short so a minute of reuse is plenty
DATABASES["default"]["CONN_MAX_AGE"] = env.int("CONN_MAX_AGE", default=60)  # noqa: F405
DATABASES["default"].setdefault("OPTIONS", {})["connect_timeout"] = env.int(  # noqa: F405
    "DB_CONNECT_TIMEOUT", default=5
)
