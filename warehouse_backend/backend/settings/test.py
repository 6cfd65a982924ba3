# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS (pytest-django / manage.py test)

- In-memory SQLite unless TEST_DATABASE_URL points elsewhere
  (use Postgres to exercise real SELECT ... FOR UPDATE row locks).
- Fast password hashing.
- Throttling off so API tests are not rate-limited.
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import REST_FRAMEWORK, env

DEBUG = False

SECRET_KEY = "test-insecure-key"

DATABASES = {
    "default": env.db("TEST_DATABASE_URL", default="sqlite://:memory:"),
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

