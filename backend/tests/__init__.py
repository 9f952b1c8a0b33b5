"""Test package initialization."""

import os

# Default settings to satisfy issue_reporter.core.config.Settings requirements for tests
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
# Auth limits are exercised explicitly; keep them out of the way elsewhere.
os.environ.setdefault("RATE_LIMIT_AUTH", "1000/minute")
os.environ.setdefault("RATE_LIMIT_DEFAULT", "1000/minute")
