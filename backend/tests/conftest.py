"""Root conftest — shared test configuration."""

import os

# Ensure tests never run against a real secret or database
os.environ.setdefault(
    "JWT_SECRET", "test-secret-for-orbit-suite-0123456789abcdef",
)
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FORMAT", "text")
