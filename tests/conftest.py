"""Test environment: in-memory SQLite and a fixed session secret, set before app import."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SESSION_SECRET", "test-secret-test-secret-test-secret-0000")
os.environ.setdefault("APP_ENV", "dev")
