"""Settings validation."""

import unittest

from pydantic import ValidationError

from app.core.config import Settings

SECRET = "s" * 32


def _settings(**overrides):
    values = {"SESSION_SECRET": SECRET, "DATABASE_URL": "sqlite://"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        s = _settings()
        self.assertEqual(s.API_V1_PREFIX, "/v1")
        self.assertEqual(s.SESSION_COOKIE_NAME, "talos_session")
        self.assertEqual(s.INIT_RATE_LIMIT_ATTEMPTS, 3)
        self.assertEqual(s.SIGN_IN_RATE_LIMIT_WINDOW_MINUTES, 15)

    def test_short_session_secret_rejected(self):
        with self.assertRaises(ValidationError):
            _settings(SESSION_SECRET="too-short")

    def test_database_url_scheme(self):
        self.assertEqual(
            _settings(DATABASE_URL=" postgresql://u:p@db/talos ").DATABASE_URL,
            "postgresql://u:p@db/talos",
        )
        with self.assertRaises(ValidationError):
            _settings(DATABASE_URL="mysql://u:p@db/talos")

    def test_postgres_alias_rewritten_to_dialect_name(self):
        self.assertEqual(
            _settings(DATABASE_URL="postgres://u:p@db/talos").DATABASE_URL,
            "postgresql://u:p@db/talos",
        )
        self.assertEqual(
            _settings(DATABASE_URL="postgres+psycopg2://u:p@db/talos").DATABASE_URL,
            "postgresql+psycopg2://u:p@db/talos",
        )

    def test_cors_origin_normalized(self):
        self.assertEqual(
            _settings(CORS_ORIGIN="https://console.example.com/").CORS_ORIGIN,
            "https://console.example.com",
        )
        with self.assertRaises(ValidationError):
            _settings(CORS_ORIGIN="console.example.com")

    def test_rate_limits_positive(self):
        with self.assertRaises(ValidationError):
            _settings(SIGN_IN_RATE_LIMIT_ATTEMPTS=0)


if __name__ == "__main__":
    unittest.main()
