"""Shared fixtures for API tests: isolated SQLite database and app per test case."""

import unittest

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import app.core.security as security
from app.core.database import enable_sqlite_foreign_keys, get_db
from app.main import create_app
from app.models import Base, User
from app.models.user import ROLE_ADMIN
from app.services.auth import sign_up_email

# Fast hashes for tests; production keeps the module default.
security.BCRYPT_ROUNDS = 4

ADMIN_PASSWORD = "Adm1nPassword"
USER_PASSWORD = "Us3rPassword"


def make_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    return engine


def create_user(db: Session, name: str, email: str, password: str, role: str = "user") -> User:
    """Create a user through the auth service, promoting when role is admin."""
    user = sign_up_email(db, name, email, password)
    if role == ROLE_ADMIN:
        user.role = ROLE_ADMIN
        db.commit()
        db.refresh(user)
    return user


class ApiTestCase(unittest.TestCase):
    """Fresh database, app (and rate limiter) and client for every test."""

    def setUp(self) -> None:
        self.engine = make_engine()
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)
        self.app = create_app()

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        self.app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(self.app)
        self.db = self.SessionLocal()

    def tearDown(self) -> None:
        self.db.close()
        self.client.close()
        self.engine.dispose()

    def add_user(self, name: str, email: str, password: str, role: str = "user") -> User:
        return create_user(self.db, name, email, password, role)

    def sign_in(self, email: str, password: str) -> dict[str, str]:
        """Sign in and return Bearer headers; cookies are dropped so callers can switch users."""
        resp = self.client.post(
            "/v1/auth/sign-in",
            json={"email": email, "password": password},
            headers={"x-forwarded-for": email},
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.client.cookies.clear()
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    def admin_headers(self, email: str = "admin@example.com") -> dict[str, str]:
        self.add_user("Admin", email, ADMIN_PASSWORD, role=ROLE_ADMIN)
        return self.sign_in(email, ADMIN_PASSWORD)

    def user_headers(self, email: str = "user@example.com") -> dict[str, str]:
        self.add_user("User", email, USER_PASSWORD)
        return self.sign_in(email, USER_PASSWORD)
