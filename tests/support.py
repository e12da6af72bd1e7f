"""Shared fixtures: an app on in-memory SQLite with fast bcrypt and generous rate limits."""

import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from hospital_cms.core.config import Settings
from hospital_cms.main import create_app
from hospital_cms.models import AuditLog, Base, User
from hospital_cms.services.auth import set_password

TEST_SECRET = "test-signing-secret"


def make_settings(**overrides: object) -> Settings:
    """Settings for tests; never reads .env so the host environment cannot leak in."""
    values: dict[str, object] = {
        "APP_ENV": "test",
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": TEST_SECRET,
        "AUTH_RATE_LIMIT_MAX_ATTEMPTS": 1000,
        "API_RATE_LIMIT_MAX_REQUESTS": 1000,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeClock:
    """Monotonic clock stand-in that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ApiTestCase(unittest.TestCase):
    """Builds a fresh app and database per test."""

    settings_overrides: dict[str, object] = {}

    def setUp(self) -> None:
        rounds = patch("hospital_cms.core.security.BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)
        self.settings = make_settings(**self.settings_overrides)
        self.app = create_app(self.settings)
        Base.metadata.create_all(self.app.state.engine)
        self.addCleanup(self.app.state.engine.dispose)
        self.client = self.new_client()

    @property
    def prefix(self) -> str:
        return self.settings.API_PREFIX

    def new_client(self) -> TestClient:
        client = TestClient(self.app)
        self.addCleanup(client.close)
        return client

    def session(self) -> Session:
        db = self.app.state.session_factory()
        self.addCleanup(db.close)
        return db

    def create_user(
        self,
        username: str,
        password: str,
        role: str = "ADMIN",
        must_change_password: bool = False,
        name: str | None = None,
    ) -> str:
        """Insert a user directly and return its id."""
        db = self.session()
        user = User(
            username=username,
            name=name or username.title(),
            role=role,
            must_change_password=must_change_password,
        )
        set_password(user, password)
        db.add(user)
        db.commit()
        return user.id

    def get_user(self, user_id: str) -> User | None:
        db = self.session()
        return db.query(User).filter(User.id == user_id).first()

    def audit_entries(self, action: str | None = None) -> list[AuditLog]:
        db = self.session()
        query = db.query(AuditLog)
        if action:
            query = query.filter(AuditLog.action == action)
        return query.order_by(AuditLog.id).all()

    def login(self, username: str, password: str, client: TestClient | None = None, **kwargs):
        return (client or self.client).post(
            f"{self.prefix}/auth/login",
            json={"username": username, "password": password},
            **kwargs,
        )

    def logged_in_client(self, username: str, password: str) -> TestClient:
        client = self.new_client()
        resp = self.login(username, password, client=client)
        self.assertEqual(resp.status_code, 200, resp.text)
        return client
