from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from src.adapters.auth.crypto import PasslibPasswordHasher
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.orm import SQLAdminRepo, init_db, make_engine, make_session_factory
from src.adapters.orm.tables import TokenRow
from src.api.deps import (
    Settings,
    get_current_admin,
    get_email_adapter,
    get_rate_limiter,
    get_rules,
    get_session_factory,
    get_settings,
)
from src.api.main import app
from src.app_shell.rate_limit import RateLimiter
from src.components.admin import AdminUser
from src.rules.loader import load_rules
from src.rules.models import Rules

APP_URL = "http://test.local"
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct-horse-battery"


@pytest.fixture
def rules() -> Rules:
    """The real rules.yaml from the project root."""
    return load_rules(Path(__file__).parent.parent / "rules.yaml")


@pytest.fixture
def session_factory(tmp_path):
    """Fresh SQLite database with all tables created."""
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def email_adapter() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def rate_limiter(rules: Rules) -> RateLimiter:
    return RateLimiter(rules.rate_limits)


@pytest.fixture
def admin_user(session_factory) -> AdminUser:
    admin = AdminUser(
        email=ADMIN_EMAIL,
        password_hash=PasslibPasswordHasher().hash_password(ADMIN_PASSWORD),
        name="Admin",
    )
    SQLAdminRepo(session_factory).save(admin)
    return admin


@pytest.fixture
def client(
    tmp_path,
    monkeypatch,
    rules: Rules,
    session_factory,
    email_adapter: DevEmailAdapter,
    rate_limiter: RateLimiter,
) -> Generator[TestClient, None, None]:
    """Unauthenticated client on a temporary database and dev email."""
    monkeypatch.setenv("APP_URL", APP_URL)
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("EMAIL_BACKEND", "dev")
    settings = Settings()

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_email_adapter] = lambda: email_adapter
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client: TestClient, admin_user: AdminUser) -> TestClient:
    """Client with the admin dependency satisfied."""
    app.dependency_overrides[get_current_admin] = lambda: admin_user
    return client


@pytest.fixture
def live_token(session_factory) -> Callable[[str], str]:
    """Reads the single outstanding token for an identifier."""

    def read(email: str) -> str:
        with session_factory() as session:
            row = session.scalars(select(TokenRow).where(TokenRow.identifier == email)).one()
            return row.token

    return read
