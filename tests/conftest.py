"""
Pytest configuration and fixtures for the Gatehouse test suite.

The environment is set before the application is imported because
configuration is read at import time.
"""

import itertools
import os
from typing import Any, Callable, Generator, Optional

os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["MAIL_BACKEND"] = "memory"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("ENTRA_CLIENT_ID", None)
os.environ.pop("ENTRA_CLIENT_SECRET", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from gatehouse.app import app  # noqa: E402
from gatehouse.core import engine, get_session  # noqa: E402
from gatehouse.models import User  # noqa: E402
from gatehouse.services.mailer import MemoryMailer, get_mailer  # noqa: E402
from gatehouse.services import users as user_service  # noqa: E402
from gatehouse.services.security import hash_password  # noqa: E402

DEFAULT_PASSWORD = "password123"


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """
    Fresh schema for every test, shared with the app through a dependency override.
    """
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        app.dependency_overrides[get_session] = lambda: session
        yield session
    app.dependency_overrides.clear()
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def client(db_session: Session) -> TestClient:
    return TestClient(app)


@pytest.fixture
def mailer() -> Generator[MemoryMailer, None, None]:
    backend = get_mailer()
    assert isinstance(backend, MemoryMailer)
    backend.clear()
    yield backend
    backend.clear()


@pytest.fixture
def user_factory(db_session: Session) -> Callable[..., User]:
    """
    Build and persist users with sequential emails.

    Pass ``sso=True`` for an account linked to the ``entra_id`` provider.
    """
    sequence = itertools.count(1)

    def create(
        *,
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        name: Optional[str] = "Test User",
        sso: bool = False,
        **fields: Any,
    ) -> User:
        n = next(sequence)
        if sso:
            fields.setdefault("provider", "entra_id")
            fields.setdefault("uid", f"sso-uid-{n}")
        user = User(
            email=email or f"user{n}@example.com",
            encrypted_password=hash_password(password),
            name=name,
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return create


@pytest.fixture
def sign_in(client: TestClient) -> Callable[..., Any]:
    def _sign_in(user: User, password: str = DEFAULT_PASSWORD, **extra: str):
        response = client.post(
            "/users/sign_in",
            data={"email": user.email, "password": password, **extra},
            follow_redirects=False,
        )
        assert response.status_code == 303
        return response

    return _sign_in


@pytest.fixture
def email_claimed_concurrently(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Make another account take the email right after validation passes,
    as a concurrent request committing first would.
    """
    validate = user_service.validate_user

    def validate_then_claim(session: Session, **kwargs: Any):
        errors = validate(session, **kwargs)
        email = user_service.normalize_email(kwargs.get("email"))
        if not errors and user_service.find_by_email(session, email) is None:
            session.add(User(email=email, encrypted_password=hash_password("otherpass1")))
            session.commit()
        return errors

    monkeypatch.setattr(user_service, "validate_user", validate_then_claim)
