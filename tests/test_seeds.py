"""
Tests for the development seed script.
"""

from sqlmodel import Session

from gatehouse.seeds import DEV_EMAIL, DEV_NAME, DEV_PASSWORD, seed
from gatehouse.services.security import verify_password
from gatehouse.services.users import count_users


def test_creates_the_development_user(db_session: Session) -> None:
    user = seed(db_session, env="development")

    assert user.email == DEV_EMAIL
    assert user.name == DEV_NAME
    assert verify_password(DEV_PASSWORD, user.encrypted_password)


def test_is_idempotent(db_session: Session) -> None:
    first = seed(db_session, env="development")
    second = seed(db_session, env="development")

    assert first.id == second.id
    assert count_users(db_session) == 1


def test_skips_other_environments(db_session: Session) -> None:
    assert seed(db_session, env="production") is None
    assert count_users(db_session) == 0
