"""Ensure the records a fresh environment needs exist.

Safe to run repeatedly::

    python -m gatehouse.seeds
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlmodel import Session, SQLModel

from .core import APP_ENV, engine, setup_logging
from .models import User
from .services.users import find_by_email, register_user

logger = logging.getLogger(__name__)

DEV_EMAIL = "dev@example.com"
DEV_PASSWORD = "password"
DEV_NAME = "Dev User"


def seed(session: Session, env: str = APP_ENV) -> Optional[User]:
    """Create the default development user. Does nothing outside development."""

    if env != "development":
        return None

    user = find_by_email(session, DEV_EMAIL)
    if user is None:
        user = register_user(
            session,
            email=DEV_EMAIL,
            password=DEV_PASSWORD,
            password_confirmation=DEV_PASSWORD,
            name=DEV_NAME,
        )
    logger.info("Development user created: %s / %s", DEV_EMAIL, DEV_PASSWORD)
    return user


def main() -> None:
    setup_logging()
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        seed(session)


if __name__ == "__main__":
    main()
