"""Account operations: validation, registration, sign-in, SSO provisioning,
password recovery and remember-me bookkeeping."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, func, select

from ..core import RESET_PASSWORD_WITHIN_HOURS, as_utc, utcnow
from ..models import User
from . import security
from .mailer import Mailer, render_message

logger = logging.getLogger(__name__)

EMAIL_REGEXP = re.compile(r"^[^@\s]+@[^@\s]+$")
PASSWORD_LENGTH = (6, 128)

_FIELD_LABELS = {
    "email": "Email",
    "password": "Password",
    "password_confirmation": "Password confirmation",
    "reset_password_token": "Reset password token",
    "name": "Name",
}


class Errors:
    """Validation messages grouped by field."""

    def __init__(self) -> None:
        self._messages: Dict[str, List[str]] = {}

    def add(self, field: str, message: str) -> None:
        self._messages.setdefault(field, []).append(message)

    def __getitem__(self, field: str) -> List[str]:
        return list(self._messages.get(field, []))

    def __contains__(self, field: str) -> bool:
        return field in self._messages

    def __bool__(self) -> bool:
        return bool(self._messages)

    def full_messages(self) -> List[str]:
        return [
            f"{_FIELD_LABELS.get(field, field.replace('_', ' ').capitalize())} {message}"
            for field, messages in self._messages.items()
            for message in messages
        ]


class RecordInvalid(Exception):
    """Raised when a user record fails validation."""

    def __init__(self, errors: Errors):
        self.errors = errors
        super().__init__("; ".join(errors.full_messages()))


@dataclass(frozen=True)
class AuthHash:
    """Identity asserted by an external provider after a successful handshake."""

    provider: str
    uid: str
    email: Optional[str] = None
    name: Optional[str] = None


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def find_by_email(session: Session, email: Optional[str]) -> Optional[User]:
    normalized = normalize_email(email)
    if not normalized:
        return None
    return session.exec(select(User).where(func.lower(User.email) == normalized)).first()


def count_users(session: Session) -> int:
    return session.exec(select(func.count(User.id))).one()


def validate_user(
    session: Session,
    *,
    email: Optional[str],
    password: Optional[str] = None,
    password_confirmation: Optional[str] = None,
    require_password: bool = True,
    user_id: Optional[int] = None,
) -> Errors:
    """Check an account's attributes and return the problems found."""

    errors = Errors()

    normalized = normalize_email(email)
    if not normalized:
        errors.add("email", "can't be blank")
    else:
        existing = find_by_email(session, normalized)
        if existing is not None and existing.id != user_id:
            errors.add("email", "has already been taken")
        if not EMAIL_REGEXP.match(normalized):
            errors.add("email", "is invalid")

    if password or require_password:
        minimum, maximum = PASSWORD_LENGTH
        if not password:
            errors.add("password", "can't be blank")
        elif len(password) < minimum:
            errors.add("password", f"is too short (minimum is {minimum} characters)")
        elif len(password) > maximum:
            errors.add("password", f"is too long (maximum is {maximum} characters)")

        if password_confirmation is not None and password_confirmation != password:
            errors.add("password_confirmation", "doesn't match Password")

    return errors


def _email_taken() -> RecordInvalid:
    errors = Errors()
    errors.add("email", "has already been taken")
    return RecordInvalid(errors)


def _save(session: Session, user: User) -> User:
    user.updated_at = utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def register_user(
    session: Session,
    *,
    email: Optional[str],
    password: Optional[str],
    password_confirmation: Optional[str] = None,
    name: Optional[str] = None,
) -> User:
    """Create a locally authenticated account."""

    errors = validate_user(
        session,
        email=email,
        password=password,
        password_confirmation=password_confirmation,
    )
    if errors:
        raise RecordInvalid(errors)

    user = User(
        email=normalize_email(email),
        encrypted_password=security.hash_password(password),
        name=(name or "").strip() or None,
    )
    try:
        _save(session, user)
    except IntegrityError:
        # The email was registered between validation and commit.
        session.rollback()
        raise _email_taken() from None
    logger.info("Registered user id=%s", user.id)
    return user


def authenticate(session: Session, email: Optional[str], password: Optional[str]) -> Optional[User]:
    """Return the user owning ``email`` when ``password`` matches."""

    user = find_by_email(session, email)
    if user is None:
        security.burn_password_check(password or "")
        return None
    if not security.verify_password(password or "", user.encrypted_password):
        return None
    return user


def _find_by_identity(session: Session, provider: str, uid: str) -> Optional[User]:
    return session.exec(
        select(User).where(User.provider == provider, User.uid == uid)
    ).first()


def from_omniauth(session: Session, auth: AuthHash) -> User:
    """Return the account linked to ``auth``, creating it on first sign-in.

    Keyed on (provider, uid): calling this again with the same identity
    returns the same row and never inserts a second one. New accounts get a
    random password since they only ever sign in through the provider.
    """

    provider = (auth.provider or "").strip()
    uid = str(auth.uid or "").strip()
    if not provider or not uid:
        raise ValueError("provider and uid are required")

    user = _find_by_identity(session, provider, uid)
    if user is not None:
        return user

    errors = validate_user(session, email=auth.email, require_password=False)
    if errors:
        raise RecordInvalid(errors)

    user = User(
        email=normalize_email(auth.email),
        encrypted_password=security.hash_password(security.random_password()),
        name=auth.name,
        provider=provider,
        uid=uid,
    )
    try:
        _save(session, user)
    except IntegrityError:
        # Another request provisioned the same identity, or took the email, first.
        session.rollback()
        existing = _find_by_identity(session, provider, uid)
        if existing is None:
            raise _email_taken() from None
        return existing

    logger.info("Provisioned user id=%s from %s", user.id, provider)
    return user


# Password recovery -----------------------------------------------------------


def send_reset_password_instructions(
    session: Session, email: Optional[str], mailer: Mailer, base_url: str
) -> User:
    """Issue a reset token for ``email`` and mail the link to the user."""

    user = find_by_email(session, email)
    if user is None:
        errors = Errors()
        errors.add("email", "not found")
        raise RecordInvalid(errors)

    raw_token = security.generate_token()
    user.reset_password_token = security.token_digest(raw_token)
    user.reset_password_sent_at = utcnow()
    _save(session, user)

    edit_url = f"{base_url.rstrip('/')}/users/password/edit?reset_password_token={raw_token}"
    mailer.send(
        render_message(
            "reset_password_instructions",
            to=user.email,
            subject="Reset password instructions",
            user=user,
            edit_url=edit_url,
        )
    )
    logger.info("Sent reset password instructions to user id=%s", user.id)
    return user


def reset_password_period_valid(user: User) -> bool:
    if user.reset_password_sent_at is None:
        return False
    expires_at = as_utc(user.reset_password_sent_at) + timedelta(hours=RESET_PASSWORD_WITHIN_HOURS)
    return utcnow() < expires_at


def find_by_reset_token(session: Session, raw_token: Optional[str]) -> Optional[User]:
    if not raw_token:
        return None
    digest = security.token_digest(raw_token)
    return session.exec(select(User).where(User.reset_password_token == digest)).first()


def reset_password_by_token(
    session: Session,
    raw_token: Optional[str],
    password: Optional[str],
    password_confirmation: Optional[str],
) -> User:
    """Set a new password for the owner of a reset token."""

    user = find_by_reset_token(session, raw_token)
    if user is None:
        errors = Errors()
        errors.add("reset_password_token", "is invalid")
        raise RecordInvalid(errors)
    if not reset_password_period_valid(user):
        errors = Errors()
        errors.add("reset_password_token", "has expired, please request a new one")
        raise RecordInvalid(errors)

    errors = validate_user(
        session,
        email=user.email,
        password=password,
        password_confirmation=password_confirmation,
        user_id=user.id,
    )
    if errors:
        raise RecordInvalid(errors)

    user.encrypted_password = security.hash_password(password)
    user.reset_password_token = None
    user.reset_password_sent_at = None
    _save(session, user)
    logger.info("Password reset for user id=%s", user.id)
    return user


# Remember me -----------------------------------------------------------------


def remember_me(session: Session, user: User) -> str:
    """Record the remember timestamp and return the signed cookie value."""

    user.remember_created_at = utcnow()
    _save(session, user)
    return security.sign_remember_token(user.id, user.encrypted_password)


def forget_me(session: Session, user: User) -> None:
    if user.remember_created_at is None:
        return
    user.remember_created_at = None
    _save(session, user)


def user_from_remember_token(session: Session, value: Optional[str]) -> Optional[User]:
    if not value:
        return None
    payload = security.load_remember_token(value)
    if payload is None:
        return None
    user = session.get(User, payload["uid"])
    if user is None or user.remember_created_at is None:
        return None
    # A password change rotates the salt and invalidates older cookies.
    if payload.get("salt") != security.remember_salt(user.encrypted_password):
        return None
    return user


__all__ = [
    "AuthHash",
    "Errors",
    "RecordInvalid",
    "authenticate",
    "count_users",
    "find_by_email",
    "find_by_reset_token",
    "forget_me",
    "from_omniauth",
    "normalize_email",
    "register_user",
    "remember_me",
    "reset_password_by_token",
    "reset_password_period_valid",
    "send_reset_password_instructions",
    "user_from_remember_token",
    "validate_user",
]
