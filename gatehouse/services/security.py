"""Password hashing, reset token digests and remember-me cookie signing."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import Optional

import bcrypt
from itsdangerous import BadSignature, URLSafeTimedSerializer

from ..core import BCRYPT_ROUNDS, REMEMBER_FOR_DAYS, SECRET_KEY

# bcrypt only looks at the first 72 bytes of its input.
_BCRYPT_MAX_BYTES = 72
# Length of the "$2b$12$" + 22 character salt prefix of a bcrypt hash.
_SALT_LENGTH = 29

_remember_serializer = URLSafeTimedSerializer(SECRET_KEY, salt="remember-user-token")


def _encode(raw_password: str) -> bytes:
    return raw_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(raw_password: str) -> str:
    return bcrypt.hashpw(_encode(raw_password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("ascii")


def verify_password(raw_password: str, encrypted_password: Optional[str]) -> bool:
    if not raw_password or not encrypted_password:
        return False
    try:
        return bcrypt.checkpw(_encode(raw_password), encrypted_password.encode("ascii"))
    except ValueError:
        return False


_DUMMY_HASH = hash_password(secrets.token_urlsafe(16))


def burn_password_check(raw_password: str) -> None:
    """Spend the same time as a real check so unknown emails are not revealed."""
    verify_password(raw_password or "x", _DUMMY_HASH)


def random_password() -> str:
    return secrets.token_urlsafe(20)


def generate_token() -> str:
    return secrets.token_urlsafe(20)


def token_digest(raw_token: str) -> str:
    """Keyed digest stored in place of the token that is emailed to the user."""
    return hmac.new(SECRET_KEY.encode("utf-8"), raw_token.encode("utf-8"), hashlib.sha256).hexdigest()


def remember_salt(encrypted_password: str) -> str:
    return encrypted_password[:_SALT_LENGTH]


def sign_remember_token(user_id: int, encrypted_password: str) -> str:
    return _remember_serializer.dumps({"uid": user_id, "salt": remember_salt(encrypted_password)})


def load_remember_token(value: str) -> Optional[dict]:
    """Return the cookie payload, or None when it is forged or older than the remember period."""
    try:
        payload = _remember_serializer.loads(value, max_age=REMEMBER_FOR_DAYS * 24 * 3600)
    except BadSignature:
        return None
    if not isinstance(payload, dict) or "uid" not in payload:
        return None
    return payload


__all__ = [
    "burn_password_check",
    "generate_token",
    "hash_password",
    "load_remember_token",
    "random_password",
    "remember_salt",
    "sign_remember_token",
    "token_digest",
    "verify_password",
]
