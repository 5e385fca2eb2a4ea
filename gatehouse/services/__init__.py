"""Service layer helpers."""

from .formatting import format_currency, to_title_case, truncate
from .mailer import MailMessage, Mailer, get_mailer
from .users import (
    AuthHash,
    Errors,
    RecordInvalid,
    authenticate,
    from_omniauth,
    register_user,
    validate_user,
)

__all__ = [
    "AuthHash",
    "Errors",
    "MailMessage",
    "Mailer",
    "RecordInvalid",
    "authenticate",
    "format_currency",
    "from_omniauth",
    "get_mailer",
    "register_user",
    "to_title_case",
    "truncate",
    "validate_user",
]
