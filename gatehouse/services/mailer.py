"""Outgoing mail delivery.

Three backends are available through ``MAIL_BACKEND``:

* ``memory``: keeps messages in ``deliveries`` (used by the test suite).
* ``console``: logs each message, handy in development.
* ``smtp``: sends through the configured SMTP relay.
"""

from __future__ import annotations

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from functools import lru_cache
from typing import Any, List, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from ..core import config

logger = logging.getLogger(__name__)

_templates = Environment(
    loader=PackageLoader("gatehouse", "templates"),
    autoescape=select_autoescape(["html", "xml"]),
)


@dataclass
class MailMessage:
    to: str
    subject: str
    html_body: str
    text_body: Optional[str] = None
    sender: Optional[str] = None


def render_message(template: str, *, to: str, subject: str, **context: Any) -> MailMessage:
    """Render ``mailer/<template>.html`` and ``.txt`` into a message."""

    context = {"subject": subject, **context}
    html_body = _templates.get_template(f"mailer/{template}.html").render(**context)
    text_body = _templates.get_template(f"mailer/{template}.txt").render(**context)
    return MailMessage(to=to, subject=subject, html_body=html_body, text_body=text_body)


class Mailer:
    """Base mail backend."""

    default_from: str = config.MAIL_FROM

    def send(self, message: MailMessage) -> None:
        raise NotImplementedError


class MemoryMailer(Mailer):
    def __init__(self) -> None:
        self.deliveries: List[MailMessage] = []

    def send(self, message: MailMessage) -> None:
        self.deliveries.append(message)

    def clear(self) -> None:
        self.deliveries.clear()


class ConsoleMailer(Mailer):
    def send(self, message: MailMessage) -> None:
        logger.info(
            "Mail to %s: %s\n%s",
            message.to,
            message.subject,
            message.text_body or message.html_body,
        )


class SMTPMailer(Mailer):
    """SMTP-based mail backend. Supports STARTTLS and authentication."""

    def __init__(
        self,
        host: str,
        port: int,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    def _build(self, message: MailMessage) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = message.sender or self.default_from
        msg["To"] = message.to
        if message.text_body:
            msg.attach(MIMEText(message.text_body, "plain", "utf-8"))
        msg.attach(MIMEText(message.html_body, "html", "utf-8"))
        return msg

    def send(self, message: MailMessage) -> None:
        msg = self._build(message)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls(context=ssl.create_default_context())
                if self._username and self._password:
                    server.login(self._username, self._password)
                server.sendmail(msg["From"], [message.to], msg.as_string())
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send mail to %s", message.to)
            raise
        logger.info("Mail sent to %s: %s", message.to, message.subject)


def build_mailer(backend: str) -> Mailer:
    if backend == "memory":
        return MemoryMailer()
    if backend == "console":
        return ConsoleMailer()
    if backend == "smtp":
        return SMTPMailer(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            username=config.SMTP_USERNAME,
            password=config.SMTP_PASSWORD,
            use_tls=config.SMTP_USE_TLS,
        )
    raise RuntimeError(f"Unknown MAIL_BACKEND: {backend}")


@lru_cache(maxsize=1)
def get_mailer() -> Mailer:
    """FastAPI dependency returning the process-wide mail backend."""

    return build_mailer(config.MAIL_BACKEND)


__all__ = [
    "ConsoleMailer",
    "MailMessage",
    "Mailer",
    "MemoryMailer",
    "SMTPMailer",
    "build_mailer",
    "get_mailer",
    "render_message",
]
