"""
Tests for mail rendering and backend selection.
"""

from unittest.mock import MagicMock, patch

import pytest

from gatehouse.services.mailer import (
    ConsoleMailer,
    MailMessage,
    MemoryMailer,
    SMTPMailer,
    build_mailer,
    render_message,
)


class _Recipient:
    email = "reader@example.com"


def test_render_message_fills_both_bodies() -> None:
    message = render_message(
        "reset_password_instructions",
        to="reader@example.com",
        subject="Reset password instructions",
        user=_Recipient(),
        edit_url="http://testserver/users/password/edit?reset_password_token=abc",
    )

    assert message.to == "reader@example.com"
    assert "Hello reader@example.com!" in message.text_body
    assert 'href="http://testserver/users/password/edit?reset_password_token=abc"' in message.html_body


@pytest.mark.parametrize(
    "backend, expected",
    [("memory", MemoryMailer), ("console", ConsoleMailer), ("smtp", SMTPMailer)],
)
def test_build_mailer(backend: str, expected: type) -> None:
    assert isinstance(build_mailer(backend), expected)


def test_build_mailer_rejects_unknown_backend() -> None:
    with pytest.raises(RuntimeError):
        build_mailer("pigeon")


def test_smtp_mailer_sends_multipart_message() -> None:
    mailer = SMTPMailer("smtp.example.com", 2525, username="u", password="p", use_tls=True)
    message = MailMessage(to="to@example.com", subject="Hi", html_body="<p>Hi</p>", text_body="Hi")

    with patch("gatehouse.services.mailer.smtplib.SMTP") as smtp_cls:
        server = MagicMock()
        smtp_cls.return_value.__enter__.return_value = server
        mailer.send(message)

    smtp_cls.assert_called_once_with("smtp.example.com", 2525, timeout=30.0)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("u", "p")
    sender, recipients, raw = server.sendmail.call_args.args
    assert recipients == ["to@example.com"]
    assert "Subject: Hi" in raw
