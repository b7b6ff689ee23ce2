import smtplib
import socket

import pytest

from core.exceptions import MailDeliveryError
from utils import mail
from utils.mail import (
    Mailer,
    MailMessage,
    SmtpSettings,
    TransportProfile,
    classify_error,
    format_address,
)


class FakeSMTP:
    """Stands in for smtplib.SMTP / SMTP_SSL and records what happened."""

    instances = []
    fail_login = None
    fail_send = None

    def __init__(self, host, port, timeout=None, context=None):
        self.host = host
        self.port = port
        self.calls = []
        FakeSMTP.instances.append(self)

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append("login")
        if FakeSMTP.fail_login:
            raise FakeSMTP.fail_login

    def send_message(self, msg):
        self.calls.append("send")
        if FakeSMTP.fail_send:
            raise FakeSMTP.fail_send

    def quit(self):
        self.calls.append("quit")

    def close(self):
        self.calls.append("close")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.quit()
        return False


class FakeSMTPSSL(FakeSMTP):
    pass


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_login = None
    FakeSMTP.fail_send = None
    monkeypatch.setattr(mail.smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(mail.smtplib, "SMTP_SSL", FakeSMTPSSL)
    return FakeSMTP


def _settings(port=465, secure=False):
    return SmtpSettings.build(
        host="smtp.example.com",
        port=port,
        secure=secure,
        username="system@example.com",
        password="secret",
    )


def _message():
    return MailMessage(
        sender="Sistem <system@example.com>",
        to="student@example.com",
        subject="Konu",
        text="Merhaba",
        html="<p>Merhaba</p>",
    )


@pytest.mark.parametrize(
    "port, secure, expected",
    [
        (465, False, TransportProfile.SSL),
        (587, True, TransportProfile.SSL),
        (587, False, TransportProfile.STARTTLS),
        (25, False, TransportProfile.PLAIN),
        (2525, True, TransportProfile.SSL),
    ],
)
def test_transport_profile_selection(port, secure, expected):
    assert TransportProfile.select(port, secure) is expected
    assert _settings(port, secure).profile is expected


@pytest.mark.parametrize(
    "exc, category",
    [
        (smtplib.SMTPAuthenticationError(535, b"bad credentials"), "auth"),
        (smtplib.SMTPRecipientsRefused({"x@example.com": (550, b"no such user")}), "envelope"),
        (smtplib.SMTPSenderRefused(553, b"sender rejected", "me@example.com"), "envelope"),
        (TimeoutError("timed out"), "timeout"),
        (socket.timeout("timed out"), "timeout"),
        (smtplib.SMTPServerDisconnected("gone"), "socket"),
        (ConnectionRefusedError("refused"), "socket"),
        (smtplib.SMTPDataError(554, b"rejected"), "unknown"),
        (ValueError("odd"), "unknown"),
    ],
)
def test_classify_error(exc, category):
    assert classify_error(exc) == category


def test_send_over_ssl(fake_smtp):
    mailer = Mailer(_settings(465))

    assert mailer.send_mail(_message()) is True

    # self-test connection, then the delivery connection
    assert len(fake_smtp.instances) == 2
    assert all(isinstance(s, FakeSMTPSSL) for s in fake_smtp.instances)
    assert fake_smtp.instances[-1].calls == ["login", "send", "quit"]


def test_send_with_starttls(fake_smtp):
    mailer = Mailer(_settings(587), verify_before_send=False)

    mailer.send_mail(_message())

    (smtp,) = fake_smtp.instances
    assert not isinstance(smtp, FakeSMTPSSL)
    assert smtp.calls == ["starttls", "login", "send", "quit"]


def test_failed_self_test_does_not_block_sending(fake_smtp, monkeypatch):
    mailer = Mailer(_settings(465))
    monkeypatch.setattr(mailer, "verify_connection", lambda: False)

    assert mailer.send_mail(_message()) is True


def test_verify_connection_reports_failure(fake_smtp):
    fake_smtp.fail_login = smtplib.SMTPAuthenticationError(535, b"bad credentials")
    mailer = Mailer(_settings(465))

    assert mailer.verify_connection() is False
    assert fake_smtp.instances[0].calls == ["login", "close"]


def test_auth_failure_raises_categorised_error(fake_smtp):
    fake_smtp.fail_login = smtplib.SMTPAuthenticationError(535, b"bad credentials")
    mailer = Mailer(_settings(465))

    with pytest.raises(MailDeliveryError) as excinfo:
        mailer.send_mail(_message())

    assert excinfo.value.category == "auth"


def test_recipient_refused_raises_envelope_error(fake_smtp):
    fake_smtp.fail_send = smtplib.SMTPRecipientsRefused(
        {"student@example.com": (550, b"no such user")}
    )
    mailer = Mailer(_settings(587), verify_before_send=False)

    with pytest.raises(MailDeliveryError) as excinfo:
        mailer.send_mail(_message())

    assert excinfo.value.category == "envelope"


def test_message_has_text_and_html_parts():
    msg = _message().to_email_message()

    assert msg["To"] == "student@example.com"
    assert msg.is_multipart()
    assert msg.get_body(preferencelist=("html",)).get_content().strip() == "<p>Merhaba</p>"


def test_sender_keeps_readable_display_name():
    assert format_address("Ayşe Yılmaz", "ayse@example.com") == "Ayşe Yılmaz <ayse@example.com>"
    assert _settings().system_sender == "Ödev Sistemi <system@example.com>"
    assert format_address("Ödev Sistemi", "") == "Ödev Sistemi"


def test_non_ascii_sender_is_encoded_on_the_wire():
    message = MailMessage(
        sender=format_address("Ayşe Yılmaz", "ayse@example.com"),
        to="student@example.com",
        subject="Konu",
        text="Merhaba",
    )

    msg = message.to_email_message()

    assert msg["From"].addresses[0].display_name == "Ayşe Yılmaz"
    assert msg["From"].addresses[0].addr_spec == "ayse@example.com"
    assert "=?utf-8?" in msg.as_string()
