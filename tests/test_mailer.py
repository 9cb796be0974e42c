import logging
import smtplib

import pytest

from access_admin.errors import DispatchError
from access_admin.services import mailer
from access_admin.services.mailer import ConsoleDispatcher, SmtpDispatcher, build_dispatcher


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.calls = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user, password))

    def sendmail(self, sender, recipients, message):
        self.calls.append(("sendmail", sender, recipients, message))
        return {}


class BrokenSMTP(FakeSMTP):
    def sendmail(self, sender, recipients, message):
        raise smtplib.SMTPServerDisconnected("connection dropped")


@pytest.fixture(autouse=True)
def _reset_fake():
    FakeSMTP.instances = []


def test_console_dispatcher_logs_and_accepts(caplog):
    with caplog.at_level(logging.INFO, logger="access_admin.services.mailer"):
        result = ConsoleDispatcher().send(["a@example.com", "b@example.com"], "Hello", "<p>hi</p>", "hi")
    assert result.delivered is True
    assert result.provider == "console"
    assert "a@example.com, b@example.com" in caplog.text
    assert "Hello" in caplog.text


def test_build_dispatcher_defaults_to_console_when_email_disabled():
    assert isinstance(build_dispatcher({"EMAIL_ENABLED": False, "MAIL_PROVIDER": "smtp"}), ConsoleDispatcher)


def test_build_dispatcher_smtp():
    dispatcher = build_dispatcher({
        "EMAIL_ENABLED": True,
        "MAIL_PROVIDER": "smtp",
        "SMTP_HOST": "mail.internal",
        "SMTP_PORT": "2525",
        "SMTP_USER": "bot",
        "SMTP_PASS": "secret",
        "EMAIL_FROM": "reviews@example.com",
    })
    assert isinstance(dispatcher, SmtpDispatcher)
    assert dispatcher.port == 2525
    assert dispatcher.sender == "reviews@example.com"


def test_build_dispatcher_smtp_without_host_falls_back():
    assert isinstance(build_dispatcher({"EMAIL_ENABLED": True, "MAIL_PROVIDER": "smtp"}), ConsoleDispatcher)


def test_build_dispatcher_unknown_provider_falls_back():
    assert isinstance(build_dispatcher({"EMAIL_ENABLED": True, "MAIL_PROVIDER": "pigeon"}), ConsoleDispatcher)


def test_smtp_dispatcher_sends_one_multipart_message(monkeypatch):
    monkeypatch.setattr(mailer.smtplib, "SMTP", FakeSMTP)
    dispatcher = SmtpDispatcher("mail.internal", 587, "bot", "secret", sender="reviews@example.com")

    result = dispatcher.send(["a@example.com", "b@example.com"], "Subject line", "<p>html</p>", "text")

    assert result.delivered is True
    assert result.provider == "smtp"
    server = FakeSMTP.instances[0]
    assert server.calls[0] == "starttls"
    assert server.calls[1] == ("login", "bot", "secret")
    _, sender, recipients, message = server.calls[2]
    assert sender == "reviews@example.com"
    assert recipients == ["a@example.com", "b@example.com"]
    assert "multipart/alternative" in message
    assert "Subject: Subject line" in message


def test_smtp_dispatcher_skips_login_without_credentials(monkeypatch):
    monkeypatch.setattr(mailer.smtplib, "SMTP", FakeSMTP)
    SmtpDispatcher("mail.internal", 25, sender="reviews@example.com", use_tls=False).send(
        ["a@example.com"], "s", "h", "t"
    )
    assert [c[0] for c in FakeSMTP.instances[0].calls] == ["sendmail"]


def test_smtp_transport_error_becomes_dispatch_error(monkeypatch):
    monkeypatch.setattr(mailer.smtplib, "SMTP", BrokenSMTP)
    dispatcher = SmtpDispatcher("mail.internal", 587, sender="reviews@example.com", use_tls=False)
    with pytest.raises(DispatchError):
        dispatcher.send(["a@example.com"], "s", "h", "t")
