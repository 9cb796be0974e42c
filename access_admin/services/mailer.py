"""
Outbound email delivery.

``ConsoleDispatcher`` is the default: it logs the message and reports it as
accepted, so the reminder flow works without any mail infrastructure.
``SmtpDispatcher`` delivers through a configured SMTP relay.
"""

import logging
import smtplib
from dataclasses import asdict, dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Sequence

from access_admin.errors import DispatchError

logger = logging.getLogger(__name__)

CONSOLE_PROVIDER = "console"
SMTP_PROVIDER = "smtp"


@dataclass(frozen=True)
class DeliveryResult:
    delivered: bool
    provider: str
    message: Optional[str] = None

    def to_dict(self):
        return asdict(self)


class ConsoleDispatcher:
    provider = CONSOLE_PROVIDER

    def send(self, recipients: Sequence[str], subject: str, html: str, text: str) -> DeliveryResult:
        logger.info(
            "Email delivery disabled, would send to=%s subject=%r\n%s",
            ", ".join(recipients),
            subject,
            text,
        )
        return DeliveryResult(delivered=True, provider=self.provider, message="logged")


class SmtpDispatcher:
    provider = SMTP_PROVIDER

    def __init__(self, host, port=587, username=None, password=None, sender=None,
                 use_tls=True, timeout=30):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.use_tls = use_tls
        self.timeout = timeout

    def _build_message(self, recipients, subject, html, text):
        msg = MIMEMultipart("alternative")
        msg["From"] = self.sender
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject
        msg.attach(MIMEText(text, "plain"))
        msg.attach(MIMEText(html, "html"))
        return msg

    def send(self, recipients: Sequence[str], subject: str, html: str, text: str) -> DeliveryResult:
        msg = self._build_message(recipients, subject, html, text)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                refused = server.sendmail(self.sender, list(recipients), msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise DispatchError(f"SMTP delivery failed: {e}") from e

        if refused:
            logger.warning("SMTP relay refused recipients: %s", ", ".join(refused))
        return DeliveryResult(
            delivered=True,
            provider=self.provider,
            message=f"accepted {len(recipients) - len(refused)} of {len(recipients)}",
        )


def build_dispatcher(config):
    """Pick the dispatcher for a Flask config mapping."""
    if not config.get("EMAIL_ENABLED"):
        return ConsoleDispatcher()

    provider = (config.get("MAIL_PROVIDER") or CONSOLE_PROVIDER).lower()
    if provider == SMTP_PROVIDER:
        if not config.get("SMTP_HOST"):
            logger.warning("MAIL_PROVIDER=smtp but SMTP_HOST is unset, falling back to console")
            return ConsoleDispatcher()
        return SmtpDispatcher(
            host=config["SMTP_HOST"],
            port=int(config.get("SMTP_PORT") or 587),
            username=config.get("SMTP_USER"),
            password=config.get("SMTP_PASS"),
            sender=config.get("EMAIL_FROM"),
            use_tls=config.get("SMTP_USE_TLS", True),
            timeout=config.get("SMTP_TIMEOUT", 30),
        )
    if provider != CONSOLE_PROVIDER:
        logger.warning("Unknown MAIL_PROVIDER %r, falling back to console", provider)
    return ConsoleDispatcher()
