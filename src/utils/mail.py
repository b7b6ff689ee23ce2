"""SMTP mail dispatch.

This module builds an SMTP connection from explicit settings and sends a
single message. Transport failures are classified, logged with a
category-specific diagnostic and re-raised as ``MailDeliveryError``; callers
decide whether to continue with other recipients.
"""

import logging
import smtplib
import socket
import ssl
from dataclasses import dataclass
from email.headerregistry import Address
from email.message import EmailMessage
from enum import Enum
from typing import Optional

from core.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)


class TransportProfile(str, Enum):
    """How the connection to the SMTP server is secured."""

    SSL = "ssl"  # implicit TLS, usually port 465
    STARTTLS = "starttls"  # plain connect then upgrade, usually port 587
    PLAIN = "plain"

    @classmethod
    def select(cls, port: int, secure: bool = False) -> "TransportProfile":
        if secure or port == 465:
            return cls.SSL
        if port == 587:
            return cls.STARTTLS
        return cls.PLAIN


def format_address(display_name: str, address: str) -> str:
    """Render ``Name <addr>`` with the display name left readable.

    ``EmailMessage`` applies RFC 2047 encoding when the header is serialized.
    """
    if not address:
        return display_name
    return str(Address(display_name=display_name or "", addr_spec=address))


@dataclass(frozen=True)
class SmtpSettings:
    """Resolved SMTP transport configuration."""

    host: str
    port: int
    username: str = ""
    password: str = ""
    profile: TransportProfile = TransportProfile.SSL
    timeout: float = 30.0
    system_name: str = "Ödev Sistemi"

    @classmethod
    def build(
        cls,
        host: str,
        port: int,
        secure: bool = False,
        username: str = "",
        password: str = "",
        timeout: float = 30.0,
        system_name: str = "Ödev Sistemi",
    ) -> "SmtpSettings":
        """Create settings and pick the transport profile once.

        Args:
            host: SMTP server host name.
            port: SMTP server port.
            secure: Force implicit TLS regardless of port.
            username: Login user, also used as the system sender address.
            password: Login password or app password.
            timeout: Socket timeout in seconds.
            system_name: Display name for system-originated mail.

        Returns:
            SmtpSettings instance.
        """
        if not username or not password:
            logger.warning(
                "SMTP_USER or SMTP_PASS is not set; delivery will fail on servers "
                "that require authentication"
            )
        if not host:
            logger.warning("SMTP_HOST is not set")
        profile = TransportProfile.select(port, secure)
        logger.info(
            "SMTP configuration: %s:%d (profile: %s, user: %s)",
            host,
            port,
            profile.value,
            username or "-",
        )
        return cls(
            host=host,
            port=port,
            username=username,
            password=password,
            profile=profile,
            timeout=timeout,
            system_name=system_name,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    @property
    def system_sender(self) -> str:
        return format_address(self.system_name, self.username)


@dataclass
class MailMessage:
    """A single outgoing message."""

    sender: str
    to: str
    subject: str
    text: str
    html: Optional[str] = None

    def to_email_message(self) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = self.to
        msg["Subject"] = self.subject
        msg.set_content(self.text)
        if self.html:
            msg.add_alternative(self.html, subtype="html")
        return msg


_DIAGNOSTICS = {
    "auth": (
        "Authentication failed: check SMTP_USER and SMTP_PASS. Gmail accounts "
        "need an app password."
    ),
    "socket": "Connection failed: the SMTP server could not be reached.",
    "timeout": "Timeout: the SMTP server did not respond in time.",
    "envelope": "Envelope rejected: the sender or recipient address is not valid.",
    "unknown": "Unexpected SMTP error.",
}


def classify_error(exc: BaseException) -> str:
    """Map a transport exception to a failure category.

    Args:
        exc: Exception raised by smtplib or the socket layer.

    Returns:
        One of "auth", "envelope", "timeout", "socket", "unknown".
    """
    # smtplib exceptions derive from OSError, so the order matters
    if isinstance(exc, smtplib.SMTPAuthenticationError):
        return "auth"
    if isinstance(exc, (smtplib.SMTPRecipientsRefused, smtplib.SMTPSenderRefused)):
        return "envelope"
    if isinstance(exc, (TimeoutError, socket.timeout)):
        return "timeout"
    if isinstance(exc, (smtplib.SMTPConnectError, smtplib.SMTPServerDisconnected)):
        return "socket"
    if isinstance(exc, smtplib.SMTPException):
        return "unknown"
    if isinstance(exc, OSError):
        return "socket"
    return "unknown"


class Mailer:
    """Sends single messages over SMTP."""

    def __init__(self, settings: SmtpSettings, verify_before_send: bool = True):
        """Initialize Mailer.

        Args:
            settings: Resolved SMTP settings.
            verify_before_send: Run the connection self-test before each send.
        """
        self.settings = settings
        self.verify_before_send = verify_before_send

    def _open(self) -> smtplib.SMTP:
        """Connect, secure and authenticate according to the profile."""
        settings = self.settings
        context = ssl.create_default_context()
        if settings.profile == TransportProfile.SSL:
            smtp = smtplib.SMTP_SSL(
                settings.host, settings.port, timeout=settings.timeout, context=context
            )
        else:
            smtp = smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout)
        try:
            if settings.profile == TransportProfile.STARTTLS:
                smtp.starttls(context=context)
            if settings.has_credentials:
                smtp.login(settings.username, settings.password)
        except (smtplib.SMTPException, OSError):
            smtp.close()
            raise
        return smtp

    def verify_connection(self) -> bool:
        """Check that the server accepts a connection and our credentials.

        Never raises: a failure is logged and reported as False.
        """
        try:
            smtp = self._open()
            smtp.quit()
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning(
                "SMTP self-test failed (%s): %s; attempting delivery anyway",
                classify_error(exc),
                exc,
            )
            return False
        logger.info("SMTP connection verified")
        return True

    def send_mail(self, message: MailMessage) -> bool:
        """Send one message.

        Args:
            message: The message to deliver.

        Returns:
            True once the server accepted the message.

        Raises:
            MailDeliveryError: If the transport fails; ``category`` tells why.
        """
        if self.verify_before_send:
            self.verify_connection()
        try:
            with self._open() as smtp:
                smtp.send_message(message.to_email_message())
        except (smtplib.SMTPException, OSError) as exc:
            category = classify_error(exc)
            logger.error("Failed to send mail to %s: %s", message.to, exc)
            logger.error(_DIAGNOSTICS[category])
            raise MailDeliveryError(category, str(exc)) from exc
        logger.info("Mail sent to %s (subject: %s)", message.to, message.subject)
        return True
