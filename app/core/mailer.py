"""
Outgoing email for account activation.

SmtpMailer sends through the configured SMTP server; ConsoleMailer only logs
the message and is the dev default. get_mailer() picks one from MAIL_BACKEND.
"""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import TYPE_CHECKING

from app.core.config import get_settings

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


class MailerError(Exception):
    """Raised when a message could not be handed to the mail transport."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class Mailer:
    """Interface for mail delivery; send() raises MailerError on failure."""

    def send(self, to_email: str, subject: str, text_body: str, html_body: str | None = None) -> None:
        raise NotImplementedError


class ConsoleMailer(Mailer):
    def send(self, to_email: str, subject: str, text_body: str, html_body: str | None = None) -> None:
        logger.info("Mail (console backend) to=%s subject=%s\n%s", to_email, subject, text_body)


class SmtpMailer(Mailer):
    """Send mail over SMTP; port 465 uses implicit TLS, any other port STARTTLS."""

    def __init__(self, settings: "Settings") -> None:
        self.settings = settings

    def _is_configured(self) -> bool:
        s = self.settings
        return bool(s.SMTP_HOST and s.SMTP_USER and s.SMTP_PASSWORD and s.SMTP_FROM)

    def _build_message(self, to_email: str, subject: str, text_body: str, html_body: str | None) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.settings.SMTP_FROM or ""
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        if html_body:
            msg.attach(MIMEText(html_body, "html", "utf-8"))
        return msg

    def send(self, to_email: str, subject: str, text_body: str, html_body: str | None = None) -> None:
        if not self._is_configured():
            raise MailerError(
                "SMTP is not configured (SMTP_HOST, SMTP_USER, SMTP_PASSWORD, SMTP_FROM)."
            )
        s = self.settings
        msg = self._build_message(to_email, subject, text_body, html_body)
        password = s.SMTP_PASSWORD.get_secret_value() if s.SMTP_PASSWORD else ""
        context = ssl.create_default_context()
        try:
            if s.SMTP_PORT == 465:
                with smtplib.SMTP_SSL(s.SMTP_HOST, s.SMTP_PORT, context=context, timeout=s.SMTP_TIMEOUT_SEC) as server:
                    server.login(s.SMTP_USER, password)
                    server.sendmail(s.SMTP_FROM, [to_email], msg.as_string())
            else:
                with smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=s.SMTP_TIMEOUT_SEC) as server:
                    server.ehlo()
                    server.starttls(context=context)
                    server.login(s.SMTP_USER, password)
                    server.sendmail(s.SMTP_FROM, [to_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise MailerError(f"Failed to send email to {to_email}: {e!s}", cause=e) from e


def get_mailer() -> Mailer:
    """Dependency: mailer for the configured MAIL_BACKEND."""
    settings = get_settings()
    if settings.MAIL_BACKEND == "smtp":
        return SmtpMailer(settings)
    return ConsoleMailer()
