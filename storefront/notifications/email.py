# storefront/notifications/email.py
import smtplib
from email.message import EmailMessage

from storefront.utils.settings import (
    EMAIL_FROM,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_TIMEOUT_SECONDS,
    SMTP_USER,
)
from storefront.utils.logging import get_logger
from storefront.utils.retry import smtp_retry

logger = get_logger(__name__)


class LoggingEmailSender:
    """Default sender when no SMTP server is configured: only logs."""

    def send(self, to: str, subject: str, body: str) -> None:
        logger.info(f"[EMAIL] to={to} subject={subject!r}\n{body}")


class SmtpEmailSender:
    def __init__(
        self,
        host: str = SMTP_HOST,
        port: int = SMTP_PORT,
        user: str = SMTP_USER,
        password: str = SMTP_PASSWORD,
        sender: str = EMAIL_FROM,
        timeout: float = SMTP_TIMEOUT_SECONDS,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.timeout = timeout

    @smtp_retry()
    def send(self, to: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password)
            smtp.send_message(msg)

        logger.info(f"Email {subject!r} sent to {to}")


def get_email_sender() -> LoggingEmailSender | SmtpEmailSender:
    if SMTP_HOST:
        return SmtpEmailSender()
    return LoggingEmailSender()
