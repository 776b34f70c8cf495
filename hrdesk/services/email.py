"""
Outbound email. Delivery is fire-and-forget: no retries, failures surface
as EmailDeliveryError for the caller to roll back and report.
"""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from hrdesk.core.config import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    pass


class EmailSender(Protocol):
    def send(self, to_email: str, subject: str, body: str) -> None:
        ...


class SMTPEmailSender:
    def __init__(self, smtp=None):
        self.smtp = smtp or settings.smtp

    def send(self, to_email: str, subject: str, body: str) -> None:
        msg = MIMEMultipart()
        msg["From"] = self.smtp.sender
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain"))

        try:
            with smtplib.SMTP(self.smtp.host, self.smtp.port, timeout=self.smtp.timeout_seconds) as server:
                server.ehlo()
                if self.smtp.use_tls:
                    server.starttls()
                    server.ehlo()
                if self.smtp.user:
                    server.login(self.smtp.user, self.smtp.password or "")
                server.sendmail(self.smtp.sender, [to_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email to {to_email} failed: {e}")
            raise EmailDeliveryError(str(e)) from e

        logger.info("Email sent", extra={"to": to_email, "subject": subject})


def get_email_sender() -> EmailSender:
    return SMTPEmailSender()
