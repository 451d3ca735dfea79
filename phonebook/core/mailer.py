"""
Email adapter for the phonebook backend.

The default implementation uses SMTP, reading credentials from Settings.
"""

from __future__ import annotations

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import logging
import smtplib
import ssl
from typing import Protocol

from .config import Settings, get_settings

logger = logging.getLogger("phonebook.mail")


class EmailSender(Protocol):
    def send_mail(self, to_address: str, subject: str, body: str) -> None: ...


class SmtpMailer:
    """EmailSender that delivers plain-text messages over SMTP."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def _build_message(self, to_address: str, subject: str, body: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.settings.smtp_from
        msg["To"] = to_address
        msg.attach(MIMEText(body, "plain", "utf-8"))
        return msg

    def send_mail(self, to_address: str, subject: str, body: str) -> None:
        """
        Send a message to ``to_address``.

        When SMTP is not configured the message is dropped with a warning.
        Transport errors propagate to the caller.
        """
        settings = self.settings
        if not settings.smtp_configured:
            logger.warning("SMTP not configured; skipping mail to %s (%s)", to_address, subject)
            return
        msg = self._build_message(to_address, subject, body)
        port = settings.smtp_port or 465
        if port == 465:
            context = ssl.create_default_context()
            with smtplib.SMTP_SSL(settings.smtp_host, port, context=context) as server:
                server.login(settings.smtp_user, settings.smtp_password)
                server.sendmail(settings.smtp_from, [to_address], msg.as_string())
        else:
            with smtplib.SMTP(settings.smtp_host, port) as server:
                server.ehlo()
                server.starttls(context=ssl.create_default_context())
                server.login(settings.smtp_user, settings.smtp_password)
                server.sendmail(settings.smtp_from, [to_address], msg.as_string())
        logger.info("Sent mail to %s (%s)", to_address, subject)
