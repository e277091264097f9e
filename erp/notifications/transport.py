"""SMTP mail transport.

The transport only knows how to deliver an already-rendered message; the
``EmailService`` owns templates and the send log.
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from fastapi.concurrency import run_in_threadpool

from erp.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class OutgoingEmail:
    to: str
    subject: str
    html: str
    sender: str


class MailTransport(Protocol):
    async def send(self, message: OutgoingEmail) -> None:
        """Deliver *message* or raise."""


class SMTPTransport:
    """Blocking smtplib delivery run in the threadpool."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SMTPTransport":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASS,
            use_tls=settings.SMTP_USE_TLS,
        )

    async def send(self, message: OutgoingEmail) -> None:
        await run_in_threadpool(self._send_sync, message)

    def _send_sync(self, message: OutgoingEmail) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = message.sender
        msg["To"] = message.to
        msg.attach(MIMEText(message.html, "html"))

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.send_message(msg)
        logger.debug("SMTP accepted message for %s", message.to)
