"""
SMTP notification sender.

Used only for the best-effort "your order is confirmed" email. Callers
decide what to do with failures; this class just raises them.
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional


class SMTPMailer:
    """Sends plain-text email through one SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout_seconds: float = 30.0,
        logger: Optional[logging.Logger] = None,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout_seconds
        self._logger = logger or logging.getLogger("print_prep.core.mailer")

    def send(self, recipient: str, subject: str, body: str) -> None:
        """
        Raises:
            smtplib.SMTPException, OSError: Relay refused or unreachable
            ValueError: Header value with CR/LF (e.g. a malformed recipient)
        """
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content(body)

        with smtplib.SMTP(self.host, self.port, timeout=self._timeout) as smtp:
            if self._use_tls:
                smtp.starttls()
            if self._username:
                smtp.login(self._username, self._password)
            smtp.send_message(message)

        self._logger.info(f"Sent '{subject}' to {recipient}")
