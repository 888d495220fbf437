"""Mail transmission.

``Mailer`` is the narrow interface the pipeline depends on: recipient,
subject, HTML body, reply-to and a sender display name. Sending is
fire-and-forget; only a raised exception is surfaced to the caller.
"""

from __future__ import annotations

import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Protocol

from .config import MailConfig
from .logging_setup import get_logger

_logger = get_logger("donation_ledger.mail")


class Mailer(Protocol):
    def send(
        self,
        recipient: str,
        subject: str,
        html_body: str,
        *,
        reply_to: str | None = None,
        sender_name: str | None = None,
    ) -> None: ...


def build_message(
    *,
    sender: str,
    recipient: str,
    subject: str,
    html_body: str,
    reply_to: str | None = None,
    sender_name: str | None = None,
) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = formataddr((sender_name, sender)) if sender_name else sender
    msg["To"] = recipient
    msg["Subject"] = subject
    if reply_to:
        msg["Reply-To"] = reply_to
    msg.set_content("This message requires an HTML-capable mail reader.")
    msg.add_alternative(html_body, subtype="html")
    return msg


class SmtpMailer:
    """Send HTML mail through an SMTP relay described by :class:`MailConfig`."""

    def __init__(self, config: MailConfig, *, timeout: float = 30.0) -> None:
        self.config = config
        self.timeout = timeout

    def send(
        self,
        recipient: str,
        subject: str,
        html_body: str,
        *,
        reply_to: str | None = None,
        sender_name: str | None = None,
    ) -> None:
        msg = build_message(
            sender=self.config.smtp_sender,
            recipient=recipient,
            subject=subject,
            html_body=html_body,
            reply_to=reply_to,
            sender_name=sender_name,
        )
        smtp_conn = smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=self.timeout)
        with smtp_conn as smtp:
            if self.config.smtp_starttls:
                smtp.starttls()
            if self.config.smtp_username:
                smtp.login(self.config.smtp_username, self.config.smtp_password or "")
            smtp.send_message(msg)
        _logger.info("sent %r to %s", subject, recipient)


__all__ = ["Mailer", "SmtpMailer", "build_message"]
