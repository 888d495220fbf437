"""Test doubles for the mail transport and template rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from donation_ledger.models import AcknowledgementBindings
from donation_ledger.rendering import TemplateRenderer


@dataclass
class SentMail:
    recipient: str
    subject: str
    html_body: str
    reply_to: str | None = None
    sender_name: str | None = None


@dataclass
class RecordingMailer:
    """Captures every message instead of talking to an SMTP relay.

    Recipients listed in ``fail_for`` raise ``ConnectionError`` to simulate a
    transport failure for that one message.
    """

    sent: list[SentMail] = field(default_factory=list)
    fail_for: set[str] = field(default_factory=set)

    def send(
        self,
        recipient: str,
        subject: str,
        html_body: str,
        *,
        reply_to: str | None = None,
        sender_name: str | None = None,
    ) -> None:
        if recipient in self.fail_for:
            raise ConnectionError(f"relay refused {recipient}")
        self.sent.append(SentMail(recipient, subject, html_body, reply_to, sender_name))

    @property
    def recipients(self) -> list[str]:
        return [m.recipient for m in self.sent]


class FailingRenderer(TemplateRenderer):
    """Bundled templates, except rendering fails for one donor's last name."""

    def __init__(self, fail_last_name: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.fail_last_name = fail_last_name

    def render(self, reference: str, bindings: AcknowledgementBindings) -> str:
        if bindings.last_name == self.fail_last_name:
            raise RuntimeError("template engine exploded")
        return super().render(reference, bindings)
