"""Acknowledgement engine.

Walks every unacknowledged ledger row (top to bottom) through one decision:

=====================  =========================================================
payment type           outcome
=====================  =========================================================
P2 (recurring)         no letter; marked acknowledged so it is not revisited
                       (the donor is thanked once a year through a P4 rollup)
D1 from an aggregating skipped entirely and not counted as eligible; the fund
fund address           sends its own acknowledgement
anything else          must be addressable; emailed when an address is on file,
                       otherwise rendered to a letter in the output area
=====================  =========================================================

A row is marked acknowledged only after its email was handed to the mailer or
its letter was written. A failure on one row is recorded against that row's
id and the run moves on; the row stays unacknowledged and is retried next
run. Unaddressable rows are tallied and left alone until someone fixes the
data.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from .config import AcknowledgementConfig
from .errors import AcknowledgementError
from .ledger import LedgerStore
from .logging_setup import get_logger
from .mail import Mailer
from .models import AckBatchResult, AcknowledgementBindings, LedgerEntry, PaymentType
from .rendering import TemplateRenderer
from .storage import FolderStore, safe_file_name

_logger = get_logger("donation_ledger.acknowledge")


class Decision(StrEnum):
    EXCLUDED_FUND = "excluded_fund"
    SKIP_RECURRING = "skip_recurring"
    UNADDRESSED = "unaddressed"
    EMAIL = "email"
    DOCUMENT = "document"


def decide(entry: LedgerEntry, config: AcknowledgementConfig) -> Decision:
    record = entry.record
    if record.payment_type is PaymentType.RECURRING:
        return Decision.SKIP_RECURRING
    if record.payment_type is PaymentType.DONOR_ADVISED_FUND and config.is_aggregating_fund(
        record.email_address
    ):
        return Decision.EXCLUDED_FUND
    if not record.is_addressable:
        return Decision.UNADDRESSED
    if record.email_address.strip():
        return Decision.EMAIL
    return Decision.DOCUMENT


def needs_mail(entries: Iterable[LedgerEntry], config: AcknowledgementConfig) -> bool:
    """True when at least one of ``entries`` would be acknowledged by email."""

    return any(decide(entry, config) is Decision.EMAIL for entry in entries)


def document_name(entry: LedgerEntry) -> str:
    """Deterministic letter file name: ``<last>_<first>_<YYYY-MM-DD>.html``."""

    r = entry.record
    stem = f"{r.last_name}_{r.first_name}_{r.donation_date:%Y-%m-%d}"
    return safe_file_name(stem) + ".html"


class AcknowledgementEngine:
    """Sends acknowledgements for one ledger using injected collaborators."""

    def __init__(
        self,
        config: AcknowledgementConfig,
        *,
        renderer: TemplateRenderer,
        mailer: Mailer | None,
        output: FolderStore,
    ) -> None:
        self.config = config
        self.renderer = renderer
        self.mailer = mailer
        self.output = output

    def _email(self, entry: LedgerEntry, bindings: AcknowledgementBindings) -> None:
        if self.mailer is None:
            raise RuntimeError("no mail transport configured")
        body = self.renderer.render(self.config.ack_email_template, bindings)
        self.mailer.send(
            entry.record.email_address,
            self.config.ack_email_subject,
            body,
            reply_to=self.config.ack_email_reply_to,
            sender_name=self.config.ack_email_sender_name,
        )

    def _document(self, entry: LedgerEntry, bindings: AcknowledgementBindings) -> None:
        data = self.renderer.render_document(self.config.ack_document_template, bindings)
        self.output.write_bytes(document_name(entry), data)

    def deliver(self, entry: LedgerEntry, decision: Decision) -> None:
        bindings = AcknowledgementBindings.from_record(entry.record)
        try:
            if decision is Decision.EMAIL:
                self._email(entry, bindings)
            else:
                self._document(entry, bindings)
        except Exception as exc:
            raise AcknowledgementError(entry.id, f"{type(exc).__name__}: {exc}") from exc

    def run(self, store: LedgerStore) -> AckBatchResult:
        result = AckBatchResult()
        pending = store.unacknowledged()
        if not pending:
            _logger.info("no unacknowledged rows")
            return result

        for entry in pending:
            decision = decide(entry, self.config)
            if decision is Decision.EXCLUDED_FUND:
                continue
            result.total_eligible += 1

            if decision is Decision.SKIP_RECURRING:
                store.mark_acknowledged(entry.id)
                store.commit()
                result.skipped_recurring += 1
                continue
            if decision is Decision.UNADDRESSED:
                _logger.info(
                    "row %d (%s) has no email or postal address",
                    entry.id,
                    entry.record.last_name,
                )
                result.skipped_unaddressed += 1
                continue

            try:
                self.deliver(entry, decision)
            except AcknowledgementError as exc:
                _logger.warning("acknowledgement failed for %s", exc)
                result.errors.append((exc.record_id, exc.detail))
                continue

            store.mark_acknowledged(entry.id)
            store.commit()
            if decision is Decision.EMAIL:
                result.emailed += 1
            else:
                result.documented += 1

        _logger.info(
            "acknowledgements: %d eligible, %d emailed, %d documented, %d recurring, "
            "%d unaddressed, %d error(s)",
            result.total_eligible,
            result.emailed,
            result.documented,
            result.skipped_recurring,
            result.skipped_unaddressed,
            len(result.errors),
        )
        return result


__all__ = ["AcknowledgementEngine", "Decision", "decide", "document_name", "needs_mail"]
