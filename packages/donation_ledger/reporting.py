"""Human-readable run summaries and their delivery.

Every run result can be rendered as a :class:`Report` carrying Markdown (for
the terminal, through ``rich``) and HTML (for the emailed summary). Reports
are delivered only when the run had at least one unit of work.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from .logging_setup import get_logger
from .mail import Mailer
from .models import AckBatchResult, DonationRecord, ImportBatchResult, RollupResult

_logger = get_logger("donation_ledger.reporting")

IMPORT_TITLE = "Import Pending Donation Data"
ACK_TITLE = "Acknowledge Donations"
ROLLUP_TITLE = "Annual Recurring Gift Rollup"


@dataclass(frozen=True, slots=True)
class Report:
    title: str
    markdown: str
    html: str
    has_work: bool


def _html_page(paragraphs: list[str]) -> str:
    body = "\n".join(paragraphs)
    return f'<div style="font-family:arial">\n{body}\n</div>'


def _ul(items: list[str]) -> str:
    return "<ul>" + "".join(f"<li>{item}</li>" for item in items) + "</ul>"


def _note_line(r: DonationRecord) -> str:
    who = f"{r.first_name} {r.last_name}"
    return f"{r.donation_date:%Y/%m/%d} {who} ({r.payment_type}): {r.payment_note}"


def import_report(result: ImportBatchResult) -> Report:
    if not result.has_work:
        text = "No files were pending import."
        return Report(IMPORT_TITLE, text, _html_page([f"<p>{text}</p>"]), False)

    md = ["The following files (rows read / records inserted) were processed:", ""]
    items: list[str] = []
    for f in result.files:
        if f.succeeded:
            line = f"{f.file_name} ({f.total_rows_read} / {f.records_inserted})"
        else:
            line = f"{f.file_name}: FAILED: {f.error}"
        md.append(f"- {line}")
        items.append(escape(line))
    html = ["<p>The following files (rows read / records inserted) were processed:</p>", _ul(items)]

    notes = result.payment_notes
    if notes:
        md += ["", "Payment notes for review:", ""]
        md += [f"- {_note_line(r)}" for r in notes]
        html += ["<p>Payment notes for review:</p>", _ul([escape(_note_line(r)) for r in notes])]

    return Report(IMPORT_TITLE, "\n".join(md), _html_page(html), True)


def acknowledgement_report(result: AckBatchResult) -> Report:
    if not result.has_work:
        text = "No donations were awaiting acknowledgement."
        return Report(ACK_TITLE, text, _html_page([f"<p>{text}</p>"]), False)

    counts = [
        ("Eligible", result.total_eligible),
        ("Emailed", result.emailed),
        ("Letters generated", result.documented),
        ("Recurring (acknowledged by annual rollup)", result.skipped_recurring),
        ("Missing email and postal address", result.skipped_unaddressed),
        ("Errors", len(result.errors)),
    ]
    md = [f"- {label}: {n}" for label, n in counts]
    items = [escape(f"{label}: {n}") for label, n in counts]
    html = [_ul(items)]
    if result.errors:
        md += ["", "Failed rows (will be retried):", ""]
        md += [f"- row {row_id}: {detail}" for row_id, detail in result.errors]
        html += [
            "<p>Failed rows (will be retried):</p>",
            _ul([escape(f"row {row_id}: {detail}") for row_id, detail in result.errors]),
        ]
    return Report(ACK_TITLE, "\n".join(md), _html_page(html), True)


def rollup_report(result: RollupResult) -> Report:
    header = f"Tax year {result.tax_year}: {result.records_inserted} rollup record(s) created."
    md = [header]
    html = [f"<p>{escape(header)}</p>"]
    if result.skipped_existing:
        line = f"{result.skipped_existing} donor(s) already had a rollup for this year."
        md.append(line)
        html.append(f"<p>{escape(line)}</p>")
    if result.records:
        lines = [
            f"{r.first_name} {r.last_name}: ${r.gross:,.2f} through {r.donation_date:%Y/%m/%d}"
            for r in result.records
        ]
        md += [""] + [f"- {line}" for line in lines]
        html.append(_ul([escape(line) for line in lines]))
    return Report(ROLLUP_TITLE, "\n".join(md), _html_page(html), result.has_work)


def deliver(
    report: Report,
    *,
    display_result: bool,
    email_result: bool,
    console: Console | None = None,
    mailer: Mailer | None = None,
    recipients: list[str] | None = None,
) -> None:
    """Show and/or email ``report``; reports without work are never emailed."""

    if display_result:
        (console or Console()).print(Panel(Markdown(report.markdown), title=report.title))
    if not (email_result and report.has_work):
        return
    if mailer is None or not recipients:
        _logger.warning("report %r not emailed: no mailer or recipients configured", report.title)
        return
    for recipient in recipients:
        mailer.send(recipient, report.title, report.html)


__all__ = [
    "Report",
    "acknowledgement_report",
    "deliver",
    "import_report",
    "rollup_report",
]
