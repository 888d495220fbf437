"""Public entry points for the batch jobs.

Each function is what both triggers call: the interactive CLI
(``display_result=True``) and a scheduler (``display_result=False,
email_result=True``). The flow is always the same:

1. open the ledger under the single-writer lock;
2. resolve named settings + environment and validate the job's config
   (a :class:`~donation_ledger.errors.ConfigurationError` aborts here, before
   any mutation);
3. run the job;
4. render the summary and deliver it.

Collaborators (mailer, renderer, console) are injectable for tests; by
default they are built from configuration.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date

from rich.console import Console

from .acknowledge import AcknowledgementEngine, needs_mail
from .config import (
    AcknowledgementConfig,
    ImportConfig,
    MailConfig,
    RollupConfig,
    resolve_settings,
)
from .errors import ConfigurationError
from .importer import import_pending
from .ledger import LedgerStore, ledger_writer
from .mail import Mailer, SmtpMailer
from .models import AckBatchResult, ImportBatchResult, RollupResult
from .rendering import TemplateRenderer
from .reporting import acknowledgement_report, deliver, import_report, rollup_report
from .rollup import generate_annual_rollup, prior_tax_year
from .storage import FolderStore


def _settings(store: LedgerStore, environ: Mapping[str, str] | None) -> dict[str, str]:
    return resolve_settings(store.settings(), environ=environ)


def _report_mailer(
    settings: Mapping[str, str],
    *,
    email_result: bool,
    mailer: Mailer | None,
) -> tuple[Mailer | None, list[str]]:
    """Validate mail settings up front when a summary is to be emailed."""

    if not email_result:
        return mailer, []
    mail_config = MailConfig.from_settings(settings)
    if not mail_config.report_recipients:
        raise ConfigurationError("report_recipients is required to email a run summary")
    return (mailer or SmtpMailer(mail_config)), mail_config.report_recipients


def import_pending_donations(
    *,
    database_url: str | None = None,
    display_result: bool = True,
    email_result: bool = False,
    mailer: Mailer | None = None,
    console: Console | None = None,
    environ: Mapping[str, str] | None = None,
) -> ImportBatchResult:
    """Import every pending intake file into the ledger and report the outcome."""

    with ledger_writer(database_url=database_url) as store:
        settings = _settings(store, environ)
        config = ImportConfig.from_settings(settings)
        report_mailer, recipients = _report_mailer(
            settings, email_result=email_result, mailer=mailer
        )
        result = import_pending(store, config)

    deliver(
        import_report(result),
        display_result=display_result,
        email_result=email_result,
        console=console,
        mailer=report_mailer,
        recipients=recipients,
    )
    return result


def acknowledge_donations(
    *,
    database_url: str | None = None,
    display_result: bool = True,
    email_result: bool = False,
    mailer: Mailer | None = None,
    renderer: TemplateRenderer | None = None,
    console: Console | None = None,
    environ: Mapping[str, str] | None = None,
) -> AckBatchResult:
    """Email or generate acknowledgements for every unacknowledged row."""

    with ledger_writer(database_url=database_url) as store:
        settings = _settings(store, environ)
        config = AcknowledgementConfig.from_settings(settings)
        # SMTP settings are required only when some pending row will be emailed.
        if mailer is None and needs_mail(store.unacknowledged(), config):
            mailer = SmtpMailer(MailConfig.from_settings(settings))
        report_mailer, recipients = _report_mailer(
            settings, email_result=email_result, mailer=mailer
        )
        renderer = renderer or TemplateRenderer(config.template_folder)
        renderer.validate([config.ack_email_template, config.ack_document_template])
        output = FolderStore(config.acknowledgement_folder)
        if not output.root.is_dir():
            raise ConfigurationError(
                f"acknowledgement_folder is not an accessible folder: {output.root}"
            )

        engine = AcknowledgementEngine(config, renderer=renderer, mailer=mailer, output=output)
        result = engine.run(store)

    deliver(
        acknowledgement_report(result),
        display_result=display_result,
        email_result=email_result,
        console=console,
        mailer=report_mailer,
        recipients=recipients,
    )
    return result


def generate_rollup(
    *,
    database_url: str | None = None,
    tax_year: int | None = None,
    today: date | None = None,
    display_result: bool = True,
    email_result: bool = False,
    mailer: Mailer | None = None,
    console: Console | None = None,
    environ: Mapping[str, str] | None = None,
) -> RollupResult:
    """Summarize a tax year's recurring gifts into P4 rows (default: last year)."""

    year = tax_year if tax_year is not None else prior_tax_year(today)
    with ledger_writer(database_url=database_url) as store:
        settings = _settings(store, environ)
        config = RollupConfig.from_settings(settings)
        report_mailer, recipients = _report_mailer(
            settings, email_result=email_result, mailer=mailer
        )
        result = generate_annual_rollup(store, tax_year=year, at=config.first_data_row)

    deliver(
        rollup_report(result),
        display_result=display_result,
        email_result=email_result,
        console=console,
        mailer=report_mailer,
        recipients=recipients,
    )
    return result


__all__ = [
    "acknowledge_donations",
    "generate_rollup",
    "import_pending_donations",
]
