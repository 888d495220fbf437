"""Typed configuration for the batch entry points.

Settings are plain ``name -> value`` strings drawn from two places, the
environment winning:

1. named settings stored alongside the ledger (``dl_settings``), and
2. environment variables ``DONATIONS_<NAME>`` (``.env`` is loaded by the CLI).

Each entry point validates only what it needs through its own pydantic model.
A missing or invalid key raises :class:`~donation_ledger.errors.ConfigurationError`
at construction time, before anything touches the ledger or the file store.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError

ENV_PREFIX = "DONATIONS_"

SETTING_NAMES: tuple[str, ...] = (
    "pending_folder",
    "imported_folder",
    "first_data_row",
    "check_ledger_data_range",
    "check_ledger_first_data_row",
    "acknowledgement_folder",
    "template_folder",
    "ack_email_template",
    "ack_document_template",
    "ack_email_subject",
    "ack_email_sender_name",
    "ack_email_reply_to",
    "aggregating_fund_emails",
    "smtp_host",
    "smtp_port",
    "smtp_sender",
    "smtp_username",
    "smtp_password",
    "smtp_starttls",
    "report_recipients",
)


def resolve_settings(
    stored: Mapping[str, str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Merge stored named settings with ``DONATIONS_*`` environment overrides.

    Blank values are dropped so they read as "missing" downstream.
    """

    env = os.environ if environ is None else environ
    merged: dict[str, str] = {}
    for name, value in (stored or {}).items():
        if value is not None and str(value).strip():
            merged[name] = str(value).strip()
    for name in SETTING_NAMES:
        value = env.get(ENV_PREFIX + name.upper())
        if value is not None and value.strip():
            merged[name] = value.strip()
    return merged


def _split_list(value: Any) -> Any:
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class _SettingsModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, str_strip_whitespace=True)

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> Self:
        try:
            return cls.model_validate(dict(settings))
        except ValidationError as exc:
            missing = tuple(
                str(err["loc"][0]) for err in exc.errors() if err["type"] == "missing"
            )
            if missing:
                raise ConfigurationError(
                    f"{cls.__name__}: missing required settings: {', '.join(missing)}",
                    missing=missing,
                ) from exc
            raise ConfigurationError(f"{cls.__name__}: invalid settings: {exc}") from exc


class ImportConfig(_SettingsModel):
    """Intake/processed folders and the ledger insertion point."""

    pending_folder: Path
    imported_folder: Path
    first_data_row: int = Field(ge=0)
    check_ledger_data_range: str = "donation_data"
    check_ledger_first_data_row: int = Field(default=1, ge=1)


class RollupConfig(_SettingsModel):
    """Insertion point for synthesized annual rollup rows."""

    first_data_row: int = Field(ge=0)


class AcknowledgementConfig(_SettingsModel):
    """Output area, template references and email envelope for acknowledgements."""

    acknowledgement_folder: Path
    ack_email_template: str
    ack_document_template: str
    ack_email_subject: str
    ack_email_sender_name: str
    ack_email_reply_to: str
    aggregating_fund_emails: list[str] = Field(default_factory=list)
    template_folder: Path | None = None

    @field_validator("aggregating_fund_emails", mode="before")
    @classmethod
    def _split_funds(cls, v: Any) -> Any:
        return _split_list(v)

    @field_validator("aggregating_fund_emails")
    @classmethod
    def _lower_funds(cls, v: list[str]) -> list[str]:
        return [item.lower() for item in v]

    def is_aggregating_fund(self, email: str) -> bool:
        return email.strip().lower() in self.aggregating_fund_emails


class MailConfig(_SettingsModel):
    """SMTP transport plus the distribution list for emailed run summaries."""

    smtp_host: str
    smtp_port: int = 25
    smtp_sender: str
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_starttls: bool = False
    report_recipients: list[str] = Field(default_factory=list)

    @field_validator("report_recipients", mode="before")
    @classmethod
    def _split_recipients(cls, v: Any) -> Any:
        return _split_list(v)


__all__ = [
    "AcknowledgementConfig",
    "ENV_PREFIX",
    "ImportConfig",
    "MailConfig",
    "RollupConfig",
    "SETTING_NAMES",
    "resolve_settings",
]
