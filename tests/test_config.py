import logging
from pathlib import Path

import pytest

from donation_ledger.config import (
    AcknowledgementConfig,
    ImportConfig,
    MailConfig,
    resolve_settings,
)
from donation_ledger.errors import ConfigurationError
from donation_ledger.logging_setup import _parse_level


def test_environment_wins_over_stored_settings():
    merged = resolve_settings(
        {"pending_folder": "/stored", "first_data_row": "2"},
        environ={"DONATIONS_PENDING_FOLDER": "/from-env", "UNRELATED": "x"},
    )
    assert merged == {"pending_folder": "/from-env", "first_data_row": "2"}


def test_blank_values_count_as_missing():
    merged = resolve_settings(
        {"pending_folder": "   ", "imported_folder": "/done"},
        environ={"DONATIONS_FIRST_DATA_ROW": ""},
    )
    assert merged == {"imported_folder": "/done"}


def test_import_config_coerces_and_defaults():
    config = ImportConfig.from_settings(
        {"pending_folder": "/in", "imported_folder": "/out", "first_data_row": "3"}
    )
    assert config.pending_folder == Path("/in")
    assert config.first_data_row == 3
    assert config.check_ledger_data_range == "donation_data"
    assert config.check_ledger_first_data_row == 1


def test_missing_keys_are_all_named():
    with pytest.raises(ConfigurationError) as excinfo:
        ImportConfig.from_settings({})
    assert set(excinfo.value.missing) == {"pending_folder", "imported_folder", "first_data_row"}
    assert "pending_folder" in str(excinfo.value)


def test_invalid_value_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="invalid settings"):
        ImportConfig.from_settings(
            {"pending_folder": "/in", "imported_folder": "/out", "first_data_row": "-1"}
        )


def test_aggregating_fund_list_is_split_and_case_insensitive():
    config = AcknowledgementConfig.from_settings(
        {
            "acknowledgement_folder": "/acks",
            "ack_email_template": "e.html.j2",
            "ack_document_template": "d.html.j2",
            "ack_email_subject": "Thanks",
            "ack_email_sender_name": "Us",
            "ack_email_reply_to": "us@example.org",
            "aggregating_fund_emails": " Grants@Fund.org ,, daf@example.org ",
        }
    )
    assert config.aggregating_fund_emails == ["grants@fund.org", "daf@example.org"]
    assert config.is_aggregating_fund("GRANTS@fund.org ")
    assert not config.is_aggregating_fund("donor@example.com")
    assert config.template_folder is None


def test_mail_config_defaults_and_recipients():
    config = MailConfig.from_settings(
        {
            "smtp_host": "smtp.example.org",
            "smtp_sender": "ledger@example.org",
            "smtp_starttls": "true",
            "report_recipients": "a@example.org,b@example.org",
        }
    )
    assert config.smtp_port == 25
    assert config.smtp_starttls is True
    assert config.report_recipients == ["a@example.org", "b@example.org"]


@pytest.mark.parametrize(
    "raw, expected",
    [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("15", 15), ("bogus", logging.INFO)],
)
def test_log_level_parsing(raw, expected):
    assert _parse_level(raw) == expected


def test_log_level_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DONATION_LEDGER_LOG_LEVEL", "error")
    assert _parse_level(None) == logging.ERROR
    monkeypatch.delenv("DONATION_LEDGER_LOG_LEVEL")
    assert _parse_level(None) == logging.INFO
