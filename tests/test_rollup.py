# ruff: noqa: E501
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import select

from db.models.ledger import DlDonation
from donation_ledger import acknowledge_donations, generate_rollup
from donation_ledger.ledger import ledger_writer
from donation_ledger.models import PaymentType
from donation_ledger.rollup import prior_tax_year, summarize
from tests.helpers.db import ledger_entries, seed_records, seed_settings
from tests.helpers.records import make_record
from tests.helpers.stubs import RecordingMailer

TODAY = date(2024, 1, 10)


def _monthly(day: date, gross: str, **overrides):
    values = {
        "donation_date": day,
        "payment_type": PaymentType.RECURRING,
        "gross": Decimal(gross),
        "fee": Decimal("0.50"),
        "net": Decimal(gross) - Decimal("0.50"),
    }
    values.update(overrides)
    return make_record(**values)


@pytest.fixture
def configured(database_url: str) -> str:
    seed_settings(database_url=database_url, values={"first_data_row": 0})
    return database_url


def _run(url: str, **kwargs):
    kwargs.setdefault("display_result", False)
    kwargs.setdefault("today", TODAY)
    return generate_rollup(database_url=url, environ={}, **kwargs)


def test_prior_tax_year():
    assert prior_tax_year(date(2025, 3, 1)) == 2024
    assert prior_tax_year(date(2025, 1, 1)) == 2024


def test_summarize_sums_money_and_takes_latest_date_and_email():
    rollup = summarize(
        [
            _monthly(date(2023, 2, 1), "10.00", email_address="old@example.com"),
            _monthly(date(2023, 11, 15), "15.00", email_address=""),
            _monthly(date(2023, 6, 1), "10.00", email_address="mid@example.com"),
        ],
        tax_year=2023,
    )
    assert rollup.payment_type is PaymentType.ANNUAL_ROLLUP
    assert rollup.gross == Decimal("35.00")
    assert rollup.fee == Decimal("1.50")
    assert rollup.net == Decimal("33.50")
    assert rollup.donation_date == date(2023, 11, 15)
    assert rollup.email_address == "mid@example.com"
    assert rollup.acknowledged is False
    assert not rollup.has_postal_address


def test_two_gifts_roll_up_into_one_p4_dated_at_the_later_gift(configured):
    seed_records(
        database_url=configured,
        records=[
            _monthly(date(2023, 3, 1), "10.00"),
            _monthly(date(2023, 9, 1), "15.00"),
        ],
    )

    result = _run(configured)

    assert result.tax_year == 2023
    (rollup,) = result.records
    assert rollup.gross == Decimal("25.00")
    assert rollup.donation_date == date(2023, 9, 1)
    p4 = [e for e in ledger_entries(database_url=configured) if e.record.payment_type is PaymentType.ANNUAL_ROLLUP]
    assert len(p4) == 1
    assert p4[0].position == 0


def test_only_prior_year_recurring_gifts_are_included(configured):
    seed_records(
        database_url=configured,
        records=[
            _monthly(date(2022, 12, 31), "100.00"),
            _monthly(date(2023, 1, 1), "10.00"),
            _monthly(date(2023, 12, 31), "10.00"),
            _monthly(date(2024, 1, 1), "100.00"),
            make_record(donation_date=date(2023, 5, 5), gross=Decimal("100.00")),
        ],
    )

    (rollup,) = _run(configured).records

    assert rollup.gross == Decimal("20.00")
    assert rollup.payment_note == "2023 recurring gifts (2)"


def test_donors_are_grouped_by_name_case_insensitively(configured):
    seed_records(
        database_url=configured,
        records=[
            _monthly(date(2023, 4, 1), "10.00"),
            _monthly(date(2023, 5, 1), "10.00", last_name="LOVELACE", first_name="ada"),
            _monthly(date(2023, 6, 1), "20.00", last_name="Hopper", first_name="Grace"),
        ],
    )

    result = _run(configured)

    assert [(r.last_name, r.gross) for r in result.records] == [
        ("Hopper", Decimal("20.00")),
        ("LOVELACE", Decimal("20.00")),
    ]
    with ledger_writer(database_url=configured) as store:
        sources = set(
            store.session.scalars(
                select(DlDonation.source_file).where(DlDonation.payment_type == "P4")
            )
        )
    assert sources == {"rollup:2023"}


def test_repeat_run_does_not_create_second_rollup(configured):
    seed_records(database_url=configured, records=[_monthly(date(2023, 3, 1), "10.00")])

    first = _run(configured)
    second = _run(configured)

    assert first.records_inserted == 1
    assert second.records_inserted == 0
    assert second.skipped_existing == 1
    assert len(ledger_entries(database_url=configured)) == 2


def test_no_recurring_gifts_is_a_no_op(configured):
    seed_records(database_url=configured, records=[make_record(donation_date=date(2023, 5, 5))])

    result = _run(configured)

    assert result.records == []
    assert not result.has_work
    assert len(ledger_entries(database_url=configured)) == 1


def test_explicit_tax_year(configured):
    seed_records(database_url=configured, records=[_monthly(date(2021, 7, 4), "12.00")])
    assert _run(configured, tax_year=2021).records_inserted == 1


def test_rollup_record_is_acknowledged_with_gross_total(configured, folders: dict[str, Path]):
    seed_settings(
        database_url=configured,
        values={
            "acknowledgement_folder": folders["output"],
            "ack_email_template": "acknowledgement_email.html.j2",
            "ack_document_template": "acknowledgement_letter.html.j2",
            "ack_email_subject": "Your 2023 giving",
            "ack_email_sender_name": "Newton Tree Conservancy",
            "ack_email_reply_to": "treasurer@example.org",
        },
    )
    seed_records(
        database_url=configured,
        records=[_monthly(date(2023, 3, 1), "10.00"), _monthly(date(2023, 9, 1), "15.00")],
    )
    _run(configured)
    mailer = RecordingMailer()

    result = acknowledge_donations(
        database_url=configured, mailer=mailer, display_result=False, environ={}
    )

    # The two P2 rows are marked silently; only the P4 produces a message.
    assert result.skipped_recurring == 2
    assert result.emailed == 1
    assert "monthly support" in mailer.sent[0].html_body
    assert "$25.00" in mailer.sent[0].html_body
