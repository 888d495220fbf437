from datetime import date
from decimal import Decimal

import pytest

from donation_ledger.errors import SourceFormatError
from donation_ledger.ingest.adapters.paypal_csv import read_paypal_export
from donation_ledger.models import PaymentSource, PaymentType
from tests.helpers.sources import paypal_csv


def _donation(**overrides: str) -> dict[str, str]:
    row = {
        "date": "3/15/2024",
        "name": "Ada Lovelace",
        "type": "Donation Payment",
        "gross": "50.00",
        "fee": "-1.75",
        "net": "48.25",
        "email": "ada@example.com",
        "address_1": "12 Elm St",
        "address_2": "Apt 3",
        "city": "Newton",
        "state": "MA",
        "zip": "2459",
    }
    row.update(overrides)
    return row


def test_maps_donation_row_to_canonical_record():
    total, records = read_paypal_export(paypal_csv([_donation()]), file_name="paypal.csv")

    assert total == 1
    (r,) = records
    assert r.acknowledged is False
    assert r.donation_date == date(2024, 3, 15)
    assert (r.first_name, r.last_name) == ("Ada", "Lovelace")
    assert (r.gross, r.fee, r.net) == (Decimal("50.00"), Decimal("-1.75"), Decimal("48.25"))
    assert r.payment_type is PaymentType.ONE_TIME
    assert r.payment_source == PaymentSource.PAYPAL
    assert r.email_address == "ada@example.com"
    assert r.street_address == "12 Elm St, Apt 3"
    assert (r.city, r.state, r.zip_code) == ("Newton", "MA", "02459")


@pytest.mark.parametrize(
    "txn_type, note, expected",
    [
        ("Mass Pay Payment", "", PaymentType.DONOR_ADVISED_FUND),
        ("Subscription Payment", "", PaymentType.RECURRING),
        ("Donation Payment", "In memory of Rex", PaymentType.ONE_TIME_WITH_NOTE),
        ("Donation Payment", "", PaymentType.ONE_TIME),
        ("Mobile Payment", "a note", PaymentType.ONE_TIME),
    ],
)
def test_payment_type_derivation(txn_type, note, expected):
    _, (record,) = read_paypal_export(paypal_csv([_donation(type=txn_type, note=note)]))
    assert record.payment_type is expected
    assert record.payment_note == note


def test_non_donation_types_are_dropped_but_counted():
    data = paypal_csv(
        [
            _donation(),
            _donation(type="General Currency Conversion"),
            _donation(type="Withdraw Funds to Bank Account"),
        ]
    )
    total, records = read_paypal_export(data)
    assert total == 3
    assert len(records) == 1


def test_shipping_name_wins_over_payer_name():
    _, (record,) = read_paypal_export(
        paypal_csv([_donation(name="A. Lovelace-King", shipping_name="Augusta, King")])
    )
    assert (record.first_name, record.last_name) == ("Augusta", "King")


def test_mass_payment_without_shipping_name_keeps_whole_payer_as_surname():
    _, (record,) = read_paypal_export(
        paypal_csv([_donation(type="Mass Pay Payment", name="Schwab Charitable Fund")])
    )
    assert record.first_name == ""
    assert record.last_name == "Schwab Charitable Fund"


def test_blank_rows_are_skipped_before_mapping():
    data = paypal_csv([_donation(), {}, _donation(name="Grace Hopper")])
    total, records = read_paypal_export(data)
    assert total == 2
    assert [r.last_name for r in records] == ["Lovelace", "Hopper"]


def test_header_only_file_yields_no_records():
    assert read_paypal_export(paypal_csv([])) == (0, [])


def test_wrong_column_count_rejects_whole_file():
    with pytest.raises(SourceFormatError, match="expected 41 fields, found 40"):
        read_paypal_export(paypal_csv([_donation()], field_count=40), file_name="paypal-x.csv")


def test_empty_file_is_a_format_error():
    with pytest.raises(SourceFormatError, match="empty"):
        read_paypal_export(b"")


def test_bad_amount_reports_row_number():
    data = paypal_csv([_donation(), _donation(gross="lots")])
    with pytest.raises(SourceFormatError, match="row 3"):
        read_paypal_export(data, file_name="paypal.csv")


def test_row_number_counts_blank_lines_before_the_bad_row():
    header, *rest = paypal_csv([_donation(), _donation(gross="lots")]).split(b"\r\n")
    data = b"\r\n".join([header, b"", b",,,", *rest])
    with pytest.raises(SourceFormatError, match=r"row 5:"):
        read_paypal_export(data, file_name="paypal.csv")


def test_non_utf8_export_is_a_format_error():
    data = paypal_csv([_donation(name="René Roux")]).decode("utf-8").encode("latin-1", "replace")
    with pytest.raises(SourceFormatError, match="paypal.csv: not UTF-8"):
        read_paypal_export(data, file_name="paypal.csv")


def test_malformed_csv_is_a_format_error():
    header = paypal_csv([]).rstrip(b"\r\n")
    data = header + b'\r\n"' + b"x" * (200 * 1024) + b'"\r\n'
    with pytest.raises(SourceFormatError, match="malformed CSV"):
        read_paypal_export(data, file_name="paypal.csv")
