from __future__ import annotations

import csv
import io
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from import_review.ingest.adapters.candidates_csv import (
    compute_fingerprint,
    read_candidates_csv,
    to_candidates,
)
from import_review.ingest.utils import load_candidates_from_csv


def _read(text: str, **kw):
    return read_candidates_csv(io.StringIO(text), **kw)


def test_reads_rows_with_external_ids() -> None:
    candidates, errors = _read(
        "Date,Amount,Payee,Memo,Source,ExternalId\n"
        "2024-03-01,-12.5,Coffee Shop,latte,Checking,FIT1\n"
        '03/02/2024,"1,234.567",Employer,,Checking,FIT2\n'
    )

    assert errors == []
    first, second = candidates
    assert (first.date, first.amount, first.payee, first.memo, first.source, first.external_id) == (
        date(2024, 3, 1),
        Decimal("-12.50"),
        "Coffee Shop",
        "latte",
        "Checking",
        "FIT1",
    )
    assert (second.date, second.amount, second.memo) == (date(2024, 3, 2), Decimal("1234.57"), None)


def test_payee_falls_back_to_memo() -> None:
    candidates, errors = _read(
        "Date,Amount,Payee,Memo,ExternalId\n"
        "2024-03-01,1.00,,ACME STORE 123,A\n"
        "2024-03-01,1.00,ACME ST,Acme Store #42 Springfield,B\n"
    )

    assert errors == []
    assert [(c.payee, c.memo) for c in candidates] == [
        ("ACME STORE 123", None),
        ("Acme Store #42 Springfield", None),
    ]


def test_bad_rows_are_reported_and_skipped() -> None:
    candidates, errors = _read(
        "Date,Amount,Payee,Memo\n"
        "not-a-date,1.00,X,\n"
        "2024-03-01,abc,X,\n"
        "2024-03-04,1.00,,\n"
        "2024-03-05,2.00,Fine,\n"
    )

    assert [c.payee for c in candidates] == ["Fine"]
    assert [e.code for e in errors] == ["date", "amount", "payee"]
    assert errors[0].message.startswith("Line 2:")
    assert errors[1].message.startswith("Line 3:")
    assert errors[2].message == (
        "Transaction on 2024-03-04 has no payee name "
        "(Payee and Memo fields both missing or empty)"
    )


def test_missing_external_id_gets_stable_fingerprint() -> None:
    rows = [{"Date": "2024-03-01", "Amount": "5", "Payee": "Bakery", "Memo": "bread"}]

    [first], _ = to_candidates(rows, default_source="checking.csv")
    [again], _ = to_candidates(rows, default_source="checking.csv")
    [other_source], _ = to_candidates(rows, default_source="savings.csv")

    expected = compute_fingerprint(
        tx_date=date(2024, 3, 1),
        amount=Decimal("5.00"),
        payee="Bakery",
        memo="bread",
        source="checking.csv",
    )
    assert first.external_id == again.external_id == expected
    assert len(expected) == 64 and expected == expected.upper()
    assert other_source.external_id != expected
    assert first.source == "checking.csv"


def test_missing_required_columns_raise_csv_error() -> None:
    with pytest.raises(csv.Error, match="Missing columns: Amount"):
        _read("Date,Payee\n2024-03-01,X\n")
    with pytest.raises(csv.Error, match="no header"):
        _read("")


def test_load_candidates_from_csv_uses_file_name_as_default_source(tmp_path: Path) -> None:
    path = tmp_path / "statement.csv"
    # Leading BOM, as written by spreadsheet exports.
    path.write_text("\ufeffDate,Amount,Payee\n2024-03-01,3.00,Deli\n", encoding="utf-8")

    [cand], errors = load_candidates_from_csv(path)

    assert errors == []
    assert cand.source == "statement.csv"
    assert cand.payee == "Deli"
