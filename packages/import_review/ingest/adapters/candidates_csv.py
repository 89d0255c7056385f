"""Adapter for mapping a flat transaction CSV to import candidates.

CSV header (exact keys; ``Memo``, ``Source`` and ``ExternalId`` may be absent):
Date, Amount, Payee, Memo, Source, ExternalId

This stands in for a bank-file parser. Like one, it returns the rows it
could read *and* a parallel list of errors for the rows it skipped; it never
aborts the whole file because of one bad row.

Row rules:
- ``Date``: ``YYYY-MM-DD``, ``MM/DD/YYYY`` or ``MM/DD/YY``.
- ``Amount``: decimal, thousands separators allowed, rounded to 2 places.
- Payee falls back to memo (memo then cleared) when empty, or when the memo
  starts with the payee (the bank truncated the name). Neither -> error.
- Missing ``ExternalId`` -> SHA-256 fingerprint of
  ``date|amount|payee|memo|source`` so re-imports of the same file match.
"""

from __future__ import annotations

import csv
import hashlib
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ...models import ImportCandidate, ParsingError

REQUIRED_HEADERS: frozenset[str] = frozenset({"Date", "Amount", "Payee"})


def _clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = re.sub(r"\s+", " ", value.replace("\r", " ").replace("\n", " ")).strip()
    return cleaned if cleaned != "" else None


def _parse_date(value: str | None) -> date | None:
    s = (value or "").strip()
    if not s:
        return None
    for fmt in ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def _parse_amount(value: str | None) -> Decimal | None:
    s = (value or "").strip().replace(",", "")
    if not s:
        return None
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    if not d.is_finite():
        return None
    return d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _resolve_payee(name: str | None, memo: str | None) -> tuple[str | None, str | None]:
    if not name or (memo and memo.lower().startswith(name.lower())):
        return memo, None
    return name, memo


def compute_fingerprint(
    *, tx_date: date, amount: Decimal, payee: str, memo: str | None, source: str | None
) -> str:
    """Stable uppercase hex SHA-256 over the row's canonical fields."""

    data = f"{tx_date.isoformat()}|{amount:.2f}|{payee}|{memo or ''}|{source or ''}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest().upper()


def to_candidates(
    rows: Iterable[Mapping[str, str | None]],
    *,
    default_source: str | None = None,
) -> tuple[list[ImportCandidate], list[ParsingError]]:
    """Convert CSV rows to candidates, collecting per-row errors."""

    candidates: list[ImportCandidate] = []
    errors: list[ParsingError] = []

    # Line numbers are 1-based and account for the header row.
    for line_no, row in enumerate(rows, start=2):
        tx_date = _parse_date(row.get("Date"))
        if tx_date is None:
            errors.append(
                ParsingError(f"Line {line_no}: invalid or missing date {row.get('Date')!r}", "date")
            )
            continue

        amount = _parse_amount(row.get("Amount"))
        if amount is None:
            errors.append(
                ParsingError(
                    f"Line {line_no}: invalid or missing amount {row.get('Amount')!r}", "amount"
                )
            )
            continue

        payee, memo = _resolve_payee(_clean_text(row.get("Payee")), _clean_text(row.get("Memo")))
        if not payee:
            errors.append(
                ParsingError(
                    f"Transaction on {tx_date.isoformat()} has no payee name "
                    "(Payee and Memo fields both missing or empty)",
                    "payee",
                )
            )
            continue

        source = _clean_text(row.get("Source")) or default_source
        external_id = _clean_text(row.get("ExternalId")) or compute_fingerprint(
            tx_date=tx_date, amount=amount, payee=payee, memo=memo, source=source
        )
        candidates.append(
            ImportCandidate(
                date=tx_date,
                amount=amount,
                payee=payee,
                external_id=external_id,
                memo=memo,
                source=source,
            )
        )

    return candidates, errors


def read_candidates_csv(
    f: Iterable[str], *, default_source: str | None = None
) -> tuple[list[ImportCandidate], list[ParsingError]]:
    """Read an open CSV file; raises ``csv.Error`` when required headers are missing."""

    reader = csv.DictReader(f)
    headers = set(reader.fieldnames or [])
    if not headers:
        raise csv.Error("CSV appears to have no header row")
    missing = sorted(REQUIRED_HEADERS - headers)
    if missing:
        raise csv.Error("CSV header mismatch. Missing columns: " + ", ".join(missing))
    return to_candidates(reader, default_source=default_source)


__all__ = [
    "REQUIRED_HEADERS",
    "compute_fingerprint",
    "read_candidates_csv",
    "to_candidates",
]
