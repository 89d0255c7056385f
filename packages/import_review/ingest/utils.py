"""Ingest utilities shared by CLI commands."""

from __future__ import annotations

from os import PathLike
from pathlib import Path

from ..models import ImportCandidate, ParsingError
from .adapters.candidates_csv import read_candidates_csv


def load_candidates_from_csv(
    csv_path: str | PathLike[str], *, default_source: str | None = None
) -> tuple[list[ImportCandidate], list[ParsingError]]:
    """Read a transaction CSV and return ``(candidates, parsing_errors)``.

    ``default_source`` labels rows whose ``Source`` column is empty; when not
    given, the file name is used.
    """

    p = Path(csv_path)
    with p.open(encoding="utf-8-sig", newline="") as f:
        return read_candidates_csv(f, default_source=default_source or p.name)


__all__ = ["load_candidates_from_csv"]
