"""Data models for the ``import_review`` package.

Two families live here:

- Plain frozen dataclasses for values that flow *into* the engine from
  collaborators (the bank-file parser) and between engine components.
- pydantic models for result shapes handed back to the API/CLI layer, which
  serializes them (``model_dump(mode="json")``).
"""

from __future__ import annotations

import enum
import math
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, computed_field

# ---------------------------------------------------------------------------
# Duplicate classification
# ---------------------------------------------------------------------------


class DuplicateStatus(enum.StrEnum):
    """Outcome of comparing an incoming row against existing data.

    Values match the ``duplicate_status`` column in
    ``fa_import_review_transactions``.
    """

    NEW = "new"
    EXACT_DUPLICATE = "exact_duplicate"
    POTENTIAL_DUPLICATE = "potential_duplicate"


@dataclass(frozen=True, slots=True)
class Classification:
    status: DuplicateStatus
    duplicate_of_key: uuid.UUID | None = None

    @property
    def is_selected(self) -> bool:
        """Default selection: only rows with no match are pre-selected."""

        return self.status is DuplicateStatus.NEW


# ---------------------------------------------------------------------------
# Parser collaborator shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ImportCandidate:
    """One parsed bank-file row awaiting classification.

    ``external_id`` is the bank-supplied identifier (OFX ``FITID``) or, when
    the file lacks one, a fingerprint computed by the parser. It is required;
    the classifier rejects an empty value as a caller bug.
    """

    date: date
    amount: Decimal
    payee: str
    external_id: str
    memo: str | None = None
    source: str | None = None


@dataclass(frozen=True, slots=True)
class ParsingError:
    """A row the parser could not turn into an :class:`ImportCandidate`."""

    message: str
    code: str | None = None


# ---------------------------------------------------------------------------
# Ledger collaborator shape
# ---------------------------------------------------------------------------


class LedgerEntry(BaseModel):
    """A finalized row handed to the ledger writer.

    ``key`` is the staged row's key; the ledger keeps it so downstream systems
    (and future duplicate detection) can correlate the two.
    """

    model_config = ConfigDict(frozen=True)

    key: uuid.UUID
    date: date
    amount: Decimal
    payee: str
    memo: str | None = None
    source: str | None = None
    external_id: str | None = None


# ---------------------------------------------------------------------------
# Result DTOs
# ---------------------------------------------------------------------------


class ParsingErrorDto(BaseModel):
    message: str
    code: str | None = None


class ImportResult(BaseModel):
    imported_count: int
    new_count: int
    exact_duplicate_count: int
    potential_duplicate_count: int
    errors: list[ParsingErrorDto] = []


class ReviewItem(BaseModel):
    """Projection of a staged row for review screens."""

    model_config = ConfigDict(from_attributes=True)

    key: uuid.UUID
    date: date
    payee: str
    amount: Decimal
    memo: str | None = None
    source: str | None = None
    duplicate_status: DuplicateStatus
    duplicate_of_key: uuid.UUID | None = None
    is_selected: bool


class PageMetadata(BaseModel):
    page_number: int
    page_size: int
    total_count: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool
    first_item: int
    last_item: int

    @classmethod
    def calculate(cls, page_number: int, page_size: int, total_count: int) -> PageMetadata:
        """Derive page metadata; ``first_item``/``last_item`` are 1-based, 0 on an empty page."""

        total_pages = math.ceil(total_count / page_size) if total_count > 0 else 0
        offset = (page_number - 1) * page_size
        on_page = offset < total_count
        return cls(
            page_number=page_number,
            page_size=page_size,
            total_count=total_count,
            total_pages=total_pages,
            has_previous_page=page_number > 1,
            has_next_page=page_number < total_pages,
            first_item=offset + 1 if on_page else 0,
            last_item=min(offset + page_size, total_count) if on_page else 0,
        )


class ReviewPage(BaseModel):
    items: list[ReviewItem]
    metadata: PageMetadata

    @computed_field  # type: ignore[prop-decorator]
    @property
    def page_number(self) -> int:
        return self.metadata.page_number

    @computed_field  # type: ignore[prop-decorator]
    @property
    def page_size(self) -> int:
        return self.metadata.page_size

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_count(self) -> int:
        return self.metadata.total_count

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return self.metadata.total_pages

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_previous_page(self) -> bool:
        return self.metadata.has_previous_page

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_next_page(self) -> bool:
        return self.metadata.has_next_page


class ReviewSummary(BaseModel):
    total_count: int
    selected_count: int
    new_count: int
    exact_duplicate_count: int
    potential_duplicate_count: int


class CompleteReviewResult(BaseModel):
    accepted_count: int
    rejected_count: int


__all__ = [
    "Classification",
    "CompleteReviewResult",
    "DuplicateStatus",
    "ImportCandidate",
    "ImportResult",
    "LedgerEntry",
    "PageMetadata",
    "ParsingError",
    "ParsingErrorDto",
    "ReviewItem",
    "ReviewPage",
    "ReviewSummary",
]
