from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

import pytest
from db.client import session_scope

from import_review.errors import ReviewValidationError
from import_review.queries import ReviewQueryService
from import_review.selection import SelectionManager
from tests.helpers.db import Row, recorded_statements, seed_staged, statement_verbs


def _rows(n: int, prefix: str = "r") -> list[Row]:
    return [Row(f"{prefix}{i}", date(2024, 4, 1), Decimal("5.00"), "Shop") for i in range(n)]


def _selected_count(db_url: str, tenant: str) -> int:
    with session_scope(database_url=db_url) as session:
        return ReviewQueryService(session).get_summary(tenant).selected_count


def test_set_selection_rejects_empty_keys(db_url: str, tenant: str) -> None:
    seed_staged(db_url, tenant, _rows(2))

    with pytest.raises(ReviewValidationError) as excinfo:
        with session_scope(database_url=db_url) as session:
            SelectionManager(session).set_selection(tenant, [], False)

    assert excinfo.value.field == "keys"
    assert _selected_count(db_url, tenant) == 2


def test_set_selection_updates_only_given_keys(db_url: str, tenant: str) -> None:
    keys = seed_staged(db_url, tenant, _rows(4))

    with session_scope(database_url=db_url) as session:
        # Duplicated keys count once.
        updated = SelectionManager(session).set_selection(tenant, [keys[0], keys[0], keys[2]], False)

    assert updated == 2
    assert _selected_count(db_url, tenant) == 2


def test_set_selection_ignores_unknown_and_foreign_keys(db_url: str, tenant: str) -> None:
    seed_staged(db_url, tenant, _rows(1), selected=False)
    foreign = seed_staged(db_url, "tenant-b", _rows(1, "b"), selected=False)

    with session_scope(database_url=db_url) as session:
        updated = SelectionManager(session).set_selection(tenant, [foreign[0], uuid.uuid4()], True)

    assert updated == 0
    assert _selected_count(db_url, tenant) == 0
    assert _selected_count(db_url, "tenant-b") == 0


def test_select_all_reaches_rows_never_paged(db_url: str, tenant: str) -> None:
    seed_staged(db_url, tenant, _rows(120), selected=False)

    with session_scope(database_url=db_url) as session:
        # The client has only looked at the first page.
        page = ReviewQueryService(session).get_page(tenant, 1, 50)
        assert len(page.items) == 50
        assert SelectionManager(session).select_all(tenant) == 120

    assert _selected_count(db_url, tenant) == 120


def test_deselect_all_is_tenant_scoped(db_url: str, tenant: str) -> None:
    seed_staged(db_url, tenant, _rows(3))
    seed_staged(db_url, "tenant-b", _rows(2, "b"))

    with session_scope(database_url=db_url) as session:
        assert SelectionManager(session).deselect_all(tenant) == 3

    assert _selected_count(db_url, tenant) == 0
    assert _selected_count(db_url, "tenant-b") == 2


def test_bulk_selection_changes_are_one_update_each(db_url: str, tenant: str) -> None:
    keys = seed_staged(db_url, tenant, _rows(500), selected=False)

    with recorded_statements(db_url) as by_key:
        with session_scope(database_url=db_url) as session:
            assert SelectionManager(session).set_selection(tenant, keys, True) == 500
    with recorded_statements(db_url) as deselect:
        with session_scope(database_url=db_url) as session:
            assert SelectionManager(session).deselect_all(tenant) == 500
    with recorded_statements(db_url) as select:
        with session_scope(database_url=db_url) as session:
            assert SelectionManager(session).select_all(tenant) == 500

    assert statement_verbs(by_key) == ["UPDATE"]
    assert statement_verbs(deselect) == ["UPDATE"]
    assert statement_verbs(select) == ["UPDATE"]
    assert _selected_count(db_url, tenant) == 500
