from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest
from db.client import session_scope

from import_review.models import Classification, DuplicateStatus, ImportCandidate
from import_review.staging import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    StagingStore,
    normalize_paging,
)
from tests.helpers.db import Row, seed_staged


@pytest.mark.parametrize(
    ("page_number", "page_size", "expected"),
    [
        (None, None, (1, DEFAULT_PAGE_SIZE)),
        (0, 10, (1, 10)),
        (-3, 10, (1, 10)),
        (2, 0, (2, DEFAULT_PAGE_SIZE)),
        (2, -1, (2, DEFAULT_PAGE_SIZE)),
        (1, 5000, (1, MAX_PAGE_SIZE)),
        (7, 1000, (7, 1000)),
    ],
)
def test_normalize_paging_clamps(page_number, page_size, expected) -> None:
    assert normalize_paging(page_number, page_size) == expected


def test_insert_batch_writes_status_and_default_selection(db_url: str, tenant: str) -> None:
    cand = ImportCandidate(
        date=date(2024, 5, 1), amount=Decimal("3.10"), payee="Kiosk", external_id="E1"
    )
    with session_scope(database_url=db_url) as session:
        keys = StagingStore(session).insert_batch(
            tenant,
            [
                (cand, Classification(DuplicateStatus.NEW)),
                (cand, Classification(DuplicateStatus.EXACT_DUPLICATE)),
                (cand, Classification(DuplicateStatus.POTENTIAL_DUPLICATE)),
            ],
        )

    assert len(set(keys)) == 3
    with session_scope(database_url=db_url) as session:
        rows = StagingStore(session).query_page(tenant).rows
        by_key = {r.key: r for r in rows}
        assert [by_key[k].duplicate_status for k in keys] == [
            "new",
            "exact_duplicate",
            "potential_duplicate",
        ]
        assert [by_key[k].is_selected for k in keys] == [True, False, False]


def test_insert_batch_with_no_items_is_a_no_op(db_url: str, tenant: str) -> None:
    with session_scope(database_url=db_url) as session:
        store = StagingStore(session)
        assert store.insert_batch(tenant, []) == []
        assert store.count(tenant) == 0


def test_query_page_orders_by_date_desc_payee_asc_then_newest_insert(
    db_url: str, tenant: str
) -> None:
    d1, d2 = date(2024, 1, 1), date(2024, 1, 2)
    keys = seed_staged(
        db_url,
        tenant,
        [
            Row("a", d1, Decimal("1.00"), "Zed"),
            Row("b", d2, Decimal("1.00"), "Beta"),
            Row("c", d2, Decimal("1.00"), "Alpha"),
            Row("d", d1, Decimal("1.00"), "Zed"),
            Row("e", d2, Decimal("1.00"), "Alpha"),
        ],
    )
    a, b, c, d, e = keys

    with session_scope(database_url=db_url) as session:
        page = StagingStore(session).query_page(tenant)

    assert [r.key for r in page.rows] == [e, c, b, d, a]
    assert page.total_count == 5


def test_consecutive_pages_are_disjoint_and_cover_everything(db_url: str, tenant: str) -> None:
    # Many rows sharing date and payee, so only the insert tie-breaker orders them.
    seed_staged(
        db_url,
        tenant,
        [Row(f"x{i}", date(2024, 1, 1), Decimal("1.00"), "Same") for i in range(23)],
    )

    seen = []
    with session_scope(database_url=db_url) as session:
        store = StagingStore(session)
        for n in (1, 2, 3):
            seen.extend(r.key for r in store.query_page(tenant, n, 10).rows)
        past_end = store.query_page(tenant, 4, 10)

    assert len(seen) == 23
    assert len(set(seen)) == 23
    assert past_end.rows == []
    assert past_end.total_count == 23


def test_query_page_clamps_oversized_page_size(db_url: str, tenant: str) -> None:
    with session_scope(database_url=db_url) as session:
        page = StagingStore(session).query_page(tenant, 0, 5000)
    assert (page.page_number, page.page_size) == (1, MAX_PAGE_SIZE)


def test_every_operation_is_tenant_scoped(db_url: str, tenant: str) -> None:
    start = date(2024, 1, 1)
    seed_staged(
        db_url, tenant, [Row(f"a{i}", start + timedelta(days=i), Decimal("1"), "A") for i in range(3)]
    )
    other = seed_staged(db_url, "tenant-b", [Row("b0", start, Decimal("1"), "B")], selected=False)

    with session_scope(database_url=db_url) as session:
        store = StagingStore(session)
        assert store.count(tenant) == 3
        assert store.count("tenant-b") == 1
        # Another tenant's key does not match.
        assert store.update_selection(tenant, other, True) == 0
        assert store.update_selection(tenant, "all", False) == 3
        assert len(store.selected_rows("tenant-b")) == 0
        assert store.delete_all(tenant) == 3

    with session_scope(database_url=db_url) as session:
        store = StagingStore(session)
        assert store.count(tenant) == 0
        assert store.count("tenant-b") == 1


def test_delete_all_on_empty_staging_returns_zero(db_url: str, tenant: str) -> None:
    with session_scope(database_url=db_url) as session:
        store = StagingStore(session)
        assert store.delete_all(tenant) == 0
        assert store.delete_all(tenant) == 0


def test_selected_rows_ignores_paging(db_url: str, tenant: str) -> None:
    seed_staged(db_url, tenant, [Row(f"s{i}", date(2024, 1, 1), Decimal("2"), "P") for i in range(60)])
    seed_staged(db_url, tenant, [Row(f"u{i}", date(2024, 1, 1), Decimal("2"), "P") for i in range(5)], selected=False)

    with session_scope(database_url=db_url) as session:
        rows = StagingStore(session).selected_rows(tenant)
    assert len(rows) == 60
    assert all(r.is_selected for r in rows)
