# ruff: noqa: I001
"""CLI for the ``import_review`` package.

Each subcommand maps onto one operation in :mod:`import_review.api`. The
``cmd_*`` handlers hold the logic and return a process exit code; the Typer
commands below only parse options and delegate. Environment variables
(``DATABASE_URL``, ``IMPORT_REVIEW_TENANT``, ``IMPORT_REVIEW_LOG_LEVEL``) are
loaded from a local ``.env`` by the root callback.
"""

from __future__ import annotations

import sys
import uuid
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError
from typer.models import ArgumentInfo, OptionInfo

from . import api
from .errors import ImportReviewError
from .logging_setup import configure_logging


def _err(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _parse_keys(raw: list[str]) -> list[uuid.UUID] | None:
    keys: list[uuid.UUID] = []
    for value in raw:
        try:
            keys.append(uuid.UUID(value))
        except ValueError:
            _err(f"not a transaction key: {value!r}")
            return None
    return keys


# ---- Command handlers ---------------------------------------------------------


def cmd_init_db(*, database_url: str | None) -> int:
    """Create all tables from the ORM metadata (development convenience).

    Production databases are managed with Alembic (``libs/db/alembic``).
    """

    from db import metadata
    from db.client import get_engine

    try:
        metadata.create_all(bind=get_engine(database_url=database_url))
    except (RuntimeError, SQLAlchemyError) as e:
        return _err(f"failed to initialize database: {e}")
    print("Database schema is up to date.")
    return 0


def cmd_upload(
    csv_path: str,
    *,
    tenant: str,
    database_url: str | None,
    source: str | None = None,
) -> int:
    """Parse ``csv_path`` and stage its rows for review.

    Prints the import counts, then one ``warning:`` line per skipped row.
    """

    import csv

    from .ingest.utils import load_candidates_from_csv

    try:
        candidates, parsing_errors = load_candidates_from_csv(csv_path, default_source=source)
    except FileNotFoundError:
        return _err(f"File not found: {csv_path}")
    except PermissionError:
        return _err(f"Permission denied: {csv_path}")
    except (csv.Error, UnicodeDecodeError) as e:
        return _err(f"Failed to parse CSV: {e}")

    if not candidates:
        for pe in parsing_errors:
            print(f"warning: {pe.message}", file=sys.stderr)
        return _err("no importable transactions found")

    try:
        result = api.import_batch(
            tenant, candidates, parsing_errors=parsing_errors, database_url=database_url
        )
    except (ImportReviewError, RuntimeError, SQLAlchemyError) as e:
        return _err(f"import failed: {e}")

    print(
        f"imported={result.imported_count}\tnew={result.new_count}\t"
        f"exact={result.exact_duplicate_count}\tpotential={result.potential_duplicate_count}"
    )
    for pe in result.errors:
        print(f"warning: {pe.message}", file=sys.stderr)
    return 0


def cmd_review(
    *, tenant: str, database_url: str | None, page: int | None, page_size: int | None
) -> int:
    """Print one review page as ``key, date, payee, amount, status, selected``."""

    try:
        result = api.get_review_page(tenant, page, page_size, database_url=database_url)
    except (RuntimeError, SQLAlchemyError) as e:
        return _err(f"review failed: {e}")

    for item in result.items:
        mark = "x" if item.is_selected else " "
        print(
            f"[{mark}]\t{item.key}\t{item.date.isoformat()}\t{item.payee}\t"
            f"{item.amount:.2f}\t{item.duplicate_status}"
        )
    md = result.metadata
    print(
        f"page {md.page_number}/{md.total_pages} "
        f"(items {md.first_item}-{md.last_item} of {md.total_count})"
    )
    return 0


def cmd_summary(*, tenant: str, database_url: str | None) -> int:
    try:
        s = api.get_summary(tenant, database_url=database_url)
    except (RuntimeError, SQLAlchemyError) as e:
        return _err(f"summary failed: {e}")
    print(
        f"total={s.total_count}\tselected={s.selected_count}\tnew={s.new_count}\t"
        f"exact={s.exact_duplicate_count}\tpotential={s.potential_duplicate_count}"
    )
    return 0


def cmd_set_selection(
    keys: list[str], selected: bool, *, tenant: str, database_url: str | None
) -> int:
    parsed = _parse_keys(keys)
    if parsed is None:
        return 1
    try:
        api.set_selection(tenant, parsed, selected, database_url=database_url)
    except (ImportReviewError, RuntimeError, SQLAlchemyError) as e:
        return _err(f"selection failed: {e}")
    return 0


def cmd_select_all(selected: bool, *, tenant: str, database_url: str | None) -> int:
    try:
        if selected:
            api.select_all(tenant, database_url=database_url)
        else:
            api.deselect_all(tenant, database_url=database_url)
    except (RuntimeError, SQLAlchemyError) as e:
        return _err(f"selection failed: {e}")
    return 0


def cmd_complete(*, tenant: str, database_url: str | None) -> int:
    try:
        result = api.complete_review(tenant, database_url=database_url)
    except ImportReviewError as e:
        return _err(f"{e} (nothing was discarded)")
    except (RuntimeError, SQLAlchemyError) as e:
        return _err(f"complete failed: {e}")
    print(f"accepted={result.accepted_count}\trejected={result.rejected_count}")
    return 0


def cmd_discard(*, tenant: str, database_url: str | None) -> int:
    try:
        deleted = api.delete_all_review(tenant, database_url=database_url)
    except (RuntimeError, SQLAlchemyError) as e:
        return _err(f"discard failed: {e}")
    print(f"deleted={deleted}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Stage bank transactions for review, adjust the selection, and accept "
        "the selected rows into the ledger."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
TENANT_OPTION: OptionInfo = typer.Option(
    ...,
    "--tenant",
    envvar="IMPORT_REVIEW_TENANT",
    help="Tenant identifier that scopes every operation.",
)
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--csv-path",
    help="Path to a transaction CSV (Date, Amount, Payee, Memo, Source, ExternalId).",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
KEYS_ARGUMENT: ArgumentInfo = typer.Argument(..., help="Transaction keys (UUIDs).")


@app.command("init-db")
def init_db_cmd(
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    raise typer.Exit(cmd_init_db(database_url=database_url))


@app.command("upload")
def upload_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    tenant: Annotated[str, TENANT_OPTION],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    source: str | None = typer.Option(
        None, help="Source label for rows without one (defaults to the file name)."
    ),
) -> None:
    """Parse a CSV and merge its rows into the open review."""

    raise typer.Exit(
        cmd_upload(str(csv_path), tenant=tenant, database_url=database_url, source=source)
    )


@app.command("review")
def review_cmd(
    tenant: Annotated[str, TENANT_OPTION],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    page: int | None = typer.Option(None, "--page", help="1-based page number."),
    page_size: int | None = typer.Option(None, "--page-size", help="Rows per page (max 1000)."),
) -> None:
    raise typer.Exit(
        cmd_review(tenant=tenant, database_url=database_url, page=page, page_size=page_size)
    )


@app.command("summary")
def summary_cmd(
    tenant: Annotated[str, TENANT_OPTION],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    raise typer.Exit(cmd_summary(tenant=tenant, database_url=database_url))


@app.command("select")
def select_cmd(
    keys: Annotated[list[str], KEYS_ARGUMENT],
    tenant: Annotated[str, TENANT_OPTION],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    raise typer.Exit(cmd_set_selection(keys, True, tenant=tenant, database_url=database_url))


@app.command("deselect")
def deselect_cmd(
    keys: Annotated[list[str], KEYS_ARGUMENT],
    tenant: Annotated[str, TENANT_OPTION],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    raise typer.Exit(cmd_set_selection(keys, False, tenant=tenant, database_url=database_url))


@app.command("select-all")
def select_all_cmd(
    tenant: Annotated[str, TENANT_OPTION],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    raise typer.Exit(cmd_select_all(True, tenant=tenant, database_url=database_url))


@app.command("deselect-all")
def deselect_all_cmd(
    tenant: Annotated[str, TENANT_OPTION],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    raise typer.Exit(cmd_select_all(False, tenant=tenant, database_url=database_url))


@app.command("complete")
def complete_cmd(
    tenant: Annotated[str, TENANT_OPTION],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Accept every selected row into the ledger and clear the review."""

    raise typer.Exit(cmd_complete(tenant=tenant, database_url=database_url))


@app.command("discard")
def discard_cmd(
    tenant: Annotated[str, TENANT_OPTION],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Drop every staged row without accepting anything."""

    raise typer.Exit(cmd_discard(tenant=tenant, database_url=database_url))


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


def main() -> None:  # pragma: no cover - console script entry
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
