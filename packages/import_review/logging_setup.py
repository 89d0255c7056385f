"""Tenant-aware logging for the ``import_review`` package.

Every engine operation is scoped to one tenant, so log records carry the
tenant as a structured attribute (``record.tenant``) instead of repeating it
inside each message:

    log = tenant_log(_logger, tenant_id)
    log.info("select_all updated=%d", updated)

renders as ``... import_review.selection INFO [tenant=acme] select_all updated=3``.

Entrypoints (the CLI, a host web app) call :func:`configure_logging` once.
Until then the package logger only carries a ``NullHandler`` and records
propagate to whatever the host has set up. Records logged without a tenant
render ``tenant=-``.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import MutableMapping
from typing import IO, Any

PACKAGE_LOGGER = "import_review"
LEVEL_ENV = "IMPORT_REVIEW_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s [tenant=%(tenant)s] %(message)s"

# Marks the handler installed by configure_logging so repeat calls are no-ops.
_HANDLER_NAME = "import_review.console"


class _TenantDefault(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "tenant"):
            record.tenant = "-"
        return True


class TenantLoggerAdapter(logging.LoggerAdapter):
    """Attach ``tenant`` to every record; caller ``extra`` is merged in."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def resolve_level(level: int | str | None = None) -> int:
    """Level from an int, a name or digit string, else ``IMPORT_REVIEW_LOG_LEVEL``.

    Unknown names resolve to ``INFO`` rather than failing startup.
    """

    if level is None:
        level = os.getenv(LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else logging.INFO


def _installed_handler(logger: logging.Logger) -> logging.Handler | None:
    for h in logger.handlers:
        if h.get_name() == _HANDLER_NAME:
            return h
    return None


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Install the package console handler (once) and return it.

    ``stream`` defaults to the ``sys.stderr`` current at call time. A second
    call returns the existing handler unchanged.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    existing = _installed_handler(logger)
    if existing is not None:
        return existing

    for h in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
        logger.removeHandler(h)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(resolved)
    handler.addFilter(_TenantDefault())
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False
    return handler


def reset_logging() -> None:
    """Undo :func:`configure_logging` (used by tests and embedding hosts)."""

    logger = logging.getLogger(PACKAGE_LOGGER)
    handler = _installed_handler(logger)
    if handler is not None:
        logger.removeHandler(handler)
        handler.close()
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


def tenant_log(logger: logging.Logger, tenant_id: str) -> TenantLoggerAdapter:
    return TenantLoggerAdapter(logger, {"tenant": tenant_id})


__all__ = [
    "DEFAULT_FORMAT",
    "LEVEL_ENV",
    "PACKAGE_LOGGER",
    "TenantLoggerAdapter",
    "configure_logging",
    "get_logger",
    "reset_logging",
    "resolve_level",
    "tenant_log",
]
