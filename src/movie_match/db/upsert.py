"""Dialect-aware ``INSERT ... ON CONFLICT`` statements.

PostgreSQL and SQLite both support conflict clauses, but SQLAlchemy exposes
them through dialect-specific ``insert()`` constructs. These helpers pick the
right one from the session's bind so service code stays dialect-neutral.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def _insert_for(session: AsyncSession, table):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"ON CONFLICT is not supported for dialect {dialect!r}")


def upsert_stmt(
    session: AsyncSession,
    table,
    values: dict[str, Any],
    conflict_columns: Sequence[str],
    update_columns: Sequence[str],
):
    """Build an insert that updates ``update_columns`` on a key conflict."""
    stmt = _insert_for(session, table).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_={col: stmt.excluded[col] for col in update_columns},
    )


def insert_ignore_stmt(
    session: AsyncSession,
    table,
    rows: list[dict[str, Any]],
    conflict_columns: Sequence[str],
):
    """Build a bulk insert that skips rows conflicting on ``conflict_columns``."""
    stmt = _insert_for(session, table).values(rows)
    return stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
