"""
adapters/postgres_reference.py
──────────────────────────────────────────────────────────────────────────────
Implements ReferenceSourcePort using psycopg2.

Database layout (owned by the administrative console):
  Table : guas
  Cols  : id (PK), gua_name, gua_prompt, position (unique), binary_code
          (unique), gua_ci
  Table : yaos
  Cols  : id (PK), gua_position (→ guas.position), position, yao_name,
          yao_prompt;  UNIQUE (gua_position, position)

Table names come from GUA_TABLE / YAO_TABLE and are composed with
psycopg2.sql.Identifier, never string formatting.

Connection management:
  - A single connection is opened lazily and reused.
  - On OperationalError the connection is reset and one retry is attempted.
  - Reference data is read once per knowledge-base build, so no pool.
"""
from __future__ import annotations

import logging
from typing import Any

import psycopg2
import psycopg2.extras
from psycopg2 import sql

from meihua.adapters.json_reference import validate_rows
from meihua.config.settings import Settings
from meihua.domain.exceptions import ReferenceSourceError
from meihua.domain.models import Hexagram, Line

logger = logging.getLogger(__name__)

# Columns selected for each table (must match the domain model aliases)
_GUA_COLS = ("id", "gua_name", "gua_prompt", "position", "binary_code", "gua_ci")
_YAO_COLS = ("id", "gua_position", "position", "yao_name", "yao_prompt")


def _select(table: str, cols: tuple[str, ...], order_by: tuple[str, ...]) -> sql.Composed:
    return sql.SQL("SELECT {cols} FROM {table} ORDER BY {order}").format(
        cols=sql.SQL(", ").join(sql.Identifier(c) for c in cols),
        table=sql.Identifier(table),
        order=sql.SQL(", ").join(sql.Identifier(c) for c in order_by),
    )


class PostgresReferenceSource:
    """psycopg2 implementation of ReferenceSourcePort.

    Injected into KnowledgeBase.from_source via services/container.py when
    ``REFERENCE_PROVIDER=postgres`` is set.
    """

    def __init__(self, settings: Settings) -> None:
        self._dsn = settings.db_dsn
        self._gua_table = settings.gua_table
        self._yao_table = settings.yao_table
        self._conn: Any = None
        logger.debug("PostgresReferenceSource ready | dsn=%s", self._dsn)

    @property
    def source_name(self) -> str:
        return f"postgres:{self._gua_table}/{self._yao_table}"

    # ── ReferenceSourcePort implementation ─────────────────────────────────

    def fetch_hexagrams(self) -> list[Hexagram]:
        query = _select(self._gua_table, _GUA_COLS, ("position",))
        try:
            rows = self._execute(query)
        except psycopg2.Error as exc:
            raise ReferenceSourceError(f"fetch_hexagrams failed: {exc}") from exc
        return validate_rows(Hexagram, rows, self._gua_table)

    def fetch_lines(self) -> list[Line]:
        query = _select(self._yao_table, _YAO_COLS, ("gua_position", "position"))
        try:
            rows = self._execute(query)
        except psycopg2.Error as exc:
            raise ReferenceSourceError(f"fetch_lines failed: {exc}") from exc
        return validate_rows(Line, rows, self._yao_table)

    # ── Connection helpers ─────────────────────────────────────────────────

    def _get_conn(self) -> Any:
        """Return an open connection, creating or reusing one."""
        if self._conn is None or self._conn.closed:
            self._conn = self._new_conn()
        return self._conn

    def _new_conn(self) -> Any:
        try:
            conn = psycopg2.connect(self._dsn)
            conn.autocommit = True
            logger.debug("PostgresReferenceSource: new connection opened")
            return conn
        except psycopg2.Error as exc:
            raise ReferenceSourceError(f"Cannot connect to database: {exc}") from exc

    def _execute(self, query: sql.Composable, params: tuple = ()) -> list[dict]:
        """Execute a query and return rows as dicts, with one auto-reconnect."""
        for attempt in (1, 2):
            conn = self._get_conn()
            try:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                    cur.execute(query, params)
                    return [dict(row) for row in cur.fetchall()]
            except psycopg2.OperationalError as exc:
                if attempt == 1:
                    logger.warning("DB OperationalError — reconnecting: %s", exc)
                    self._conn = None
                else:
                    raise ReferenceSourceError(
                        f"DB query failed after reconnect: {exc}"
                    ) from exc
        return []  # unreachable

    def close(self) -> None:
        """Close the connection; the container calls this once both tables are loaded."""
        if self._conn and not self._conn.closed:
            self._conn.close()
            logger.debug("PostgresReferenceSource: connection closed")
