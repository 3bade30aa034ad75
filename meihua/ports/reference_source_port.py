"""
ports/reference_source_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for wherever the reference tables live.

The knowledge base is populated once from a source before any derivation
runs.  Sources only read — create/update/delete of reference data belongs to
the administrative console, not to this package.

Current implementations (adapters/):
  BuiltinReferenceSource   canonical names, no prompts, no I/O
  JsonReferenceSource      backend export file
  HttpReferenceSource      reference backend REST API (requests)
  PostgresReferenceSource  reference tables in PostgreSQL (psycopg2)

To add another store: implement this Protocol and add ONE branch in
services/container.py.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from meihua.domain.models import Hexagram, Line


@runtime_checkable
class ReferenceSourcePort(Protocol):
    """Contract for loading the hexagram and line reference tables."""

    @property
    def source_name(self) -> str:
        """Short human-readable identifier used in logs."""
        ...

    def fetch_hexagrams(self) -> list[Hexagram]:
        """Load every hexagram record.

        Raises:
            ReferenceSourceError: On I/O or validation failure.
        """
        ...

    def fetch_lines(self) -> list[Line]:
        """Load every line record.

        Raises:
            ReferenceSourceError: On I/O or validation failure.
        """
        ...
