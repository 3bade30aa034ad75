"""
ports/knowledge_base_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for the symbolic knowledge base (64 hexagrams + lines).

The resolver depends on this Protocol only.  Lookups are hard errors on a
miss: a 64-entry table covering every 6-bit code must never miss, so a miss
is a data-integrity defect to surface, not a case to default.

Current implementation: KnowledgeBase (services/knowledge_base.py), an
immutable in-memory index built once from a ReferenceSourcePort.
"""
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from meihua.domain.models import Hexagram, Line


@runtime_checkable
class KnowledgeBasePort(Protocol):
    """Read-only contract for hexagram and line lookups."""

    def find_hexagram_by_code(self, code: str) -> Hexagram:
        """Exact-match lookup on Hexagram.binary_code.

        Raises:
            HexagramNotFound: If no hexagram carries ``code``.
        """
        ...

    def find_line(self, hexagram_ordinal_position: int, line_position: int) -> Line:
        """Exact-match lookup on (hexagram ordinal, line position).

        Raises:
            LineNotFound: If the composite key is absent.
        """
        ...

    def find_all_changing_line(self, hexagram_ordinal_position: int) -> Optional[Line]:
        """Return the synthetic 7th line of a hexagram, or None if it has none."""
        ...
