"""
services/knowledge_base.py
──────────────────────────────────────────────────────────────────────────────
Immutable in-memory implementation of KnowledgeBasePort.

Built once from a ReferenceSourcePort (or plain record sequences) and never
mutated afterwards.  All indexes are read-only mappings, so concurrent
derivations can share one instance without locking.  Reloading reference
data means building a new KnowledgeBase and swapping the reference (see
services/container.py), never editing this one.

Integrity is checked at build time:
  • binary_code unique across hexagrams
  • ordinal_position unique across hexagrams
  • (hexagram_ordinal_position, line_position) unique across lines
  • every line references an existing hexagram ordinal
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from types import MappingProxyType
from typing import Optional

from meihua.domain.exceptions import (
    HexagramNotFound,
    KnowledgeBaseIntegrityError,
    LineNotFound,
)
from meihua.domain.models import ALL_CHANGING_LINE_POSITION, Hexagram, Line
from meihua.ports.reference_source_port import ReferenceSourcePort

logger = logging.getLogger(__name__)

HEXAGRAM_COUNT = 64


class KnowledgeBase:
    """Read-only index of hexagram and line records.

    Use ``from_source`` / ``from_records`` rather than the constructor.

    Args:
        hexagrams: Hexagram records (validated for uniqueness).
        lines:     Line records (validated for uniqueness and references).
    """

    def __init__(self, hexagrams: Iterable[Hexagram], lines: Iterable[Line]) -> None:
        hexagrams = tuple(hexagrams)
        lines = tuple(lines)

        by_code: dict[str, Hexagram] = {}
        by_position: dict[int, Hexagram] = {}
        for hexagram in hexagrams:
            if hexagram.binary_code in by_code:
                raise KnowledgeBaseIntegrityError(
                    f"Duplicate binary_code {hexagram.binary_code!r} "
                    f"({by_code[hexagram.binary_code].name!r} and {hexagram.name!r})"
                )
            if hexagram.ordinal_position in by_position:
                raise KnowledgeBaseIntegrityError(
                    f"Duplicate ordinal_position {hexagram.ordinal_position}"
                )
            by_code[hexagram.binary_code] = hexagram
            by_position[hexagram.ordinal_position] = hexagram

        by_key: dict[tuple[int, int], Line] = {}
        for line in lines:
            if line.hexagram_ordinal_position not in by_position:
                raise KnowledgeBaseIntegrityError(
                    f"Line {line.name!r} references unknown hexagram position "
                    f"{line.hexagram_ordinal_position}"
                )
            if line.key in by_key:
                raise KnowledgeBaseIntegrityError(
                    f"Duplicate line key {line.key}"
                )
            by_key[line.key] = line

        self._hexagrams = tuple(sorted(hexagrams, key=lambda h: h.ordinal_position))
        self._lines = tuple(sorted(lines, key=lambda line: line.key))
        self._by_code = MappingProxyType(by_code)
        self._by_key = MappingProxyType(by_key)

    # ── Constructors ───────────────────────────────────────────────────────

    @classmethod
    def from_records(
        cls,
        hexagrams: Iterable[Hexagram],
        lines: Iterable[Line],
    ) -> KnowledgeBase:
        kb = cls(hexagrams, lines)
        logger.info(
            "KnowledgeBase built | hexagrams=%d lines=%d complete=%s",
            len(kb._hexagrams), len(kb._lines), kb.is_complete,
        )
        return kb

    @classmethod
    def from_source(cls, source: ReferenceSourcePort) -> KnowledgeBase:
        """Load both reference tables from ``source`` and index them."""
        logger.info("Loading reference data | source=%s", source.source_name)
        return cls.from_records(source.fetch_hexagrams(), source.fetch_lines())

    # ── KnowledgeBasePort implementation ───────────────────────────────────

    def find_hexagram_by_code(self, code: str) -> Hexagram:
        try:
            return self._by_code[code]
        except KeyError:
            raise HexagramNotFound(code) from None

    def find_line(self, hexagram_ordinal_position: int, line_position: int) -> Line:
        try:
            return self._by_key[(hexagram_ordinal_position, line_position)]
        except KeyError:
            raise LineNotFound(hexagram_ordinal_position, line_position) from None

    def find_all_changing_line(self, hexagram_ordinal_position: int) -> Optional[Line]:
        return self._by_key.get((hexagram_ordinal_position, ALL_CHANGING_LINE_POSITION))

    # ── Extras ─────────────────────────────────────────────────────────────

    @property
    def hexagrams(self) -> tuple[Hexagram, ...]:
        """All hexagrams, ordered by ordinal position."""
        return self._hexagrams

    @property
    def lines(self) -> tuple[Line, ...]:
        """All lines, ordered by (hexagram ordinal, line position)."""
        return self._lines

    @property
    def is_complete(self) -> bool:
        """True when all 64 hexagrams (hence every 6-bit code) are present."""
        return len(self._by_code) == HEXAGRAM_COUNT

    def __len__(self) -> int:
        return len(self._hexagrams)

    def __repr__(self) -> str:
        return f"KnowledgeBase(hexagrams={len(self._hexagrams)}, lines={len(self._lines)})"
