"""
tests/conftest.py
──────────────────────────────────────────────────────────────────────────────
Shared pytest fixtures and fake reference sources.

Fake sources implement ReferenceSourcePort via structural subtyping — they
do NOT inherit from any base class.  pytest uses them to test the knowledge
base and resolver without any REST backend or database.

Fixture hierarchy:
  settings          → Settings with the builtin provider
  builtin_source    → BuiltinReferenceSource (full 64-hexagram table)
  knowledge_base    → KnowledgeBase over builtin_source
  resolver          → DivinationResolver over knowledge_base
  partial_kb        → KnowledgeBase holding only 乾 / 履 and 乾's lines
  partial_resolver  → DivinationResolver over partial_kb
"""
from __future__ import annotations

import pytest

from meihua.adapters.builtin_reference import BuiltinReferenceSource
from meihua.config.settings import Settings
from meihua.domain.models import Hexagram, Line
from meihua.services.formatter import ResultFormatter
from meihua.services.knowledge_base import KnowledgeBase
from meihua.services.resolver import DivinationResolver


# ── Settings fixture ───────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def settings() -> Settings:
    """Return a Settings instance with sane test defaults."""
    return Settings(
        reference_provider="builtin",
        api_base_url="http://reference.test",
        gua_endpoint="/api/guas",
        yao_endpoint="/api/yaos",
        db_dsn="dbname=oracle_test",
        gua_table="guas",
        yao_table="yaos",
        summary_locale="en",
        http_timeout=5,
        http_retries=3,
    )


# ── Record builders ────────────────────────────────────────────────────────

def make_hexagram(position: int, name: str, code: str, **extra) -> Hexagram:
    return Hexagram(
        id=f"h{position}",
        name=name,
        ordinal_position=position,
        binary_code=code,
        **extra,
    )


def make_line(position: int, line: int, name: str, **extra) -> Line:
    return Line(
        id=f"l{position}-{line}",
        hexagram_ordinal_position=position,
        line_position=line,
        name=name,
        **extra,
    )


# ── Fake sources ───────────────────────────────────────────────────────────

class InMemoryReferenceSource:
    """Serves fixed record lists; counts fetches."""

    source_name = "memory"

    def __init__(self, hexagrams: list[Hexagram], lines: list[Line]) -> None:
        self._hexagrams = hexagrams
        self._lines = lines
        self.fetch_count = 0

    def fetch_hexagrams(self) -> list[Hexagram]:
        self.fetch_count += 1
        return list(self._hexagrams)

    def fetch_lines(self) -> list[Line]:
        return list(self._lines)


_PARTIAL_HEXAGRAMS = [
    make_hexagram(1, "乾", "111111", classical_text="元亨利贞"),
    make_hexagram(10, "履", "011111"),
]

_PARTIAL_LINES = [
    make_line(1, i, name, descriptive_prompt=f"乾 line {i}")
    for i, name in enumerate(["初九", "九二", "九三", "九四", "九五", "上九", "用九"], 1)
]


# ── pytest fixtures ────────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def builtin_source():
    return BuiltinReferenceSource()


@pytest.fixture(scope="session")
def knowledge_base(builtin_source):
    return KnowledgeBase.from_source(builtin_source)


@pytest.fixture
def resolver(knowledge_base):
    return DivinationResolver(knowledge_base=knowledge_base)


@pytest.fixture
def partial_source():
    return InMemoryReferenceSource(_PARTIAL_HEXAGRAMS, _PARTIAL_LINES)


@pytest.fixture
def partial_kb(partial_source):
    return KnowledgeBase.from_source(partial_source)


@pytest.fixture
def partial_resolver(partial_kb):
    return DivinationResolver(knowledge_base=partial_kb)


@pytest.fixture
def formatter():
    return ResultFormatter("en")


@pytest.fixture
def zh_formatter():
    return ResultFormatter("zh")
