"""
tests/integration/test_postgres_reference.py
──────────────────────────────────────────────────────────────────────────────
Integration tests for PostgresReferenceSource.

Requires a running PostgreSQL instance with the gua / yao reference tables
populated.  These tests are marked @pytest.mark.integration and are SKIPPED
in the standard test run.

Run with:
  pytest -m integration meihua/tests/integration/test_postgres_reference.py -v

Environment:
  DB_DSN defaults to "dbname=oracle_db"
"""
from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration


@pytest.fixture(scope="module")
def pg_source():
    """Create a real PostgresReferenceSource for integration testing."""
    from meihua.adapters.postgres_reference import PostgresReferenceSource
    from meihua.config.settings import get_settings
    source = PostgresReferenceSource(get_settings())
    yield source
    source.close()


class TestHexagramTable:
    def test_has_64_rows(self, pg_source):
        assert len(pg_source.fetch_hexagrams()) == 64

    def test_codes_unique(self, pg_source):
        codes = [h.binary_code for h in pg_source.fetch_hexagrams()]
        assert len(set(codes)) == len(codes)

    def test_ordered_by_position(self, pg_source):
        positions = [h.ordinal_position for h in pg_source.fetch_hexagrams()]
        assert positions == sorted(positions)


class TestLineTable:
    def test_every_hexagram_has_six_lines(self, pg_source):
        lines = pg_source.fetch_lines()
        regular = {(line.hexagram_ordinal_position, line.line_position)
                   for line in lines if not line.is_all_changing}
        assert len(regular) == 64 * 6


class TestKnowledgeBase:
    def test_builds_complete(self, pg_source):
        from meihua.services.knowledge_base import KnowledgeBase
        kb = KnowledgeBase.from_source(pg_source)
        assert kb.is_complete

    def test_derivation_resolves(self, pg_source):
        from meihua.services.knowledge_base import KnowledgeBase
        from meihua.services.resolver import DivinationResolver
        resolver = DivinationResolver(KnowledgeBase.from_source(pg_source))
        result = resolver.derive(1, 1, 1)
        assert result.primary_code == "111111"
        assert result.changing_line.line_position == 1
