"""
tests/unit/test_container.py
──────────────────────────────────────────────────────────────────────────────
Unit tests for provider selection and snapshot swapping in
services/container.py.
"""
from __future__ import annotations

import dataclasses

import pytest

from meihua.adapters.builtin_reference import BuiltinReferenceSource
from meihua.adapters.http_reference import HttpReferenceSource
from meihua.adapters.json_reference import JsonReferenceSource
from meihua.adapters.postgres_reference import PostgresReferenceSource
from meihua.domain.exceptions import ConfigurationError, ReferenceSourceError
from meihua.services import container


@pytest.fixture
def fresh_container(monkeypatch, settings):
    """Point the container at test settings and reset its cache around the test."""
    monkeypatch.setattr(container, "get_settings", lambda: settings)
    container.refresh_resolver()
    yield container
    container.refresh_resolver()


class TestBuildSource:
    @pytest.mark.parametrize("provider,cls", [
        ("builtin", BuiltinReferenceSource),
        ("json", JsonReferenceSource),
        ("http", HttpReferenceSource),
        ("postgres", PostgresReferenceSource),
        ("BUILTIN", BuiltinReferenceSource),
    ])
    def test_provider_selection(self, settings, provider, cls):
        s = dataclasses.replace(settings, reference_provider=provider)
        assert isinstance(container._build_source(s), cls)

    def test_unknown_provider(self, settings):
        s = dataclasses.replace(settings, reference_provider="sqlite")
        with pytest.raises(ConfigurationError, match="REFERENCE_PROVIDER"):
            container._build_source(s)


class TestBuildResolver:
    def test_builtin_resolver(self, settings):
        resolver = container.build_resolver(settings)
        assert resolver.knowledge_base.is_complete
        assert resolver.formatter.locale == "en"

    def test_locale_from_settings(self, settings):
        resolver = container.build_resolver(
            dataclasses.replace(settings, summary_locale="zh")
        )
        assert resolver.derive(1, 1, 1).summary.startswith("占卜结果")

    def test_bad_locale(self, settings):
        with pytest.raises(ConfigurationError):
            container.build_resolver(dataclasses.replace(settings, summary_locale="xx"))

    def test_json_provider_missing_file(self, settings, tmp_path):
        s = dataclasses.replace(
            settings,
            reference_provider="json",
            reference_json_path=tmp_path / "absent.json",
        )
        with pytest.raises(ReferenceSourceError):
            container.build_resolver(s)


class TestSingleton:
    def test_cached(self, fresh_container):
        assert fresh_container.get_resolver() is fresh_container.get_resolver()

    def test_refresh_swaps_whole_snapshot(self, fresh_container):
        before = fresh_container.get_resolver()
        result_before = before.derive(5, 6, 4)

        fresh_container.refresh_resolver()
        after = fresh_container.get_resolver()

        assert after is not before
        assert after.knowledge_base is not before.knowledge_base
        # the old resolver keeps working on its own snapshot
        assert before.derive(5, 6, 4) == result_before
        assert after.derive(5, 6, 4) == result_before

    def test_knowledge_base_cached_and_shared(self, fresh_container):
        kb = fresh_container.get_knowledge_base()
        assert fresh_container.get_knowledge_base() is kb
        assert fresh_container.get_resolver().knowledge_base is kb

    def test_refresh_reloads_knowledge_base(self, fresh_container):
        before = fresh_container.get_knowledge_base()
        fresh_container.refresh_resolver()
        assert fresh_container.get_knowledge_base() is not before


class _ClosingSource(BuiltinReferenceSource):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.closed = 0

    def fetch_lines(self):
        if self.fail:
            raise ReferenceSourceError("fetch_lines failed: connection reset")
        return super().fetch_lines()

    def close(self) -> None:
        self.closed += 1


class TestSourceClosing:
    def test_source_closed_after_load(self, monkeypatch, settings):
        source = _ClosingSource()
        monkeypatch.setattr(container, "_build_source", lambda s: source)
        kb = container.load_knowledge_base(settings)
        assert kb.is_complete
        assert source.closed == 1

    def test_source_closed_when_load_fails(self, monkeypatch, settings):
        source = _ClosingSource(fail=True)
        monkeypatch.setattr(container, "_build_source", lambda s: source)
        with pytest.raises(ReferenceSourceError):
            container.build_resolver(settings)
        assert source.closed == 1

    def test_source_without_close(self, settings):
        # the builtin source has no close(); loading still succeeds
        assert container.load_knowledge_base(settings).is_complete
