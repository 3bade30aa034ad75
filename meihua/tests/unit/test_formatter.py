"""
tests/unit/test_formatter.py
──────────────────────────────────────────────────────────────────────────────
Unit tests for ResultFormatter (services/formatter.py).
"""
from __future__ import annotations

import pytest

from meihua.domain.exceptions import ConfigurationError
from meihua.services.formatter import SUPPORTED_LOCALES, ResultFormatter


class TestSummary:
    def test_english_sentence(self, resolver, formatter):
        result = resolver.derive(3, 5, 2)
        assert formatter.summary(result) == (
            'Result: primary hexagram is "家人", secondary hexagram is "小畜", '
            'changing line is the primary hexagram\'s ("家人") "六二"'
        )

    def test_chinese_sentence(self, resolver, zh_formatter):
        result = resolver.derive(3, 5, 2)
        assert zh_formatter.summary(result) == (
            '占卜结果：本卦为"家人"，之卦为"小畜"，变爻为 本卦（"家人"）的 "六二"'
        )

    def test_summary_matches_result_field(self, resolver, formatter):
        result = resolver.derive(10, 20, 30)
        assert formatter.summary(result) == result.summary

    def test_locale_case_insensitive(self):
        assert ResultFormatter("ZH").locale == "zh"

    def test_unknown_locale(self):
        with pytest.raises(ConfigurationError, match="SUMMARY_LOCALE"):
            ResultFormatter("fr")

    def test_supported_locales(self):
        assert SUPPORTED_LOCALES == ("en", "zh")


class TestDetails:
    def test_contains_all_sections(self, resolver, formatter):
        text = formatter.details(resolver.derive(3, 5, 2))
        assert "Primary hexagram" in text
        assert "Secondary hexagram" in text
        assert "Changing line" in text
        assert "Calculation" in text
        assert "101110 → 111110" in text
        assert "离 (Li) 101" in text
        assert "巽 (Xun) 110" in text
        assert "Inputs   : 3, 5, 2" in text

    def test_classical_text_and_prompt_shown(self, partial_resolver, formatter):
        text = formatter.details(partial_resolver.derive(1, 1, 1))
        assert "Judgement: 元亨利贞" in text
        assert "Text     : 乾 line 1" in text
        assert "All lines changing : 用九" in text

    def test_optional_fields_omitted(self, resolver, formatter):
        text = formatter.details(resolver.derive(3, 5, 2))
        assert "Judgement" not in text
        assert "All lines changing" not in text

    def test_trigrams_labelled_for_both_hexagrams(self, resolver, formatter):
        # 101110 → 111110: line 2 turns the lower 离 into 乾
        text = formatter.details(resolver.derive(3, 5, 2))
        assert "Trigrams : 离 (Li) below, 巽 (Xun) above" in text
        assert "Trigrams : 乾 (Qian) below, 巽 (Xun) above" in text
