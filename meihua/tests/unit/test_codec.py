"""
tests/unit/test_codec.py
──────────────────────────────────────────────────────────────────────────────
Unit tests for the pure codec functions (domain/codec.py).

Tests cover:
  • remainder_or_max never yields 0 and stays within 1..divisor
  • the fixed selector → bits trigram table, bit for bit
  • compose_primary_code ordering (lower first) and shape
  • flip_line: single-character difference, involution, range checks
"""
from __future__ import annotations

import pytest

from meihua.domain import codec
from meihua.domain.exceptions import InvalidInput, InvalidLinePosition, InvalidSelector


class TestRemainderOrMax:
    @pytest.mark.parametrize("divisor", [6, 8])
    def test_result_always_in_range(self, divisor):
        for n in range(1, 200):
            r = codec.remainder_or_max(n, divisor)
            assert 1 <= r <= divisor

    @pytest.mark.parametrize("n,divisor,expected", [
        (8, 8, 8),
        (16, 8, 8),
        (6, 6, 6),
        (12, 6, 6),
        (9, 8, 1),
        (17, 8, 1),
        (7, 6, 1),
        (5, 8, 5),
        (1_000_003, 8, 3),
    ])
    def test_known_values(self, n, divisor, expected):
        assert codec.remainder_or_max(n, divisor) == expected

    @pytest.mark.parametrize("n", [0, -3, -8])
    def test_non_positive_rejected(self, n):
        with pytest.raises(InvalidInput):
            codec.remainder_or_max(n, 8)

    @pytest.mark.parametrize("n", [True, 2.5, "8", None])
    def test_non_integer_rejected(self, n):
        with pytest.raises(InvalidInput):
            codec.remainder_or_max(n, 8)

    def test_unsupported_divisor_rejected(self):
        with pytest.raises(InvalidInput):
            codec.remainder_or_max(10, 7)

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            codec.remainder_or_max(0, 6)


class TestTrigramTable:
    EXPECTED = {
        1: "111", 2: "011", 3: "101", 4: "001",
        5: "110", 6: "010", 7: "100", 8: "000",
    }

    def test_table_bit_for_bit(self):
        assert {s: codec.trigram_bits(s) for s in range(1, 9)} == self.EXPECTED

    def test_all_patterns_distinct(self):
        assert len({codec.trigram_bits(s) for s in range(1, 9)}) == 8

    def test_trigram_names(self):
        assert codec.trigram(1).name == "乾"
        assert codec.trigram(8).name == "坤"
        assert codec.trigram(4).pinyin == "Zhen"

    @pytest.mark.parametrize("selector", [0, 9, -1, True, "1"])
    def test_invalid_selector(self, selector):
        with pytest.raises(InvalidSelector):
            codec.trigram_bits(selector)

    def test_reverse_lookup(self):
        for selector in range(1, 9):
            t = codec.trigram(selector)
            assert codec.trigram_for_bits(t.bits) == t

    def test_reverse_lookup_unknown_bits(self):
        with pytest.raises(InvalidSelector):
            codec.trigram_for_bits("12")

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            codec.TRIGRAMS[9] = codec.trigram(1)  # type: ignore[index]


class TestComposePrimaryCode:
    def test_lower_first(self):
        # lower 震 (001), upper 艮 (100)
        assert codec.compose_primary_code(4, 7) == "001100"

    def test_order_is_significant(self):
        assert codec.compose_primary_code(4, 7) != codec.compose_primary_code(7, 4)

    def test_all_codes_six_binary_chars(self):
        for lower in range(1, 9):
            for upper in range(1, 9):
                code = codec.compose_primary_code(lower, upper)
                assert len(code) == 6
                assert set(code) <= {"0", "1"}

    def test_covers_all_64_codes(self):
        codes = {
            codec.compose_primary_code(lower, upper)
            for lower in range(1, 9)
            for upper in range(1, 9)
        }
        assert len(codes) == 64

    def test_invalid_selector_propagates(self):
        with pytest.raises(InvalidSelector):
            codec.compose_primary_code(0, 1)


class TestFlipLine:
    @pytest.mark.parametrize("k", range(1, 7))
    def test_differs_in_exactly_one_position(self, k):
        code = "101100"
        flipped = codec.flip_line(code, k)
        diffs = [i for i, (a, b) in enumerate(zip(code, flipped)) if a != b]
        assert diffs == [k - 1]

    @pytest.mark.parametrize("k", range(1, 7))
    def test_involution(self, k):
        for code in ("000000", "111111", "010101", "110001"):
            assert codec.flip_line(codec.flip_line(code, k), k) == code

    def test_first_bit(self):
        assert codec.flip_line("111111", 1) == "011111"

    def test_last_bit(self):
        assert codec.flip_line("000000", 6) == "000001"

    @pytest.mark.parametrize("k", [0, 7, -1, True])
    def test_out_of_range_position(self, k):
        with pytest.raises(InvalidLinePosition):
            codec.flip_line("111111", k)

    @pytest.mark.parametrize("code", ["11111", "1111111", "11a111", ""])
    def test_malformed_code(self, code):
        with pytest.raises(InvalidLinePosition):
            codec.flip_line(code, 1)
