"""
domain/codec.py
──────────────────────────────────────────────────────────────────────────────
Pure arithmetic / bit transformations from raw integers to hexagram codes.

  remainder_or_max      n % d, with a zero remainder wrapped to d itself
  trigram_bits          selector 1..8 → 3-bit string (fixed table below)
  compose_primary_code  lower trigram bits + upper trigram bits
  flip_line             invert one character of a 6-bit code → secondary code

The selector → bits table is the reference data's own convention, not the
conventional Yijing trigram-number order.  It must stay bit-for-bit as is:
every binary_code in the reference tables was written against it.

No state, no I/O — safe to call from any thread.
"""
from __future__ import annotations

from types import MappingProxyType

from meihua.domain.exceptions import InvalidInput, InvalidLinePosition, InvalidSelector
from meihua.domain.models import Trigram

TRIGRAM_DIVISOR = 8
LINE_DIVISOR = 6
_DIVISORS = (LINE_DIVISOR, TRIGRAM_DIVISOR)

# selector → (bits, name, pinyin)
_TRIGRAM_TABLE = {
    1: ("111", "乾", "Qian"),
    2: ("011", "兑", "Dui"),
    3: ("101", "离", "Li"),
    4: ("001", "震", "Zhen"),
    5: ("110", "巽", "Xun"),
    6: ("010", "坎", "Kan"),
    7: ("100", "艮", "Gen"),
    8: ("000", "坤", "Kun"),
}

TRIGRAMS: MappingProxyType[int, Trigram] = MappingProxyType({
    selector: Trigram(selector=selector, bits=bits, name=name, pinyin=pinyin)
    for selector, (bits, name, pinyin) in _TRIGRAM_TABLE.items()
})

_TRIGRAMS_BY_BITS = MappingProxyType({t.bits: t for t in TRIGRAMS.values()})


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def remainder_or_max(n: int, divisor: int) -> int:
    """Return ``n % divisor``, or ``divisor`` when the remainder is zero.

    The result is always in ``1..divisor``.

    Raises:
        InvalidInput: If ``n`` is not a positive int or ``divisor`` is not
            one of the two divisors the method uses (6 or 8).
    """
    if not _is_int(n) or n <= 0:
        raise InvalidInput(f"Expected a positive integer, got {n!r}")
    if divisor not in _DIVISORS:
        raise InvalidInput(f"Divisor must be one of {_DIVISORS}, got {divisor!r}")
    remainder = n % divisor
    return remainder or divisor


def trigram(selector: int) -> Trigram:
    """Return the Trigram record for ``selector`` (1..8)."""
    if not _is_int(selector) or selector not in TRIGRAMS:
        raise InvalidSelector(selector)
    return TRIGRAMS[selector]


def trigram_bits(selector: int) -> str:
    """Return the 3-bit string for ``selector`` (1..8)."""
    return trigram(selector).bits


def trigram_for_bits(bits: str) -> Trigram:
    """Reverse lookup: 3-bit pattern → Trigram."""
    try:
        return _TRIGRAMS_BY_BITS[bits]
    except (KeyError, TypeError):
        raise InvalidSelector(bits) from None


def compose_primary_code(lower_selector: int, upper_selector: int) -> str:
    """Concatenate the lower trigram's bits, then the upper trigram's bits."""
    return trigram_bits(lower_selector) + trigram_bits(upper_selector)


def flip_line(code: str, line_position: int) -> str:
    """Return ``code`` with the character at 1-indexed ``line_position`` inverted.

    Positions count from the first (leftmost) character, i.e. from the lower
    trigram upward.  Applying the same flip twice returns the original code.

    Raises:
        InvalidLinePosition: If ``line_position`` is outside 1..6 or ``code``
            is not a 6-character binary string.
    """
    if not _is_int(line_position) or not 1 <= line_position <= 6:
        raise InvalidLinePosition(line_position)
    if not isinstance(code, str) or len(code) != 6 or set(code) - {"0", "1"}:
        raise InvalidLinePosition(line_position, detail=f"bad code {code!r}")
    index = line_position - 1
    flipped = "0" if code[index] == "1" else "1"
    return code[:index] + flipped + code[index + 1:]
