"""
services/formatter.py
──────────────────────────────────────────────────────────────────────────────
Renders a DerivationResult as text for display or clipboard export.

  summary()  the canonical one-sentence result (English, or the console's
             Chinese wording with locale="zh")
  details()  multi-line breakdown: both hexagrams, the changing line and
             the calculation details (remainders, trigram bits and names)

Pure string composition — no I/O and no failure modes beyond an unknown
locale, which is rejected when the formatter is built.
"""
from __future__ import annotations

from meihua.domain import codec
from meihua.domain.exceptions import ConfigurationError
from meihua.domain.models import DerivationResult, Hexagram, Line

_SUMMARY_TEMPLATES = {
    "en": (
        'Result: primary hexagram is "{primary}", secondary hexagram is '
        '"{secondary}", changing line is the primary hexagram\'s '
        '("{primary}") "{line}"'
    ),
    "zh": (
        '占卜结果：本卦为"{primary}"，之卦为"{secondary}"，'
        '变爻为 本卦（"{primary}"）的 "{line}"'
    ),
}

SUPPORTED_LOCALES = tuple(_SUMMARY_TEMPLATES)


class ResultFormatter:
    """Composes summary and detail text for derivation results.

    Args:
        locale: "en" (default) or "zh".

    Raises:
        ConfigurationError: For an unsupported locale.
    """

    def __init__(self, locale: str = "en") -> None:
        locale = locale.lower()
        if locale not in _SUMMARY_TEMPLATES:
            raise ConfigurationError(
                f"Unknown SUMMARY_LOCALE '{locale}'. "
                f"Valid values: {', '.join(repr(name) for name in SUPPORTED_LOCALES)}."
            )
        self._locale = locale
        self._template = _SUMMARY_TEMPLATES[locale]

    @property
    def locale(self) -> str:
        return self._locale

    # ── Public API ─────────────────────────────────────────────────────────

    def compose_summary(self, primary: Hexagram, secondary: Hexagram, line: Line) -> str:
        """Build the summary sentence from the three resolved records."""
        return self._template.format(
            primary=primary.name,
            secondary=secondary.name,
            line=line.name,
        )

    def summary(self, result: DerivationResult) -> str:
        return self.compose_summary(
            result.primary_hexagram,
            result.secondary_hexagram,
            result.changing_line,
        )

    def details(self, result: DerivationResult) -> str:
        """Multi-line breakdown of a result, one labelled field per line."""
        rule = "─" * 60
        out = [rule, self.summary(result), rule]
        out += _hexagram_block("Primary hexagram", result.primary_hexagram, result.primary_code)
        out += _hexagram_block("Secondary hexagram", result.secondary_hexagram, result.secondary_code)

        line = result.changing_line
        out.append("Changing line")
        out.append(f"  Name     : {line.name}")
        out.append(f"  Position : line {line.line_position} of hexagram "
                   f"{line.hexagram_ordinal_position}")
        if line.descriptive_prompt:
            out.append(f"  Text     : {line.descriptive_prompt}")
        if result.all_changing_line is not None:
            out.append(f"  All lines changing : {result.all_changing_line.name}")

        lower, upper = result.lower_trigram, result.upper_trigram
        out.append("Calculation")
        out.append("  Inputs   : " + ", ".join(str(n) for n in result.input_numbers))
        out.append(f"  Remainders (lower/upper/line) : "
                   f"{result.lower_remainder} / {result.upper_remainder} / "
                   f"{result.line_remainder}")
        out.append(f"  Lower trigram : {lower.selector} - {lower.name} ({lower.pinyin}) {lower.bits}")
        out.append(f"  Upper trigram : {upper.selector} - {upper.name} ({upper.pinyin}) {upper.bits}")
        out.append(f"  Codes (primary → secondary) : "
                   f"{result.primary_code} → {result.secondary_code}")
        out.append(rule)
        return "\n".join(out)


def _hexagram_block(title: str, hexagram: Hexagram, code: str) -> list[str]:
    block = [
        title,
        f"  Name     : {hexagram.name}",
        f"  Code     : {code}",
        f"  Position : {hexagram.ordinal_position}",
    ]
    lower, upper = codec.trigram_for_bits(code[:3]), codec.trigram_for_bits(code[3:])
    block.append(f"  Trigrams : {lower.name} ({lower.pinyin}) below, "
                 f"{upper.name} ({upper.pinyin}) above")
    if hexagram.classical_text:
        block.append(f"  Judgement: {hexagram.classical_text}")
    return block
