"""
adapters/builtin_reference.py
──────────────────────────────────────────────────────────────────────────────
Implements ReferenceSourcePort from a bundled table of the 64 hexagrams.

Provides the canonical skeleton of the reference tables without any
external store:
  • 64 hexagrams in King Wen order with their Chinese names
  • binary codes composed with the codec's own trigram table
    (lower trigram bits first), so every 6-bit code resolves
  • 6 lines per hexagram named 初九 / 六二 / … / 上六, where line k takes
    its polarity from character k-1 of the binary code (the character that
    changes when line k moves), plus 用九 / 用六 as line 7 of 乾 and 坤

Descriptive prompts and classical texts are left empty; they are curated in
the administrative console and arrive through the json / http / postgres
providers.

To enable:
  REFERENCE_PROVIDER=builtin (the default).
"""
from __future__ import annotations

import logging

from meihua.domain import codec
from meihua.domain.models import ALL_CHANGING_LINE_POSITION, Hexagram, Line

logger = logging.getLogger(__name__)

# (ordinal, name, pinyin, upper trigram, lower trigram)
_HEXAGRAM_INFO = [
    (1, "乾", "Qian", "Qian", "Qian"),
    (2, "坤", "Kun", "Kun", "Kun"),
    (3, "屯", "Zhun", "Kan", "Zhen"),
    (4, "蒙", "Meng", "Gen", "Kan"),
    (5, "需", "Xu", "Kan", "Qian"),
    (6, "讼", "Song", "Qian", "Kan"),
    (7, "师", "Shi", "Kun", "Kan"),
    (8, "比", "Bi", "Kan", "Kun"),
    (9, "小畜", "Xiao Chu", "Xun", "Qian"),
    (10, "履", "Lü", "Qian", "Dui"),
    (11, "泰", "Tai", "Kun", "Qian"),
    (12, "否", "Pi", "Qian", "Kun"),
    (13, "同人", "Tong Ren", "Qian", "Li"),
    (14, "大有", "Da You", "Li", "Qian"),
    (15, "谦", "Qian", "Kun", "Gen"),
    (16, "豫", "Yu", "Zhen", "Kun"),
    (17, "随", "Sui", "Dui", "Zhen"),
    (18, "蛊", "Gu", "Gen", "Xun"),
    (19, "临", "Lin", "Kun", "Dui"),
    (20, "观", "Guan", "Xun", "Kun"),
    (21, "噬嗑", "Shi He", "Li", "Zhen"),
    (22, "贲", "Bi", "Gen", "Li"),
    (23, "剥", "Bo", "Gen", "Kun"),
    (24, "复", "Fu", "Kun", "Zhen"),
    (25, "无妄", "Wu Wang", "Qian", "Zhen"),
    (26, "大畜", "Da Chu", "Gen", "Qian"),
    (27, "颐", "Yi", "Gen", "Zhen"),
    (28, "大过", "Da Guo", "Dui", "Xun"),
    (29, "坎", "Kan", "Kan", "Kan"),
    (30, "离", "Li", "Li", "Li"),
    (31, "咸", "Xian", "Dui", "Gen"),
    (32, "恒", "Heng", "Zhen", "Xun"),
    (33, "遁", "Dun", "Qian", "Gen"),
    (34, "大壮", "Da Zhuang", "Zhen", "Qian"),
    (35, "晋", "Jin", "Li", "Kun"),
    (36, "明夷", "Ming Yi", "Kun", "Li"),
    (37, "家人", "Jia Ren", "Xun", "Li"),
    (38, "睽", "Kui", "Li", "Dui"),
    (39, "蹇", "Jian", "Kan", "Gen"),
    (40, "解", "Xie", "Zhen", "Kan"),
    (41, "损", "Sun", "Gen", "Dui"),
    (42, "益", "Yi", "Xun", "Zhen"),
    (43, "夬", "Guai", "Dui", "Qian"),
    (44, "姤", "Gou", "Qian", "Xun"),
    (45, "萃", "Cui", "Dui", "Kun"),
    (46, "升", "Sheng", "Kun", "Xun"),
    (47, "困", "Kun", "Dui", "Kan"),
    (48, "井", "Jing", "Kan", "Xun"),
    (49, "革", "Ge", "Dui", "Li"),
    (50, "鼎", "Ding", "Li", "Xun"),
    (51, "震", "Zhen", "Zhen", "Zhen"),
    (52, "艮", "Gen", "Gen", "Gen"),
    (53, "渐", "Jian", "Xun", "Gen"),
    (54, "归妹", "Gui Mei", "Zhen", "Dui"),
    (55, "丰", "Feng", "Zhen", "Li"),
    (56, "旅", "Lü", "Li", "Gen"),
    (57, "巽", "Xun", "Xun", "Xun"),
    (58, "兑", "Dui", "Dui", "Dui"),
    (59, "涣", "Huan", "Xun", "Kan"),
    (60, "节", "Jie", "Kan", "Dui"),
    (61, "中孚", "Zhong Fu", "Xun", "Dui"),
    (62, "小过", "Xiao Guo", "Zhen", "Gen"),
    (63, "既济", "Ji Ji", "Kan", "Li"),
    (64, "未济", "Wei Ji", "Li", "Kan"),
]

_SELECTOR_BY_PINYIN = {t.pinyin: t.selector for t in codec.TRIGRAMS.values()}

_MIDDLE_ORDINALS = {2: "二", 3: "三", 4: "四", 5: "五"}

# Line 7 names for the all-yang / all-yin hexagrams
_ALL_CHANGING_NAMES = {1: "用九", 2: "用六"}


def _line_name(line_position: int, is_yang: bool) -> str:
    """初九 / 九二 / … / 上六 style name for a regular line."""
    number = "九" if is_yang else "六"
    if line_position == 1:
        return f"初{number}"
    if line_position == 6:
        return f"上{number}"
    return f"{number}{_MIDDLE_ORDINALS[line_position]}"


def _binary_code(lower: str, upper: str) -> str:
    return codec.compose_primary_code(_SELECTOR_BY_PINYIN[lower], _SELECTOR_BY_PINYIN[upper])


class BuiltinReferenceSource:
    """Bundled canonical hexagram and line tables."""

    source_name = "builtin"

    def fetch_hexagrams(self) -> list[Hexagram]:
        return [
            Hexagram(
                id=f"gua-{ordinal:02d}",
                name=name,
                descriptive_prompt="",
                ordinal_position=ordinal,
                binary_code=_binary_code(lower, upper),
            )
            for ordinal, name, _pinyin, upper, lower in _HEXAGRAM_INFO
        ]

    def fetch_lines(self) -> list[Line]:
        lines: list[Line] = []
        for ordinal, _name, _pinyin, upper, lower in _HEXAGRAM_INFO:
            # line k is the character flip_line(code, k) toggles
            code = _binary_code(lower, upper)
            for position in range(1, 7):
                lines.append(
                    Line(
                        id=f"yao-{ordinal:02d}-{position}",
                        hexagram_ordinal_position=ordinal,
                        line_position=position,
                        name=_line_name(position, code[position - 1] == "1"),
                    )
                )
            if ordinal in _ALL_CHANGING_NAMES:
                lines.append(
                    Line(
                        id=f"yao-{ordinal:02d}-{ALL_CHANGING_LINE_POSITION}",
                        hexagram_ordinal_position=ordinal,
                        line_position=ALL_CHANGING_LINE_POSITION,
                        name=_ALL_CHANGING_NAMES[ordinal],
                    )
                )
        logger.debug("BuiltinReferenceSource | lines=%d", len(lines))
        return lines
