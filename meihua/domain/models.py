"""
domain/models.py
──────────────────────────────────────────────────────────────────────────────
Pure domain objects — Pydantic models with no imports from adapters or ports.

These models are the lingua franca of the entire system:
  • adapters produce them from raw reference rows (gua / yao records)
  • services resolve and assemble them
  • interfaces (CLI, Streamlit) serialise them

Reference records accept the backend's wire names as aliases
(gua_name, gua_prompt, position, gua_ci / gua_position, yao_name,
yao_prompt) so rows from the REST API, a JSON export or the database
validate directly, without extra DTOs or marshallers.

All models are frozen: a record loaded into the knowledge base can never be
mutated in place.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Line position reserved for the synthetic "all lines changing" line
# (用九 / 用六), defined only for the all-yang and all-yin hexagrams.
ALL_CHANGING_LINE_POSITION = 7


# ── Reference records ──────────────────────────────────────────────────────────

class Trigram(BaseModel):
    """One of the eight three-line symbols."""

    model_config = ConfigDict(frozen=True)

    selector: int = Field(..., ge=1, le=8)
    bits:     str = Field(..., pattern=r"^[01]{3}$")
    name:     str = ""
    pinyin:   str = ""


class Hexagram(BaseModel):
    """A six-line symbol (卦) as stored in the reference tables."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id:                 str
    name:               str = Field(..., alias="gua_name")
    descriptive_prompt: str = Field("", alias="gua_prompt")
    ordinal_position:   int = Field(..., alias="position", ge=1, le=64)
    binary_code:        str = Field(..., pattern=r"^[01]{6}$")
    classical_text:     Optional[str] = Field(None, alias="gua_ci")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> str:
        return str(v)

    @field_validator("descriptive_prompt", mode="before")
    @classmethod
    def none_prompt_to_empty(cls, v: object) -> object:
        return "" if v is None else v


class Line(BaseModel):
    """A single line (爻) of a hexagram, keyed by the hexagram's ordinal."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id:                        str
    hexagram_ordinal_position: int = Field(..., alias="gua_position", ge=1, le=64)
    line_position:             int = Field(..., alias="position", ge=1,
                                           le=ALL_CHANGING_LINE_POSITION)
    name:                      str = Field(..., alias="yao_name")
    descriptive_prompt:        str = Field("", alias="yao_prompt")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> str:
        return str(v)

    @field_validator("descriptive_prompt", mode="before")
    @classmethod
    def none_prompt_to_empty(cls, v: object) -> object:
        return "" if v is None else v

    @property
    def key(self) -> tuple[int, int]:
        """Composite key (hexagram ordinal, line position)."""
        return (self.hexagram_ordinal_position, self.line_position)

    @property
    def is_all_changing(self) -> bool:
        return self.line_position == ALL_CHANGING_LINE_POSITION


# ── Input ──────────────────────────────────────────────────────────────────────

class DerivationRequest(BaseModel):
    """Validated input to DivinationResolver: three strictly positive ints."""

    model_config = ConfigDict(frozen=True)

    n1: int = Field(..., gt=0, strict=True, description="Selects the lower trigram (mod 8)")
    n2: int = Field(..., gt=0, strict=True, description="Selects the upper trigram (mod 8)")
    n3: int = Field(..., gt=0, strict=True, description="Selects the changing line (mod 6)")

    @property
    def numbers(self) -> tuple[int, int, int]:
        return (self.n1, self.n2, self.n3)


# ── Output ─────────────────────────────────────────────────────────────────────

class DerivationResult(BaseModel):
    """Complete, fully resolved outcome of DivinationResolver.derive().

    This is the object serialised to JSON by the CLI and the Streamlit page.
    """

    model_config = ConfigDict(frozen=True)

    input_numbers:    tuple[int, int, int]

    # Remainder-or-wrap selectors
    lower_remainder:  int
    upper_remainder:  int
    line_remainder:   int

    # Trigrams and binary codes
    lower_trigram:    Trigram
    upper_trigram:    Trigram
    lower_bits:       str
    upper_bits:       str
    primary_code:     str
    secondary_code:   str

    # Resolved reference records
    primary_hexagram:   Hexagram
    secondary_hexagram: Hexagram
    changing_line:      Line
    all_changing_line:  Optional[Line] = None

    summary:          str

    def to_dict(self) -> dict:
        """Serialise to a plain JSON-safe dict."""
        return self.model_dump(mode="json")
