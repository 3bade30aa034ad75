"""
services/resolver.py
──────────────────────────────────────────────────────────────────────────────
Orchestrator: wires the codec and the knowledge base into a single
derive(n1, n2, n3) → DerivationResult call.

This is the primary entry point for all interfaces (CLI, Streamlit).
It knows nothing about where the reference data came from — it only speaks
to KnowledgeBasePort.

Pipeline (single pass, no branching on external state):
  1. remainders   n1 % 8, n2 % 8, n3 % 6 (zero wraps to the divisor)
  2. primary      lower trigram bits + upper trigram bits
  3. secondary    primary with the changing line's bit flipped
  4-6. lookups    primary, secondary, changing line (misses propagate)
  7. assemble     DerivationResult + summary sentence

Either a complete result is returned or an exception is raised; there is
no partial result.
"""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from meihua.domain import codec
from meihua.domain.exceptions import InvalidInput
from meihua.domain.models import DerivationRequest, DerivationResult
from meihua.ports.knowledge_base_port import KnowledgeBasePort
from meihua.services.formatter import ResultFormatter

logger = logging.getLogger(__name__)


class DivinationResolver:
    """Plum Blossom numerology: three numbers → two hexagrams + changing line.

    Inject via services/container.py in application code; tests build it
    directly around a synthetic knowledge base.

    Args:
        knowledge_base: Any KnowledgeBasePort implementation.
        formatter:      ResultFormatter for the summary (default: English).
    """

    def __init__(
        self,
        knowledge_base: KnowledgeBasePort,
        formatter: Optional[ResultFormatter] = None,
    ) -> None:
        self._kb = knowledge_base
        self._formatter = formatter or ResultFormatter()

    @property
    def knowledge_base(self) -> KnowledgeBasePort:
        return self._kb

    @property
    def formatter(self) -> ResultFormatter:
        return self._formatter

    # ── Public API ─────────────────────────────────────────────────────────

    def derive(self, n1: int, n2: int, n3: int) -> DerivationResult:
        """Derive primary / secondary hexagrams and the changing line.

        Raises:
            InvalidInput:     Any input is not a strictly positive int.
            HexagramNotFound: A computed code is missing from the tables.
            LineNotFound:     The changing line is missing from the tables.
        """
        try:
            request = DerivationRequest(n1=n1, n2=n2, n3=n3)
        except ValidationError as exc:
            raise InvalidInput(
                f"Inputs must be positive integers, got ({n1!r}, {n2!r}, {n3!r})"
            ) from exc
        return self.derive_request(request)

    def derive_request(self, request: DerivationRequest) -> DerivationResult:
        """Run the derivation for an already validated request."""
        n1, n2, n3 = request.numbers
        logger.info("derive | inputs=(%d, %d, %d)", n1, n2, n3)

        # ── 1. Remainders ──────────────────────────────────────────────────
        lower_sel = codec.remainder_or_max(n1, codec.TRIGRAM_DIVISOR)
        upper_sel = codec.remainder_or_max(n2, codec.TRIGRAM_DIVISOR)
        line_sel = codec.remainder_or_max(n3, codec.LINE_DIVISOR)
        logger.debug("remainders | lower=%d upper=%d line=%d", lower_sel, upper_sel, line_sel)

        # ── 2-3. Codes ─────────────────────────────────────────────────────
        lower = codec.trigram(lower_sel)
        upper = codec.trigram(upper_sel)
        primary_code = codec.compose_primary_code(lower_sel, upper_sel)
        secondary_code = codec.flip_line(primary_code, line_sel)
        logger.debug("codes | primary=%s secondary=%s", primary_code, secondary_code)

        # ── 4-6. Lookups (misses propagate unmodified) ─────────────────────
        primary = self._kb.find_hexagram_by_code(primary_code)
        secondary = self._kb.find_hexagram_by_code(secondary_code)
        changing_line = self._kb.find_line(primary.ordinal_position, line_sel)
        all_changing = self._kb.find_all_changing_line(primary.ordinal_position)

        # ── 7. Assemble ────────────────────────────────────────────────────
        result = DerivationResult(
            input_numbers=(n1, n2, n3),
            lower_remainder=lower_sel,
            upper_remainder=upper_sel,
            line_remainder=line_sel,
            lower_trigram=lower,
            upper_trigram=upper,
            lower_bits=lower.bits,
            upper_bits=upper.bits,
            primary_code=primary_code,
            secondary_code=secondary_code,
            primary_hexagram=primary,
            secondary_hexagram=secondary,
            changing_line=changing_line,
            all_changing_line=all_changing,
            summary=self._formatter.compose_summary(primary, secondary, changing_line),
        )
        logger.info(
            "derive | primary=%s(%d) secondary=%s(%d) line=%d",
            primary.name, primary.ordinal_position,
            secondary.name, secondary.ordinal_position,
            line_sel,
        )
        return result
