"""
domain/exceptions.py
──────────────────────────────────────────────────────────────────────────────
Custom exception hierarchy.

All exceptions are rooted at MeihuaError so callers can catch broadly
(except MeihuaError) or narrowly (except HexagramNotFound).

When adding an HTTP layer, map these to appropriate status codes:
  InvalidInput               → 422
  HexagramNotFound           → 500 (reference data is broken, not the user)
  LineNotFound               → 500
  KnowledgeBaseIntegrityError→ 500
  ReferenceSourceError       → 503
"""
from __future__ import annotations


class MeihuaError(Exception):
    """Base exception for all application errors."""


class ConfigurationError(MeihuaError):
    """Raised when required configuration is missing or invalid."""


class InvalidInput(MeihuaError, ValueError):
    """Raised when a derivation input is not a strictly positive integer."""


class InvalidSelector(MeihuaError):
    """Raised when a trigram selector falls outside 1..8."""

    def __init__(self, selector: object) -> None:
        self.selector = selector
        super().__init__(f"Trigram selector must be in 1..8, got {selector!r}")


class InvalidLinePosition(MeihuaError):
    """Raised when a line position to flip falls outside 1..6."""

    def __init__(self, line_position: object, detail: str = "") -> None:
        self.line_position = line_position
        message = f"Line position must be in 1..6, got {line_position!r}"
        super().__init__(f"{message} ({detail})" if detail else message)


class KnowledgeBaseError(MeihuaError):
    """Base for reference-table lookups and integrity failures."""


class HexagramNotFound(KnowledgeBaseError):
    """Raised when no hexagram carries the requested binary code."""

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"No hexagram with binary code {code!r}")


class LineNotFound(KnowledgeBaseError):
    """Raised when no line exists for (hexagram position, line position)."""

    def __init__(self, position: int, line: int) -> None:
        self.position = position
        self.line = line
        super().__init__(
            f"No line {line} for hexagram at position {position}"
        )


class KnowledgeBaseIntegrityError(KnowledgeBaseError):
    """Raised when reference records violate a uniqueness or key constraint."""


class ReferenceSourceError(MeihuaError):
    """Raised when a reference-data adapter cannot load its records."""
