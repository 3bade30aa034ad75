"""
adapters/json_reference.py
──────────────────────────────────────────────────────────────────────────────
Implements ReferenceSourcePort from a JSON export of the reference backend.

File layout (the backend's own wire names):
  {
    "guas": [{"id": ..., "gua_name": ..., "gua_prompt": ...,
              "position": 1, "binary_code": "111111", "gua_ci": ...}, ...],
    "yaos": [{"id": ..., "gua_position": 1, "position": 1,
              "yao_name": ..., "yao_prompt": ...}, ...]
  }

The file is read once, on first fetch.

To enable:
  REFERENCE_PROVIDER=json
  REFERENCE_JSON_PATH=/path/to/reference_data.json
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from meihua.domain.exceptions import ReferenceSourceError
from meihua.domain.models import Hexagram, Line

logger = logging.getLogger(__name__)


class JsonReferenceSource:
    """Reads gua / yao records from a JSON export file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._payload: Optional[dict[str, Any]] = None

    @property
    def source_name(self) -> str:
        return f"json:{self._path}"

    # ── ReferenceSourcePort implementation ─────────────────────────────────

    def fetch_hexagrams(self) -> list[Hexagram]:
        return validate_rows(Hexagram, self._section("guas"), self._path)

    def fetch_lines(self) -> list[Line]:
        return validate_rows(Line, self._section("yaos"), self._path)

    # ── Private helpers ────────────────────────────────────────────────────

    def _section(self, key: str) -> list[dict]:
        payload = self._load()
        rows = payload.get(key)
        if not isinstance(rows, list):
            raise ReferenceSourceError(
                f"{self._path}: expected a list under '{key}'"
            )
        return rows

    def _load(self) -> dict[str, Any]:
        if self._payload is None:
            if not self._path.exists():
                raise ReferenceSourceError(f"Reference file not found: {self._path}")
            try:
                payload = json.loads(self._path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise ReferenceSourceError(
                    f"Cannot read reference file {self._path}: {exc}"
                ) from exc
            if not isinstance(payload, dict):
                raise ReferenceSourceError(
                    f"{self._path}: top level must be an object with 'guas' and 'yaos'"
                )
            self._payload = payload
            logger.debug("JsonReferenceSource loaded | path=%s", self._path)
        return self._payload


def validate_rows(model, rows: list[dict], origin: Any) -> list:
    """Validate raw rows into ``model`` instances, naming the bad row on failure."""
    records = []
    for i, row in enumerate(rows):
        try:
            records.append(model.model_validate(row))
        except ValidationError as exc:
            raise ReferenceSourceError(
                f"{origin}: invalid {model.__name__} record #{i}: {exc}"
            ) from exc
    return records
