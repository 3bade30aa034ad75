"""
adapters/http_reference.py
──────────────────────────────────────────────────────────────────────────────
Implements ReferenceSourcePort against the reference backend's REST API.

Key behaviour:
  - GET {API_BASE_URL}{GUA_ENDPOINT}  → JSON list of gua records
  - GET {API_BASE_URL}{YAO_ENDPOINT}  → JSON list of yao records
  - Uses raw requests (no client SDK)
  - Retries on connection errors and 429 / 500 / 502 / 503 with exponential
    back-off; any other non-2xx is fatal
  - Rows validate straight into domain models via the backend's wire names

Required env vars:
  API_BASE_URL   — e.g. https://oracle-backend.example.com
  GUA_ENDPOINT   — default: /api/guas
  YAO_ENDPOINT   — default: /api/yaos

To enable:
  Set REFERENCE_PROVIDER=http in your .env file.
"""
from __future__ import annotations

import logging
import time

import requests

from meihua.adapters.json_reference import validate_rows
from meihua.config.settings import Settings
from meihua.domain.exceptions import ConfigurationError, ReferenceSourceError
from meihua.domain.models import Hexagram, Line

logger = logging.getLogger(__name__)

_RETRY_STATUSES = (429, 500, 502, 503)


def build_url(base_url: str, endpoint: str) -> str:
    """Join base URL and endpoint, making sure exactly one '/' separates them."""
    clean_endpoint = endpoint if endpoint.startswith("/") else f"/{endpoint}"
    return f"{base_url.rstrip('/')}{clean_endpoint}"


class HttpReferenceSource:
    """REST client for the reference backend's gua / yao list endpoints.

    Injected into KnowledgeBase.from_source via services/container.py when
    ``REFERENCE_PROVIDER=http`` is set in the environment.
    """

    def __init__(self, settings: Settings) -> None:
        if not settings.api_base_url:
            raise ConfigurationError(
                "API_BASE_URL is not set. "
                "Add it to your .env file or environment."
            )
        self._settings = settings
        self._headers = {"Accept": "application/json"}
        logger.debug("HttpReferenceSource ready | base_url=%s", settings.api_base_url)

    @property
    def source_name(self) -> str:
        return f"http:{self._settings.api_base_url}"

    # ── ReferenceSourcePort implementation ─────────────────────────────────

    def fetch_hexagrams(self) -> list[Hexagram]:
        url = build_url(self._settings.api_base_url, self._settings.gua_endpoint)
        rows = self._get_with_retry(url)
        logger.info("Fetched %d gua records from %s", len(rows), url)
        return validate_rows(Hexagram, rows, url)

    def fetch_lines(self) -> list[Line]:
        url = build_url(self._settings.api_base_url, self._settings.yao_endpoint)
        rows = self._get_with_retry(url)
        logger.info("Fetched %d yao records from %s", len(rows), url)
        return validate_rows(Line, rows, url)

    # ── Private helpers ────────────────────────────────────────────────────

    def _get_with_retry(self, url: str) -> list[dict]:
        """GET ``url`` with back-off on transient failures; return the JSON list."""
        retries = max(1, self._settings.http_retries)
        delay = 1.0
        last_error = ""

        for attempt in range(1, retries + 1):
            try:
                resp = requests.get(
                    url,
                    headers=self._headers,
                    timeout=self._settings.http_timeout,
                )
            except requests.RequestException as exc:
                last_error = str(exc)
                logger.warning(
                    "Reference request error (attempt %d/%d): %s",
                    attempt, retries, exc,
                )
                if attempt < retries:
                    time.sleep(delay)
                    delay *= 2
                continue

            if resp.status_code in _RETRY_STATUSES:
                last_error = f"HTTP {resp.status_code}"
                logger.warning(
                    "Reference backend %d (attempt %d/%d) — back-off %.1fs",
                    resp.status_code, attempt, retries, delay,
                )
                if attempt < retries:
                    time.sleep(delay)
                    delay *= 2
                continue

            if not resp.ok:
                logger.error(
                    "Reference backend HTTP %d: %s",
                    resp.status_code, resp.text[:300],
                )
                raise ReferenceSourceError(
                    f"GET {url} failed with HTTP {resp.status_code}"
                )

            return self._extract_rows(resp, url)

        raise ReferenceSourceError(
            f"GET {url} failed after {retries} attempts: {last_error}"
        )

    @staticmethod
    def _extract_rows(resp: requests.Response, url: str) -> list[dict]:
        try:
            data = resp.json()
        except ValueError as exc:
            raise ReferenceSourceError(f"GET {url} returned invalid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise ReferenceSourceError(
                f"GET {url} returned {type(data).__name__}, expected a list"
            )
        return data
