"""
services/container.py
──────────────────────────────────────────────────────────────────────────────
Dependency Injection container.

THIS IS THE ONLY FILE THAT NAMES CONCRETE ADAPTER CLASSES.

Provider selection is driven entirely by environment variables — no code
changes are needed to switch between reference-data stores:

  REFERENCE_PROVIDER=builtin  (default) → BuiltinReferenceSource
  REFERENCE_PROVIDER=json               → JsonReferenceSource
  REFERENCE_PROVIDER=http               → HttpReferenceSource
  REFERENCE_PROVIDER=postgres           → PostgresReferenceSource

Snapshot semantics:
  @lru_cache(maxsize=1) makes get_knowledge_base() and get_resolver() return
  the same instances across calls, and the cached resolver reads the cached
  knowledge base.  Reference sources are closed as soon as both tables are
  loaded.  refresh_resolver() drops the cached knowledge base and resolver;
  the next get_resolver() builds a fresh KnowledgeBase and swaps it in
  whole.  Resolvers already handed out keep their own immutable snapshot,
  so in-flight derivations never observe a half-loaded table.
"""
from __future__ import annotations

import logging
from functools import lru_cache

from meihua.config.settings import Settings, get_settings
from meihua.domain.exceptions import ConfigurationError
from meihua.ports.reference_source_port import ReferenceSourcePort
from meihua.services.formatter import ResultFormatter
from meihua.services.knowledge_base import KnowledgeBase
from meihua.services.resolver import DivinationResolver

logger = logging.getLogger(__name__)


def _build_source(settings: Settings) -> ReferenceSourcePort:
    """Instantiate the correct ReferenceSourcePort adapter based on REFERENCE_PROVIDER."""
    provider = settings.reference_provider.lower()
    if provider == "builtin":
        from meihua.adapters.builtin_reference import BuiltinReferenceSource
        logger.info("Reference provider: builtin")
        return BuiltinReferenceSource()
    if provider == "json":
        from meihua.adapters.json_reference import JsonReferenceSource
        logger.info("Reference provider: JSON (%s)", settings.reference_json_path)
        return JsonReferenceSource(settings.reference_json_path)
    if provider == "http":
        from meihua.adapters.http_reference import HttpReferenceSource
        logger.info("Reference provider: HTTP (%s)", settings.api_base_url)
        return HttpReferenceSource(settings)
    if provider == "postgres":
        from meihua.adapters.postgres_reference import PostgresReferenceSource
        logger.info("Reference provider: Postgres (%s)", settings.db_dsn)
        return PostgresReferenceSource(settings)
    raise ConfigurationError(
        f"Unknown REFERENCE_PROVIDER '{settings.reference_provider}'. "
        "Valid values: 'builtin', 'json', 'http', 'postgres'."
    )


def load_knowledge_base(settings: Settings) -> KnowledgeBase:
    """Read the configured reference store into a new KnowledgeBase (no caching).

    The source is closed once both tables are loaded.
    """
    source = _build_source(settings)
    try:
        knowledge_base = KnowledgeBase.from_source(source)
    finally:
        close = getattr(source, "close", None)
        if close is not None:
            close()
    if not knowledge_base.is_complete:
        logger.warning(
            "Knowledge base incomplete | hexagrams=%d, some derivations will fail",
            len(knowledge_base),
        )
    return knowledge_base


def build_resolver(settings: Settings) -> DivinationResolver:
    """Wire a DivinationResolver from explicit settings (no caching)."""
    knowledge_base = load_knowledge_base(settings)
    formatter = ResultFormatter(settings.summary_locale)
    return DivinationResolver(knowledge_base=knowledge_base, formatter=formatter)


@lru_cache(maxsize=1)
def get_knowledge_base() -> KnowledgeBase:
    """Load and return the KnowledgeBase singleton for the current settings.

    Raises:
        ConfigurationError:   Unknown provider.
        ReferenceSourceError: The reference store could not be read.
        KnowledgeBaseIntegrityError: The reference tables violate a key.
    """
    return load_knowledge_base(get_settings())


@lru_cache(maxsize=1)
def get_resolver() -> DivinationResolver:
    """Build and return the fully wired DivinationResolver singleton.

    Shares the knowledge base returned by get_knowledge_base().

    Raises:
        ConfigurationError:   Unknown provider or locale.
        ReferenceSourceError: The reference store could not be read.
        KnowledgeBaseIntegrityError: The reference tables violate a key.
    """
    settings = get_settings()
    logger.info(
        "Building DivinationResolver | reference_provider=%s locale=%s",
        settings.reference_provider,
        settings.summary_locale,
    )
    formatter = ResultFormatter(settings.summary_locale)
    return DivinationResolver(knowledge_base=get_knowledge_base(), formatter=formatter)


def refresh_resolver() -> None:
    """Drop the cached knowledge base and resolver so the next call reloads reference data."""
    get_resolver.cache_clear()
    get_knowledge_base.cache_clear()
    logger.info("DivinationResolver cache cleared; reference data reloads on next use")
