"""
Plum Blossom (梅花易数) Hexagram Derivation Engine
=================================================
Hexagonal (Ports & Adapters) architecture.

Layer map
─────────────────────────────────────────────────────
  config/       All tuneable settings (env / .env driven)
  domain/       Pure business objects (models, exceptions, codec) — no I/O
  ports/        Abstract interfaces (Python Protocols)
  adapters/     Reference-data sources (builtin, JSON, HTTP, Postgres)
  services/     Knowledge base, resolver, formatter, DI container
  interfaces/   Delivery layer: CLI, Streamlit calculator
  tests/        Full test suite: unit / integration / e2e

Three positive integers go in; a primary hexagram, a secondary ("changed")
hexagram and the changing line come out:

  n1 % 8 → lower trigram ┐
  n2 % 8 → upper trigram ┴→ primary code ──flip(n3 % 6)──→ secondary code

Swapping the reference-data store:
  1. Write a new adapter in adapters/ implementing ReferenceSourcePort
  2. Add one branch in services/container.py
  3. Done — the resolver never sees concrete adapters
"""
__version__ = "1.0.0"
