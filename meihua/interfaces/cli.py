"""
interfaces/cli.py
──────────────────────────────────────────────────────────────────────────────
Command-line interface for the Plum Blossom hexagram calculator.

Usage:
  # Single derivation (summary sentence)
  python -m meihua.interfaces.cli 9 17 7

  # Full breakdown: both hexagrams, changing line, calculation details
  python -m meihua.interfaces.cli 9 17 7 --details

  # Batch file (three numbers per line)
  python -m meihua.interfaces.cli --file numbers.txt

  # JSON output, Chinese summary, reference data from the REST backend
  python -m meihua.interfaces.cli 3 5 2 --json --locale zh --provider http

  # Via installed entry-point (pyproject.toml [project.scripts])
  meihua-derive 3 5 2

Exit codes:
  0 — success
  1 — fatal error (reference data unavailable or inconsistent)
  2 — argument error (including non-positive numbers)
"""
from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path

from meihua.config.settings import get_settings
from meihua.domain.exceptions import InvalidInput, MeihuaError
from meihua.services.container import build_resolver, get_resolver
from meihua.services.formatter import SUPPORTED_LOCALES
from meihua.services.resolver import DivinationResolver

logger = logging.getLogger(__name__)


# ── Argument parser ────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="meihua-derive",
        description="Derive primary / secondary hexagrams and the changing line "
                    "from three positive numbers (Plum Blossom numerology).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "numbers",
        nargs="*",
        type=int,
        metavar="N",
        help="Three numbers: lower trigram, upper trigram, changing line.",
    )
    p.add_argument(
        "--file", "-f",
        metavar="FILE",
        type=Path,
        help="Path to a text file with three numbers per line.",
    )
    p.add_argument(
        "--details", "-d",
        action="store_true",
        help="Print the full breakdown instead of the summary sentence.",
    )
    p.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output results as JSON.",
    )
    p.add_argument(
        "--locale", "-l",
        choices=SUPPORTED_LOCALES,
        default=None,
        help="Summary language. (default: SUMMARY_LOCALE or 'en')",
    )
    p.add_argument(
        "--provider", "-p",
        choices=["builtin", "json", "http", "postgres"],
        default=None,
        help="Reference-data provider. (default: REFERENCE_PROVIDER or 'builtin')",
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    return p


# ── Formatting helpers ─────────────────────────────────────────────────────

def _print_result(result, resolver: DivinationResolver, args: argparse.Namespace) -> None:
    if args.json_output:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif args.details:
        print(resolver.formatter.details(result))
    else:
        print(result.summary)


# ── Main logic ─────────────────────────────────────────────────────────────

def _load_triples_from_file(path: Path) -> list[tuple[int, int, int]]:
    """Read number triples from a file, skip blank/comment lines."""
    if not path.exists():
        print(f"ERROR: File not found: {path}", file=sys.stderr)
        sys.exit(2)
    triples = []
    for lineno, raw in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.replace(",", " ").split()
        try:
            values = [int(p) for p in parts]
        except ValueError:
            values = []
        if len(values) != 3:
            print(f"ERROR: {path}:{lineno}: expected three integers, got {line!r}",
                  file=sys.stderr)
            sys.exit(2)
        triples.append((values[0], values[1], values[2]))
    return triples


def _resolver_for(args: argparse.Namespace) -> DivinationResolver:
    """Cached resolver, or a one-off one when CLI flags override settings."""
    if args.provider is None and args.locale is None:
        return get_resolver()
    settings = get_settings()
    overrides = {}
    if args.provider is not None:
        overrides["reference_provider"] = args.provider
    if args.locale is not None:
        overrides["summary_locale"] = args.locale
    return build_resolver(dataclasses.replace(settings, **overrides))


def run(args: argparse.Namespace) -> int:
    """Execute derivations for the given arguments.

    Returns:
        Exit code (0 = success, 1 = error, 2 = bad input).
    """
    if args.numbers:
        if len(args.numbers) != 3:
            print(f"ERROR: expected exactly three numbers, got {len(args.numbers)}",
                  file=sys.stderr)
            return 2
        triples = [tuple(args.numbers)]
    elif args.file:
        triples = _load_triples_from_file(args.file)
    else:
        print("ERROR: provide three numbers or --file", file=sys.stderr)
        return 2

    try:
        resolver = _resolver_for(args)
    except MeihuaError as exc:
        logger.exception("Failed to initialise resolver")
        print(f"ERROR: Resolver initialisation failed: {exc}", file=sys.stderr)
        return 1

    exit_code = 0
    for n1, n2, n3 in triples:
        try:
            result = resolver.derive(n1, n2, n3)
            _print_result(result, resolver, args)
        except InvalidInput as exc:
            print(f"ERROR [{n1}, {n2}, {n3}]: {exc}", file=sys.stderr)
            exit_code = max(exit_code, 2)
        except MeihuaError as exc:
            logger.exception("Derivation failed for %r", (n1, n2, n3))
            print(f"ERROR [{n1}, {n2}, {n3}]: {exc}", file=sys.stderr)
            exit_code = max(exit_code, 1)

    return exit_code


def main() -> None:
    """Entry point for the meihua-derive console script."""
    parser = _build_parser()
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    if not args.numbers and not args.file:
        parser.print_help()
        sys.exit(2)

    sys.exit(run(args))


if __name__ == "__main__":
    main()
