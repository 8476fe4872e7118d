"""Command-line driver: build, query and edit index snapshots."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path

from minisearch.config import Settings, get_settings
from minisearch.observability.logging import configure_logging
from minisearch.observability.metrics import write_metrics
from minisearch.search.errors import EmptyCorpusError, IndexIOError, SnapshotParseError
from minisearch.search.files import find_files
from minisearch.search.scoring import ScoringEngine
from minisearch.search.snapshot import load_snapshot, save_snapshot
from minisearch.search.store import InvertedIndexStore


logger = logging.getLogger(__name__)


def _build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="minisearch", description="Minimal full-text search over local files.")
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=settings.snapshot_path,
        help=f"Snapshot file to read/write (default: {settings.snapshot_path}).",
    )
    parser.add_argument(
        "--metrics-file",
        type=Path,
        default=settings.metrics_file,
        help="Write Prometheus metrics in text exposition format to this file after the command.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser("index", help="Index files matching a glob pattern into a new snapshot.")
    index_parser.add_argument("pattern", help="Glob pattern, e.g. 'docs/**/*.txt'.")
    index_parser.add_argument(
        "--max-files",
        type=int,
        default=settings.max_files,
        help="Index at most this many files.",
    )

    query_parser = subparsers.add_parser("query", help="Rank indexed documents against query terms.")
    query_parser.add_argument("terms", nargs="+", help="Query terms.")
    query_parser.add_argument("--model", choices=("tfidf", "bm25"), default=settings.default_model)
    query_parser.add_argument("--limit", type=int, default=None, help="Show only the top N results.")

    remove_parser = subparsers.add_parser("remove", help="Delete a term from the index.")
    remove_parser.add_argument("term", help="Term to delete.")

    return parser


def _cmd_index(args: argparse.Namespace) -> int:
    paths = find_files(args.pattern, args.max_files)
    if not paths:
        logger.error("No files match %s", args.pattern)
        return 1
    store = InvertedIndexStore()
    store.index_files(paths)
    save_snapshot(store, args.snapshot)
    print(f"Indexed {store.document_count} documents, {store.term_count} terms -> {args.snapshot}")
    return 0


def _cmd_query(args: argparse.Namespace, settings: Settings) -> int:
    store = load_snapshot(args.snapshot)
    engine = ScoringEngine.from_settings(store, settings)
    results = engine.lookup(args.terms, model=args.model, limit=args.limit)
    if not results:
        print("No matching documents.")
        return 0
    for result in results:
        print(f"{result.name}: {result.score:.6f}")
    return 0


def _cmd_remove(args: argparse.Namespace) -> int:
    store = load_snapshot(args.snapshot)
    store.remove_term(args.term.lower())
    save_snapshot(store, args.snapshot)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)
    parser = _build_parser(settings)
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        if args.command == "index":
            status = _cmd_index(args)
        elif args.command == "query":
            status = _cmd_query(args, settings)
        else:
            status = _cmd_remove(args)
    except (IndexIOError, SnapshotParseError, EmptyCorpusError) as exc:
        logger.error("%s", exc)
        status = 1

    if args.metrics_file is not None:
        try:
            write_metrics(args.metrics_file)
        except OSError as exc:
            logger.error("Failed to write metrics to %s: %s", args.metrics_file, exc)
            status = 1
    return status


if __name__ == "__main__":
    raise SystemExit(main())
