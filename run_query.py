#!/usr/bin/env python
"""Smoke-test the multi-upload QueryResolver.

Runs definitions / references / hover for one position, translating it into
each upload's commit through the diff between the two commits.

Two modes:

  • scenario mode — in-memory repositories from ``codeintel.seed.mock_uploads``;
    needs neither git nor a running query service.
  • live mode     — one or more ``--upload ID:COMMIT``; diffs come from the
    git clone at ``--repo-path`` (or ``CODEINTEL_REPO_PATH``) and answers from
    the query service at ``CODEINTEL_INDEX_URL``.

Environment (.env file or shell exports)::

    CODEINTEL_INDEX_URL     http://localhost:3186
    CODEINTEL_TIMEOUT       30
    CODEINTEL_PAGE_SIZE     (unset = server default)
    CODEINTEL_MAX_WORKERS   1
    CODEINTEL_REPO_PATH     .
    CODEINTEL_LOG_LEVEL     WARNING

Usage::

    # list available scenarios
    python run_query.py

    # all three query kinds on line 8, character 13 of the scenario's target commit
    python run_query.py checkout_drift --line 8 --character 13

    # references two at a time, following the cursor to the end
    python run_query.py checkout_drift --kind references --first 2 --all-pages

    # live: upload 7 is the nearest indexed commit, 3 the next one
    python run_query.py --repo-path ~/src/app --repository 1 --commit HEAD_SHA \\
        --path src/app.py --upload 7:abc1234 --upload 3:def5678 --line 10 --character 4
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import textwrap

from dotenv import load_dotenv

load_dotenv()

from codeintel.errors import CodeIntelError
from codeintel.positions import GitDiffSource, PositionAdjuster
from codeintel.query import (
    HttpIndexedSourceClient,
    LocationConnection,
    QueryConfig,
    QueryResolver,
    Upload,
)
from codeintel.seed.mock_uploads import ALL_SCENARIOS, MockQueryScenario, get_scenario

_KINDS = ("definitions", "references", "hover")

# ---------------------------------------------------------------------------
# Printing helpers
# ---------------------------------------------------------------------------

SEP = "─" * 72


def _print_header(title: str) -> None:
    print(f"\n{SEP}")
    print(f"  {title}")
    print(SEP)


def _print_scenario_info(scenario: MockQueryScenario) -> None:
    _print_header(f"SCENARIO: {scenario.scenario_id}")
    print(f"  Path          : {scenario.path}")
    print(f"  Target commit : {scenario.target_commit}")
    print("  Description   : ")
    for line in textwrap.wrap(scenario.description, width=64):
        print(f"    {line}")
    print()
    print(f"  {'UPLOAD':<8}  COMMIT")
    print(f"  {'─'*8}  {'─'*20}")
    for upload in scenario.uploads:
        print(f"  {upload.id:<8}  {upload.commit}")
    print()


def _print_locations(connection: LocationConnection) -> None:
    if not connection.locations:
        print("    (no locations)")
    for loc in connection.locations:
        start, end = loc.range.start, loc.range.end
        print(f"    {loc.path}:{start.line}:{start.character}-{end.line}:{end.character}  @ {loc.commit}")


# ---------------------------------------------------------------------------
# Core runner
# ---------------------------------------------------------------------------

def run_queries(
    resolver: QueryResolver,
    kinds: list[str],
    line: int,
    character: int,
    first: int | None,
    all_pages: bool,
) -> int:
    """Run *kinds* against *resolver* and print results.  Returns exit code (0 = success)."""
    try:
        if "definitions" in kinds:
            _print_header(f"DEFINITIONS at {line}:{character}")
            _print_locations(resolver.definitions(line, character))

        if "hover" in kinds:
            _print_header(f"HOVER at {line}:{character}")
            hover = resolver.hover(line, character)
            print(f"    {hover.text}" if hover else "    (no hover)")

        if "references" in kinds:
            cursor = None
            page = 1
            while True:
                _print_header(f"REFERENCES at {line}:{character} — page {page}")
                connection = resolver.references(line, character, after=cursor, first=first)
                _print_locations(connection)
                print(f"    end cursor : {connection.end_cursor or '(none)'}")
                if not (all_pages and connection.has_next_page):
                    break
                cursor = connection.end_cursor
                page += 1
    except CodeIntelError as exc:
        print(f"\n  [ERROR] {type(exc).__name__}: {exc}")
        return 1

    print(f"\n{SEP}\n")
    return 0


def _parse_upload(raw: str) -> Upload:
    upload_id, sep, commit = raw.partition(":")
    if not sep or not commit:
        raise argparse.ArgumentTypeError(f"expected ID:COMMIT, got {raw!r}")
    try:
        return Upload(id=int(upload_id), commit=commit)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid upload {raw!r}: {exc}") from exc


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _list_scenarios() -> None:
    _print_header("AVAILABLE SCENARIOS")
    print(f"  {'ID':<20}  {'TARGET':<14}  UPLOADS")
    print(f"  {'─'*20}  {'─'*14}  {'─'*30}")
    for sid, scenario in ALL_SCENARIOS.items():
        uploads = ", ".join(f"{u.id}@{u.commit[:7]}" for u in scenario.uploads)
        print(f"  {sid:<20}  {scenario.target_commit[:12]:<14}  {uploads}")
    print()
    print("  Usage: python run_query.py <scenario_id> --line N --character N")
    print("         python run_query.py --repo-path DIR --commit SHA --path P --upload ID:COMMIT ...\n")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Smoke-test the multi-upload QueryResolver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("scenario", nargs="?", help="Scenario ID to run (omit to list available scenarios)")
    parser.add_argument("--kind", choices=_KINDS, action="append",
                        help="Query kind to run (repeatable; default: all)")
    parser.add_argument("--line", type=int, default=8)
    parser.add_argument("--character", type=int, default=13)
    parser.add_argument("--first", type=int, help="References page size")
    parser.add_argument("--all-pages", action="store_true", help="Follow the references cursor to the end")
    parser.add_argument("--max-workers", type=int, help="Concurrent per-upload reference queries")
    # Live mode
    parser.add_argument("--repo-path", help="Local git clone (default: CODEINTEL_REPO_PATH)")
    parser.add_argument("--repository", type=int, default=0, help="Repository id passed to the query service")
    parser.add_argument("--commit", help="Target commit the position is expressed in")
    parser.add_argument("--path", help="Repository-relative file path")
    parser.add_argument("--upload", type=_parse_upload, action="append", default=[],
                        help="ID:COMMIT, nearest first (repeatable)")

    args = parser.parse_args()

    logging.basicConfig(
        level=os.environ.get("CODEINTEL_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = QueryConfig.from_env()
    if args.max_workers is not None:
        config = config.model_copy(update={"max_workers": max(args.max_workers, 1)})
    kinds = args.kind or list(_KINDS)

    if args.upload:
        if not (args.commit and args.path):
            parser.error("live mode needs --commit and --path")
        repo_path = args.repo_path or config.repo_path
        with HttpIndexedSourceClient(config.index_url, timeout=config.timeout) as client:
            resolver = QueryResolver(
                repository_id=args.repository,
                commit=args.commit,
                path=args.path,
                uploads=args.upload,
                client=client,
                adjuster=PositionAdjuster(GitDiffSource(repo_path, timeout=config.timeout)),
                config=config,
            )
            code = run_queries(resolver, kinds, args.line, args.character, args.first, args.all_pages)
        sys.exit(code)

    if not args.scenario:
        _list_scenarios()
        sys.exit(0)

    try:
        scenario = get_scenario(args.scenario)
    except KeyError as exc:
        print(f"\nError: {exc}")
        print("Run `python run_query.py` with no arguments to list available scenarios.\n")
        sys.exit(1)

    _print_scenario_info(scenario)
    code = run_queries(scenario.resolver(config), kinds, args.line, args.character, args.first, args.all_pages)
    sys.exit(code)


if __name__ == "__main__":
    main()
