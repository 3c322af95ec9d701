from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from ratios.config import DEFAULT_DATA_ROOT, DEFAULT_SEARCH_INDEX_PATH, load_verify_config, resolve_runtime_path
from ratios.search_index import SearchIndexBuildError, build_search_index
from ratios.validate import verify


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Apprenticeship ratio data utilities")
    subparsers = parser.add_subparsers(dest="command", required=True)

    verify_parser = subparsers.add_parser("verify", help="Verify region data files and the search index")
    verify_parser.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Repository root path (default: current directory).",
    )
    verify_parser.add_argument(
        "--data-root",
        default=None,
        help=f"Directory holding index.json and region files (default: {DEFAULT_DATA_ROOT}).",
    )
    verify_parser.add_argument(
        "--search-index",
        default=None,
        help=f"Search index artifact to check (default: {DEFAULT_SEARCH_INDEX_PATH}).",
    )
    verify_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional YAML settings file.",
    )
    verify_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Echo every passing check.",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        help="Print a single JSON report instead of the text summary.",
    )

    index_parser = subparsers.add_parser(
        "build-search-index",
        help="Build the lightweight search index from region files.",
    )
    index_parser.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Repository root path (default: current directory).",
    )
    index_parser.add_argument(
        "--data-root",
        default=DEFAULT_DATA_ROOT,
        help=f"Data directory (default: {DEFAULT_DATA_ROOT}).",
    )
    index_parser.add_argument(
        "--output",
        default=DEFAULT_SEARCH_INDEX_PATH,
        help=f"Output path (default: {DEFAULT_SEARCH_INDEX_PATH}).",
    )
    index_parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output.")

    return parser


def run_verify(args: argparse.Namespace) -> int:
    project_root = args.project_root.resolve()
    try:
        config = load_verify_config(args.config)
        overrides: dict[str, object] = {}
        if args.data_root:
            overrides["data_root"] = args.data_root
        if args.search_index:
            overrides["search_index_path"] = args.search_index
        if args.verbose:
            overrides["verbose"] = True
        if args.json:
            overrides["json_output"] = True
        config = config.model_validate({**config.model_dump(mode="python"), **overrides})
        return verify(config, project_root=project_root)
    except Exception as exc:
        print(f"Verification script failed: {exc}", file=sys.stderr)
        return 1


def run_build_search_index(args: argparse.Namespace) -> int:
    project_root = args.project_root.resolve()
    try:
        result = build_search_index(
            project_root=project_root,
            data_root=resolve_runtime_path(project_root, args.data_root),
            output_path=resolve_runtime_path(project_root, args.output),
        )
    except SearchIndexBuildError as exc:
        payload = {
            "ok": False,
            "error_type": exc.__class__.__name__,
            "message": str(exc),
        }
        if args.pretty:
            print(json.dumps(payload, indent=2, sort_keys=True))
        else:
            print(json.dumps(payload, sort_keys=True))
        return 1

    if args.pretty:
        print(json.dumps(result, indent=2, sort_keys=True))
    else:
        print(json.dumps(result, sort_keys=True))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "verify":
        return run_verify(args)
    if args.command == "build-search-index":
        return run_build_search_index(args)
    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
