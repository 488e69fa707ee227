"""CLI entry point for har-stitch."""

import argparse
import json
import logging
import sys

from rich.console import Console
from rich.table import Table

import har_stitch.io.har_files
import har_stitch.io.logging_setup
import har_stitch.settings
from har_stitch.core.errors import HarError
from har_stitch.core.load_time import FullyLoaded, get_fully_loaded
from har_stitch.core.merge import merge_hars
from har_stitch.pipeline.enrichment import add_meta_to_har, get_empty_har

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="har-stitch", description="Merge HAR captures and summarize page load times"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-v: summaries, -vv: every page rename)",
    )
    parser.add_argument(
        "--log-file", default=None, help="Also append log records to this file"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    merge = commands.add_parser("merge", help="Merge HAR files into one")
    merge.add_argument("inputs", nargs="+", help="HAR files, in capture order")
    merge.add_argument("-o", "--output", required=True, help="Merged HAR output path")
    merge.add_argument(
        "--no-validate",
        dest="validate",
        action="store_false",
        default=True,
        help="Skip page id / pageref consistency checks",
    )
    merge.add_argument("--indent", type=int, default=None, help="JSON indent (default: compact)")

    fully_loaded = commands.add_parser(
        "fully-loaded", help="Print the fully loaded time of every page"
    )
    fully_loaded.add_argument("input", help="HAR file")
    fully_loaded.add_argument("--json", action="store_true", default=False, help="Print JSON")

    empty = commands.add_parser("empty", help="Write a placeholder HAR for a failed run")
    empty.add_argument("url", help="URL that was tested")
    empty.add_argument("--browser", required=True, help="Browser name")
    empty.add_argument("-o", "--output", required=True, help="HAR output path")
    empty.add_argument("--connectivity", default=None, help="Connectivity profile name")
    empty.add_argument("--result-url", default=None, help="Base URL where results are published")
    return parser


def _run_merge(args) -> int:
    hars = [har_stitch.io.har_files.load_har(path) for path in args.inputs]
    merged = merge_hars(hars, validate=args.validate)
    har_stitch.io.har_files.write_har(args.output, merged, indent=args.indent)
    log = merged["log"]
    print(
        f"Merged {len(hars)} HAR file(s): {len(log.get('pages', []))} page(s), "
        f"{len(log.get('entries', []))} entry(ies) -> {args.output}"
    )
    return 0


def _render_fully_loaded(results: list[FullyLoaded], console: Console) -> None:
    table = Table(title="Fully loaded")
    table.add_column("#", justify="right")
    table.add_column("URL")
    table.add_column("Fully loaded (ms)", justify="right")
    for index, result in enumerate(results, start=1):
        table.add_row(str(index), result["url"] or "-", f"{result['fullyLoaded']:.0f}")
    console.print(table)


def _run_fully_loaded(args) -> int:
    har = har_stitch.io.har_files.load_har(args.input)
    results = get_fully_loaded(har)
    if args.json:
        print(json.dumps(results, indent=2))
    else:
        _render_fully_loaded(results, Console())
    return 0


def _run_empty(args) -> int:
    options = har_stitch.settings.load_enrichment_options(
        {"connectivity_profile": args.connectivity, "result_url": args.result_url}
    )
    har = get_empty_har(args.url, args.browser)
    add_meta_to_har(0, har["log"]["pages"][0], args.url, options)
    har_stitch.io.har_files.write_har(args.output, har)
    print(f"Wrote placeholder HAR for {args.url} -> {args.output}")
    return 0


_COMMANDS = {
    "merge": _run_merge,
    "fully-loaded": _run_fully_loaded,
    "empty": _run_empty,
}


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    level = har_stitch.io.logging_setup.configure(args.verbose, args.log_file)
    logger.debug("running %s level=%s", args.command, logging.getLevelName(level))

    try:
        return _COMMANDS[args.command](args)
    except (HarError, OSError, json.JSONDecodeError) as e:
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"har-stitch {args.command}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
