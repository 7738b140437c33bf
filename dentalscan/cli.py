"""dentalscan CLI. Invoked as `dentalscan` when installed with pip install -e ."""

import argparse
import sys
import time
from pathlib import Path

from dentalscan import __version__
from dentalscan._deps import check_required
from dentalscan.config import SPEED_CHOICES, ScanConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dentalscan",
        description="Crawl dental clinic websites from a CSV and score how likely each owns a 3D scanner.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        default=None,
        metavar="CSV",
        help="Input CSV (columns: name, website, email). Prompted for when omitted.",
    )
    parser.add_argument("-o", "--output", default=None, metavar="PATH", help="Output CSV (default: <input>_3d_results.csv)")
    parser.add_argument(
        "--encoding",
        default="auto",
        metavar="ENC",
        help="Input encoding (default: auto = UTF-8, falling back to CP949/EUC-KR)",
    )
    parser.add_argument("--quick", action="store_true", help="Scan only each site's first page (single-page scoring).")
    parser.add_argument(
        "--speed",
        choices=SPEED_CHOICES,
        default=None,
        metavar="MODE",
        help="Workers/delay preset: conservative, balanced, aggressive. Explicit flags win.",
    )
    parser.add_argument("--workers", type=int, default=None, metavar="N", help="Sites crawled in parallel (default: 10)")
    parser.add_argument("--max-pages", type=int, default=None, metavar="N", help="Max pages per site, first page included (default: 25)")
    parser.add_argument("--max-depth", type=int, default=None, metavar="N", help="Max link hops from the first page (default: 5)")
    parser.add_argument("--delay", type=float, default=None, metavar="SECS", help="Pause between pages of one site (default: 0.2)")
    parser.add_argument("--timeout", type=float, default=None, metavar="SECS", help="Per-request timeout (default: 10)")
    parser.add_argument(
        "--max-timeouts",
        type=int,
        default=None,
        metavar="N",
        dest="max_timeout_retries",
        help="Timeouts on one site before it is marked ERROR (default: 3)",
    )
    parser.add_argument("--deadline", type=float, default=None, metavar="SECS", help="Wall-clock limit for the whole run (default: 1200)")
    parser.add_argument(
        "--grace",
        type=float,
        default=None,
        metavar="SECS",
        help="After the deadline, how long running sites get to stop (default: 30)",
    )
    parser.add_argument(
        "--progress-interval",
        type=float,
        default=None,
        metavar="SECS",
        help="Seconds between progress reports; 0 disables (default: 300)",
    )
    parser.add_argument("--robots", action="store_true", help="Obey robots.txt on each site.")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bar (e.g. for scripting)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print per-page fetch errors.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _prompt_for_path() -> str:
    try:
        return input("CSV file path: ").strip()
    except EOFError:
        return ""


def config_from_args(args: argparse.Namespace) -> ScanConfig:
    config = ScanConfig.from_env()
    if args.speed:
        config = config.with_preset(args.speed)
    return config.with_overrides(
        workers=args.workers,
        max_pages=args.max_pages,
        max_depth=args.max_depth,
        delay_s=args.delay,
        timeout_s=args.timeout,
        max_timeout_retries=args.max_timeout_retries,
        deadline_s=args.deadline,
        grace_s=args.grace,
        progress_interval_s=args.progress_interval,
        mode="quick" if args.quick else None,
        respect_robots=True if args.robots else None,
        debug=True if args.verbose else None,
    )


def main(argv: list[str] | None = None) -> int:
    check_required()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    from dentalscan.pipeline import format_summary, scan_targets
    from dentalscan.storage import load_targets, output_path_for, write_results

    raw_path = args.input or _prompt_for_path()
    if not raw_path:
        print("Error: No input file given.", file=sys.stderr)
        return 1
    in_path = Path(raw_path).expanduser()
    try:
        table = load_targets(in_path, encoding=args.encoding)
    except (OSError, UnicodeDecodeError, LookupError) as e:
        print(f"Error: cannot read {in_path}: {e}", file=sys.stderr)
        return 1
    print(f"Loaded {len(table.targets)} sites from {len(table.rows)} rows ({table.encoding})", file=sys.stderr)
    if not table.targets:
        print("Error: No rows with a website or email.", file=sys.stderr)
        return 1

    started = time.monotonic()
    results = scan_targets(table.targets, config, progress=not args.no_progress)
    elapsed = time.monotonic() - started

    out_path = Path(args.output) if args.output else output_path_for(in_path)
    try:
        write_results(out_path, table, results)
    except OSError as e:
        print(f"Error: cannot write {out_path}: {e}", file=sys.stderr)
        return 1
    print("\n" + format_summary(results, elapsed, skipped=table.skipped), file=sys.stderr)
    print(f"\nSaved: {out_path}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
