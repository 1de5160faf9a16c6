#!/usr/bin/env python3
"""Command line entry point: ``fastq-pair [options] LEFT RIGHT``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pairing_core import __version__
from pairing_core.config import PairingConfig, load_config
from pairing_core.exceptions import PairingError, ResourceError
from pairing_core.logging_config import (
    add_logging_args,
    clear_log_context,
    configure_logging,
    set_log_context,
)
from pairing_core.pairing import PairingResult, pair_files
from pairing_core.utils.io import write_json
from pairing_core.utils.logging import log_event, utc_now

logger = logging.getLogger("pairing_core.cli")

EXIT_OK = 0
EXIT_ERROR = 1


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from e
    if number < 1:
        raise argparse.ArgumentTypeError(f"{value!r} must be a positive integer")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fastq-pair",
        description=(
            "Split two FASTQ files into reads present in both (paired) and reads "
            "present in only one (single)."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pair two gzipped files, dropping repeated ids
  fastq-pair -d sample_R1.fastq.gz sample_R2.fastq.gz

  # Ids carry a trailing comment after a space; rewrite headers to <id>1/<id>2
  fastq-pair -s -f left.fq right.fq
        """,
    )
    parser.add_argument("left", help="First FASTQ file (plain, gzip or zstd); this one is indexed")
    parser.add_argument("right", help="Second FASTQ file (plain, gzip or zstd)")
    parser.add_argument(
        "-t",
        "--table-size",
        type=_positive_int,
        default=None,
        help="Number of hash buckets (default: 100003). Use roughly the number of reads.",
    )
    parser.add_argument(
        "-d",
        "--deduplicate",
        action="store_true",
        default=None,
        help="Keep only the first record of each id in each file",
    )
    parser.add_argument(
        "-s",
        "--split-spaces",
        dest="split_at_whitespace",
        action="store_true",
        default=None,
        help="Only use the header up to the first space or tab as the id",
    )
    parser.add_argument(
        "-f",
        "--format-id",
        action="store_true",
        default=None,
        help="Rewrite output headers as <id>1 and <id>2",
    )
    parser.add_argument(
        "-p",
        "--print-table-counts",
        action="store_true",
        default=None,
        help="Print the number of entries in each hash bucket",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=None, help="Log every id")
    parser.add_argument(
        "-o",
        "--output-dir",
        default=None,
        help="Directory for the outputs (default: beside each input)",
    )
    parser.add_argument("--config", default=None, help="YAML file with run settings")
    parser.add_argument("--summary-json", default=None, help="Write counters and output paths to this JSON file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    add_logging_args(parser)
    return parser


def resolve_config(args: argparse.Namespace) -> PairingConfig:
    config_path = Path(args.config).expanduser() if args.config else None
    return load_config(
        config_path,
        table_size=args.table_size,
        deduplicate=args.deduplicate,
        split_at_whitespace=args.split_at_whitespace,
        format_id=args.format_id,
        print_table_counts=args.print_table_counts,
        verbose=args.verbose,
        output_dir=Path(args.output_dir).expanduser() if args.output_dir else None,
    )


def build_summary(args: argparse.Namespace, config: PairingConfig, result: PairingResult) -> dict[str, object]:
    summary = result.to_dict()
    summary["inputs"] = {"left": args.left, "right": args.right}
    summary["config"] = config.to_dict()
    summary["finished_at_utc"] = utc_now()
    return summary


def write_summary(path: Path, summary: dict[str, object]) -> None:
    try:
        write_json(path, summary)
    except OSError as e:
        raise ResourceError(
            f"Can't write run summary {path}: {e}",
            context={"path": str(path), "operation": "write"},
        ) from e
    log_event(logger, "Wrote run summary", path=str(path))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, fmt=args.log_format)

    try:
        config = resolve_config(args)
        if config.verbose:
            configure_logging(level=args.log_level, fmt=args.log_format, verbose=True)
        set_log_context(left=args.left, right=args.right)
        result = pair_files(args.left, args.right, config)
        outputs = result.outputs
        print(
            f"Writing the paired reads to {outputs.left_paired} and {outputs.right_paired}\n"
            f"Writing the single reads to {outputs.left_single} and {outputs.right_single}"
        )
        for line in result.counters.summary_lines(include_duplicates=config.deduplicate):
            print(line)
        if args.summary_json:
            write_summary(Path(args.summary_json).expanduser(), build_summary(args, config, result))
    except PairingError as e:
        log_event(logger, "Pairing failed", level=logging.ERROR, **e.as_log_fields())
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_ERROR
    finally:
        clear_log_context()
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
