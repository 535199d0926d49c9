"""Entry point for running bamwindow as a module: python -m bamwindow."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from dataclasses import replace

from . import __version__
from .config import SampleConfig
from .core.intervals import parse_region
from .core.properties import estimate_alignment_properties
from .core.sample import Sample
from .core.serialization import serialize_alignment_properties, serialize_pileup
from .errors import StatisticsEstimationError, StoreIOError
from .evidence import SNV, Deletion

logger = logging.getLogger("bamwindow")


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    log_fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(level=level, format=log_fmt, stream=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bamwindow",
        description="Windowed, depth-capped evidence extraction from BAM/CRAM files.",
    )
    p.add_argument("--version", action="version", version=f"bamwindow {__version__}")
    p.add_argument("-v", "--verbose", action="count", default=0, help="-v for INFO, -vv for DEBUG.")
    p.add_argument("--reference", help="Reference FASTA (required for CRAM).")
    p.add_argument(
        "--max-depth",
        type=int,
        help="Subsample to this many observations per site (overrides BAMWINDOW_MAX_DEPTH).",
    )
    p.add_argument(
        "--summary-only", action="store_true", help="Print only the pileup summary."
    )

    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("stats", help="Estimate alignment properties.")
    s.add_argument("bam", help="BAM/CRAM file.")
    s.add_argument("--omit-insert-size", action="store_true", help="Single-end data.")

    s = sub.add_parser("snv", help="Pileup for a single nucleotide variant.")
    s.add_argument("bam", help="Indexed BAM/CRAM file.")
    s.add_argument("contig")
    s.add_argument("pos", type=int, help="1-based position.")
    s.add_argument("ref")
    s.add_argument("alt")

    s = sub.add_parser("deletion", help="Pileup for a deletion.")
    s.add_argument("bam", help="Indexed BAM/CRAM file.")
    s.add_argument("region", help="Deleted bases, 0-based half-open, e.g. chr1:1000-1100.")

    return p


def _run(args: argparse.Namespace) -> dict:
    config = SampleConfig.from_env()
    if args.max_depth is not None:
        config = replace(config, max_depth=args.max_depth)

    if args.command == "stats":
        props = estimate_alignment_properties(
            args.bam, omit_insert_size=args.omit_insert_size, reference_path=args.reference
        )
        return serialize_alignment_properties(props)

    if args.command == "snv":
        if args.pos < 1:
            raise ValueError(f"Position must be positive, got {args.pos}")
        variant = SNV(args.contig, args.pos - 1, args.ref, args.alt)
        description = {
            "type": "snv",
            "contig": args.contig,
            "pos": args.pos,
            "ref": args.ref,
            "alt": args.alt,
        }
    else:
        interval = parse_region(args.region)
        variant = Deletion(interval.contig, interval.start, interval.end)
        description = {"type": "deletion", "region": str(interval)}

    with Sample.from_path(args.bam, config=config, reference_path=args.reference) as sample:
        pileup = sample.extract_observations(variant)

    return serialize_pileup(pileup, description, include_observations=not args.summary_only)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the bamwindow command line."""
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    try:
        result = _run(args)
    except (StoreIOError, StatisticsEstimationError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"bamwindow: error: {e}", file=sys.stderr)
        return 1

    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
