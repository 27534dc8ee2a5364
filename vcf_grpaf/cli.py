"""Command-line interface for recomputing per-group allele statistics."""
from __future__ import annotations

import argparse
import datetime
import logging
import os
import sys
from typing import Optional, Sequence

from . import __version__
from .groups import GroupRegistry, load_labels
from .logging_utils import (
    ConfigError,
    GrpAFError,
    configure_logging,
    handle_critical_error,
    log_message,
)
from .pipeline import DEFAULT_WINDOW, run_pipeline
from .vcf_io import VcfTextReader, VcfTextWriter


def _positive_int(arg: str) -> int:
    """argparse type accepting integers >= 1."""
    try:
        value = int(arg)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {arg!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return value


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI args for the group statistics tool."""
    parser = argparse.ArgumentParser(
        prog="vcf_grpaf",
        description=(
            "Recompute AF, MAF, MAC, AC, AN and genotype counts for sample groups "
            "and rewrite them into the INFO column, replacing tags from earlier runs."
        ),
    )
    parser.add_argument("input", metavar="VCF", help="Input VCF (.vcf, .vcf.gz or '-' for stdin).")
    parser.add_argument(
        "-o",
        "--output",
        required=True,
        help="Output VCF. '-' writes to stdout; a .vcf.gz path is bgzipped and tabix-indexed.",
    )
    parser.add_argument(
        "-l",
        "--labels",
        required=True,
        help="Tab-delimited two-column file: <sample> <group>.",
    )
    parser.add_argument(
        "-t",
        "--threads",
        type=_positive_int,
        default=1,
        help="Number of worker threads processing records (default: 1).",
    )
    parser.add_argument(
        "--window",
        type=_positive_int,
        default=DEFAULT_WINDOW,
        help=f"Maximum number of records in flight across workers (default: {DEFAULT_WINDOW}).",
    )
    parser.add_argument(
        "--strict-samples",
        action="store_true",
        help="Abort when a labelled sample is missing from the VCF instead of warning.",
    )
    parser.add_argument("--log-file", dest="log_file", help="Also write log messages to this file.")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages and echo progress to stdout.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def run(
    input_vcf: str,
    output: str,
    labels: str,
    *,
    threads: int = 1,
    window: int = DEFAULT_WINDOW,
    strict_samples: bool = False,
    verbose: bool = False,
    log_file: Optional[str] = None,
) -> int:
    """Execute the workflow and return the number of records written."""

    configure_logging(
        log_level=logging.DEBUG if verbose else logging.INFO,
        log_file=log_file,
        enable_file_logging=bool(log_file),
        enable_console=True,
    )
    # Progress must not be echoed into a VCF written to stdout.
    echo = verbose and output != "-"

    log_message(
        "Script Execution Log - " + datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        level=logging.DEBUG,
    )
    if threads < 1:
        handle_critical_error(f"--threads must be at least 1, got {threads}", exc_cls=ConfigError)
    if window < 1:
        handle_critical_error(f"--window must be at least 1, got {window}", exc_cls=ConfigError)
    if input_vcf != "-" and not os.path.isfile(input_vcf):
        handle_critical_error(f"Input VCF does not exist: {input_vcf}", exc_cls=ConfigError)

    pairs = load_labels(labels)

    with VcfTextReader.from_path(input_vcf) as reader:
        registry = GroupRegistry.from_labels(pairs, reader.header.samples, strict=strict_samples)
        log_message(f"Loaded {len(registry)} groups from {labels}", echo)
        for group in registry.groups:
            log_message(
                f"Group {group}: {registry.size(group)} sample(s) present in the VCF",
                echo,
                level=logging.DEBUG,
            )
        with VcfTextWriter(output, verbose=echo) as writer:
            processed = run_pipeline(
                reader,
                writer,
                registry,
                workers=threads,
                window=window,
                verbose=echo,
            )

    log_message(f"Finished vcf_grpaf: {processed} record(s) written to {output}", echo)
    return processed


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Parse arguments and execute the workflow."""

    args = parse_arguments(argv)
    try:
        run(
            args.input,
            args.output,
            args.labels,
            threads=args.threads,
            window=args.window,
            strict_samples=args.strict_samples,
            verbose=args.verbose,
            log_file=args.log_file,
        )
    except GrpAFError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)


__all__ = ["main", "parse_arguments", "run"]


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    main()
