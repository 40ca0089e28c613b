"""!
@brief Command-line entry points for the two remediation scripts.
@details ``retail-office-remediate`` removes retail Microsoft 365 builds and
``retail-office-detect`` reports them gated on OS install age. Both set up
logging, run their decision flow once, print one summary line and return the
exit code for :func:`sys.exit`.
"""
from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from typing import Iterable, Optional

from . import constants, detect_report, logging_ext, remediate, summary, version
from .registry_tools import WinRegistry


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    metadata = version.build_info()
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"{metadata['version']} ({metadata['build']})",
    )
    parser.add_argument("--logdir", metavar="DIR", help="Directory for human/JSONL log output.")
    parser.add_argument("--json", action="store_true", help="Mirror structured events to stdout.")
    parser.add_argument(
        "--no-normalize",
        action="store_true",
        help="Exit with negative status codes instead of clamping them to 0.",
    )


def build_remediate_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retail-office-remediate",
        description="Silently uninstall retail Microsoft 365 builds.",
    )
    _add_common_arguments(parser)
    parser.add_argument("--dry-run", action="store_true", help="Log uninstall commands without running them.")
    return parser


def build_detect_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retail-office-detect",
        description="Detect retail Microsoft 365 builds on recently provisioned devices.",
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--hours",
        metavar="N",
        type=float,
        default=constants.DEFAULT_HOURS_THRESHOLD,
        help="OS install age in hours that still counts as recent (default: %(default)s).",
    )
    return parser


def _resolve_log_directory(candidate: Optional[str]) -> pathlib.Path:
    if candidate:
        return pathlib.Path(candidate).expanduser().resolve()
    return logging_ext.get_default_log_directory()


def _bootstrap_logging(args: argparse.Namespace) -> tuple[logging.Logger, logging.Logger]:
    """!
    @brief Initialize human and machine loggers using :mod:`logging_ext` helpers.
    """

    logdir = _resolve_log_directory(getattr(args, "logdir", None))
    return logging_ext.setup_logging(logdir, json_to_stdout=getattr(args, "json", False))


def _policy(args: argparse.Namespace) -> summary.NormalizationPolicy:
    if getattr(args, "no_normalize", False):
        return summary.NormalizationPolicy.PASSTHROUGH
    return summary.NormalizationPolicy.CLAMP_NEGATIVE


def remediate_main(argv: Optional[Iterable[str]] = None) -> int:
    """!
    @brief Entry point for the uninstall remediation.
    @returns Process exit code integer.
    """

    args = build_remediate_parser().parse_args(list(argv) if argv is not None else None)
    _bootstrap_logging(args)
    result = remediate.run_remediation(WinRegistry(), dry_run=args.dry_run)
    return summary.finish(result, _policy(args))


def detect_main(argv: Optional[Iterable[str]] = None) -> int:
    """!
    @brief Entry point for the detection-only script.
    @returns Process exit code integer.
    """

    args = build_detect_parser().parse_args(list(argv) if argv is not None else None)
    _bootstrap_logging(args)
    result = detect_report.run_detection_report(WinRegistry(), args.hours)
    return summary.finish(result, _policy(args))


def main(argv: Optional[Iterable[str]] = None) -> int:
    """!
    @brief Dispatch ``remediate``/``detect`` subcommands for ``python -m`` use.
    @details The subcommand is mandatory; a missing or unknown one is a usage
    error (exit 2) so that a bare invocation never uninstalls anything.
    """

    arguments = list(argv) if argv is not None else sys.argv[1:]
    entry_points = {"detect": detect_main, "remediate": remediate_main}
    if not arguments or arguments[0] not in entry_points:
        parser = argparse.ArgumentParser(prog="remediation_entry.py", usage="%(prog)s {detect,remediate} ...")
        parser.error(f"a subcommand is required: {', '.join(sorted(entry_points))}")
    return entry_points[arguments[0]](arguments[1:])


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
