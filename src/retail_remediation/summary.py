"""!
@brief Run summary formatting and exit-code mapping.
@details Every run ends with exactly one line on stdout,
``<LEVEL> <timestamp> = <message>``, followed by the process exit code.

The level is derived from the raw status code, while the exit code is
normalised afterwards: with :attr:`NormalizationPolicy.CLAMP_NEGATIVE` the
informational codes ``-2`` and ``-3`` print ``WARNING`` yet exit ``0``, which
an agent reading only the exit code cannot tell apart from success. That
behaviour is kept for parity with deployed detection rules;
:attr:`NormalizationPolicy.PASSTHROUGH` is available for callers that want the
raw code.
"""
from __future__ import annotations

import datetime
import enum
import sys
from dataclasses import dataclass, field
from typing import TextIO

from . import constants, logging_ext

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class NormalizationPolicy(enum.Enum):
    """!
    @brief How raw status codes map onto process exit codes.
    """

    CLAMP_NEGATIVE = "clamp-negative"
    PASSTHROUGH = "passthrough"


def _now() -> datetime.datetime:
    return datetime.datetime.now()


@dataclass(frozen=True)
class ExecutionSummary:
    """!
    @brief Final outcome of a remediation run.
    """

    status_code: int
    message: str
    timestamp: datetime.datetime = field(default_factory=_now)


def level_for(status_code: int) -> str:
    if status_code == constants.EXIT_OK:
        return "OK"
    if status_code == constants.EXIT_FAIL:
        return "FAIL"
    return "WARNING"


def format_summary(summary: ExecutionSummary) -> str:
    """!
    @brief Render ``summary`` as the single console line.
    """

    stamp = summary.timestamp.strftime(TIMESTAMP_FORMAT)
    return f"{level_for(summary.status_code)} {stamp} = {summary.message}"


def normalize_exit_code(
    status_code: int,
    policy: NormalizationPolicy = NormalizationPolicy.CLAMP_NEGATIVE,
) -> int:
    if policy is NormalizationPolicy.CLAMP_NEGATIVE and status_code < 0:
        return constants.EXIT_OK
    return status_code


def finish(
    summary: ExecutionSummary,
    policy: NormalizationPolicy = NormalizationPolicy.CLAMP_NEGATIVE,
    *,
    stream: TextIO | None = None,
) -> int:
    """!
    @brief Print ``summary`` and return the exit code the process should use.
    @details The entry point passes the result straight to :func:`sys.exit`;
    nothing else in the package terminates the process.
    """

    line = format_summary(summary)
    exit_code = normalize_exit_code(summary.status_code, policy)

    logging_ext.get_human_logger().info(line)
    logging_ext.get_machine_logger().info(
        "run_summary",
        extra=logging_ext.build_event_extra(
            "run_summary",
            status_code=summary.status_code,
            exit_code=exit_code,
            summary=summary.message,
            policy=policy.value,
        ),
    )

    target = stream if stream is not None else sys.stdout
    print(line, file=target, flush=True)
    return exit_code


__all__ = [
    "ExecutionSummary",
    "NormalizationPolicy",
    "TIMESTAMP_FORMAT",
    "finish",
    "format_summary",
    "level_for",
    "normalize_exit_code",
]
