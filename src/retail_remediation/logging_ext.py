"""!
@brief Structured logging helpers for the remediation scripts.
@details Implements a dual-stream pipeline: a rotating human-readable text log
and a rotating JSONL telemetry log. Neither stream writes to the console by
default because the device-management agent captures stdout and expects only
the single summary line produced by :mod:`retail_remediation.summary`.
"""
from __future__ import annotations

import datetime as _dt
import json
import logging
import os
import sys
import tempfile
import uuid
from logging import handlers
from pathlib import Path
from typing import Dict, Iterable, Mapping, Tuple

from . import version

HUMAN_LOGGER_NAME = "retail_remediation.human"
"""!
@brief Logger name for human-readable output.
"""

MACHINE_LOGGER_NAME = "retail_remediation.machine"
"""!
@brief Logger name for JSONL telemetry output.
"""

HUMAN_LOG_FILENAME = "retail-remediation.log"
MACHINE_LOG_FILENAME = "retail-remediation.jsonl"

_STANDARD_RECORD_KEYS: Dict[str, None] = {
    "name": None,
    "msg": None,
    "args": None,
    "levelname": None,
    "levelno": None,
    "pathname": None,
    "filename": None,
    "module": None,
    "exc_info": None,
    "exc_text": None,
    "stack_info": None,
    "lineno": None,
    "funcName": None,
    "created": None,
    "msecs": None,
    "relativeCreated": None,
    "thread": None,
    "threadName": None,
    "processName": None,
    "process": None,
    "taskName": None,
    "message": None,
    "asctime": None,
    "channel": None,
}

_CURRENT_LOG_DIRECTORY: Path | None = None
_RUN_METADATA: Dict[str, object] | None = None


class _ChannelFilter(logging.Filter):
    """!
    @brief Inject a fixed ``channel`` attribute on log records.
    """

    def __init__(self, channel: str) -> None:
        super().__init__()
        self._channel = channel

    def filter(self, record: logging.LogRecord) -> bool:
        record.channel = self._channel
        return True


class _JsonLineFormatter(logging.Formatter):
    """!
    @brief Format ``LogRecord`` instances as single-line JSON objects.
    @details Standard metadata (timestamp, level, logger, message) is merged
    with any ``extra`` attributes supplied by callers. Values that are not JSON
    serializable are coerced to their ``repr``.
    """

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - concise override
        moment = _dt.datetime.fromtimestamp(record.created, tz=_dt.timezone.utc)
        payload: Dict[str, object] = {
            "timestamp": moment.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "channel": getattr(record, "channel", "machine"),
        }

        payload.update(_extract_extras(record))
        try:
            return json.dumps(payload, ensure_ascii=False)
        except TypeError:
            sanitized = {key: _coerce_json(value) for key, value in payload.items()}
            return json.dumps(sanitized, ensure_ascii=False)


def _extract_extras(record: logging.LogRecord) -> Dict[str, object]:
    extras: Dict[str, object] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_RECORD_KEYS:
            continue
        extras[key] = value
    return extras


def _coerce_json(value: object) -> object:
    try:
        json.dumps(value)
    except TypeError:
        return repr(value)
    return value


def _configure_logger(logger: logging.Logger, formatter: logging.Formatter, handlers_to_add: Iterable[logging.Handler]) -> None:
    """!
    @brief Reset a logger and attach the supplied handlers.
    """

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for flt in list(logger.filters):
        logger.removeFilter(flt)
    for handler in handlers_to_add:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False


def get_default_log_directory() -> Path:
    """!
    @brief Resolve the default log directory.
    @details Uses ``%ProgramData%\\RetailOfficeRemediation\\logs`` on Windows and a
    directory under the system temp folder elsewhere.
    """

    program_data = os.environ.get("ProgramData")
    if os.name == "nt" and program_data:
        return Path(program_data) / "RetailOfficeRemediation" / "logs"
    return Path(tempfile.gettempdir()) / "retail-remediation" / "logs"


def _rotating_handler(path: Path) -> logging.Handler:
    return handlers.RotatingFileHandler(
        path,
        maxBytes=1_048_576,
        backupCount=5,
        encoding="utf-8",
    )


def _open_log_files(root_dir: Path) -> Tuple[logging.Handler, logging.Handler, Path | None]:
    """!
    @brief Open the human and machine log files under ``root_dir``.
    @details Tries ``root_dir`` first and the system temp directory second.
    When neither accepts both files, :class:`logging.NullHandler` instances are
    returned with no directory, so logging is silently disabled for the run.
    """

    for candidate in (root_dir, Path(tempfile.gettempdir())):
        human_file: logging.Handler | None = None
        try:
            candidate.mkdir(parents=True, exist_ok=True)
            human_file = _rotating_handler(candidate / HUMAN_LOG_FILENAME)
            machine_file = _rotating_handler(candidate / MACHINE_LOG_FILENAME)
        except OSError:
            if human_file is not None:
                human_file.close()
            continue
        return human_file, machine_file, candidate
    return logging.NullHandler(), logging.NullHandler(), None


def setup_logging(
    root_dir: Path,
    *,
    json_to_stdout: bool = False,
    level: int = logging.INFO,
) -> Tuple[logging.Logger, logging.Logger]:
    """!
    @brief Set up human and machine loggers.
    @details Returns the human-readable and structured event loggers. The
    directory is created if it does not exist; when it or the log files in it
    cannot be opened the temp directory is used, and failing that logging is
    disabled, so the summary line is never lost to a logging failure.
    """

    global _CURRENT_LOG_DIRECTORY

    human_file, machine_file, _CURRENT_LOG_DIRECTORY = _open_log_files(root_dir)

    human_logger = logging.getLogger(HUMAN_LOGGER_NAME)
    machine_logger = logging.getLogger(MACHINE_LOGGER_NAME)

    human_logger.setLevel(level)
    machine_logger.setLevel(level)

    human_formatter = logging.Formatter(
        "%(asctime)s %(levelname)-8s [%(channel)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    machine_formatter = _JsonLineFormatter()

    machine_handlers: list[logging.Handler] = [machine_file]
    if json_to_stdout:
        machine_handlers.append(logging.StreamHandler(stream=sys.stdout))

    _configure_logger(human_logger, human_formatter, [human_file])
    _configure_logger(machine_logger, machine_formatter, machine_handlers)

    human_logger.addFilter(_ChannelFilter("human"))
    machine_logger.addFilter(_ChannelFilter("machine"))

    _emit_run_metadata(human_logger, machine_logger)

    return human_logger, machine_logger


def get_human_logger() -> logging.Logger:
    """!
    @brief Retrieve the configured human-readable logger.
    """

    return logging.getLogger(HUMAN_LOGGER_NAME)


def get_machine_logger() -> logging.Logger:
    """!
    @brief Retrieve the configured machine/JSON logger.
    """

    return logging.getLogger(MACHINE_LOGGER_NAME)


def get_log_directory() -> Path | None:
    return _CURRENT_LOG_DIRECTORY


def get_run_metadata() -> Mapping[str, object] | None:
    """!
    @brief Return the most recent run metadata payload.
    @details The structure contains ``run_id`` (UUID4 hex), ``timestamp`` in
    ISO-8601 UTC form, and version/build identifiers.
    """

    return dict(_RUN_METADATA) if _RUN_METADATA is not None else None


def build_event_extra(event: str, **fields: object) -> Dict[str, object]:
    """!
    @brief Compose the ``extra`` mapping for a machine log event.
    @details Adds the current ``run_id`` so events from one invocation can be
    correlated across log rotations.
    """

    payload: Dict[str, object] = {"event": event}
    if _RUN_METADATA is not None:
        payload["run_id"] = _RUN_METADATA["run_id"]
    payload.update(fields)
    return payload


def _emit_run_metadata(human_logger: logging.Logger, machine_logger: logging.Logger) -> None:
    global _RUN_METADATA

    moment = _dt.datetime.now(tz=_dt.timezone.utc)
    _RUN_METADATA = {
        "run_id": uuid.uuid4().hex,
        "timestamp": moment.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "version": version.__version__,
        "build": version.__build__,
        "python": sys.version.split()[0],
        "logdir": str(_CURRENT_LOG_DIRECTORY) if _CURRENT_LOG_DIRECTORY else None,
    }

    human_logger.info(
        "Retail Office Remediation %s (%s) starting, run %s",
        version.__version__,
        version.__build__,
        _RUN_METADATA["run_id"],
    )
    machine_logger.info("run_start", extra={"event": "run_start", "run": dict(_RUN_METADATA)})


__all__ = [
    "HUMAN_LOGGER_NAME",
    "MACHINE_LOGGER_NAME",
    "build_event_extra",
    "get_default_log_directory",
    "get_human_logger",
    "get_log_directory",
    "get_machine_logger",
    "get_run_metadata",
    "setup_logging",
]
