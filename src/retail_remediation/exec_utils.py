"""!
@brief Subprocess execution helpers with sanitised environments.
@details Centralises invocation of :func:`subprocess.run` so the uninstaller
inherits consistent logging, dry-run behaviour, hidden-window handling and
environment hygiene. Commands supplied as a single string are handed to the
OS verbatim, which is what ``cmd.exe /c`` needs to parse registry-provided
uninstall strings with their own quoting. Child output is discarded rather
than piped, so grandchildren that inherit the handles cannot hold the call
open after the child exits.
"""

from __future__ import annotations

import os
import subprocess
import time
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any

from . import logging_ext

_SANITIZE_BLOCKLIST = {
    "PYTHONPATH",
    "PYTHONHOME",
    "PYTHONWARNINGS",
    "VIRTUAL_ENV",
    "PIP_REQUIRE_VIRTUALENV",
    "CONDA_PREFIX",
    "CONDA_DEFAULT_ENV",
    "PYENV_VERSION",
    "POETRY_ACTIVE",
    "__PYVENV_LAUNCHER__",
}


@dataclass
class CommandResult:
    """!
    @brief Outcome information from :func:`run_command`.
    @details ``skipped`` is ``True`` when dry-run mode bypassed execution and
    ``error`` is set when the process could not be started at all.
    """

    command: Sequence[str]
    returncode: int
    duration: float
    skipped: bool = False
    error: str | None = None


def _build_call_payload(
    command_list: Sequence[str],
    *,
    hidden: bool,
    extra: Mapping[str, object] | None,
) -> MutableMapping[str, object]:
    payload: MutableMapping[str, object] = {
        "command": list(command_list),
        "hidden": hidden,
    }
    if extra:
        for key, value in extra.items():
            if key not in {"event", "result"}:
                payload[key] = value
    return payload


def _build_result_payload(*, return_code: int, duration: float, error: str | None = None) -> dict[str, object]:
    return {
        "rc": return_code,
        "duration_ms": round(duration * 1000, 3),
        "error": error,
    }


def _hidden_window_options() -> dict[str, Any]:
    """!
    @brief Build ``subprocess.run`` keyword arguments that suppress console windows.
    @details Returns an empty mapping on platforms without ``CREATE_NO_WINDOW``.
    """

    flags = getattr(subprocess, "CREATE_NO_WINDOW", 0)
    return {"creationflags": flags} if flags else {}


def sanitize_environment() -> MutableMapping[str, str]:
    """!
    @brief Copy :data:`os.environ` without variables leaked by a packaged interpreter.
    """

    environment = {str(k): str(v) for k, v in os.environ.items() if v is not None}
    for key in _SANITIZE_BLOCKLIST:
        environment.pop(key, None)
    return environment


def run_command(
    command: Sequence[str] | str,
    *,
    event: str,
    dry_run: bool = False,
    hidden: bool = False,
    human_message: str | None = None,
    extra: Mapping[str, object] | None = None,
) -> CommandResult:
    """!
    @brief Execute ``command`` with consistent logging and environment hygiene.
    @details Emits ``*_plan`` and ``*_result`` machine-log events. Execution is
    synchronous with no timeout: the call blocks until the child exits. A
    non-zero exit code is logged but not raised; a failure to start the
    process is reported through ``CommandResult.error``.
    @param command Argument sequence, or a complete command line string.
    @param event Base name for structured log events.
    @param dry_run When ``True`` no subprocess is spawned.
    @param hidden When ``True`` the child runs without a visible window.
    @param human_message Optional message emitted to the human logger.
    @param extra Additional metadata merged into machine log payloads.
    """

    human_logger = logging_ext.get_human_logger()
    machine_logger = logging_ext.get_machine_logger()

    if isinstance(command, str):
        invocation: Sequence[str] | str = command
        command_list = [command]
    else:
        command_list = [str(part) for part in command]
        invocation = command_list

    call_payload = _build_call_payload(command_list, hidden=hidden, extra=extra)
    machine_logger.info(
        f"{event}_plan",
        extra={"event": f"{event}_plan", "call": dict(call_payload), "dry_run": dry_run},
    )

    if dry_run:
        if human_message:
            human_logger.info("%s [dry-run]", human_message)
        else:
            human_logger.info("Dry-run: would execute %s", " ".join(command_list))
        machine_logger.info(
            f"{event}_dry_run",
            extra={
                "event": f"{event}_dry_run",
                "call": dict(call_payload),
                "result": _build_result_payload(return_code=0, duration=0.0),
            },
        )
        return CommandResult(command=command_list, returncode=0, duration=0.0, skipped=True)

    if human_message:
        human_logger.info(human_message)

    options: dict[str, Any] = _hidden_window_options() if hidden else {}

    start = time.monotonic()
    try:
        completed = subprocess.run(  # noqa: S603 - intentional command execution
            invocation,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
            env=sanitize_environment(),
            **options,
        )
    except FileNotFoundError as exc:
        duration = time.monotonic() - start
        human_logger.error("Command not found: %s", command_list[0])
        machine_logger.error(
            f"{event}_missing",
            extra={
                "event": f"{event}_missing",
                "call": dict(call_payload),
                "result": _build_result_payload(return_code=127, duration=duration, error=str(exc)),
            },
        )
        return CommandResult(command=command_list, returncode=127, duration=duration, error=str(exc))
    except OSError as exc:
        duration = time.monotonic() - start
        human_logger.error("Failed to execute %s: %s", command_list[0], exc)
        machine_logger.error(
            f"{event}_error",
            extra={
                "event": f"{event}_error",
                "call": dict(call_payload),
                "result": _build_result_payload(return_code=1, duration=duration, error=str(exc)),
            },
        )
        return CommandResult(command=command_list, returncode=1, duration=duration, error=str(exc))

    duration = time.monotonic() - start
    machine_logger.info(
        f"{event}_result",
        extra={
            "event": f"{event}_result",
            "call": dict(call_payload),
            "result": _build_result_payload(return_code=completed.returncode, duration=duration),
        },
    )

    if completed.returncode != 0:
        human_logger.warning("Command %s exited with %s", command_list[0], completed.returncode)

    return CommandResult(command=command_list, returncode=completed.returncode, duration=duration)


__all__ = ["CommandResult", "run_command", "sanitize_environment"]
