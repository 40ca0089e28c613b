"""!
@brief Tests for :mod:`retail_remediation.logging_ext`.
"""
from __future__ import annotations

import io
import json
import logging
from contextlib import redirect_stdout

from retail_remediation import logging_ext


def _flush(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        handler.flush()


def test_setup_logging_creates_files_and_formats(tmp_path) -> None:
    human_logger, machine_logger = logging_ext.setup_logging(tmp_path)
    human_logger.info("hello world")
    machine_logger.info("startup", extra=logging_ext.build_event_extra("startup", mode="detect"))
    _flush(human_logger)
    _flush(machine_logger)

    human_text = (tmp_path / logging_ext.HUMAN_LOG_FILENAME).read_text(encoding="utf-8")
    assert "hello world" in human_text
    assert "[human]" in human_text

    machine_entries = [
        json.loads(line)
        for line in (tmp_path / logging_ext.MACHINE_LOG_FILENAME).read_text(encoding="utf-8").splitlines()
        if line.strip()
    ]
    run_entry = machine_entries[0]
    assert run_entry["event"] == "run_start"
    assert run_entry["run"]["run_id"]

    startup = next(item for item in machine_entries if item.get("event") == "startup")
    assert startup["channel"] == "machine"
    assert startup["mode"] == "detect"
    assert startup["run_id"] == run_entry["run"]["run_id"]

    metadata = logging_ext.get_run_metadata()
    assert metadata is not None
    assert metadata["logdir"] == str(tmp_path)


def test_console_stays_quiet_by_default(tmp_path) -> None:
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        human_logger, machine_logger = logging_ext.setup_logging(tmp_path)
        human_logger.warning("only in the file")
        machine_logger.info("event", extra={"event": "event"})

    assert buffer.getvalue() == ""


def test_json_stdout_mirror(tmp_path) -> None:
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        _, machine_logger = logging_ext.setup_logging(tmp_path, json_to_stdout=True)
        machine_logger.warning("mirror", extra=logging_ext.build_event_extra("mirror"))
        _flush(machine_logger)

    output_lines = [line for line in buffer.getvalue().splitlines() if line.strip()]
    assert json.loads(output_lines[0])["event"] == "run_start"
    parsed = json.loads(output_lines[-1])
    assert parsed["event"] == "mirror"
    assert parsed["level"] == "WARNING"


def test_logger_helpers_return_configured_instances(tmp_path) -> None:
    human_logger, machine_logger = logging_ext.setup_logging(tmp_path)
    assert logging_ext.get_human_logger() is human_logger
    assert logging_ext.get_machine_logger() is machine_logger
    assert logging_ext.get_log_directory() == tmp_path


def _block_log_files(directory) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / logging_ext.HUMAN_LOG_FILENAME).mkdir()
    (directory / logging_ext.MACHINE_LOG_FILENAME).mkdir()


def test_unopenable_log_file_falls_back_to_temp_directory(tmp_path, monkeypatch) -> None:
    blocked = tmp_path / "blocked"
    _block_log_files(blocked)
    fallback = tmp_path / "temp"
    fallback.mkdir()
    monkeypatch.setattr(logging_ext.tempfile, "gettempdir", lambda: str(fallback))

    human_logger, _ = logging_ext.setup_logging(blocked)
    human_logger.info("still logged")
    _flush(human_logger)

    assert logging_ext.get_log_directory() == fallback
    assert "still logged" in (fallback / logging_ext.HUMAN_LOG_FILENAME).read_text(encoding="utf-8")


def test_logging_is_disabled_when_no_directory_is_usable(tmp_path, monkeypatch) -> None:
    blocked = tmp_path / "blocked"
    _block_log_files(blocked)
    monkeypatch.setattr(logging_ext.tempfile, "gettempdir", lambda: str(blocked))

    buffer = io.StringIO()
    with redirect_stdout(buffer):
        human_logger, machine_logger = logging_ext.setup_logging(blocked)
        human_logger.error("dropped")
        machine_logger.error("dropped", extra={"event": "dropped"})

    assert logging_ext.get_log_directory() is None
    assert all(isinstance(handler, logging.NullHandler) for handler in human_logger.handlers)
    assert all(isinstance(handler, logging.NullHandler) for handler in machine_logger.handlers)
    assert buffer.getvalue() == ""
