# tests/10_independent/test_determine_log_level.py
"""Tests for AppLogger level resolution, streams and error reporting."""

import argparse
import logging

import apathetic_logging as mod_alogs
import pytest

import wcforge.logs as mod_logs
import wcforge.meta as mod_meta


def test_cli_level_beats_env_and_config(
    monkeypatch: pytest.MonkeyPatch,
    direct_logger: mod_logs.AppLogger,
) -> None:
    # --- setup ---
    monkeypatch.setenv(f"{mod_meta.PROGRAM_ENV}_LOG_LEVEL", "error")
    args = argparse.Namespace(log_level="debug")

    # --- execute ---
    level = direct_logger.determine_log_level(args=args, root_log_level="warning")

    # --- verify ---
    assert level == "DEBUG"


def test_env_level_beats_config(
    monkeypatch: pytest.MonkeyPatch,
    direct_logger: mod_logs.AppLogger,
) -> None:
    # --- setup ---
    monkeypatch.delenv(f"{mod_meta.PROGRAM_ENV}_LOG_LEVEL", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "error")

    # --- execute ---
    level = direct_logger.determine_log_level(
        args=argparse.Namespace(log_level=None), root_log_level="warning"
    )

    # --- verify ---
    assert level == "ERROR"


def test_config_level_then_default(
    monkeypatch: pytest.MonkeyPatch,
    direct_logger: mod_logs.AppLogger,
) -> None:
    monkeypatch.delenv(f"{mod_meta.PROGRAM_ENV}_LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    assert direct_logger.determine_log_level(root_log_level="warning") == "WARNING"
    assert direct_logger.determine_log_level() == "INFO"


def test_app_logger_is_registered_under_package_name() -> None:
    logger = logging.getLogger(mod_meta.PROGRAM_PACKAGE)

    assert logger is mod_logs.get_app_logger()
    assert isinstance(logger, mod_alogs.Logger)


def test_level_number_knows_custom_levels() -> None:
    assert mod_logs.level_number("warning") == logging.WARNING
    assert mod_logs.level_number("trace") == logging.getLevelName("TRACE")
    assert mod_logs.level_number("silent") == logging.getLevelName("SILENT")
    assert mod_logs.level_number("nope") is None


def test_log_level_choices_are_known_levels() -> None:
    for name in mod_logs.LOG_LEVELS:
        assert mod_logs.level_number(name) is not None, name


def test_warnings_go_to_stderr_and_info_to_stdout(
    direct_logger: mod_logs.AppLogger,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- execute ---
    direct_logger.info("hello")
    direct_logger.warning("careful")

    # --- verify ---
    captured = capsys.readouterr()
    assert "hello" in captured.out
    assert "careful" in captured.err
    assert mod_alogs.TAG_STYLES["WARNING"][1] in captured.err
    assert "careful" not in captured.out


def test_use_level_restores_previous_level(
    direct_logger: mod_logs.AppLogger,
) -> None:
    direct_logger.setLevel("trace")
    with direct_logger.useLevel("error"):
        assert direct_logger.levelName == "ERROR"
    assert direct_logger.levelName == "TRACE"


def test_report_adds_traceback_only_in_debug(
    direct_logger: mod_logs.AppLogger,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    def _explode() -> None:
        xmsg = "kaboom"
        raise ValueError(xmsg)

    # --- execute ---
    direct_logger.setLevel("info")
    try:
        _explode()
    except ValueError as e:
        direct_logger.report(logging.ERROR, "quiet: %s", e)
    quiet = capsys.readouterr().err

    direct_logger.setLevel("debug")
    try:
        _explode()
    except ValueError as e:
        direct_logger.report(logging.ERROR, "loud: %s", e)
    loud = capsys.readouterr().err

    # --- verify ---
    assert "quiet: kaboom" in quiet
    assert "Traceback" not in quiet
    assert "loud: kaboom" in loud
    assert "Traceback" in loud
