# tests/utils/log_fixtures.py
"""Reusable fixtures for testing the wcforge logger."""

import uuid

import pytest

import wcforge.logs as mod_logs


@pytest.fixture
def direct_logger() -> mod_logs.AppLogger:
    """A brand-new AppLogger with no shared state.

    Only for testing the logger itself; get_app_logger() is untouched.
    """
    name = f"test_logger_{uuid.uuid4().hex[:6]}"
    logger = mod_logs.AppLogger(name, enable_color=False)
    logger.setLevel("trace")
    return logger
