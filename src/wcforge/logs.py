# src/wcforge/logs.py

import argparse
import logging
import os
from typing import Any, cast

from apathetic_logging import (
    Logger,
    registerDefaultLogLevel,
    registerLogger,
    registerLogLevelEnvVars,
)

from .constants import DEFAULT_ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from .meta import PROGRAM_ENV, PROGRAM_PACKAGE


# ANSI colors for task lines
RESET = "\033[0m"
CYAN = "\033[36m"
YELLOW = "\033[93m"
RED = "\033[91m"
GREEN = "\033[92m"
GRAY = "\033[90m"

# choices for --log-level and the `log_level` config key
LOG_LEVELS = [
    "trace",
    "debug",
    "info",
    "warning",
    "error",
    "critical",
    "silent",
]


class AppLogger(Logger):
    """App-specific logger class."""

    def determine_log_level(
        self,
        *,
        args: argparse.Namespace | None = None,
        root_log_level: str | None = None,
    ) -> str:
        """Resolve log level from CLI → env → root config → default."""
        args_level = getattr(args, "log_level", None)
        if args_level is not None:
            return str(args_level).upper()

        env_log_level = os.getenv(
            f"{PROGRAM_ENV}_{DEFAULT_ENV_LOG_LEVEL}"
        ) or os.getenv(DEFAULT_ENV_LOG_LEVEL)
        if env_log_level:
            return env_log_level.upper()

        if root_log_level:
            return root_log_level.upper()

        return DEFAULT_LOG_LEVEL.upper()

    def report(self, level: int, msg: str, *args: Any) -> None:
        """Log at `level`, attaching the active traceback only in debug."""
        if self.isEnabledFor(logging.DEBUG):
            self.log(level, msg, *args, exc_info=True, stacklevel=2)
        else:
            self.log(level, msg, *args)


# --- Logger initialization ---------------------------------------------------

# Force the logging module to use the Logger class globally.
# This must happen *before* any loggers are created.
logging.setLoggerClass(AppLogger)

# Force registration of TRACE and SILENT levels
AppLogger.extendLoggingModule()

registerLogLevelEnvVars(
    [f"{PROGRAM_ENV}_{DEFAULT_ENV_LOG_LEVEL}", DEFAULT_ENV_LOG_LEVEL]
)
registerDefaultLogLevel(DEFAULT_LOG_LEVEL)

# Register the logger name so getLogger() can find it
registerLogger(PROGRAM_PACKAGE)

_APP_LOGGER = cast("AppLogger", logging.getLogger(PROGRAM_PACKAGE))


# --- Convenience utils ---------------------------------------------------------


def level_number(name: str) -> int | None:
    """Numeric value of a level name such as "trace", or None if unknown."""
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else None


def get_app_logger() -> AppLogger:
    """Return the configured app logger.

    Use this in application code instead of logging.getLogger() for
    better type hints.
    """
    return _APP_LOGGER
