# src/wcforge/tasks.py
"""Labelled task runner used by build, lint and publish.

Each task logs one line when it starts and one when it finishes or fails:

    Starting  build → script: rewrite...
    Finished  build → script: rewrite ✓

Nested tasks receive their parent's label chain as `prefix`.
"""

from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

from .logs import CYAN, GRAY, GREEN, RED, YELLOW, get_app_logger
from .utils import clean_dir


T = TypeVar("T")

ARROW = "→"

TaskFunc = Callable[..., Awaitable[T]]


def join_prefix(prefix: str, label: str) -> str:
    """Extend a label chain: ("build", "script") → "build → script"."""
    return f"{prefix} {ARROW} {label}" if prefix else label


def format_label(label: str, prefix: str) -> str:
    logger = get_app_logger()
    if not prefix:
        return logger.colorize(label, CYAN)
    return (
        f"{logger.colorize(f'{prefix} {ARROW}', GRAY)} {logger.colorize(label, CYAN)}"
    )


def log_task_starting(label: str, prefix: str = "") -> str:
    """Log the start of a task and return the prefix for its subtasks."""
    get_app_logger().info("Starting  %s...", format_label(label, prefix))
    return join_prefix(prefix, label)


def log_task_successful(label: str, prefix: str = "") -> None:
    logger = get_app_logger()
    logger.info(
        "Finished  %s %s", format_label(label, prefix), logger.colorize("✓", GREEN)
    )


def log_task_failed(label: str, prefix: str = "") -> None:
    logger = get_app_logger()
    logger.info(
        "Failed    %s %s", format_label(label, prefix), logger.colorize("✗", RED)
    )


def log_task_info(message: str, prefix: str = "") -> None:
    logger = get_app_logger()
    logger.info(
        "Info      %s %s",
        logger.colorize(prefix or "-", GRAY),
        logger.colorize(message, YELLOW),
    )


def skip_task(label: str, prefix: str = "", message: str | None = None) -> None:
    logger = get_app_logger()
    reason = f" - {logger.colorize(message, YELLOW)}" if message else ""
    logger.info("Skipping  %s%s", format_label(label, prefix), reason)


async def run_task(
    label: str,
    prefix: str,
    task: TaskFunc[T],
    *args: Any,
) -> T:
    """Run `task(sub_prefix, *args)` between Starting/Finished log lines.

    On failure the Failed line is logged and the error is re-raised.
    """
    sub_prefix = log_task_starting(label, prefix)
    try:
        result = await task(sub_prefix, *args)
    except Exception:
        log_task_failed(label, prefix)
        raise
    log_task_successful(label, prefix)
    return result


async def clean(path: Path, label: str, prefix: str = "") -> None:
    """Delete `path` as a labelled task."""

    async def _clean(_prefix: str) -> None:
        clean_dir(path)

    await run_task(f"clean: {label}", prefix, _clean)
