# src/wcforge/commands.py

import asyncio
from pathlib import Path

from .errors import CommandError
from .logs import get_app_logger


async def run_command(
    args: list[str],
    cwd: Path | None = None,
    *,
    check: bool = True,
) -> str:
    """Run a command and return its stdout without the trailing newline.

    Raises CommandError on a non-zero exit unless `check` is False.
    stderr is folded into the error's output.
    """
    logger = get_app_logger()
    logger.debug("$ %s", " ".join(args))

    proc = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    raw_out, raw_err = await proc.communicate()
    stdout = raw_out.decode("utf-8", errors="replace")
    stderr = raw_err.decode("utf-8", errors="replace")

    if proc.returncode != 0 and check:
        output = "\n".join(part.strip() for part in (stdout, stderr) if part.strip())
        raise CommandError(args, proc.returncode or 1, output)

    logger.trace("[run_command] exit=%s stdout=%d bytes", proc.returncode, len(stdout))
    return stdout.removesuffix("\n")


async def run_command_status(args: list[str], cwd: Path | None = None) -> tuple[int, str]:
    """Run a command and return (exit code, combined output) without raising."""
    proc = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    raw_out, _ = await proc.communicate()
    return proc.returncode or 0, raw_out.decode("utf-8", errors="replace").rstrip()
