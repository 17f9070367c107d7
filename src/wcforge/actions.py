# src/wcforge/actions.py

import re
import subprocess
import time
from collections.abc import Callable
from contextlib import suppress
from importlib.metadata import PackageNotFoundError, version as package_version
from pathlib import Path

from .config.config_types import RootConfigResolved
from .constants import DEFAULT_WATCH_INTERVAL
from .logs import get_app_logger
from .meta import PROGRAM_PACKAGE, Metadata


def _collect_watched_files(config: RootConfigResolved) -> list[Path]:
    """Every source file, plus package.json and the config file."""
    files = [p for p in config["src"]["path"].rglob("*") if p.is_file()]
    project_root = config["project_root"]
    extra = [project_root / "package.json", config["__meta__"]["config_path"]]
    files.extend(p for p in extra if p is not None and p.is_file())
    return sorted(set(files))


def _snapshot(files: list[Path]) -> dict[Path, float]:
    mtimes: dict[Path, float] = {}
    for f in files:
        with suppress(FileNotFoundError):
            mtimes[f] = f.stat().st_mtime
    return mtimes


def watch_for_changes(
    rebuild_func: Callable[[], None],
    config: RootConfigResolved,
    interval: float = DEFAULT_WATCH_INTERVAL,
) -> None:
    """Poll source modification times and rebuild when anything changes.

    Output (dist and temp) is never watched, so a rebuild cannot trigger
    itself. Files are re-listed on every tick to pick up new ones.
    Stops on KeyboardInterrupt.
    """
    logger = get_app_logger()
    logger.info(
        "👀 Watching for changes (interval=%.2fs)... Press Ctrl+C to stop.", interval
    )
    out_paths = (config["dist_path"], config["temp_path"])

    def _watched() -> list[Path]:
        return [
            f
            for f in _collect_watched_files(config)
            if not any(f == o or f.is_relative_to(o) for o in out_paths)
        ]

    mtimes = _snapshot(_watched())
    rebuild_func()  # initial build

    try:
        while True:
            time.sleep(interval)

            current = _snapshot(_watched())
            logger.trace("[watch] Checking %d files for changes", len(current))

            changed = [
                f
                for f in set(mtimes) | set(current)
                if mtimes.get(f) != current.get(f)
            ]
            if changed:
                logger.info(
                    "\n🔁 Detected %d modified file(s). Rebuilding...", len(changed)
                )
                rebuild_func()
                # refresh timestamps after rebuild
                current = _snapshot(_watched())
            mtimes = current
    except KeyboardInterrupt:
        logger.info("\n🛑 Watch stopped.")


def get_metadata() -> Metadata:
    """Return (version, commit) for this tool.

    A source checkout reads pyproject.toml and git; an installed package
    reports its distribution version.
    """
    logger = get_app_logger()
    version = "unknown"
    commit = "unknown"

    root = Path(__file__).resolve().parents[2]
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        logger.trace("trying to read metadata from %s", pyproject)
        match = re.search(
            r'(?m)^\s*version\s*=\s*["\']([^"\']+)["\']',
            pyproject.read_text(encoding="utf-8"),
        )
        if match:
            version = match.group(1)
    else:
        with suppress(PackageNotFoundError):
            version = package_version(PROGRAM_PACKAGE)

    with suppress(OSError, subprocess.CalledProcessError):
        logger.trace("trying to get commit from git")
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
        commit = result.stdout.strip()

    logger.trace("got package version %s with commit %s", version, commit)
    return Metadata(version, commit)
