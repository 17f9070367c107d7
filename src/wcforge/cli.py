# src/wcforge/cli.py

import argparse
import asyncio
import logging
import platform
import sys
from dataclasses import dataclass
from difflib import get_close_matches
from pathlib import Path

from apathetic_logging import safeLog
from apathetic_utils import cast_hint, get_sys_version_info

from .actions import get_metadata, watch_for_changes
from .build import build_dir, run_build
from .config import (
    RootConfig,
    RootConfigResolved,
    load_and_validate_config,
    resolve_config,
)
from .constants import DEFAULT_WATCH_INTERVAL
from .errors import ExternalError
from .lint import run_lint
from .logs import LOG_LEVELS, get_app_logger
from .meta import PROGRAM_DISPLAY, PROGRAM_SCRIPT
from .publish import make_release_info, run_publish
from .tasks import clean


COMMANDS = ("build", "lint", "publish", "publish-dry", "clean")


# --------------------------------------------------------------------------- #
# CLI setup and helpers
# --------------------------------------------------------------------------- #


class HintingArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        known_opts: list[str] = []
        for action in self._actions:
            known_opts.extend([s for s in action.option_strings if s])

        hint_lines: list[str] = []
        # "unrecognized arguments: --dry-rn ..."
        if "unrecognized arguments:" in message:
            bad = message.split("unrecognized arguments:", 1)[1].strip()
            for arg in (tok for tok in bad.split() if tok.startswith("-")):
                close = get_close_matches(arg, known_opts, n=1, cutoff=0.6)
                if close:
                    hint_lines.append(f"Hint: did you mean {close[0]}?")
        # "argument command: invalid choice: 'biuld' (choose from ...)"
        elif "invalid choice:" in message:
            bad = message.split("invalid choice:", 1)[1].split("(", 1)[0]
            close = get_close_matches(bad.strip(" '\""), COMMANDS, n=1, cutoff=0.6)
            if close:
                hint_lines.append(f"Hint: did you mean {close[0]}?")

        self.print_usage(sys.stderr)
        full = f"{self.prog}: error: {message}"
        if hint_lines:
            full += "\n" + "\n".join(hint_lines)
        self.exit(2, full + "\n")


def _setup_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = HintingArgumentParser(
        prog=PROGRAM_SCRIPT,
        description="Build, lint and publish web components.",
    )

    parser.add_argument(
        "command",
        nargs="?",
        choices=COMMANDS,
        help="What to run.",
    )
    parser.add_argument("-c", "--config", help="Path to the wcforge config file.")
    parser.add_argument(
        "-p",
        "--production",
        action="store_true",
        default=None,
        help="Build for production (overrides NODE_ENV).",
    )

    parser.add_argument(
        "--watch",
        nargs="?",
        type=float,
        metavar="SECONDS",
        const=-1.0,
        default=None,
        help=(
            "Rebuild automatically on changes (build only). "
            "Optionally specify interval in seconds"
            f" (default config or: {DEFAULT_WATCH_INTERVAL})."
        ),
    )

    # --- Publish ---
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Run the publish checks without changing anything.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        default=None,
        help="Continue publishing when git or file checks fail.",
    )
    parser.add_argument(
        "--release-version",
        metavar="VERSION",
        help="Version to publish (semver, e.g. 1.2.0 or 2.0.0-beta.1).",
    )
    parser.add_argument(
        "--npm-tag",
        metavar="TAG",
        help="npm dist-tag (default: latest, or next for prereleases).",
    )
    parser.add_argument(
        "--push",
        action="store_true",
        default=None,
        help="Push the release commit, branches and tags after publishing.",
    )
    parser.add_argument(
        "--github-release",
        action="store_true",
        default=None,
        help="Create a GitHub release with the archives (requires --push and gh).",
    )

    # --- Color ---
    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Disable ANSI color output.",
    )
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Force-enable ANSI color output (overrides auto-detect).",
    )
    color.set_defaults(use_color=None)

    # --- Version and verbosity ---
    parser.add_argument("--version", action="store_true", help="Show version info.")

    log_level = parser.add_mutually_exclusive_group()
    log_level.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const="warning",
        dest="log_level",
        help="Suppress non-critical output (same as --log-level warning).",
    )
    log_level.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const="debug",
        dest="log_level",
        help="Verbose output (same as --log-level debug).",
    )
    log_level.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        dest="log_level",
        help="Set log verbosity level.",
    )
    return parser


def _normalize_args(
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
) -> None:
    """Apply command-implied flags and reject flags that do not apply."""
    # bare --watch: interval comes from env/config/default
    watch_flag = args.watch is not None
    if args.watch is not None and args.watch < 0:
        args.watch = None
    args.watch_enabled = watch_flag

    if watch_flag and args.command != "build":
        parser.error("--watch can only be used with the build command")
    if args.watch is not None and args.watch <= 0:
        parser.error("--watch interval must be greater than 0")

    if args.command == "publish-dry":
        args.dry_run = True
        args.force = True


# --------------------------------------------------------------------------- #
# Main entry helpers
# --------------------------------------------------------------------------- #


@dataclass
class _LoadedConfig:
    """Container for loaded and resolved configuration data."""

    config_path: Path | None
    root_cfg: RootConfig
    resolved: RootConfigResolved
    config_dir: Path
    cwd: Path


def _initialize_logger(args: argparse.Namespace) -> None:
    """Initialize logger with CLI args, env vars, and defaults."""
    logger = get_app_logger()
    log_level = logger.determine_log_level(args=args)
    logger.setLevel(log_level)
    if args.use_color is not None:
        logger.enable_color = args.use_color
    logger.trace("[BOOT] log-level initialized: %s", logger.levelName)

    logger.debug(
        "Runtime: Python %s (%s)\n    %s",
        platform.python_version(),
        platform.python_implementation(),
        sys.version.replace("\n", " "),
    )


def _handle_early_exits(args: argparse.Namespace) -> int | None:
    """Return an exit code if nothing else should run, None otherwise."""
    logger = get_app_logger()

    if getattr(args, "version", None):
        meta = get_metadata()
        logger.info("%s %s (%s)", PROGRAM_DISPLAY, meta.version, meta.commit)
        return 0

    if get_sys_version_info() < (3, 10):
        logger.error("%s requires Python 3.10 or newer.", PROGRAM_DISPLAY)
        return 1

    return None


def _load_and_resolve_config(args: argparse.Namespace) -> _LoadedConfig:
    """Load config and resolve final configuration."""
    logger = get_app_logger()

    config_path: Path | None = None
    root_cfg: RootConfig | None = None
    config_result = load_and_validate_config(args)
    if config_result is not None:
        config_path, root_cfg, _validation_summary = config_result

    logger.trace("[CONFIG] log-level re-resolved from config: %s", logger.levelName)

    cwd = Path.cwd().resolve()
    config_dir = config_path.parent if config_path else cwd

    if root_cfg is None:
        logger.info("No config file found; using defaults and package.json.")
        root_cfg = cast_hint(RootConfig, {})

    resolved = resolve_config(
        root_cfg, args, config_dir, cwd, config_path=config_path
    )

    return _LoadedConfig(
        config_path=config_path,
        root_cfg=root_cfg,
        resolved=resolved,
        config_dir=config_dir,
        cwd=cwd,
    )


def _execute_build(resolved: RootConfigResolved, args: argparse.Namespace) -> None:
    """Execute build either in watch mode or one-time mode."""
    logger = get_app_logger()

    if not args.watch_enabled:
        asyncio.run(run_build(resolved))
        return

    def _rebuild() -> None:
        # a failed build must not end the watch
        try:
            asyncio.run(run_build(resolved))
        except (ExternalError, ValueError, RuntimeError, OSError) as e:
            logger.report(logging.ERROR, "Build failed: %s", e)

    watch_for_changes(_rebuild, resolved, interval=resolved["watch_interval"])


async def _clean(resolved: RootConfigResolved) -> None:
    await clean(resolved["dist_path"], "dist", "clean")
    await clean(build_dir(resolved), "temp", "clean")


def _execute_command(
    command: str,
    resolved: RootConfigResolved,
    args: argparse.Namespace,
) -> int:
    logger = get_app_logger()

    if command == "build":
        _execute_build(resolved, args)
    elif command == "clean":
        asyncio.run(_clean(resolved))
    elif command == "lint":
        if asyncio.run(run_lint(resolved)):
            return 1
    else:
        release = make_release_info(
            args.release_version, resolved["publish"]["npm_tag"]
        )
        asyncio.run(run_publish(resolved, release))
        if resolved["publish"]["dry_run"]:
            logger.info("Dry run complete: nothing was published.")
    return 0


# --------------------------------------------------------------------------- #
# Main entry
# --------------------------------------------------------------------------- #


def main(argv: list[str] | None = None) -> int:
    logger = get_app_logger()  # init (use env + defaults)

    try:
        parser = _setup_parser()
        args = parser.parse_args(argv)

        # --- Early runtime init (use CLI + env + defaults) ---
        _initialize_logger(args)

        early_exit_code = _handle_early_exits(args)
        if early_exit_code is not None:
            return early_exit_code

        if args.command is None:
            parser.error("a command is required: " + ", ".join(COMMANDS))
        _normalize_args(args, parser)

        config = _load_and_resolve_config(args)

        if config.config_path:
            logger.info("🔧 Using config: %s", config.config_path.name)
        logger.debug("📁 Project root: %s", config.config_dir)
        logger.debug("📂 Invoked from: %s", config.cwd)

        return _execute_command(args.command, config.resolved, args)

    except (FileNotFoundError, ValueError, TypeError, RuntimeError) as e:
        # controlled termination
        silent = getattr(e, "silent", False)
        if not silent:
            try:
                logger.report(logging.ERROR, str(e))
            except Exception:  # noqa: BLE001
                safeLog(f"[FATAL] Logging failed while reporting: {e}")
        return getattr(e, "code", 1)

    except Exception as e:  # noqa: BLE001
        # unexpected internal error
        try:
            logger.report(logging.CRITICAL, "Unexpected internal error: %s", e)
        except Exception:  # noqa: BLE001
            safeLog(f"[FATAL] Logging failed while reporting: {e}")

        return getattr(e, "code", 1)


def main_entry() -> None:
    sys.exit(main())
