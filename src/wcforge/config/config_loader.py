# src/wcforge/config/config_loader.py


import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import Any, cast

from apathetic_schema import (
    ApatheticSchema_ValidationSummary as ValidationSummary,
)
from apathetic_utils import (
    cast_hint,
    load_jsonc,
    plural,
    remove_path_in_error_message,
)
from wcforge.logs import get_app_logger, level_number
from wcforge.meta import PROGRAM_CONFIG

from .config_types import RootConfig
from .config_validate import validate_config


CONFIG_PRIORITY = {".py": 0, ".jsonc": 1, ".json": 2}


def find_config(
    args: argparse.Namespace,
    cwd: Path,
    *,
    missing_level: str = "debug",
) -> Path | None:
    """Locate a configuration file.

    missing_level: log-level for failing to find a configuration file.

    Search order:
      1. Explicit path from CLI (--config)
      2. .{PROGRAM_CONFIG}.py, .{PROGRAM_CONFIG}.jsonc, .{PROGRAM_CONFIG}.json
         in the current working directory, then each parent

    Returns the first matching path, or None if no config was found.
    """
    logger = get_app_logger()

    missing_level_no = level_number(missing_level)
    if missing_level_no is None:
        logger.error("Invalid log level name in find_config(): %s", missing_level)
        missing_level_no = logging.ERROR

    # --- 1. Explicit config path ---
    if getattr(args, "config", None):
        config = Path(args.config).expanduser().resolve()
        logger.trace("[find_config] Checking explicit path: %s", config)
        if not config.exists():
            xmsg = f"Specified config file not found: {config}"
            raise FileNotFoundError(xmsg)
        if config.is_dir():
            xmsg = f"Specified config path is a directory, not a file: {config}"
            raise ValueError(xmsg)
        return config

    # --- 2. Default candidates (closest directory wins) ---
    for directory in (cwd, *cwd.parents):
        found = [
            directory / f".{PROGRAM_CONFIG}{suffix}"
            for suffix in CONFIG_PRIORITY
            if (directory / f".{PROGRAM_CONFIG}{suffix}").exists()
        ]
        if not found:
            continue
        if len(found) > 1:
            names = ", ".join(p.name for p in found)
            logger.warning(
                "Multiple config files detected (%s); using %s.",
                names,
                found[0].name,
            )
        return found[0]

    logger.log(missing_level_no, "No config file found in %s or parents", cwd)
    return None


def load_config(config_path: Path) -> dict[str, Any] | list[Any] | None:
    """Load configuration data from a file.

    Supports:
      - Python configs: .py files defining `config`
      - JSON/JSONC configs: .json, .jsonc files

    Returns the raw object defined in the config, or None for intentionally
    empty configs (e.g. empty files or `config = None`).
    """
    logger = get_app_logger()
    logger.trace("[load_config] Loading from %s (%s)", config_path, config_path.suffix)

    if config_path.suffix == ".py":
        config_globals: dict[str, Any] = {}

        # allow local imports in Python configs (configs are trusted user code)
        parent_dir = str(config_path.parent)
        added_to_sys_path = parent_dir not in sys.path
        if added_to_sys_path:
            sys.path.insert(0, parent_dir)

        try:
            source = config_path.read_text(encoding="utf-8")
            exec(compile(source, str(config_path), "exec"), config_globals)  # noqa: S102
        except Exception as e:
            tb = traceback.format_exc()
            xmsg = (
                f"Error while executing Python config: {config_path.name}\n"
                f"{type(e).__name__}: {e}\n{tb}"
            )
            raise RuntimeError(xmsg) from e
        finally:
            if added_to_sys_path and sys.path[0] == parent_dir:
                sys.path.pop(0)

        if "config" not in config_globals:
            xmsg = f"{config_path.name} did not define `config`"
            raise ValueError(xmsg)

        result = config_globals["config"]
        if not isinstance(result, (dict, type(None))):
            xmsg = (
                f"config in {config_path.name} must be a dict or None"
                f", not {type(result).__name__}"
            )
            raise TypeError(xmsg)
        return cast("dict[str, Any] | None", result)

    try:
        return load_jsonc(config_path)
    except ValueError as e:
        clean_msg = remove_path_in_error_message(str(e), config_path)
        xmsg = (
            f"Error while loading configuration file '{config_path.name}': {clean_msg}"
        )
        raise ValueError(xmsg) from e


def parse_config(
    raw_config: dict[str, Any] | list[Any] | None,
) -> dict[str, Any] | None:
    """Normalize user config into the RootConfig shape (no filesystem work).

    Accepted forms:
      - None / {}            → None (use defaults)
      - {...}                → the root config
      - {"wcforge": {...}}   → the nested object (package.json-style section)

    Unknown keys are preserved for the validation phase.
    """
    logger = get_app_logger()
    logger.trace("[parse_config] Parsing %s", type(raw_config).__name__)

    if not raw_config:
        return None

    if not isinstance(raw_config, dict):
        xmsg = (
            f"Invalid top-level value: {type(raw_config).__name__}"
            " (expected an object with named keys)"
        )
        raise TypeError(xmsg)

    nested = raw_config.get(PROGRAM_CONFIG)
    if len(raw_config) == 1 and isinstance(nested, dict):
        logger.trace("[parse_config] Unwrapping `%s` section", PROGRAM_CONFIG)
        return cast_hint(dict[str, Any], nested) or None

    return dict(raw_config)


def _validation_summary(
    summary: ValidationSummary,
    config_path: Path,
) -> None:
    """Pretty-print a validation summary."""
    logger = get_app_logger()
    mode = "strict mode" if summary.strict else "lenient mode"

    counts: list[str] = []
    if summary.errors:
        counts.append(f"{len(summary.errors)} error{plural(summary.errors)}")
    if summary.strict_warnings:
        counts.append(
            f"{len(summary.strict_warnings)} strict warning"
            f"{plural(summary.strict_warnings)}",
        )
    if summary.warnings:
        counts.append(
            f"{len(summary.warnings)} normal warning{plural(summary.warnings)}",
        )
    counts_msg = f"\nFound {', '.join(counts)}." if counts else ""

    if not summary.valid:
        logger.error(
            "Failed to validate configuration file %s (%s).%s",
            config_path.name,
            mode,
            counts_msg,
        )
    elif counts:
        logger.warning(
            "Validated configuration file %s (%s) with warnings.%s",
            config_path.name,
            mode,
            counts_msg,
        )
    else:
        logger.debug("Validated %s (%s) successfully.", config_path.name, mode)

    if summary.errors:
        logger.error("\nErrors:\n  • %s", "\n  • ".join(summary.errors))
    if summary.strict_warnings:
        logger.error(
            "\nStrict warnings (treated as errors):\n  • %s",
            "\n  • ".join(summary.strict_warnings),
        )
    if summary.warnings:
        logger.warning(
            "\nWarnings (non-fatal):\n  • %s", "\n  • ".join(summary.warnings)
        )


def load_and_validate_config(
    args: argparse.Namespace,
    cwd: Path | None = None,
) -> tuple[Path, RootConfig, ValidationSummary] | None:
    """Find, load, parse, and validate the user's configuration.

    Also applies the config's log_level early, so logging settles as soon
    as possible.

    Returns (config_path, root_cfg, validation_summary), or None if no
    config file was found or it was empty.
    """
    logger = get_app_logger()
    cwd = (cwd or Path.cwd()).resolve()

    config_path = find_config(args, cwd)
    if config_path is None:
        return None

    raw_config = load_config(config_path)

    try:
        parsed_cfg = parse_config(raw_config)
    except TypeError as e:
        xmsg = f"Could not parse config {config_path.name}: {e}"
        raise TypeError(xmsg) from e
    if parsed_cfg is None:
        return None

    raw_log_level = parsed_cfg.get("log_level")
    if isinstance(raw_log_level, str) and raw_log_level:
        logger.setLevel(
            logger.determine_log_level(args=args, root_log_level=raw_log_level)
        )

    validation_result = validate_config(parsed_cfg)
    _validation_summary(validation_result, config_path)
    if not validation_result.valid:
        xmsg = f"Configuration file {config_path.name} contains validation errors."
        exception = ValueError(xmsg)
        exception.silent = True  # type: ignore[attr-defined]
        exception.data = validation_result  # type: ignore[attr-defined]
        raise exception

    root_cfg: RootConfig = cast_hint(RootConfig, parsed_cfg)
    return config_path, root_cfg, validation_result
