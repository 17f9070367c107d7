# src/wcforge/config/config_validate.py


import re
from typing import Any

from apathetic_schema import (
    ApatheticSchema_ValidationSummary as ValidationSummary,
)
from apathetic_schema import check_schema_conformance, collect_msg
from apathetic_utils import schema_from_typeddict
from wcforge.constants import DEFAULT_STRICT_CONFIG
from wcforge.logs import LOG_LEVELS, get_app_logger

from .config_types import RootConfig


# Field-specific type examples for better error messages.
# Wildcard patterns (with *) match several fields.
FIELD_EXAMPLES: dict[str, str] = {
    "root.component.name": '"my-element"',
    "root.src.entrypoint": '"my-element.mjs"',
    "root.src.template.markup": '"template.html"',
    "root.src.template.style": '"style.scss"',
    "root.build.script.global_namespace": '"window.MyElements"',
    "root.publish.archive_formats": '["tar", "zip"]',
    "root.publish.github_release.notes": '"First stable release."',
    "root.tools.*.priority": '["terser", "uglifyjs"]',
    "root.tools.*.tools.*.args": '["--compress", "{input}"]',
    "root.*.path": '"dist"',
    "root.watch_interval": "1.5",
    "root.log_level": '"debug"',
    "root.strict_config": "true",
}


def _validate_values(
    parsed_cfg: dict[str, Any],
    *,
    summary: ValidationSummary,  # modified
) -> None:
    """Checks a type annotation cannot express."""
    log_level = parsed_cfg.get("log_level")
    if isinstance(log_level, str) and log_level.lower() not in LOG_LEVELS:
        collect_msg(
            f"Invalid log_level `{log_level}`: expected one of"
            f" {', '.join(LOG_LEVELS)}.",
            strict=True,
            summary=summary,
            is_error=True,
        )

    watch_interval = parsed_cfg.get("watch_interval")
    if isinstance(watch_interval, (int, float)) and watch_interval <= 0:
        collect_msg(
            "watch_interval must be greater than 0.",
            strict=True,
            summary=summary,
            is_error=True,
        )

    publish = parsed_cfg.get("publish")
    if isinstance(publish, dict):
        pattern = publish.get("prerelease_branch_regex")
        if isinstance(pattern, str):
            try:
                re.compile(pattern)
            except re.error as e:
                collect_msg(
                    f"publish.prerelease_branch_regex is not a valid regex: {e}",
                    strict=True,
                    summary=summary,
                    is_error=True,
                )

    build = parsed_cfg.get("build")
    script = build.get("script") if isinstance(build, dict) else None
    namespace = script.get("global_namespace") if isinstance(script, dict) else None
    if isinstance(namespace, str) and not re.fullmatch(
        r"[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*", namespace
    ):
        collect_msg(
            f"build.script.global_namespace `{namespace}` is not a dotted"
            " JavaScript identifier.",
            strict=True,
            summary=summary,
            is_error=True,
        )


def validate_config(
    parsed_cfg: dict[str, Any],
    *,
    strict: bool | None = None,
) -> ValidationSummary:
    """Validate a normalized config.

    strict=True  →  unknown keys are fatal, but still listed separately
    strict=False →  unknown keys are reported as warnings

    When `strict` is None the config's own `strict_config` key decides,
    falling back to DEFAULT_STRICT_CONFIG.
    """
    logger = get_app_logger()
    logger.trace("[validate_config] Starting validation (strict=%s)", strict)

    strict_from_cfg: Any = parsed_cfg.get("strict_config")
    if strict is not None:
        strict_config = strict
    elif isinstance(strict_from_cfg, bool):
        strict_config = strict_from_cfg
    else:
        strict_config = DEFAULT_STRICT_CONFIG

    summary = ValidationSummary(
        valid=True,
        errors=[],
        strict_warnings=[],
        warnings=[],
        strict=strict_config,
    )

    ok = check_schema_conformance(
        parsed_cfg,
        schema_from_typeddict(RootConfig),
        "top-level configuration",
        strict_config=strict_config,
        summary=summary,
        base_path="root",
        field_examples=FIELD_EXAMPLES,
    )
    if not ok and not (summary.errors or summary.strict_warnings):
        collect_msg(
            "Top-level configuration invalid.",
            strict=True,
            summary=summary,
            is_error=True,
        )

    _validate_values(parsed_cfg, summary=summary)

    summary.valid = not summary.errors and not summary.strict_warnings
    return summary
