# src/wcforge/config/config_resolve.py


import argparse
import os
from pathlib import Path
from typing import Any, cast

from apathetic_utils import cast_hint
from wcforge.constants import (
    DEFAULT_ARCHIVE_DIR,
    DEFAULT_CATEGORIES,
    DEFAULT_CATEGORY_ORDER,
    DEFAULT_CHECK_FILES,
    DEFAULT_DIST_DIR,
    DEFAULT_DRY_RUN,
    DEFAULT_ENV_WATCH_INTERVAL,
    DEFAULT_ENVIRONMENT,
    DEFAULT_FORCE,
    DEFAULT_GIT_REMOTE,
    DEFAULT_GITHUB_RELEASE,
    DEFAULT_GLOBAL_NAMESPACE,
    DEFAULT_MASTER_BRANCH,
    DEFAULT_MERGE_MAJOR_BRANCH,
    DEFAULT_MODULE_EXTENSION,
    DEFAULT_PRERELEASE_BRANCH_REGEX,
    DEFAULT_PUSH,
    DEFAULT_SCRIPT_EXTENSION,
    DEFAULT_SRC_DIR,
    DEFAULT_STRICT_CONFIG,
    DEFAULT_TEMP_DIR,
    DEFAULT_WATCH_INTERVAL,
)
from wcforge.errors import ConfigError
from wcforge.logs import get_app_logger
from wcforge.meta import PROGRAM_ENV
from wcforge.utils import load_json_object

from .config_types import (
    ArchiveFormat,
    BuildConfigResolved,
    ComponentConfigResolved,
    Environment,
    PublishConfigResolved,
    RootConfig,
    RootConfigResolved,
    SrcConfigResolved,
    ToolCategoryConfig,
    ToolCategoryConfigResolved,
    ToolConfig,
    ToolConfigResolved,
)


PACKAGE_JSON = "package.json"


# --- package.json ---------------------------------------------------------------


def load_package_json(project_root: Path) -> dict[str, Any]:
    """Return the parsed package.json of the project, or {} if there is none."""
    path = project_root / PACKAGE_JSON
    if not path.exists():
        get_app_logger().debug("No %s in %s", PACKAGE_JSON, project_root)
        return {}
    return load_json_object(path)


def split_package_name(package_name: str) -> tuple[str, str | None]:
    """'@scope/my-element' → ('my-element', '@scope')."""
    if package_name.startswith("@") and "/" in package_name:
        scope, name = package_name.split("/", 1)
        return name, scope
    return package_name, None


def _resolve_component(
    root_cfg: RootConfig, package: dict[str, Any]
) -> ComponentConfigResolved:
    component = root_cfg.get("component", {})
    pkg_name, pkg_scope = split_package_name(str(package.get("name", "")))

    return {
        "name": component.get("name") or pkg_name,
        "scope": component.get("scope") or pkg_scope,
    }


# --- tools ------------------------------------------------------------------------


def _resolve_tool_config(
    tool_label: str, tool_config: ToolConfig | dict[str, Any]
) -> ToolConfigResolved:
    tool_dict = cast("dict[str, Any]", tool_config)
    return {
        "command": tool_dict.get("command", tool_label),
        "args": list(tool_dict.get("args", [])),
        "path": tool_dict.get("path"),
        "options": list(tool_dict.get("options", [])),
    }


def resolve_tools(
    user_tools: dict[str, ToolCategoryConfig] | None,
) -> dict[str, ToolCategoryConfigResolved]:
    """Merge user tool categories over the defaults.

    `enabled` and `priority` replace the default; tool entries are merged
    key by key, so overriding only `path` keeps the default args.
    Categories unknown to wcforge are kept (and ignored) with a warning.
    """
    logger = get_app_logger()
    user_tools = user_tools or {}

    unknown = sorted(set(user_tools) - set(DEFAULT_CATEGORIES))
    if unknown:
        logger.warning(
            "Unknown tool categories: %s. Valid categories are: %s",
            ", ".join(unknown),
            ", ".join(sorted(DEFAULT_CATEGORIES)),
        )

    resolved: dict[str, ToolCategoryConfigResolved] = {}
    for cat_name in [*DEFAULT_CATEGORY_ORDER, *unknown]:
        default_cat = DEFAULT_CATEGORIES.get(cat_name, {})
        user_cat = user_tools.get(cat_name, {})

        enabled = user_cat.get("enabled", default_cat.get("enabled", True))
        priority = list(user_cat.get("priority", default_cat.get("priority", [])))

        tools: dict[str, ToolConfigResolved] = {}
        default_tools: dict[str, Any] = default_cat.get("tools", {})
        user_cat_tools: dict[str, Any] = dict(user_cat.get("tools", {}))
        for label in {**default_tools, **user_cat_tools}:
            merged = {**default_tools.get(label, {}), **user_cat_tools.get(label, {})}
            tools[label] = _resolve_tool_config(label, merged)

        # a tool named only in priority runs with its label as the command
        for label in priority:
            tools.setdefault(label, _resolve_tool_config(label, {}))

        resolved[cat_name] = {
            # empty priority = disabled
            "enabled": bool(enabled) and bool(priority),
            "priority": priority,
            "tools": tools,
        }
    return resolved


# --- sections -------------------------------------------------------------------


def _resolve_src(root_cfg: RootConfig, project_root: Path) -> SrcConfigResolved:
    src = root_cfg.get("src", {})
    template = src.get("template", {})
    return {
        "path": (project_root / src.get("path", DEFAULT_SRC_DIR)).resolve(),
        "entrypoint": src.get("entrypoint", ""),
        "template": {
            "markup": template.get("markup"),
            "style": template.get("style"),
        },
    }


def _resolve_build(root_cfg: RootConfig) -> BuildConfigResolved:
    build = root_cfg.get("build", {})
    module = build.get("module", {})
    script = build.get("script", {})
    return {
        "module": {
            "create": module.get("create", True),
            "extension": module.get("extension", DEFAULT_MODULE_EXTENSION),
        },
        "script": {
            "create": script.get("create", True),
            "extension": script.get("extension", DEFAULT_SCRIPT_EXTENSION),
            "bundle_imports": script.get("bundle_imports", False),
            "global_namespace": script.get(
                "global_namespace", DEFAULT_GLOBAL_NAMESPACE
            ),
            "import_prefix": script.get("import_prefix"),
        },
        "symlinks": build.get("symlinks", False),
    }


def _resolve_publish(
    root_cfg: RootConfig,
    args: argparse.Namespace,
    project_root: Path,
) -> PublishConfigResolved:
    publish = root_cfg.get("publish", {})

    dry_run = publish.get("dry_run", DEFAULT_DRY_RUN)
    if getattr(args, "dry_run", None):
        dry_run = True
    force = publish.get("force", DEFAULT_FORCE)
    if getattr(args, "force", None):
        force = True
    push = publish.get("push", DEFAULT_PUSH)
    if getattr(args, "push", None):
        push = True

    release_cfg = publish.get("github_release", {})
    release_enabled = release_cfg.get("enabled", DEFAULT_GITHUB_RELEASE)
    if getattr(args, "github_release", None):
        release_enabled = True

    archive_formats: list[ArchiveFormat] = list(
        publish.get("archive_formats", ["tar", "zip"])
    )

    return {
        "dry_run": dry_run,
        "force": force,
        "master_branch": publish.get("master_branch", DEFAULT_MASTER_BRANCH),
        "prerelease_branch_regex": publish.get(
            "prerelease_branch_regex", DEFAULT_PRERELEASE_BRANCH_REGEX
        ),
        "run_git_checks": publish.get("run_git_checks", True),
        "run_file_checks": publish.get("run_file_checks", True),
        "check_files": {
            **DEFAULT_CHECK_FILES,
            **cast("dict[str, bool]", publish.get("check_files", {})),
        },
        "archive_formats": archive_formats,
        "archive_path": (
            project_root / publish.get("archive_path", DEFAULT_ARCHIVE_DIR)
        ).resolve(),
        "npm_tag": getattr(args, "npm_tag", None) or publish.get("npm_tag"),
        "merge_major_branch": publish.get(
            "merge_major_branch", DEFAULT_MERGE_MAJOR_BRANCH
        ),
        "push": push,
        "remote": publish.get("remote", DEFAULT_GIT_REMOTE),
        "github_release": {
            "enabled": release_enabled,
            "name": release_cfg.get("name"),
            "notes": release_cfg.get("notes", ""),
            "draft": release_cfg.get("draft", False),
        },
    }


def _resolve_watch_interval(root_cfg: RootConfig, args: argparse.Namespace) -> float:
    logger = get_app_logger()
    env_name = f"{PROGRAM_ENV}_{DEFAULT_ENV_WATCH_INTERVAL}"
    env_watch = os.getenv(env_name)

    if getattr(args, "watch", None) is not None:
        return float(args.watch)
    if env_watch is not None:
        try:
            return float(env_watch)
        except ValueError:
            logger.warning("Invalid %s=%r, using default.", env_name, env_watch)
            return DEFAULT_WATCH_INTERVAL
    return float(root_cfg.get("watch_interval", DEFAULT_WATCH_INTERVAL))


def _resolve_environment(args: argparse.Namespace) -> Environment:
    if getattr(args, "production", None):
        return "production"
    node_env = os.getenv("NODE_ENV", DEFAULT_ENVIRONMENT)
    return "production" if node_env == "production" else "development"


# --- entry ----------------------------------------------------------------------


def resolve_config(
    root_input: RootConfig,
    args: argparse.Namespace,
    config_dir: Path,
    cwd: Path,
    *,
    config_path: Path | None = None,
) -> RootConfigResolved:
    """Fully resolve a loaded RootConfig into a ready-to-run RootConfigResolved.

    Relative paths are anchored at the config's directory (the project root).
    Also syncs the app logger to the resolved log level.
    """
    logger = get_app_logger()
    root_cfg = cast_hint(RootConfig, dict(root_input))
    project_root = config_dir.resolve()

    package = load_package_json(project_root)

    watch_interval = _resolve_watch_interval(root_cfg, args)
    logger.trace("[resolve_config] Watch interval resolved to %ss", watch_interval)

    log_level = logger.determine_log_level(
        args=args, root_log_level=root_cfg.get("log_level")
    )
    logger.setLevel(log_level)

    dist_path = (
        project_root / root_cfg.get("dist", {}).get("path", DEFAULT_DIST_DIR)
    ).resolve()
    temp_path = (
        project_root / root_cfg.get("temp", {}).get("path", DEFAULT_TEMP_DIR)
    ).resolve()
    if dist_path == project_root:
        xmsg = "dist.path must not be the project root (it is cleaned on build)."
        raise ConfigError(xmsg)

    resolved: RootConfigResolved = {
        "project_root": project_root,
        "component": _resolve_component(root_cfg, package),
        "src": _resolve_src(root_cfg, project_root),
        "dist_path": dist_path,
        "temp_path": temp_path,
        "build": _resolve_build(root_cfg),
        "publish": _resolve_publish(root_cfg, args, project_root),
        "tools": resolve_tools(root_cfg.get("tools")),
        "package": package,
        "environment": _resolve_environment(args),
        "log_level": log_level,
        "strict_config": root_cfg.get("strict_config", DEFAULT_STRICT_CONFIG),
        "watch_interval": watch_interval,
        "__meta__": {
            "cli_root": cwd.resolve(),
            "config_root": project_root,
            "config_path": config_path,
        },
    }
    logger.trace(
        "[resolve_config] component=%s src=%s dist=%s",
        resolved["component"]["name"],
        resolved["src"]["path"],
        dist_path,
    )
    return resolved
