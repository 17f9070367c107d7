# src/wcforge/publish.py
"""Release a built component: git and file checks, version bump, merge into
the major branch, tag, npm publish and release archives, then optionally
git push and a GitHub release.

Every mutating step is skipped on a dry run. Whatever happens, the branch
that was checked out when publishing started is checked out again at the
end.
"""

import re
import shutil
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .build import module_filename, script_filename
from .commands import run_command
from .config.config_types import RootConfigResolved
from .constants import (
    ARCHIVE_FORMATS,
    DEFAULT_NPM_TAG,
    DEFAULT_PRERELEASE_NPM_TAG,
    SEMVER_PATTERN,
)
from .errors import CommandError, ConfigError, ExternalError
from .logs import CYAN, YELLOW, get_app_logger
from .settle import settle_all
from .tasks import log_task_info, run_task
from .tools import find_tool_executable
from .utils import copy_file, load_json_object, write_json


DRY_RUN_LABEL = " (dry run)"

# archive format label → shutil.make_archive format
_SHUTIL_FORMATS = {"tar": "gztar", "zip": "zip"}


@dataclass(frozen=True)
class ReleaseInfo:
    version: str
    prerelease: bool
    npm_tag: str

    @property
    def tag(self) -> str:
        return f"v{self.version}"

    @property
    def major_branch(self) -> str | None:
        """`<major>.x` for stable releases from 1.0.0 on, else None."""
        major = self.version.split(".", 1)[0]
        if self.prerelease or major == "0":
            return None
        return f"{major}.x"


def make_release_info(version: str | None, npm_tag: str | None = None) -> ReleaseInfo:
    """Validate a release version and pick its npm dist-tag."""
    if not version:
        xmsg = "Cannot publish: no release version given (use --release-version)."
        raise ConfigError(xmsg)
    version = version.removeprefix("v")
    match = re.match(SEMVER_PATTERN, version)
    if match is None:
        xmsg = f"Invalid release version `{version}`: expected semver (X.Y.Z[-pre])."
        raise ConfigError(xmsg)
    prerelease = match.group(4) is not None
    if not npm_tag:
        npm_tag = DEFAULT_PRERELEASE_NPM_TAG if prerelease else DEFAULT_NPM_TAG
    return ReleaseInfo(version=version, prerelease=prerelease, npm_tag=npm_tag)


# --- git checks -------------------------------------------------------------------


async def current_branch(cwd: Path) -> str:
    return await run_command(["git", "rev-parse", "--abbrev-ref", "HEAD"], cwd=cwd)


async def _check_clean(_prefix: str, cwd: Path) -> None:
    status = await run_command(["git", "status", "--porcelain"], cwd=cwd)
    if status.strip():
        xmsg = "Cannot publish - working directory is not clean."
        raise ExternalError(xmsg)


def check_branch(
    branch: str, config: RootConfigResolved, *, prerelease: bool
) -> None:
    publish = config["publish"]
    if prerelease:
        pattern = publish["prerelease_branch_regex"]
        if re.search(pattern, branch) is None:
            xmsg = (
                "Cannot publish - not on valid prerelease branch."
                f" Branch name must match this regex: {pattern}"
            )
            raise ExternalError(xmsg)
    elif branch != publish["master_branch"]:
        xmsg = f'Cannot publish - not on "{publish["master_branch"]}" branch.'
        raise ExternalError(xmsg)


async def _check_synced(_prefix: str, cwd: Path) -> None:
    await run_command(["git", "fetch", "--quiet"], cwd=cwd)
    head, upstream = await settle_all(
        [
            run_command(["git", "rev-parse", "HEAD"], cwd=cwd),
            run_command(["git", "rev-parse", "@{u}"], cwd=cwd),
        ]
    )
    if head != upstream:
        xmsg = "Cannot publish - remote history differs. Please pull/push changes."
        raise ExternalError(xmsg)


async def _git_checks(
    prefix: str,
    config: RootConfigResolved,
    branch: str,
    release: ReleaseInfo,
) -> None:
    cwd = config["project_root"]

    async def _branch(_prefix: str) -> None:
        check_branch(branch, config, prerelease=release.prerelease)

    await settle_all(
        [
            run_task("working directory clean", prefix, _check_clean, cwd),
            run_task("branch", prefix, _branch),
            run_task("in sync with upstream", prefix, _check_synced, cwd),
        ]
    )


# --- file checks ------------------------------------------------------------------


def required_dist_files(config: RootConfigResolved) -> dict[str, str]:
    """check name → file that must be present in dist."""
    return {
        "package": "package.json",
        "module": module_filename(config),
        "script": script_filename(config),
        "license": "LICENSE",
        "readme": "README.md",
    }


async def _file_checks(prefix: str, config: RootConfigResolved) -> None:
    dist = config["dist_path"]
    if not dist.is_dir() or not any(dist.iterdir()):
        xmsg = f"Cannot publish - {dist.name} is empty. Run the build first."
        raise ExternalError(xmsg)

    def _check(name: str, filename: str) -> Awaitable[None]:
        async def _exists(_prefix: str) -> None:
            if not (dist / filename).is_file():
                xmsg = f"Cannot publish - {filename} is missing from {dist.name}."
                raise ExternalError(xmsg)

        return run_task(name, prefix, _exists)

    checks = config["publish"]["check_files"]
    pending: list[Awaitable[None]] = []
    for name, filename in required_dist_files(config).items():
        if not checks.get(name, True):
            log_task_info(f"skipping {name}", prefix)
            continue
        pending.append(_check(name, filename))
    await settle_all(pending)


async def _run_check_group(
    label: str,
    prefix: str,
    config: RootConfigResolved,
    func: Callable[..., Awaitable[None]],
    *args: object,
) -> None:
    """Run a check group; with `force` a failure is only a warning."""
    try:
        await run_task(label, prefix, func, config, *args)
    except Exception as e:
        if not config["publish"]["force"]:
            raise
        get_app_logger().warning("Continuing despite error (force):\n  %s", e)


# --- mutating steps ---------------------------------------------------------------


def set_package_version(path: Path, version: str) -> bool:
    """Set `version` in a package.json; returns False if the file is missing."""
    if not path.is_file():
        return False
    package = load_json_object(path)
    write_json(path, {**package, "version": version})
    return True


async def _update_version(
    _prefix: str, config: RootConfigResolved, release: ReleaseInfo
) -> None:
    cwd = config["project_root"]
    for path in (cwd / "package.json", config["dist_path"] / "package.json"):
        set_package_version(path, release.version)

    status = await run_command(["git", "status", "--porcelain"], cwd=cwd)
    if status.strip():
        await run_command(["git", "add", "."], cwd=cwd)
        await run_command(["git", "commit", "-m", release.version], cwd=cwd)


async def _merge_major_branch(
    _prefix: str, config: RootConfigResolved, major_branch: str, from_branch: str
) -> None:
    cwd = config["project_root"]
    exists = await run_command(
        ["git", "rev-parse", "--verify", "--quiet", f"refs/heads/{major_branch}"],
        cwd=cwd,
        check=False,
    )
    if exists.strip():
        await run_command(["git", "checkout", major_branch], cwd=cwd)
    else:
        await run_command(["git", "checkout", "-b", major_branch], cwd=cwd)
    await run_command(["git", "merge", "--no-edit", from_branch], cwd=cwd)


async def _create_tag(
    _prefix: str, config: RootConfigResolved, release: ReleaseInfo
) -> None:
    await run_command(["git", "tag", release.tag], cwd=config["project_root"])


async def _npm_publish(
    _prefix: str, config: RootConfigResolved, release: ReleaseInfo
) -> None:
    await run_command(
        ["npm", "publish", str(config["dist_path"]), "--tag", release.npm_tag],
        cwd=config["project_root"],
    )


def create_archive(
    directory: Path, base_name: Path, archive_format: str
) -> Path:
    """Archive the contents of `directory` (not the directory itself)."""
    target = base_name.with_name(base_name.name + ARCHIVE_FORMATS[archive_format])
    if target.exists():
        target.unlink()
    made = shutil.make_archive(
        str(base_name),
        _SHUTIL_FORMATS[archive_format],
        root_dir=directory,
    )
    return Path(made)


async def _create_archives(
    prefix: str, config: RootConfigResolved, release: ReleaseInfo
) -> list[Path]:
    publish = config["publish"]
    out_dir = publish["archive_path"]
    out_dir.mkdir(parents=True, exist_ok=True)
    base_name = out_dir / f"{config['component']['name']}-{release.tag}"

    # archive a snapshot so the archives never contain each other
    staging = config["temp_path"] / "archive"
    if staging.exists():
        shutil.rmtree(staging)
    for file in config["dist_path"].rglob("*"):
        if file.is_file():
            copy_file(file, staging / file.relative_to(config["dist_path"]))

    archives: list[Path] = []
    for fmt in publish["archive_formats"]:
        archives.append(create_archive(staging, base_name, fmt))
        log_task_info(f"created {archives[-1].name}", prefix)
    return archives


async def _release_info(
    _prefix: str, config: RootConfigResolved, release: ReleaseInfo
) -> None:
    logger = get_app_logger()
    cwd = config["project_root"]
    dry_run = config["publish"]["dry_run"]

    if dry_run:
        version_commit = "(not created)"
        last_commit = await run_command(["git", "log", "-1", "--oneline"], cwd=cwd)
    else:
        # newest first: the version commit, then the commit it was made on
        history = await run_command(["git", "log", "-2", "--oneline"], cwd=cwd)
        log = history.splitlines()
        version_commit = log[0] if log else ""
        last_commit = log[-1] if log else ""

    try:
        publisher = await run_command(["npm", "whoami", "--silent"], cwd=cwd)
    except CommandError as e:
        logger.warning("Could not determine the npm user: %s", e)
        publisher = "(unknown)"

    if dry_run:
        logger.info("  %s", logger.colorize("=== Dry Run ===", CYAN))
    rows = [
        ("Version", release.version),
        ("Version commit", version_commit),
        ("Last commit", last_commit),
        ("NPM tag", release.npm_tag),
        ("Publisher", publisher),
    ]
    for name, value in rows:
        logger.info("  %s %s", logger.colorize(f"{name}:".ljust(16), YELLOW), value)


async def _git_push(
    _prefix: str, config: RootConfigResolved, branches: list[str]
) -> None:
    cwd = config["project_root"]
    remote = config["publish"]["remote"]
    await run_command(["git", "push", remote, *branches], cwd=cwd)
    await run_command(["git", "push", remote, "--tags"], cwd=cwd)


async def _github_release(
    _prefix: str,
    config: RootConfigResolved,
    release: ReleaseInfo,
    archives: list[Path],
) -> None:
    settings = config["publish"]["github_release"]
    gh = find_tool_executable("gh", project_root=config["project_root"])
    if gh is None:
        xmsg = (
            "Cannot create the GitHub release: the GitHub CLI (`gh`) was not found."
        )
        raise ConfigError(xmsg)

    args = [
        gh,
        "release",
        "create",
        release.tag,
        *(str(archive) for archive in archives),
        "--title",
        settings["name"] or release.tag,
        "--notes",
        settings["notes"],
    ]
    if release.prerelease:
        args.append("--prerelease")
    if settings["draft"]:
        args.append("--draft")
    await run_command(args, cwd=config["project_root"])


async def _restore_branch(_prefix: str, cwd: Path, branch: str) -> None:
    if await current_branch(cwd) != branch:
        await run_command(["git", "checkout", branch], cwd=cwd)


# --- entry ------------------------------------------------------------------------


async def run_publish(
    config: RootConfigResolved,
    release: ReleaseInfo,
    prefix: str = "publish",
) -> None:
    """Publish the built component as `release`."""
    logger = get_app_logger()
    publish = config["publish"]
    cwd = config["project_root"]
    dry_run = publish["dry_run"]

    if not config["component"]["name"]:
        xmsg = "Cannot publish: `component.name` is not set."
        raise ConfigError(xmsg)

    branch = await current_branch(cwd)
    logger.debug(
        "Publishing %s %s from %s (npm tag %s)%s",
        config["component"]["name"],
        release.version,
        branch,
        release.npm_tag,
        DRY_RUN_LABEL if dry_run else "",
    )

    async def _step(
        label: str, func: Callable[..., Awaitable[Any]], *args: Any
    ) -> Any:
        if dry_run:
            log_task_info(f"skipping {label}{DRY_RUN_LABEL}", prefix)
            return None
        return await run_task(label, prefix, func, *args)

    major_branch = release.major_branch if publish["merge_major_branch"] else None
    archives: list[Path] = []
    try:
        if publish["run_git_checks"]:
            await _run_check_group(
                "git checks", prefix, config, _git_checks, branch, release
            )
        else:
            log_task_info("skipping git checks", prefix)

        if publish["run_file_checks"]:
            await _run_check_group("file checks", prefix, config, _file_checks)
        else:
            log_task_info("skipping file checks", prefix)

        await _step("update version", _update_version, config, release)
        if major_branch is None:
            log_task_info("skipping merge into major branch", prefix)
        else:
            await _step(
                "merge into major branch",
                _merge_major_branch,
                config,
                major_branch,
                branch,
            )
        await _step("create tag", _create_tag, config, release)
        await _step("publish to npm", _npm_publish, config, release)
        await run_task("release info", prefix, _release_info, config, release)
        made = await _step("create archives", _create_archives, config, release)
        archives = made or []
    finally:
        await run_task("restore branch", prefix, _restore_branch, cwd, branch)

    if not publish["push"]:
        log_task_info("skipping git push", prefix)
    else:
        branches = [branch] if major_branch is None else [branch, major_branch]
        await _step("git push", _git_push, config, branches)

    if not publish["github_release"]["enabled"]:
        return
    if not publish["push"]:
        log_task_info("skipping GitHub release - changes were not pushed", prefix)
        return
    await _step("GitHub release", _github_release, config, release, archives)
