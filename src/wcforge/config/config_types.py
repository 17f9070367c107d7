# src/wcforge/config/config_types.py


from pathlib import Path
from typing import Literal, TypedDict

from typing_extensions import NotRequired


ArchiveFormat = Literal["tar", "zip"]
Environment = Literal["development", "production"]


# --- external tools ---------------------------------------------------------


class ToolConfig(TypedDict, total=False):
    command: str  # executable name (defaults to the tool label)
    args: list[str]  # command arguments, may use {input} / {output}
    path: str  # custom executable path
    options: list[str]  # additional CLI arguments (appended to args)


class ToolCategoryConfig(TypedDict, total=False):
    enabled: bool  # default: True
    priority: list[str]  # tool labels in priority order
    tools: NotRequired[dict[str, ToolConfig]]  # per-tool overrides


# --- component ----------------------------------------------------------------


class ComponentConfig(TypedDict, total=False):
    name: str  # defaults to the package.json name without its scope
    scope: str  # npm scope, e.g. "@my-org"


class TemplateConfig(TypedDict, total=False):
    markup: str  # .html / .htm, relative to src.path
    style: str  # .css / .sass / .scss, relative to src.path


class SrcConfig(TypedDict, total=False):
    path: str
    entrypoint: str  # relative to path; may be a glob matching one file
    template: TemplateConfig


class DirConfig(TypedDict, total=False):
    path: str


# --- build --------------------------------------------------------------------


class ModuleBuildConfig(TypedDict, total=False):
    create: bool
    extension: str


class ScriptBuildConfig(TypedDict, total=False):
    create: bool
    extension: str
    bundle_imports: bool
    global_namespace: str
    import_prefix: str | None


class BuildConfig(TypedDict, total=False):
    module: ModuleBuildConfig
    script: ScriptBuildConfig
    symlinks: bool  # link built files into the project root


# --- publish ------------------------------------------------------------------


class CheckFilesConfig(TypedDict, total=False):
    package: bool
    module: bool
    script: bool
    license: bool
    readme: bool


class GitHubReleaseConfig(TypedDict, total=False):
    enabled: bool
    name: str  # release title, defaults to the tag
    notes: str
    draft: bool


class PublishConfig(TypedDict, total=False):
    dry_run: bool
    force: bool
    master_branch: str
    prerelease_branch_regex: str
    run_git_checks: bool
    run_file_checks: bool
    check_files: CheckFilesConfig
    archive_formats: list[ArchiveFormat]
    archive_path: str
    npm_tag: str
    merge_major_branch: bool  # merge releases into "<major>.x"
    push: bool
    remote: str
    github_release: GitHubReleaseConfig


# --- root -----------------------------------------------------------------------


class RootConfig(TypedDict, total=False):
    component: ComponentConfig
    src: SrcConfig
    dist: DirConfig
    temp: DirConfig
    build: BuildConfig
    publish: PublishConfig
    tools: dict[str, ToolCategoryConfig]

    log_level: str
    strict_config: bool
    watch_interval: float


# Resolved types - all fields are guaranteed to be present with final values


class ToolConfigResolved(TypedDict):
    command: str
    args: list[str]
    path: str | None
    options: list[str]


class ToolCategoryConfigResolved(TypedDict):
    enabled: bool
    priority: list[str]
    tools: dict[str, ToolConfigResolved]


class ComponentConfigResolved(TypedDict):
    name: str
    scope: str | None


class TemplateConfigResolved(TypedDict):
    markup: str | None
    style: str | None


class SrcConfigResolved(TypedDict):
    path: Path  # absolute
    entrypoint: str
    template: TemplateConfigResolved


class ModuleBuildConfigResolved(TypedDict):
    create: bool
    extension: str


class ScriptBuildConfigResolved(TypedDict):
    create: bool
    extension: str
    bundle_imports: bool
    global_namespace: str
    import_prefix: str | None


class BuildConfigResolved(TypedDict):
    module: ModuleBuildConfigResolved
    script: ScriptBuildConfigResolved
    symlinks: bool


class GitHubReleaseConfigResolved(TypedDict):
    enabled: bool
    name: str | None
    notes: str
    draft: bool


class PublishConfigResolved(TypedDict):
    dry_run: bool
    force: bool
    master_branch: str
    prerelease_branch_regex: str
    run_git_checks: bool
    run_file_checks: bool
    check_files: dict[str, bool]
    archive_formats: list[ArchiveFormat]
    archive_path: Path  # absolute
    npm_tag: str | None
    merge_major_branch: bool
    push: bool
    remote: str
    github_release: GitHubReleaseConfigResolved


class MetaConfigResolved(TypedDict):
    # sources of parameters
    cli_root: Path
    config_root: Path
    config_path: Path | None


class RootConfigResolved(TypedDict):
    project_root: Path  # directory holding package.json
    component: ComponentConfigResolved
    src: SrcConfigResolved
    dist_path: Path  # absolute
    temp_path: Path  # absolute
    build: BuildConfigResolved
    publish: PublishConfigResolved
    tools: dict[str, ToolCategoryConfigResolved]
    package: dict[str, object]  # parsed package.json

    environment: Environment
    log_level: str
    strict_config: bool
    watch_interval: float

    __meta__: MetaConfigResolved
