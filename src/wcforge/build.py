# src/wcforge/build.py
"""Build a web component into its distribution files.

The build produces, in `dist`:

  - `<name><module ext>`: the ES module, with its template injected
  - `<name><script ext>`: a minified global-scope script (see rewrite.py)
  - `package.json`, `README.md` and `LICENSE`

Intermediate files live in `<temp>/build`.
"""

import os
import re
from collections.abc import Awaitable, Callable
from pathlib import Path

from apathetic_utils import plural

from .config.config_types import RootConfigResolved
from .constants import (
    DIST_EXTRA_FILES,
    DIST_PACKAGE_STRIP_KEYS,
    MARKUP_EXTENSIONS,
    SASS_EXTENSIONS,
)
from .errors import ConfigError, UncertainEntryFileError
from .logs import get_app_logger
from .rewrite import RewriteOptions, count_default_exports, parse_program, rewrite_source
from .settle import settle_all
from .tasks import clean, log_task_info, run_task, skip_task
from .templates import check_template_files, inject_template
from .tools import resolve_category_command, run_tool
from .utils import copy_file, glob_files, write_json


BUILD_SUBDIR = "build"
ENTRYPOINT_BASENAME = "entrypoint"
NODE_MODULES = "node_modules"

ESLINT_COMMENT_RE = re.compile(r"^\s*/\*+[\s*]*eslint[ -]\S*\s*\*+/\s*$", re.MULTILINE)
TSLINT_COMMENT_RE = re.compile(r"^\s*//\s*tslint:.*$", re.MULTILINE)

BuildStep = Callable[[str, RootConfigResolved], Awaitable[None]]


# --- paths ----------------------------------------------------------------------


def build_dir(config: RootConfigResolved) -> Path:
    return config["temp_path"] / BUILD_SUBDIR


def resolve_entrypoint(config: RootConfigResolved) -> Path:
    """Return the single source file the entrypoint setting names."""
    pattern = config["src"]["entrypoint"]
    matches = glob_files(config["src"]["path"], pattern)
    if len(matches) != 1:
        raise UncertainEntryFileError(pattern, len(matches))
    return matches[0]


def prepared_entrypoint(config: RootConfigResolved) -> Path:
    suffix = Path(config["src"]["entrypoint"]).suffix
    return build_dir(config) / f"{ENTRYPOINT_BASENAME}{suffix}"


def module_filename(config: RootConfigResolved) -> str:
    return f"{config['component']['name']}{config['build']['module']['extension']}"


def script_filename(config: RootConfigResolved) -> str:
    return f"{config['component']['name']}{config['build']['script']['extension']}"


def compiled_style_path(config: RootConfigResolved) -> Path | None:
    style = config["src"]["template"]["style"]
    if style is None:
        return None
    return build_dir(config) / f"{Path(style).stem}.css"


def minified_markup_path(config: RootConfigResolved) -> Path | None:
    markup = config["src"]["template"]["markup"]
    if markup is None:
        return None
    return build_dir(config) / Path(markup).name


# --- source transforms ----------------------------------------------------------


def depth_change(src_dir: Path, target_dir: Path) -> int:
    """How many directories deeper `target_dir` sits than `src_dir`.

    ".tmp/build" seen from "src" is "../.tmp/build": one up, two down → 1.
    """
    rel = os.path.relpath(target_dir, src_dir)
    change = 0
    for segment in Path(rel).parts:
        if segment in ("", "."):
            continue
        change += -1 if segment == ".." else 1
    return change


def fix_node_modules_depth(source: str, change: int) -> str:
    """Re-point `../node_modules/` imports after moving a file `change` deeper."""
    if change <= 0:
        return source
    return source.replace(
        f"../{NODE_MODULES}/", f"{'../' * (change + 1)}{NODE_MODULES}/"
    )


def strip_lint_comments(source: str) -> str:
    return TSLINT_COMMENT_RE.sub("", ESLINT_COMMENT_RE.sub("", source))


def relink_node_modules(source: str, scope: str | None) -> str:
    """Point node_modules imports at where the package is installed.

    A published component lives in `node_modules/<scope>/<name>/`, so its
    sibling packages in the same scope are one level up and everything
    else two.
    """
    if scope:
        source = re.sub(rf"(\.\./)*{NODE_MODULES}/{re.escape(scope)}/", "../", source)
    return re.sub(rf"(\.\./)*{NODE_MODULES}/", "../../", source)


def prepare_module_source(source: str, scope: str | None) -> str:
    return relink_node_modules(strip_lint_comments(source), scope).strip() + "\n"


def dist_package_json(
    package: dict[str, object], module_file: str
) -> dict[str, object]:
    """The package.json shipped in dist: source-only keys removed, `main` set."""
    dist_package = {
        k: v for k, v in package.items() if k not in DIST_PACKAGE_STRIP_KEYS
    }
    dist_package["main"] = module_file
    return dist_package


def _read_optional(path: Path | None) -> str | None:
    if path is None:
        return None
    return path.read_text(encoding="utf-8")


def _inject(config: RootConfigResolved, source: str) -> str:
    return inject_template(
        source,
        markup=_read_optional(minified_markup_path(config)),
        style=_read_optional(compiled_style_path(config)),
    )


# --- steps ----------------------------------------------------------------------


def check_build_config(config: RootConfigResolved) -> None:
    if not config["component"]["name"]:
        xmsg = "Cannot build: `component.name` is not set."
        raise ConfigError(xmsg)
    if not config["src"]["entrypoint"]:
        xmsg = "Cannot build: `src.entrypoint` is not set."
        raise ConfigError(xmsg)
    template = config["src"]["template"]
    check_template_files(template["markup"], template["style"])


async def _check_source_files(_prefix: str, config: RootConfigResolved) -> None:
    source = resolve_entrypoint(config).read_text(encoding="utf-8")
    found = count_default_exports(parse_program(source))
    if found > 0:
        xmsg = f"Do not use default exports. {found} found."
        raise ConfigError(xmsg)


async def _prepare_entrypoint(_prefix: str, config: RootConfigResolved) -> None:
    source = resolve_entrypoint(config).read_text(encoding="utf-8")
    change = depth_change(config["src"]["path"], build_dir(config))
    target = prepared_entrypoint(config)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(fix_node_modules_depth(source, change), encoding="utf-8")


async def _minify_html_file(config: RootConfigResolved, file: Path) -> None:
    logger = get_app_logger()
    command = resolve_category_command(
        "html_minifier",
        config["tools"]["html_minifier"],
        file,
        project_root=config["project_root"],
    )
    if command is None:
        logger.debug("No HTML minifier available; only newlines are removed.")
        minified = file.read_text(encoding="utf-8")
    else:
        minified = await run_tool(command, cwd=config["project_root"])
    target = build_dir(config) / file.name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(minified.replace("\n", ""), encoding="utf-8")


async def _minify_html(prefix: str, config: RootConfigResolved) -> None:
    files = sorted(
        f
        for ext in MARKUP_EXTENSIONS
        for f in glob_files(config["src"]["path"], f"**/*{ext}")
    )
    if not files:
        log_task_info("no html files.", prefix)
        return
    await settle_all(_minify_html_file(config, f) for f in files)


async def _compile_css(_prefix: str, config: RootConfigResolved) -> None:
    style = config["src"]["template"]["style"]
    target = compiled_style_path(config)
    assert style is not None  # noqa: S101
    assert target is not None  # noqa: S101

    source = config["src"]["path"] / style
    if source.suffix.lower() in SASS_EXTENSIONS:
        command = resolve_category_command(
            "style_compiler",
            config["tools"]["style_compiler"],
            source,
            project_root=config["project_root"],
        )
        if command is None:
            xmsg = f"Cannot compile `{style}`: no style compiler is available."
            raise ConfigError(xmsg)
        css = await run_tool(command, cwd=config["project_root"])
    else:
        css = source.read_text(encoding="utf-8")

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(css.replace("\n", ""), encoding="utf-8")


async def _build_module(_prefix: str, config: RootConfigResolved) -> None:
    source = prepared_entrypoint(config).read_text(encoding="utf-8")
    module = prepare_module_source(source, config["component"]["scope"])
    target = config["dist_path"] / module_filename(config)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(_inject(config, module), encoding="utf-8")


async def _bundle_script(
    _prefix: str, config: RootConfigResolved, script: Path
) -> Path:
    """Inline the imports the rewriter left in place; returns the bundle."""
    target = script.with_name(f"{config['component']['name']}.bundle.js")
    command = resolve_category_command(
        "script_bundler",
        config["tools"]["script_bundler"],
        script,
        target,
        project_root=config["project_root"],
    )
    if command is None:
        xmsg = (
            f"Cannot build `{script.name}` with build.script.bundle_imports:"
            " no script bundler is available."
        )
        raise ConfigError(xmsg)
    result = await run_tool(command, cwd=config["project_root"])
    if command.output is None:
        target.write_text(result, encoding="utf-8")
    return target


async def _build_script(prefix: str, config: RootConfigResolved) -> None:
    script_cfg = config["build"]["script"]
    options = RewriteOptions(
        namespace=script_cfg["global_namespace"],
        bundle_imports=script_cfg["bundle_imports"],
        import_prefix=script_cfg["import_prefix"],
    )
    source = prepared_entrypoint(config).read_text(encoding="utf-8")
    script = _inject(config, rewrite_source(source, options))

    unminified = build_dir(config) / script_filename(config)
    unminified.write_text(script, encoding="utf-8")
    if options.bundle_imports:
        unminified = await run_task(
            "bundle", prefix, _bundle_script, config, unminified
        )

    target = config["dist_path"] / script_filename(config)
    command = resolve_category_command(
        "script_minifier",
        config["tools"]["script_minifier"],
        unminified,
        target,
        project_root=config["project_root"],
    )
    if command is None:
        get_app_logger().warning(
            "No script minifier available; %s is not minified.", target.name
        )
        skip_task("minify", prefix, "no minifier installed")
        copy_file(unminified, target)
        return
    result = await run_tool(command, cwd=config["project_root"])
    if command.output is None:
        target.write_text(result, encoding="utf-8")


async def _finalize(_prefix: str, config: RootConfigResolved) -> None:
    logger = get_app_logger()
    project_root = config["project_root"]
    dist = config["dist_path"]

    async def _copy(name: str) -> None:
        source = project_root / name
        if not source.exists():
            logger.debug("No %s to copy into dist.", name)
            return
        copy_file(source, dist / name)

    async def _package() -> None:
        if not config["package"]:
            logger.debug("No package.json to copy into dist.")
            return
        write_json(
            dist / "package.json",
            dist_package_json(config["package"], module_filename(config)),
        )

    await settle_all([*(_copy(name) for name in DIST_EXTRA_FILES), _package()])


async def _symlinks(_prefix: str, config: RootConfigResolved) -> None:
    name = config["component"]["name"]
    files = [
        f
        for f in glob_files(config["dist_path"], f"{name}*")
        if f.name.endswith((".js", ".mjs"))
    ]
    for file in files:
        link = config["project_root"] / file.name
        if link.exists() or link.is_symlink():
            link.unlink()
        link.symlink_to(os.path.relpath(file, link.parent))


# --- entry ----------------------------------------------------------------------


async def run_build(config: RootConfigResolved, prefix: str = "build") -> None:
    """Run every build step in order; failures propagate after being logged."""
    logger = get_app_logger()
    check_build_config(config)
    logger.debug(
        "Building %s from %s",
        config["component"]["name"],
        config["src"]["path"],
    )

    await clean(config["dist_path"], "dist", prefix)
    await clean(build_dir(config), "temp", prefix)

    await run_task("check source files", prefix, _check_source_files, config)
    await run_task("prepare entrypoint", prefix, _prepare_entrypoint, config)

    async def _maybe_compile_css() -> None:
        if config["src"]["template"]["style"] is None:
            skip_task("compile css", prefix, "no style template")
            return
        await run_task("compile css", prefix, _compile_css, config)

    await settle_all(
        [
            run_task("minify html", prefix, _minify_html, config),
            _maybe_compile_css(),
        ]
    )

    async def _maybe(create: bool, label: str, func: BuildStep) -> None:
        if not create:
            skip_task(label, prefix, "disabled in config")
            return
        await run_task(label, prefix, func, config)

    build_cfg = config["build"]
    await settle_all(
        [
            _maybe(build_cfg["module"]["create"], "module", _build_module),
            _maybe(build_cfg["script"]["create"], "script", _build_script),
        ]
    )

    await run_task("finalize", prefix, _finalize, config)

    if build_cfg["symlinks"]:
        await run_task("symlinks", prefix, _symlinks, config)

    built = len(list(config["dist_path"].glob("*")))
    logger.debug("dist holds %d file%s", built, plural(built))
