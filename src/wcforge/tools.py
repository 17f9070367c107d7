# src/wcforge/tools.py
"""Locate and run the external node tools a build relies on.

Tools are grouped in categories (html_minifier, style_compiler, ...). Each
category lists tool labels in priority order; the first one whose executable
can be found is used. A tool's args may reference `{input}` and `{output}`;
without `{input}` the input path is appended, and without `{output}` the
tool's stdout is taken as the result.
"""

import shutil
from dataclasses import dataclass
from pathlib import Path

from .commands import run_command
from .config.config_types import ToolCategoryConfigResolved, ToolConfigResolved
from .logs import get_app_logger


INPUT_PLACEHOLDER = "{input}"
OUTPUT_PLACEHOLDER = "{output}"


@dataclass(frozen=True)
class ToolCommand:
    label: str
    args: list[str]
    # None → the result is on stdout
    output: Path | None


def find_tool_executable(
    tool_name: str,
    custom_path: str | None = None,
    *,
    project_root: Path | None = None,
) -> str | None:
    """Find tool executable, checking custom_path first, then PATH.

    The project's `node_modules/.bin` (under `project_root`, else the
    working directory) is searched before PATH, the way npm scripts see it.
    """
    if custom_path:
        path = Path(custom_path)
        if path.exists() and path.is_file():
            return str(path.resolve())
        # fall back to lookup below

    local_bin = (project_root or Path.cwd()) / "node_modules" / ".bin"
    if local_bin.is_dir():
        found = shutil.which(tool_name, path=str(local_bin))
        if found:
            return found

    return shutil.which(tool_name)


def build_tool_command(
    tool_label: str,
    input_path: Path,
    output_path: Path | None,
    tools_dict: dict[str, ToolConfigResolved],
    *,
    project_root: Path | None = None,
) -> ToolCommand | None:
    """Build the full command to execute a tool, or None if it is unavailable."""
    if tool_label not in tools_dict:
        return None
    tool = tools_dict[tool_label]

    executable = find_tool_executable(
        tool["command"], custom_path=tool["path"], project_root=project_root
    )
    if not executable:
        return None

    raw_args = [*tool["args"], *tool["options"]]
    args: list[str] = []
    writes_output = False
    for arg in raw_args:
        if OUTPUT_PLACEHOLDER in arg:
            if output_path is None:
                return None
            writes_output = True
            arg = arg.replace(OUTPUT_PLACEHOLDER, str(output_path))  # noqa: PLW2901
        args.append(arg.replace(INPUT_PLACEHOLDER, str(input_path)))

    if not any(INPUT_PLACEHOLDER in a for a in raw_args):
        args.append(str(input_path))

    return ToolCommand(
        label=tool_label,
        args=[executable, *args],
        output=output_path if writes_output else None,
    )


def resolve_category_command(
    category_name: str,
    category: ToolCategoryConfigResolved,
    input_path: Path,
    output_path: Path | None = None,
    *,
    project_root: Path | None = None,
) -> ToolCommand | None:
    """Return the command for the first available tool of a category."""
    logger = get_app_logger()

    if not category["enabled"]:
        logger.debug("Category %s is disabled, skipping", category_name)
        return None

    for tool_label in category["priority"]:
        command = build_tool_command(
            tool_label,
            input_path,
            output_path,
            category["tools"],
            project_root=project_root,
        )
        if command is not None:
            logger.debug("Using %s for %s", tool_label, category_name)
            return command
        logger.debug("Tool %s not available for %s", tool_label, category_name)

    return None


async def run_tool(
    command: ToolCommand,
    cwd: Path | None = None,
) -> str:
    """Run a resolved tool command and return its result text.

    The result is read back from `command.output` when the tool writes a file,
    otherwise it is the tool's stdout.
    """
    stdout = await run_command(command.args, cwd=cwd)
    if command.output is not None:
        return command.output.read_text(encoding="utf-8")
    return stdout
