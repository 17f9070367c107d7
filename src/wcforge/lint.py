# src/wcforge/lint.py

from dataclasses import dataclass
from pathlib import Path

from .commands import run_command_status
from .config.config_types import RootConfigResolved
from .logs import get_app_logger
from .settle import settle_all
from .tasks import run_task, skip_task
from .tools import ToolCommand, resolve_category_command


NO_ISSUES = "No linting issues."


@dataclass(frozen=True)
class LintReport:
    label: str
    ran: bool
    has_issues: bool = False
    output: str = ""

    def render(self) -> str:
        if not self.ran:
            return "Skipped (no linter available)."
        if not self.has_issues:
            return NO_ISSUES
        return self.output or "Linter reported issues."


async def run_linter(command: ToolCommand, cwd: Path) -> tuple[bool, str]:
    """Run a linter; a non-zero exit means it found issues."""
    code, output = await run_command_status(command.args, cwd=cwd)
    return code != 0, output


async def _lint_category(
    prefix: str,
    config: RootConfigResolved,
    label: str,
    category_name: str,
) -> LintReport:
    command = resolve_category_command(
        category_name,
        config["tools"][category_name],
        config["src"]["path"],
        project_root=config["project_root"],
    )
    if command is None:
        skip_task(label, prefix, "no linter available")
        return LintReport(label=label, ran=False)

    async def _lint(_prefix: str) -> tuple[bool, str]:
        return await run_linter(command, config["project_root"])

    has_issues, output = await run_task(label, prefix, _lint)
    return LintReport(label=label, ran=True, has_issues=has_issues, output=output)


async def run_lint(config: RootConfigResolved, prefix: str = "lint") -> bool:
    """Lint scripts and styles concurrently and print a report.

    Returns True if any linter reported issues.
    """
    logger = get_app_logger()
    reports = await settle_all(
        [
            _lint_category(prefix, config, "scripts", "script_linter"),
            _lint_category(prefix, config, "styles", "style_linter"),
        ]
    )

    logger.info("Linting complete.")
    for report in reports:
        logger.info("%s:\n%s", report.label.capitalize(), report.render())

    return any(r.has_issues for r in reports)
