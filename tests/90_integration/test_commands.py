# tests/90_integration/test_commands.py
"""End-to-end runs of each command through wcforge.cli.main."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

import wcforge.actions as mod_actions
import wcforge.cli as mod_cli
import wcforge.config.config_types as mod_types
import wcforge.meta as mod_meta
import wcforge.publish as mod_publish
import wcforge.tools as mod_tools
from tests.utils import make_project, patch_everywhere


CONFIG = {
    "src": {
        "entrypoint": "demo-element.mjs",
        "template": {"markup": "template.html", "style": "styles.css"},
    },
}


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A component project as cwd, with its config and no node tools."""
    make_project(tmp_path)
    config = tmp_path / f".{mod_meta.PROGRAM_CONFIG}.json"
    config.write_text(json.dumps(CONFIG), encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(mod_tools, "find_tool_executable", lambda *_a, **_k: None)
    return tmp_path


def test_build_command(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    # --- execute ---
    code = mod_cli.main(["build"])

    # --- verify ---
    assert code == 0
    assert (project / "dist" / "demo-element.mjs").is_file()
    assert (project / "dist" / "demo-element.min.js").is_file()
    assert "Using config: .wcforge.json" in capsys.readouterr().out


def test_build_without_config_fails_cleanly(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    make_project(tmp_path)
    monkeypatch.chdir(tmp_path)

    code = mod_cli.main(["build"])

    assert code == 1
    captured = capsys.readouterr()
    assert "No config file found" in captured.out
    assert "`src.entrypoint` is not set" in captured.err


def test_clean_command(project: Path) -> None:
    # --- setup ---
    assert mod_cli.main(["build"]) == 0
    assert (project / ".tmp" / "build").is_dir()

    # --- execute ---
    code = mod_cli.main(["clean"])

    # --- verify ---
    assert code == 0
    assert not (project / "dist").exists()
    assert not (project / ".tmp" / "build").exists()


def test_lint_command_without_linters_succeeds(project: Path) -> None:  # noqa: ARG001
    assert mod_cli.main(["lint"]) == 0


def test_lint_command_fails_on_issues(
    project: Path,  # noqa: ARG001
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_lint(*_args: Any, **_kwargs: Any) -> bool:
        return True

    patch_everywhere(monkeypatch, mod_cli, "run_lint", fake_lint)

    assert mod_cli.main(["lint"]) == 1


def test_publish_requires_release_version(
    project: Path,  # noqa: ARG001
    capsys: pytest.CaptureFixture[str],
) -> None:
    code = mod_cli.main(["publish"])

    assert code == 1
    assert "--release-version" in capsys.readouterr().err


def test_publish_dry_after_build(
    project: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    assert mod_cli.main(["build"]) == 0
    calls: list[str] = []

    async def fake_run(args: list[str], *_a: Any, **_k: Any) -> str:
        calls.append(" ".join(args))
        if args[:3] == ["git", "rev-parse", "--abbrev-ref"]:
            return "master"
        if args[:2] == ["git", "status"]:
            return " M src/demo-element.mjs"
        return "abc123"

    monkeypatch.setattr(mod_publish, "run_command", fake_run)

    # --- execute ---
    code = mod_cli.main(["publish-dry", "--release-version", "1.0.0-rc.1"])

    # --- verify ---
    assert code == 0
    assert not any(
        c.startswith(("git tag", "npm publish", "git commit", "git push"))
        for c in calls
    )
    captured = capsys.readouterr()
    assert "Continuing despite error (force)" in captured.err
    assert "Dry run complete: nothing was published." in captured.out
    package = json.loads((project / "package.json").read_text(encoding="utf-8"))
    assert package["version"] == "0.0.0-development"


def test_watch_flag_uses_config_interval(
    project: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    # --- setup ---
    config = project / f".{mod_meta.PROGRAM_CONFIG}.json"
    config.write_text(json.dumps({**CONFIG, "watch_interval": 0.42}), encoding="utf-8")
    called: dict[str, float] = {}

    # --- stubs ---
    def fake_watch(
        rebuild_func: Callable[[], None],
        _resolved: mod_types.RootConfigResolved,
        interval: float,
    ) -> None:
        called["interval"] = interval
        rebuild_func()

    # --- patch and execute ---
    patch_everywhere(monkeypatch, mod_actions, "watch_for_changes", fake_watch)
    code = mod_cli.main(["build", "--watch"])

    # --- verify ---
    assert code == 0
    assert called["interval"] == pytest.approx(0.42)
    assert (project / "dist" / "demo-element.mjs").is_file()


def test_watch_rebuild_failure_does_not_stop_watching(
    project: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup: a default export makes every build fail ---
    (project / "src" / "demo-element.mjs").write_text(
        "export default class {}\n", encoding="utf-8"
    )
    rebuilds: list[int] = []

    def fake_watch(
        rebuild_func: Callable[[], None],
        _resolved: mod_types.RootConfigResolved,
        interval: float,  # noqa: ARG001
    ) -> None:
        for _ in range(2):
            rebuild_func()
            rebuilds.append(1)

    patch_everywhere(monkeypatch, mod_actions, "watch_for_changes", fake_watch)

    # --- execute ---
    code = mod_cli.main(["build", "--watch", "0.5"])

    # --- verify ---
    assert code == 0
    assert rebuilds == [1, 1]
    assert "Do not use default exports" in capsys.readouterr().err
