# tests/10_independent/test_utils_files.py
"""Tests for wcforge.utils file helpers."""

from pathlib import Path

import pytest

import wcforge.utils as mod_utils


def test_load_json_object_rejects_non_objects(tmp_path: Path) -> None:
    path = tmp_path / "package.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(TypeError, match="must contain a JSON object"):
        mod_utils.load_json_object(path)


def test_write_json_uses_npm_formatting(tmp_path: Path) -> None:
    path = tmp_path / "out" / "package.json"
    mod_utils.write_json(path, {"name": "x", "files": ["a"]})
    assert path.read_text(encoding="utf-8") == (
        '{\n  "name": "x",\n  "files": [\n    "a"\n  ]\n}\n'
    )


def test_glob_files_literal_and_pattern(tmp_path: Path) -> None:
    # --- setup ---
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "one.mjs").write_text("", encoding="utf-8")
    (tmp_path / "two.mjs").write_text("", encoding="utf-8")

    # --- execute / verify ---
    assert mod_utils.glob_files(tmp_path, "two.mjs") == [tmp_path / "two.mjs"]
    assert mod_utils.glob_files(tmp_path, "missing.mjs") == []
    assert mod_utils.glob_files(tmp_path, "**/*.mjs") == [
        tmp_path / "a" / "one.mjs",
        tmp_path / "two.mjs",
    ]


def test_clean_dir_removes_tree_and_ignores_missing(tmp_path: Path) -> None:
    target = tmp_path / "dist"
    (target / "nested").mkdir(parents=True)
    (target / "nested" / "f.js").write_text("", encoding="utf-8")

    mod_utils.clean_dir(target)
    mod_utils.clean_dir(target)

    assert not target.exists()
