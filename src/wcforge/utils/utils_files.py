# src/wcforge/utils/utils_files.py

import json
import shutil
from pathlib import Path
from typing import Any, cast

from apathetic_utils import has_glob_chars


def load_json_object(path: Path) -> dict[str, Any]:
    """Load a JSON file whose root must be an object (e.g. package.json)."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        xmsg = f"Invalid JSON in {path.name}: {e.msg} (line {e.lineno})"
        raise ValueError(xmsg) from e
    if not isinstance(data, dict):
        xmsg = f"{path.name} must contain a JSON object, not {type(data).__name__}"
        raise TypeError(xmsg)
    return cast("dict[str, Any]", data)


def write_json(path: Path, data: Any) -> None:
    """Write JSON the way npm does: 2-space indent and a trailing newline."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", "utf-8")


def clean_dir(path: Path) -> None:
    """Delete a directory tree (or file) if it exists."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def copy_file(src: Path, dest: Path) -> Path:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dest)
    return dest


def glob_files(root: Path, pattern: str) -> list[Path]:
    """Expand `pattern` under `root` into a sorted list of files.

    A pattern without glob characters resolves to itself when it exists.
    """
    if not has_glob_chars(pattern):
        candidate = root / pattern
        return [candidate] if candidate.is_file() else []
    return sorted(p for p in root.glob(pattern) if p.is_file())
