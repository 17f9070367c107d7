# src/wcforge/utils/__init__.py

from .utils_files import (
    clean_dir,
    copy_file,
    glob_files,
    load_json_object,
    write_json,
)


__all__ = [
    "clean_dir",
    "copy_file",
    "glob_files",
    "load_json_object",
    "write_json",
]
