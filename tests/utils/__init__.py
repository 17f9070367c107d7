# tests/utils/__init__.py

from .constants import DEFAULT_TEST_LOG_LEVEL
from .force_mtime_advance import force_mtime_advance
from .patch_everywhere import patch_everywhere
from .project import (
    ELEMENT_SOURCE,
    PACKAGE_JSON,
    make_args,
    make_config,
    make_project,
    make_root_config,
)


__all__ = [  # noqa: RUF022
    # constants
    "DEFAULT_TEST_LOG_LEVEL",
    # force_mtime_advance
    "force_mtime_advance",
    # patch_everywhere
    "patch_everywhere",
    # project
    "ELEMENT_SOURCE",
    "PACKAGE_JSON",
    "make_args",
    "make_config",
    "make_project",
    "make_root_config",
]
