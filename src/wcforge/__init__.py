# src/wcforge/__init__.py

"""wcforge: build, lint and publish web components.

Full developer API
==================
This package re-exports the public symbols of its submodules for
programmatic use. Anything prefixed with "_" is internal and may change.

Highlights:
    - main()              → CLI entrypoint
    - run_build()         → Build a component into dist
    - run_publish()       → Check, tag and publish a release
    - rewrite_source()    → Turn ES-module linkage into global namespace access
    - settle_all()        → Await a batch of operations, then report every failure
"""

from .actions import get_metadata, watch_for_changes
from .build import run_build
from .cli import main
from .config import (
    RootConfig,
    RootConfigResolved,
    find_config,
    load_and_validate_config,
    load_config,
    parse_config,
    resolve_config,
    validate_config,
)
from .constants import (
    DEFAULT_ENV_LOG_LEVEL,
    DEFAULT_ENV_WATCH_INTERVAL,
    DEFAULT_GLOBAL_NAMESPACE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_STRICT_CONFIG,
    DEFAULT_WATCH_INTERVAL,
)
from .errors import (
    CommandError,
    ConfigError,
    ExternalError,
    ProcessingError,
    UncertainEntryFileError,
)
from .lint import run_lint
from .logs import get_app_logger
from .meta import (
    PROGRAM_CONFIG,
    PROGRAM_DISPLAY,
    PROGRAM_ENV,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
    Metadata,
)
from .publish import ReleaseInfo, make_release_info, run_publish
from .rewrite import (
    Program,
    RewriteOptions,
    Statement,
    parse_program,
    render_program,
    rewrite_program,
    rewrite_source,
)
from .settle import Failure, MultiTaskError, Success, settle_all


__all__ = [  # noqa: RUF022
    # actions
    "get_metadata",
    "watch_for_changes",
    # build
    "run_build",
    # cli
    "main",
    # config
    "find_config",
    "load_and_validate_config",
    "load_config",
    "parse_config",
    "resolve_config",
    "RootConfig",
    "RootConfigResolved",
    "validate_config",
    # constants
    "DEFAULT_ENV_LOG_LEVEL",
    "DEFAULT_ENV_WATCH_INTERVAL",
    "DEFAULT_GLOBAL_NAMESPACE",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_STRICT_CONFIG",
    "DEFAULT_WATCH_INTERVAL",
    # errors
    "CommandError",
    "ConfigError",
    "ExternalError",
    "ProcessingError",
    "UncertainEntryFileError",
    # lint
    "run_lint",
    # logs
    "get_app_logger",
    # meta
    "Metadata",
    "PROGRAM_CONFIG",
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    # publish
    "make_release_info",
    "ReleaseInfo",
    "run_publish",
    # rewrite
    "parse_program",
    "Program",
    "render_program",
    "rewrite_program",
    "rewrite_source",
    "RewriteOptions",
    "Statement",
    # settle
    "Failure",
    "MultiTaskError",
    "settle_all",
    "Success",
]
