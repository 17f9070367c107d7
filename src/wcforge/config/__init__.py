# src/wcforge/config/__init__.py
"""Configuration: discovery, loading, validation and resolution."""

from .config_loader import (
    find_config,
    load_and_validate_config,
    load_config,
    parse_config,
)
from .config_resolve import (
    load_package_json,
    resolve_config,
    resolve_tools,
    split_package_name,
)
from .config_types import (
    ArchiveFormat,
    BuildConfigResolved,
    Environment,
    PublishConfigResolved,
    RootConfig,
    RootConfigResolved,
    ToolCategoryConfig,
    ToolCategoryConfigResolved,
    ToolConfig,
    ToolConfigResolved,
)
from .config_validate import validate_config


__all__ = [  # noqa: RUF022
    # config_loader
    "find_config",
    "load_and_validate_config",
    "load_config",
    "parse_config",
    # config_resolve
    "load_package_json",
    "resolve_config",
    "resolve_tools",
    "split_package_name",
    # config_types
    "ArchiveFormat",
    "BuildConfigResolved",
    "Environment",
    "PublishConfigResolved",
    "RootConfig",
    "RootConfigResolved",
    "ToolCategoryConfig",
    "ToolCategoryConfigResolved",
    "ToolConfig",
    "ToolConfigResolved",
    # config_validate
    "validate_config",
]
