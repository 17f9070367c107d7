# src/wcforge/meta.py
"""Program identity shared by the CLI, the logger and the config loader."""

from typing import NamedTuple


# Human-facing name used in banners and --version
PROGRAM_DISPLAY = "wcforge"

# Console script name (argparse prog)
PROGRAM_SCRIPT = "wcforge"

# Import package and logger name
PROGRAM_PACKAGE = "wcforge"

# Prefix for environment variables (e.g. WCFORGE_LOG_LEVEL)
PROGRAM_ENV = "WCFORGE"

# Config file stem: .wcforge.py / .wcforge.jsonc / .wcforge.json
PROGRAM_CONFIG = "wcforge"


class Metadata(NamedTuple):
    version: str
    commit: str
