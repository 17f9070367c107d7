# src/wcforge/constants.py
"""Central constants used across the project."""

from typing import Any


# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"
DEFAULT_ENV_WATCH_INTERVAL: str = "WATCH_INTERVAL"

# --- program defaults ---
DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_WATCH_INTERVAL: float = 1.0  # seconds
DEFAULT_ENVIRONMENT: str = "development"

# --- config defaults ---
DEFAULT_STRICT_CONFIG: bool = True
DEFAULT_SRC_DIR: str = "src"
DEFAULT_DIST_DIR: str = "dist"
DEFAULT_TEMP_DIR: str = ".tmp"
DEFAULT_MODULE_EXTENSION: str = ".mjs"
DEFAULT_SCRIPT_EXTENSION: str = ".min.js"
DEFAULT_GLOBAL_NAMESPACE: str = "window.WebComponents"

# --- build ---
# files copied next to the built component
DIST_EXTRA_FILES: tuple[str, ...] = ("README.md", "LICENSE")

# package.json keys that only make sense in the source tree
DIST_PACKAGE_STRIP_KEYS: tuple[str, ...] = (
    "version",
    "scripts",
    "directories",
    "devDependencies",
    "engines",
)

MARKUP_EXTENSIONS: frozenset[str] = frozenset({".html", ".htm"})
STYLE_EXTENSIONS: frozenset[str] = frozenset({".css", ".sass", ".scss"})
SASS_EXTENSIONS: frozenset[str] = frozenset({".sass", ".scss"})

# --- publish defaults ---
DEFAULT_DRY_RUN: bool = False
DEFAULT_FORCE: bool = False
DEFAULT_MASTER_BRANCH: str = "master"
DEFAULT_PRERELEASE_BRANCH_REGEX: str = r"^(?:(?:[1-9][0-9]*)\.0-preview|master)$"
DEFAULT_NPM_TAG: str = "latest"
DEFAULT_PRERELEASE_NPM_TAG: str = "next"
DEFAULT_ARCHIVE_DIR: str = "."
DEFAULT_MERGE_MAJOR_BRANCH: bool = True
DEFAULT_PUSH: bool = False
DEFAULT_GIT_REMOTE: str = "origin"
DEFAULT_GITHUB_RELEASE: bool = False
DEFAULT_CHECK_FILES: dict[str, bool] = {
    "package": True,
    "module": True,
    "script": True,
    "license": True,
    "readme": True,
}
ARCHIVE_FORMATS: dict[str, str] = {
    "tar": ".tar.gz",
    "zip": ".zip",
}

# semver 2.0.0 (https://semver.org), anchored
SEMVER_PATTERN: str = (
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

# --- external tool defaults ---
DEFAULT_CATEGORY_ORDER: list[str] = [
    "html_minifier",
    "style_compiler",
    "script_bundler",
    "script_minifier",
    "script_linter",
    "style_linter",
]

# Type: dict[str, dict[str, Any]] - matches ToolCategoryConfig structure.
# `{input}` / `{output}` are substituted; without `{input}` the input path is
# appended, without `{output}` the tool's stdout is the result.
DEFAULT_CATEGORIES: dict[str, dict[str, Any]] = {
    "html_minifier": {
        "enabled": True,
        "priority": ["html-minifier"],
        "tools": {
            "html-minifier": {
                "args": [
                    "--collapse-whitespace",
                    "--remove-comments",
                    "--remove-optional-tags",
                    "--remove-redundant-attributes",
                    "--remove-script-type-attributes",
                    "--remove-style-link-type-attributes",
                    "--use-short-doctype",
                    "--minify-css",
                    "true",
                    "--minify-js",
                    "true",
                ],
            },
        },
    },
    "style_compiler": {
        "enabled": True,
        "priority": ["sass"],
        "tools": {
            "sass": {
                "args": ["--no-source-map", "--style=compressed", "{input}"],
            },
        },
    },
    # only used with build.script.bundle_imports; writes an IIFE
    "script_bundler": {
        "enabled": True,
        "priority": ["rollup", "esbuild"],
        "tools": {
            "rollup": {
                "args": ["{input}", "--format", "iife", "--file", "{output}"],
            },
            "esbuild": {
                "args": ["{input}", "--bundle", "--format=iife", "--outfile={output}"],
            },
        },
    },
    "script_minifier": {
        "enabled": True,
        "priority": ["terser", "uglifyjs"],
        "tools": {
            "terser": {
                "args": ["{input}", "--compress", "--mangle", "--output", "{output}"],
            },
            "uglifyjs": {
                "args": ["{input}", "--compress", "--mangle", "--output", "{output}"],
            },
        },
    },
    "script_linter": {
        "enabled": True,
        "priority": ["eslint"],
        "tools": {
            "eslint": {
                "args": ["--format", "unix", "{input}"],
            },
        },
    },
    "style_linter": {
        "enabled": True,
        "priority": ["stylelint", "sass-lint"],
        "tools": {
            "stylelint": {
                "args": ["--formatter", "unix", "{input}/**/*.{css,scss,sass}"],
            },
            "sass-lint": {
                "args": ["--verbose", "--max-warnings", "0", "{input}/**/*.s+(a|c)ss"],
            },
        },
    },
}
