# tests/utils/project.py
"""Factories for on-disk component projects and their resolved configs."""

import argparse
import json
from pathlib import Path
from typing import Any

from apathetic_utils import cast_hint

import wcforge.config.config_resolve as mod_resolve
import wcforge.config.config_types as mod_types


ELEMENT_SOURCE = """\
/* eslint-disable */
import { WcBase } from '../node_modules/@demo/wc-base/wc-base.mjs';
// tslint:disable:no-any

export class DemoElement extends WcBase {
  static get template() {
    return `[[inject:template]]<p>placeholder</p>[[endinject]]`;
  }
  static get styles() {
    return `[[inject:style]]p {}[[endinject]]`;
  }
}

window.customElements.define('demo-element', DemoElement);
"""

PACKAGE_JSON: dict[str, Any] = {
    "name": "@demo/demo-element",
    "version": "0.0.0-development",
    "description": "A demo element",
    "scripts": {"build": "wcforge build"},
    "devDependencies": {"wcforge": "*"},
    "engines": {"node": ">=10"},
}


def make_project(
    root: Path,
    *,
    source: str = ELEMENT_SOURCE,
    entrypoint: str = "demo-element.mjs",
    markup: str | None = "<div>\n  <slot></slot>\n</div>\n",
    style: str | None = ":host {\n  display: block;\n}\n",
    package: dict[str, Any] | None = None,
    extras: bool = True,
) -> Path:
    """Write a minimal component project under `root` and return `root`."""
    src = root / "src"
    src.mkdir(parents=True, exist_ok=True)
    (src / entrypoint).write_text(source, encoding="utf-8")
    if markup is not None:
        (src / "template.html").write_text(markup, encoding="utf-8")
    if style is not None:
        (src / "styles.css").write_text(style, encoding="utf-8")

    pkg = PACKAGE_JSON if package is None else package
    (root / "package.json").write_text(json.dumps(pkg, indent=2) + "\n", "utf-8")

    if extras:
        (root / "README.md").write_text("# demo-element\n", encoding="utf-8")
        (root / "LICENSE").write_text("MIT\n", encoding="utf-8")
    return root


def make_root_config(
    *,
    entrypoint: str = "demo-element.mjs",
    markup: str | None = "template.html",
    style: str | None = "styles.css",
    **overrides: Any,
) -> mod_types.RootConfig:
    template: dict[str, str] = {}
    if markup is not None:
        template["markup"] = markup
    if style is not None:
        template["style"] = style
    cfg: dict[str, Any] = {
        "src": {"entrypoint": entrypoint, "template": template},
        **overrides,
    }
    return cast_hint(mod_types.RootConfig, cfg)


def make_args(**kwargs: Any) -> argparse.Namespace:
    """Namespace with every CLI attribute resolve_config() reads."""
    defaults: dict[str, Any] = {
        "config": None,
        "log_level": None,
        "watch": None,
        "production": None,
        "dry_run": None,
        "force": None,
        "npm_tag": None,
        "push": None,
        "github_release": None,
        "release_version": None,
    }
    return argparse.Namespace(**{**defaults, **kwargs})


def make_config(
    root: Path,
    root_cfg: mod_types.RootConfig | None = None,
    **args: Any,
) -> mod_types.RootConfigResolved:
    """Resolve `root_cfg` (default: make_root_config()) for the project at root."""
    cfg = make_root_config() if root_cfg is None else root_cfg
    return mod_resolve.resolve_config(cfg, make_args(**args), root, root)
