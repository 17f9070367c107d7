# src/wcforge/templates.py
"""Inline a component's markup and style into its JavaScript.

Component sources mark where the template goes with

    `[[inject:template]] <p>placeholder</p> [[endinject]]`

(and `[[inject:style]]` for the stylesheet; `html` and `css` are accepted
as aliases). The whole marker region is replaced by the built file's
contents. The region normally sits inside a template literal, so backticks
in the injected text are escaped.
"""

import re
from pathlib import Path

from .constants import MARKUP_EXTENSIONS, STYLE_EXTENSIONS
from .errors import ConfigError


TEMPLATE_KEYWORDS = ("template", "html")
STYLE_KEYWORDS = ("style", "css")


def inject_pattern(keyword: str) -> re.Pattern[str]:
    """Regex matching every `[[inject:<keyword>]] ... [[endinject]]` region."""
    start = re.escape(f"[[inject:{keyword}]]")
    end = re.escape("[[endinject]]")
    return re.compile(f"{start}.*?{end}", re.DOTALL)


def escape_template_literal(text: str) -> str:
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def inject(source: str, keyword: str, content: str) -> str:
    """Replace all `keyword` regions of `source` with `content`."""
    escaped = escape_template_literal(content)
    return inject_pattern(keyword).sub(lambda _m: escaped, source)


def check_template_files(markup: str | None, style: str | None) -> None:
    """Reject template files the build does not know how to process."""
    if markup is not None and Path(markup).suffix.lower() not in MARKUP_EXTENSIONS:
        xmsg = (
            f"Cannot process markup file `{markup}`: expected one of"
            f" {', '.join(sorted(MARKUP_EXTENSIONS))}."
        )
        raise ConfigError(xmsg)
    if style is not None and Path(style).suffix.lower() not in STYLE_EXTENSIONS:
        xmsg = (
            f"Cannot process style file `{style}`: expected one of"
            f" {', '.join(sorted(STYLE_EXTENSIONS))}."
        )
        raise ConfigError(xmsg)


def inject_template(
    source: str,
    *,
    markup: str | None = None,
    style: str | None = None,
) -> str:
    """Inject built markup and style into `source` (each optional)."""
    if markup is not None:
        for keyword in TEMPLATE_KEYWORDS:
            source = inject(source, keyword, markup)
    if style is not None:
        for keyword in STYLE_KEYWORDS:
            source = inject(source, keyword, style)
    return source
