"""Markdown-lite rendering of script explanations.

Explanations come back as loosely formatted markdown. Only a small subset
is understood, which is all the explanation prompt asks for:

- Blocks are separated by blank lines
- "# " starts an <h3> heading, "## " an <h4> heading
- A block starting with "* " or "- " is a list, one <li> per line
- Anything else is a <p> paragraph
- **text** becomes <strong>text</strong> inside every kind of block

Text is HTML-escaped before the markup is applied.
"""

from __future__ import annotations

import html
import re

_BLOCK_SEPARATOR = re.compile(r"\n\s*\n")
_BOLD = re.compile(r"\*\*(.*?)\*\*")


def _inline(text: str) -> str:
    return _BOLD.sub(r"<strong>\1</strong>", html.escape(text, quote=False))


def render_block(block: str) -> str:
    """Render one blank-line-separated block to an HTML element."""
    trimmed = block.strip()

    if trimmed.startswith("# "):
        return f"<h3>{_inline(trimmed[2:])}</h3>"
    if trimmed.startswith("## "):
        return f"<h4>{_inline(trimmed[3:])}</h4>"

    if trimmed.startswith("* ") or trimmed.startswith("- "):
        # Every line is an item, marker or not; the first two characters go
        items = "".join(
            f"<li>{_inline(line[2:])}</li>" for line in trimmed.split("\n")
        )
        return f"<ul>{items}</ul>"

    return f"<p>{_inline(trimmed)}</p>"


def render_explanation(text: str) -> str:
    """Render an explanation to an HTML fragment, one element per line.

    Example:
        >>> render_explanation("# Overview\\n\\n- **Logs** to disk")
        '<h3>Overview</h3>\\n<ul><li><strong>Logs</strong> to disk</li></ul>'
    """
    return "\n".join(render_block(block) for block in _BLOCK_SEPARATOR.split(text))
