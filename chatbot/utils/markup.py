"""
MARKUP RENDERER
===============

Turns untrusted message text (model replies, uploaded file names, user input)
into HTML that is safe to drop into a chat bubble. It is NOT a markdown parser:
only four constructs are recognised, each by a single regex pass.

ORDER (fixed):
  1. Escape &, <, > (ampersand first so later entities are not double-escaped).
  2. Apply MARKUP_RULES in order: bold, italic, inline code, link.
  3. Turn newlines into <br/>.

After step 1 the text has no angle brackets, so every tag in the output comes
from a rule. Nested or overlapping constructs may render oddly; that is accepted.
"""

import re
from typing import Callable, Tuple, Union

Replacement = Union[str, Callable[[re.Match], str]]

_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
)


def _link(match: re.Match) -> str:
    # Quotes would end the href attribute early.
    href = match.group(2).replace('"', "&quot;")
    return f'<a href="{href}" target="_blank" rel="noopener noreferrer">{match.group(1)}</a>'


# Ordered (pattern, replacement) pairs. Bold must run before italic.
MARKUP_RULES: Tuple[Tuple[re.Pattern, Replacement], ...] = (
    (re.compile(r"\*\*(.*?)\*\*"), r"<strong>\1</strong>"),
    (re.compile(r"\*(.*?)\*"), r"<em>\1</em>"),
    (re.compile(r"`([^`]+)`"), r"<code>\1</code>"),
    (re.compile(r"\[([^\]]+)\]\(([^)]+)\)"), _link),
)


def escape_html(text: str) -> str:
    """Escape the three HTML metacharacters, ampersand first."""
    for char, entity in _ESCAPES:
        text = text.replace(char, entity)
    return text


def render_markup(text: str) -> str:
    """Escape text, apply MARKUP_RULES in order, then convert newlines to <br/>."""
    html = escape_html(text)
    for pattern, replacement in MARKUP_RULES:
        html = pattern.sub(replacement, html)
    return html.replace("\n", "<br/>")
