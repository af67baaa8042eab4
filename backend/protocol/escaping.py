"""
Parameter escaping for text carried on the tagged protocol channel.

The two directions use different entity sets and this is deliberate
compatibility with the host SDK:

    escape:   &  <  >  "  '   ->  &amp; &lt; &gt; &quot; &#039;
    unescape: &gt; &lt; &#92; &#39; &#34;  ->  >  <  \\  '  "

So `<` and `>` round-trip, while `&`, `"` and `'` arrive at the peer still
escaped. Replacement order matters and is fixed.
"""

from __future__ import annotations

from typing import Any, Final

_ESCAPES: Final[tuple[tuple[str, str], ...]] = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
)

_UNESCAPES: Final[tuple[tuple[str, str], ...]] = (
    ("&gt;", ">"),
    ("&lt;", "<"),
    ("&#92;", "\\"),
    ("&#39;", "'"),
    ("&#34;", '"'),
)


def escape_parameter(value: Any) -> Any:
    """Escape a string for the protocol channel. Non-strings pass through."""
    if not isinstance(value, str):
        return value
    for raw, entity in _ESCAPES:
        value = value.replace(raw, entity)
    return value


def unescape_parameter(value: Any) -> Any:
    """Undo host-side escaping. Non-strings pass through."""
    if not isinstance(value, str):
        return value
    for entity, raw in _UNESCAPES:
        value = value.replace(entity, raw)
    return value
