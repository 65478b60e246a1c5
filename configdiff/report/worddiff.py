"""Inline word-level diff of two short texts, rendered as HTML."""

from __future__ import annotations

import difflib
import html
import re

_TOKEN = re.compile(r"\w+|\s+|[^\w\s]")


def tokenize(text: str) -> list[str]:
    return _TOKEN.findall(text)


def word_diff(old: str, new: str) -> str:
    """Render *old* -> *new* with removed words in ``<del>`` and added words in ``<ins>``."""
    a, b = tokenize(old), tokenize(new)
    matcher = difflib.SequenceMatcher(None, a, b, autojunk=False)
    parts: list[str] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        removed = html.escape("".join(a[i1:i2]), quote=False)
        added = html.escape("".join(b[j1:j2]), quote=False)
        if tag == "equal":
            parts.append(removed)
            continue
        if removed:
            parts.append(f'<del class="removed">{removed}</del>')
        if added:
            parts.append(f'<ins class="added">{added}</ins>')
    return "".join(parts)
