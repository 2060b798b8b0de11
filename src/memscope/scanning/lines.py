"""Offset-to-line lookup for scanned source text."""

from __future__ import annotations

from bisect import bisect_right

COMMENT_MARKER = "//"


class LineLocator:
    """Maps character offsets in ``text`` to 1-based line numbers.

    Line starts are computed once so each lookup is a binary search.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._starts = [0]
        pos = text.find("\n")
        while pos != -1:
            self._starts.append(pos + 1)
            pos = text.find("\n", pos + 1)

    def line_of(self, offset: int) -> int:
        return bisect_right(self._starts, offset)

    def line_text(self, line: int) -> str:
        if line < 1 or line > len(self._starts):
            return ""
        start = self._starts[line - 1]
        end = self._text.find("\n", start)
        return self._text[start:] if end == -1 else self._text[start:end]

    def is_commented(self, line: int) -> bool:
        """True when the line's trimmed text starts with ``//``."""
        return self.line_text(line).strip().startswith(COMMENT_MARKER)
