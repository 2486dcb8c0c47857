"""Comment stripping and quote-aware splitting of DDL text."""

import re
from collections.abc import Iterator

LINE_COMMENT = re.compile(r"--[^\n]*")
BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
WHITESPACE = re.compile(r"\s+")

QUOTES = frozenset("'\"`")
STATEMENT_TERMINATOR = ";"
DEFINITION_SEPARATOR = ","


def preprocess(sql: str) -> str:
    """Remove comments and collapse whitespace."""
    cleaned = LINE_COMMENT.sub("", sql)
    cleaned = BLOCK_COMMENT.sub("", cleaned)
    return WHITESPACE.sub(" ", cleaned).strip()


def _scan(text: str) -> Iterator[tuple[str, bool, int]]:
    """Yield each character with its literal state and parenthesis depth.

    A quote directly preceded by a backslash does not open or close a literal.
    Only that one character is looked at, so ``\\\\'`` is misread; escaping rules
    differ between dialects and this matches how dumps are usually written.
    """
    quote: str | None = None
    depth = 0
    previous = ""
    for char in text:
        if char in QUOTES and previous != "\\":
            if quote is None:
                quote = char
            elif char == quote:
                quote = None
        if quote is None:
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
        yield char, quote is not None, depth
        previous = char


def _split(text: str, separator: str, *, top_level_only: bool) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    for char, in_literal, depth in _scan(text):
        if char == separator and not in_literal and (depth == 0 or not top_level_only):
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    parts.append("".join(current).strip())
    return [part for part in parts if part]


def split_statements(sql: str) -> list[str]:
    """Split text on statement terminators that sit outside quoted literals."""
    return _split(sql, STATEMENT_TERMINATOR, top_level_only=False)


def split_definitions(body: str) -> list[str]:
    """Split a table body on commas outside literals and parentheses."""
    return _split(body, DEFINITION_SEPARATOR, top_level_only=True)


def enclosed(text: str, open_index: int) -> str | None:
    """Return the text inside the parenthesis opened at ``open_index``.

    ``None`` when the parenthesis is never closed.
    """
    for offset, (char, in_literal, depth) in enumerate(_scan(text[open_index:])):
        if char == ")" and not in_literal and depth == 0:
            return text[open_index + 1 : open_index + offset]
    return None


def mask_literals(text: str) -> str:
    """Blank out the contents of quoted literals, keeping positions."""
    return "".join(
        " " if in_literal and char not in QUOTES else char
        for char, in_literal, _depth in _scan(text)
    )


def strip_quotes(identifier: str) -> str:
    """Drop identifier quoting characters and surrounding space."""
    return identifier.strip().replace("`", "").replace('"', "")
