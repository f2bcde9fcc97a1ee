"""Boundary-aware token matching for single lines."""

from __future__ import annotations

from collections.abc import Iterable

CODE_COMMENT_PREFIX = "//"
_IDENTIFIER_PUNCTUATION = frozenset("_.")


def is_identifier_char(char: str) -> bool:
    """Return True for characters that extend a resource identifier."""
    return char.isalnum() or char in _IDENTIFIER_PUNCTUATION


def find_token(line: str, token: str, start: int = 0) -> int:
    """Return the first position of `token` that ends on an identifier boundary, else -1.

    `R.string.title` matches `R.string.title)` but not `R.string.title_bar` or
    `R.string.title.long`; a rejected occurrence resumes the search one character
    later so a second reference on the same line is still found.
    """
    if not token:
        return -1
    position = line.find(token, start)
    while position >= 0:
        end = position + len(token)
        if end >= len(line) or not is_identifier_char(line[end]):
            return position
        position = line.find(token, position + 1)
    return -1


def contains_token(line: str, token: str) -> bool:
    """Return True when the line holds at least one boundary-valid occurrence."""
    return find_token(line, token) >= 0


def contains_any_token(line: str, tokens: Iterable[str]) -> bool:
    """Return True when any token occurs on the line with a valid boundary."""
    return any(contains_token(line, token) for token in tokens)


def is_code_comment(line: str) -> bool:
    """Return True for lines that are a single-line comment in code files."""
    return line.lstrip().startswith(CODE_COMMENT_PREFIX)
