"""Line-level matching of inline resource declarations."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from resprune.categories import INLINE_CATEGORIES, ResourceCategory

TAG_END = ">"
SELF_CLOSING_MARKER = "/"


@dataclass(slots=True, frozen=True)
class DeclarationMatch:
    """Opening tag found on a single line.

    `value_end` is the index of the quote that ends the name attribute.
    """

    category: ResourceCategory
    name: str
    position: int
    value_end: int


def match_declarations(
    line: str, categories: Sequence[ResourceCategory] = INLINE_CATEGORIES
) -> list[DeclarationMatch]:
    """Return every `<key name="X"` opening tag on a line, ordered by position."""
    matches: list[DeclarationMatch] = []
    for category in categories:
        tag = category.opening_tag
        position = line.find(tag)
        while position >= 0:
            value_start = position + len(tag)
            value_end = line.find('"', value_start)
            if value_end < 0:
                break
            if value_end > value_start:
                matches.append(
                    DeclarationMatch(
                        category=category,
                        name=line[value_start:value_end],
                        position=position,
                        value_end=value_end,
                    )
                )
            position = line.find(tag, value_end + 1)
    matches.sort(key=lambda match: match.position)
    return matches


def is_self_closing_end(line: str, tag_end: int) -> bool:
    """Return True when the `>` at `tag_end` closes a `<... />` tag."""
    return tag_end > 0 and line[tag_end - 1] == SELF_CLOSING_MARKER


def closes_on_line(line: str, match: DeclarationMatch) -> bool:
    """Return True when the declaration opened on `line` also ends there.

    Either the opening tag itself is self-closing, or the category's closing tag
    follows it. A self-closing child such as `<br/>` does not end the declaration.
    """
    tag_end = line.find(TAG_END, match.value_end)
    if tag_end < 0:
        return False
    if is_self_closing_end(line, tag_end):
        return True
    return line.find(match.category.closing_tag, tag_end) >= 0
