"""Line-state machine that drops unused inline declarations from a definition file."""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass, replace

from resprune.catalog.declarations import (
    TAG_END,
    DeclarationMatch,
    is_self_closing_end,
    match_declarations,
)


@dataclass(slots=True, frozen=True)
class PendingBlock:
    """Declaration still open at the end of a line.

    While `tag_open` is set the opening tag itself has not ended yet, so a
    self-closing `/>` can still finish the block.
    """

    category: str
    name: str
    closing_tag: str
    tag_open: bool = False


@dataclass(slots=True, frozen=True)
class RewriteResult:
    """Outcome of rewriting one definition file's lines."""

    lines: tuple[str, ...]
    removed: tuple[tuple[str, str], ...]
    removed_line_count: int
    unterminated: PendingBlock | None = None
    shared: tuple[tuple[str, str], ...] = ()

    @property
    def text(self) -> str:
        return "".join(self.lines)

    @property
    def should_write(self) -> bool:
        """True when lines were dropped and something non-empty remains."""
        return self.removed_line_count > 0 and bool(self.text)


def _step(line: str, block: PendingBlock, cursor: int) -> tuple[PendingBlock | None, int]:
    if block.tag_open:
        tag_end = line.find(TAG_END, cursor)
        if tag_end < 0:
            return block, len(line)
        if is_self_closing_end(line, tag_end):
            return None, tag_end + 1
        block = replace(block, tag_open=False)
        cursor = tag_end + 1
    close = line.find(block.closing_tag, cursor)
    if close < 0:
        return block, len(line)
    return None, close + len(block.closing_tag)


def open_block_after(
    line: str,
    matches: Sequence[DeclarationMatch],
    pending: PendingBlock | None = None,
) -> PendingBlock | None:
    """Return the declaration still open once `line` has been read.

    `pending` is the block carried over from earlier lines; `matches` are the
    line's opening tags in position order.
    """
    cursor = 0
    for match in matches:
        if pending is not None:
            pending, cursor = _step(line, pending, cursor)
            if pending is not None:
                return pending
        if match.position < cursor:
            continue
        pending = PendingBlock(
            category=match.category.key,
            name=match.name,
            closing_tag=match.category.closing_tag,
            tag_open=True,
        )
        cursor = match.value_end
    if pending is not None:
        pending, _ = _step(line, pending, cursor)
    return pending


def rewrite_definition_lines(
    lines: Sequence[str],
    doomed: Mapping[str, Collection[str]],
) -> RewriteResult:
    """Drop the declarations of `doomed` (category key -> names) from `lines`.

    Lines should keep their terminators (`splitlines(keepends=True)`) so that the
    kept lines join back to the original bytes. Lines joined by an open block form
    one group; a group is dropped only when every declaration in it is doomed,
    otherwise its doomed declarations are reported as `shared` and kept.
    """
    kept: list[str] = []
    removed: list[tuple[str, str]] = []
    shared: list[tuple[str, str]] = []
    removed_line_count = 0
    group_lines: list[str] = []
    group_matches: list[DeclarationMatch] = []
    pending: PendingBlock | None = None

    for line in lines:
        matches = match_declarations(line)
        if pending is None and not matches:
            kept.append(line)
            continue
        group_lines.append(line)
        group_matches.extend(matches)
        pending = open_block_after(line, matches, pending)
        if pending is not None:
            continue

        keys = [(match.category.key, match.name) for match in group_matches]
        doomed_keys = [key for key in keys if key[1] in doomed.get(key[0], ())]
        if doomed_keys and len(doomed_keys) == len(keys):
            removed.extend(doomed_keys)
            removed_line_count += len(group_lines)
        else:
            kept.extend(group_lines)
            shared.extend(doomed_keys)
        group_lines = []
        group_matches = []

    unterminated = None
    if group_lines:
        kept.extend(group_lines)
        if any(match.name in doomed.get(match.category.key, ()) for match in group_matches):
            unterminated = pending

    return RewriteResult(
        lines=tuple(kept),
        removed=tuple(dict.fromkeys(removed)),
        removed_line_count=removed_line_count,
        unterminated=unterminated,
        shared=tuple(dict.fromkeys(shared)),
    )
