"""Flatten discussion comments and inline review threads into list rows.

Discussion comments sort by their own timestamp. Each inline thread stays a
contiguous block (root, then replies in pre-order) and sorts by the newest
timestamp anywhere in the thread, so an active thread moves down the list
as a whole instead of scattering its replies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .models import InlineCommentNode, IssueComment, LoadedPrComments, ReviewComment
from .text.normalize import NO_BODY_PLACEHOLDER, preview_body
from .text.spans import SpanColor
from .timefmt import to_timestamp

CommentKind = Literal["discussion", "inline"]

GHOST_AUTHOR = "ghost"
GENERAL_LOCATION = "general"
AUTHOR_COLOR_PALETTE: tuple[SpanColor, ...] = ("cyan", "green", "magenta", "blue", "yellow")


@dataclass(frozen=True)
class UnifiedCommentRow:
    key: str
    depth: int
    subline: str
    body: str
    html_url: str
    created_at: str | None
    author: str
    location: str
    kind: CommentKind


def author_name(login: str | None) -> str:
    return login or GHOST_AUTHOR


def hash_string(value: str) -> int:
    result = 0
    for ch in value:
        result = (result * 31 + ord(ch)) & 0xFFFFFFFF
    return result


def author_color(login: str) -> SpanColor:
    """Pick a stable palette color for an author login."""
    if not login:
        return "white"
    return AUTHOR_COLOR_PALETTE[hash_string(login.lower()) % len(AUTHOR_COLOR_PALETTE)]


def line_ref(path: str | None, line: int | None, original_line: int | None) -> str:
    """Format an inline comment location as ``path:line`` when possible."""
    if not path:
        return GENERAL_LOCATION
    resolved = line if line is not None else original_line
    if not resolved:
        return path
    return f"{path}:{resolved}"


def discussion_row(comment: IssueComment) -> UnifiedCommentRow:
    return UnifiedCommentRow(
        key=f"discussion-{comment.id}",
        depth=0,
        subline=preview_body(comment.body),
        body=comment.body or NO_BODY_PLACEHOLDER,
        html_url=comment.html_url,
        created_at=comment.created_at,
        author=author_name(comment.user_login),
        location=GENERAL_LOCATION,
        kind="discussion",
    )


def inline_row(comment: ReviewComment, depth: int) -> UnifiedCommentRow:
    return UnifiedCommentRow(
        key=f"inline-{comment.id}",
        depth=depth,
        subline=preview_body(comment.body),
        body=comment.body or NO_BODY_PLACEHOLDER,
        html_url=comment.html_url,
        created_at=comment.created_at,
        author=author_name(comment.user_login),
        location=line_ref(comment.path, comment.line, comment.original_line),
        kind="inline",
    )


def walk_thread(root: InlineCommentNode) -> list[tuple[InlineCommentNode, int]]:
    """Return ``(node, depth)`` pairs in pre-order using an explicit stack."""
    out: list[tuple[InlineCommentNode, int]] = []
    stack: list[tuple[InlineCommentNode, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        out.append((node, depth))
        for child in reversed(node.children):
            stack.append((child, depth + 1))
    return out


def latest_timestamp(root: InlineCommentNode) -> float:
    return max(to_timestamp(node.comment.created_at) for node, _depth in walk_thread(root))


def inline_rows(root: InlineCommentNode) -> list[UnifiedCommentRow]:
    return [inline_row(node.comment, depth) for node, depth in walk_thread(root)]


def build_unified_rows(data: LoadedPrComments) -> list[UnifiedCommentRow]:
    """Merge discussion rows and thread blocks into one chronological list."""
    grouped: list[tuple[float, list[UnifiedCommentRow]]] = []
    for comment in data.issue_comments:
        grouped.append((to_timestamp(comment.created_at), [discussion_row(comment)]))
    for thread in data.inline_threads:
        grouped.append((latest_timestamp(thread.root), inline_rows(thread.root)))

    # list.sort is stable, so equal keys keep input order.
    grouped.sort(key=lambda item: item[0])
    return [row for _sort, rows in grouped for row in rows]


__all__ = [
    "CommentKind",
    "GHOST_AUTHOR",
    "GENERAL_LOCATION",
    "AUTHOR_COLOR_PALETTE",
    "UnifiedCommentRow",
    "author_name",
    "author_color",
    "line_ref",
    "discussion_row",
    "inline_row",
    "walk_thread",
    "latest_timestamp",
    "inline_rows",
    "build_unified_rows",
]
