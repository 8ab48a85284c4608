"""Data-source records for pull requests and their comments.

These mirror the fields the GitHub API returns that the viewer reads. They
are plain frozen dataclasses; the viewer never mutates loaded data.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RepoInfo:
    name_with_owner: str
    url: str = ""

    @property
    def web_url(self) -> str:
        return self.url or f"https://github.com/{self.name_with_owner}"


@dataclass(frozen=True)
class PrListItem:
    number: int
    title: str
    head_ref_name: str
    base_ref_name: str
    updated_at: str | None = None


@dataclass(frozen=True)
class PrInfo:
    number: int
    title: str
    url: str


@dataclass(frozen=True)
class IssueComment:
    """Top-level discussion comment on a pull request."""

    id: int
    body: str | None
    user_login: str | None
    created_at: str | None
    html_url: str


@dataclass(frozen=True)
class ReviewComment:
    """Inline review comment anchored to a file and optional line."""

    id: int
    body: str | None
    user_login: str | None
    created_at: str | None
    html_url: str
    path: str | None = None
    line: int | None = None
    original_line: int | None = None
    in_reply_to_id: int | None = None


@dataclass(frozen=True)
class InlineCommentNode:
    comment: ReviewComment
    children: tuple[InlineCommentNode, ...] = ()


@dataclass(frozen=True)
class InlineThread:
    root: InlineCommentNode


@dataclass(frozen=True)
class LoadedPrComments:
    """Everything the comment viewer needs for one pull request."""

    repo: RepoInfo
    pr: PrInfo
    issue_comments: tuple[IssueComment, ...] = ()
    inline_threads: tuple[InlineThread, ...] = ()
    pr_inference: str = ""


__all__ = [
    "RepoInfo",
    "PrListItem",
    "PrInfo",
    "IssueComment",
    "ReviewComment",
    "InlineCommentNode",
    "InlineThread",
    "LoadedPrComments",
]
