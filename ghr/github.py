"""GitHub data source built on the ``gh`` command-line client.

Every call shells out to ``gh`` and parses its JSON output into the records
in ``ghr.models``. Authentication, hosts, and proxies are whatever the user's
``gh`` session is configured for. Failures raise ``GitHubCliError``.
"""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Sequence

from .models import (
    InlineCommentNode,
    InlineThread,
    IssueComment,
    LoadedPrComments,
    PrInfo,
    PrListItem,
    RepoInfo,
    ReviewComment,
)

logger = logging.getLogger(__name__)

GH_TIMEOUT_SECONDS = 30.0
PR_LIST_LIMIT = 100

INFERENCE_EXPLICIT = "explicit --pr argument"
INFERENCE_SELECTED = "selected from open PR list"


class GitHubCliError(RuntimeError):
    """A ``gh`` invocation failed or produced output we could not parse."""

    def __init__(self, command: Sequence[str], message: str) -> None:
        self.command = tuple(command)
        self.message = message.strip() or "gh command failed"
        super().__init__(self.message)


def run_gh(args: Sequence[str], timeout_seconds: float = GH_TIMEOUT_SECONDS) -> str:
    """Run ``gh`` with ``args`` and return stdout."""
    command = ["gh", *args]
    logger.debug("running %s", " ".join(command))
    try:
        proc = subprocess.run(
            command,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except FileNotFoundError as exc:
        raise GitHubCliError(command, "gh CLI not found; install it from https://cli.github.com") from exc
    except subprocess.TimeoutExpired as exc:
        raise GitHubCliError(command, f"gh timed out after {timeout_seconds:g}s") from exc

    if proc.returncode != 0:
        raise GitHubCliError(command, proc.stderr or f"gh exited with status {proc.returncode}")
    return proc.stdout


def decode_json_stream(text: str) -> list[object]:
    """Decode back-to-back JSON documents, as ``gh api --paginate`` prints them."""
    decoder = json.JSONDecoder()
    documents: list[object] = []
    pos = 0
    length = len(text)
    while True:
        while pos < length and text[pos].isspace():
            pos += 1
        if pos >= length:
            return documents
        document, pos = decoder.raw_decode(text, pos)
        documents.append(document)


def gh_json(args: Sequence[str]) -> object:
    output = run_gh(args)
    try:
        return json.loads(output)
    except json.JSONDecodeError as exc:
        raise GitHubCliError(["gh", *args], f"invalid JSON from gh: {exc}") from exc


def gh_paginated(endpoint: str) -> list[dict]:
    """Fetch every page of a REST list endpoint and concatenate the items."""
    args = ["api", "--paginate", endpoint]
    output = run_gh(args)
    try:
        pages = decode_json_stream(output)
    except json.JSONDecodeError as exc:
        raise GitHubCliError(["gh", *args], f"invalid JSON from gh: {exc}") from exc

    items: list[dict] = []
    for page in pages:
        if isinstance(page, list):
            items.extend(item for item in page if isinstance(item, dict))
    return items


def _optional_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _login(raw: dict) -> str | None:
    user = raw.get("user")
    if isinstance(user, dict) and isinstance(user.get("login"), str):
        return user["login"]
    return None


def parse_issue_comment(raw: dict) -> IssueComment:
    return IssueComment(
        id=int(raw.get("id") or 0),
        body=raw.get("body"),
        user_login=_login(raw),
        created_at=raw.get("created_at"),
        html_url=raw.get("html_url") or "",
    )


def parse_review_comment(raw: dict) -> ReviewComment:
    return ReviewComment(
        id=int(raw.get("id") or 0),
        body=raw.get("body"),
        user_login=_login(raw),
        created_at=raw.get("created_at"),
        html_url=raw.get("html_url") or "",
        path=raw.get("path"),
        line=_optional_int(raw.get("line")),
        original_line=_optional_int(raw.get("original_line")),
        in_reply_to_id=_optional_int(raw.get("in_reply_to_id")),
    )


def build_inline_threads(comments: Sequence[ReviewComment]) -> tuple[InlineThread, ...]:
    """Group review comments into reply trees keyed by ``in_reply_to_id``.

    Replies whose parent is missing become thread roots. Sibling order
    follows input order.
    """
    by_id = {comment.id: comment for comment in comments}
    children: dict[int, list[ReviewComment]] = {}
    roots: list[ReviewComment] = []
    for comment in comments:
        parent_id = comment.in_reply_to_id
        if parent_id is None or parent_id == comment.id or parent_id not in by_id:
            roots.append(comment)
        else:
            children.setdefault(parent_id, []).append(comment)

    threads: list[InlineThread] = []
    built: dict[int, InlineCommentNode] = {}
    for root in roots:
        # Post-order build with an explicit stack; frozen nodes need children first.
        stack: list[tuple[ReviewComment, bool]] = [(root, False)]
        visiting: set[int] = set()
        while stack:
            comment, expanded = stack.pop()
            if expanded:
                kids = tuple(built[kid.id] for kid in children.get(comment.id, ()) if kid.id in built)
                built[comment.id] = InlineCommentNode(comment=comment, children=kids)
                continue
            if comment.id in visiting:
                continue
            visiting.add(comment.id)
            stack.append((comment, True))
            for kid in reversed(children.get(comment.id, ())):
                stack.append((kid, False))
        threads.append(InlineThread(root=built[root.id]))
    return tuple(threads)


def resolve_repo(repo: str | None = None) -> RepoInfo:
    """Return the repository named by ``repo`` or the one in the current directory."""
    args = ["repo", "view"]
    if repo:
        args.append(repo)
    args += ["--json", "nameWithOwner,url"]
    data = gh_json(args)
    if not isinstance(data, dict) or not data.get("nameWithOwner"):
        raise GitHubCliError(["gh", *args], "could not resolve repository")
    return RepoInfo(name_with_owner=data["nameWithOwner"], url=data.get("url") or "")


def list_open_prs(repo: RepoInfo, limit: int = PR_LIST_LIMIT) -> list[PrListItem]:
    data = gh_json(
        [
            "pr",
            "list",
            "--repo",
            repo.name_with_owner,
            "--state",
            "open",
            "--limit",
            str(limit),
            "--json",
            "number,title,headRefName,baseRefName,updatedAt",
        ]
    )
    if not isinstance(data, list):
        return []
    return [
        PrListItem(
            number=int(item.get("number") or 0),
            title=item.get("title") or "",
            head_ref_name=item.get("headRefName") or "",
            base_ref_name=item.get("baseRefName") or "",
            updated_at=item.get("updatedAt"),
        )
        for item in data
        if isinstance(item, dict)
    ]


def _parse_pr_info(data: object, args: Sequence[str]) -> PrInfo:
    if not isinstance(data, dict) or not isinstance(data.get("number"), int):
        raise GitHubCliError(["gh", *args], "unexpected pull request payload")
    return PrInfo(number=data["number"], title=data.get("title") or "", url=data.get("url") or "")


def fetch_pr(repo: RepoInfo, number: int) -> PrInfo:
    args = ["pr", "view", str(number), "--repo", repo.name_with_owner, "--json", "number,title,url"]
    return _parse_pr_info(gh_json(args), args)


def current_branch() -> str | None:
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            capture_output=True,
            text=True,
            check=False,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    branch = proc.stdout.strip()
    if proc.returncode != 0 or not branch or branch == "HEAD":
        return None
    return branch


def infer_pr_for_current_branch(repo: RepoInfo) -> tuple[PrInfo | None, str]:
    """Find the PR whose head is the checked-out branch.

    Returns ``(None, reason)`` when there is no such PR; that is not an error.
    """
    branch = current_branch()
    if branch is None:
        return None, "no current branch"
    args = ["pr", "view", branch, "--repo", repo.name_with_owner, "--json", "number,title,url"]
    try:
        pr = _parse_pr_info(gh_json(args), args)
    except GitHubCliError as exc:
        logger.info("no PR for branch %s: %s", branch, exc)
        return None, f"no open PR for branch {branch}"
    return pr, f"current branch {branch}"


def load_pr_comments(repo: RepoInfo, number: int, pr_inference: str = "") -> LoadedPrComments:
    """Fetch a PR plus its discussion comments and inline review threads."""
    pr = fetch_pr(repo, number)
    base = f"repos/{repo.name_with_owner}"
    issue_comments = tuple(parse_issue_comment(raw) for raw in gh_paginated(f"{base}/issues/{number}/comments"))
    review_comments = [parse_review_comment(raw) for raw in gh_paginated(f"{base}/pulls/{number}/comments")]
    logger.info(
        "loaded %s#%d: %d discussion, %d inline comments",
        repo.name_with_owner,
        number,
        len(issue_comments),
        len(review_comments),
    )
    return LoadedPrComments(
        repo=repo,
        pr=pr,
        issue_comments=issue_comments,
        inline_threads=build_inline_threads(review_comments),
        pr_inference=pr_inference,
    )


__all__ = [
    "GH_TIMEOUT_SECONDS",
    "INFERENCE_EXPLICIT",
    "INFERENCE_SELECTED",
    "GitHubCliError",
    "run_gh",
    "decode_json_stream",
    "gh_json",
    "gh_paginated",
    "parse_issue_comment",
    "parse_review_comment",
    "build_inline_threads",
    "resolve_repo",
    "list_open_prs",
    "fetch_pr",
    "current_branch",
    "infer_pr_for_current_branch",
    "load_pr_comments",
]
