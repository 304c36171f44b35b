"""Data structures describing an analysed pull request."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from typing import Any, Optional


def _drop_none(obj: Any) -> dict[str, Any]:
    return {
        f.name: getattr(obj, f.name)
        for f in fields(obj)
        if getattr(obj, f.name) is not None
    }


@dataclass
class PRSize:
    """Size of a pull request in changed lines and files."""

    lines_changed: int = 0
    files_changed: int = 0


@dataclass
class Timestamps:
    """Key moments of a pull request, as UTC RFC 3339 strings."""

    first_commit: Optional[str] = None
    created_at: Optional[str] = None
    first_review_request: Optional[str] = None
    first_comment: Optional[str] = None
    first_approval: Optional[str] = None
    second_approval: Optional[str] = None
    merged_at: Optional[str] = None
    closed_at: Optional[str] = None


@dataclass
class PRTimestamps:
    """Timestamps as they appear in the report; unset entries are left out."""

    first_commit: Optional[str] = None
    created_at: Optional[str] = None
    first_review_request: Optional[str] = None
    first_comment: Optional[str] = None
    first_approval: Optional[str] = None
    second_approval: Optional[str] = None
    merged_at: Optional[str] = None
    closed_at: Optional[str] = None
    release_created_at: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping, omitting unset timestamps."""
        return _drop_none(self)


@dataclass
class PRMetrics:
    """Review-process metrics; only the draft time is always present."""

    draft_time_hours: float = 0.0
    time_to_first_review_request_hours: Optional[float] = None
    time_to_first_review_hours: Optional[float] = None
    review_cycle_time_hours: Optional[float] = None
    blocking_non_blocking_ratio: Optional[float] = None
    reviewer_participation_ratio: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping, omitting metrics that are unset."""
        return _drop_none(self)


_OMIT_WHEN_NONE = frozenset({"metrics", "release_name", "timestamps"})


@dataclass
class PRDetails:
    """The complete analysis of one pull request."""

    organization_name: str
    repository_name: str
    pr_number: int
    pr_title: str
    pr_web_url: str
    pr_node_id: str
    author_username: str
    approver_usernames: list[str] = field(default_factory=list)
    commenter_usernames: list[str] = field(default_factory=list)
    state: str = ""
    num_comments: int = 0
    num_commenters: int = 0
    num_approvers: int = 0
    num_requested_reviewers: int = 0
    change_requests_count: int = 0
    lines_changed: int = 0
    files_changed: int = 0
    commits_after_first_review: int = 0
    jira_issue: str = ""
    is_bot: bool = False
    metrics: Optional[PRMetrics] = None
    release_name: Optional[str] = None
    timestamps: Optional[PRTimestamps] = None
    generated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping of the report."""
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None and f.name in _OMIT_WHEN_NONE:
                continue
            if isinstance(value, (PRMetrics, PRTimestamps)):
                value = value.to_dict()
            elif isinstance(value, list):
                value = list(value)
            data[f.name] = value
        return data

    def to_json(self) -> str:
        """Serialise the report as indented JSON."""
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class ReleaseInfo:
    """Name and creation time of the release that shipped a pull request."""

    name: str
    created_at: str = ""


@dataclass
class Config:
    """Settings for talking to GitHub."""

    github_token: str = field(default="", repr=False)