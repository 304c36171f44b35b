"""Pure functions that turn raw GitHub pull-request data into metrics.

All inputs are the JSON objects returned by the GitHub REST API, as plain
dictionaries and lists.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional, Pattern

from pullmetrics.types import PRMetrics, PRSize, ReleaseInfo, Timestamps

JIRA_PATTERN = re.compile(r"\b[A-Z][A-Z0-9]+-\d+\b", re.ASCII)

_RFC3339 = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(Z|[+-]\d{2}:\d{2})$"
)
_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def _get(obj: Any, *keys: str) -> Any:
    """Walk nested mappings, yielding None where anything is missing."""
    for key in keys:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def _login(obj: Any) -> str:
    return _get(obj, "login") or ""


def _user_login(obj: Any) -> str:
    return _login(_get(obj, "user"))


def _parse_rfc3339(text: Any) -> Optional[datetime]:
    if not isinstance(text, str):
        return None
    match = _RFC3339.match(text)
    if match is None:
        return None
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        off_hours, off_minutes = int(zone[1:3]), int(zone[4:6])
        if off_hours > 23 or off_minutes > 59:
            return None
        tz = timezone(sign * timedelta(hours=off_hours, minutes=off_minutes))
    micro = int((fraction or "0")[:6].ljust(6, "0"))
    try:
        return datetime(
            int(year), int(month), int(day),
            int(hour), int(minute), int(second), micro, tzinfo=tz,
        )
    except ValueError:
        return None


def _time_or_zero(value: Any) -> datetime:
    parsed = _parse_rfc3339(value)
    return parsed if parsed is not None else _ZERO_TIME


def _is_zero(moment: datetime) -> bool:
    return moment == _ZERO_TIME


def _format_utc(moment: datetime) -> str:
    utc = moment.astimezone(timezone.utc)
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d}"
        f"T{utc.hour:02d}:{utc.minute:02d}:{utc.second:02d}Z"
    )


def _hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600.0


def _commit_time(commit: Any) -> datetime:
    return _time_or_zero(_get(commit, "commit", "author", "date"))


def _first_review_request_time(timeline: Iterable[dict]) -> Optional[datetime]:
    for event in timeline:
        if _get(event, "event") == "review_requested":
            return _time_or_zero(_get(event, "created_at"))
    return None


def get_pr_state(pr: dict) -> str:
    """Return "draft", "merged", or the pull request's own state."""
    if pr.get("draft"):
        return "draft"
    if pr.get("merged"):
        return "merged"
    return pr.get("state") or ""


def get_approvers(reviews: Iterable[dict]) -> list[str]:
    """Return the distinct logins of reviewers who approved, in first-seen order."""
    approvers: dict[str, None] = {}
    for review in reviews:
        if _get(review, "state") == "APPROVED":
            approvers.setdefault(_user_login(review), None)
    return list(approvers)


def get_commenters(
    comments: Iterable[dict], review_comments: Iterable[dict], author_username: str
) -> set[str]:
    """Return the logins of everyone but the author who commented."""
    commenters: set[str] = set()
    for comment in [*comments, *review_comments]:
        login = _user_login(comment)
        if login != author_username:
            commenters.add(login)
    return commenters


def count_total_comments(comments: list, review_comments: list) -> int:
    """Return the number of conversation and inline review comments."""
    return len(comments) + len(review_comments)


def get_commenter_usernames(commenters: Iterable[str]) -> list[str]:
    """Return commenter logins in sorted order."""
    return sorted(commenters)


def count_all_requested_reviewers(pr: dict, reviews: Iterable[dict]) -> int:
    """Count reviewers who reviewed plus those still requested, without duplicates."""
    requested = {_user_login(review) for review in reviews}
    requested.update(_login(user) for user in pr.get("requested_reviewers") or [])
    return len(requested)


def get_timestamps(
    pr: dict,
    reviews: Iterable[dict],
    comments: Iterable[dict],
    review_comments: Iterable[dict],
    timeline: Iterable[dict],
    commits: Iterable[dict],
) -> Timestamps:
    """Collect the key moments of a pull request as UTC strings."""
    timestamps = Timestamps()

    commits = list(commits)
    if commits:
        timestamps.first_commit = _format_utc(min(_commit_time(c) for c in commits))

    created = _time_or_zero(pr.get("created_at"))
    if not _is_zero(created):
        timestamps.created_at = _format_utc(created)

    merged = _parse_rfc3339(pr.get("merged_at"))
    if merged is not None and not _is_zero(merged):
        timestamps.merged_at = _format_utc(merged)
    closed = _parse_rfc3339(pr.get("closed_at"))
    if closed is not None and not _is_zero(closed):
        timestamps.closed_at = _format_utc(closed)

    request_time = _first_review_request_time(timeline)
    if request_time is not None:
        timestamps.first_review_request = _format_utc(request_time)

    comment_times = [
        _time_or_zero(_get(c, "created_at")) for c in [*comments, *review_comments]
    ]
    if comment_times:
        timestamps.first_comment = _format_utc(min(comment_times))

    approval_times = sorted(
        _time_or_zero(_get(review, "submitted_at"))
        for review in reviews
        if _get(review, "state") == "APPROVED"
    )
    if approval_times:
        timestamps.first_approval = _format_utc(approval_times[0])
    if len(approval_times) > 1:
        timestamps.second_approval = _format_utc(approval_times[1])

    return timestamps


def format_to_utc(timestamp: str) -> str:
    """Normalise an RFC 3339 timestamp to UTC; return it unchanged if unparsable."""
    parsed = _parse_rfc3339(timestamp)
    if parsed is None:
        return timestamp
    return _format_utc(parsed)


def calculate_pr_size(files: Iterable[dict]) -> PRSize:
    """Sum additions and deletions over the changed files."""
    files = list(files)
    lines = sum(
        (_get(f, "additions") or 0) + (_get(f, "deletions") or 0) for f in files
    )
    return PRSize(lines_changed=lines, files_changed=len(files))


def find_release_info_for_merged_pr(
    pr: dict, releases: Optional[Iterable[dict]]
) -> Optional[ReleaseInfo]:
    """Return the first release published after the pull request was merged."""
    if not pr.get("merged"):
        return None
    merged_time = _parse_rfc3339(pr.get("merged_at"))
    if merged_time is None:
        return None

    candidates = []
    for release in releases or []:
        published = _parse_rfc3339(_get(release, "published_at"))
        if published is None or _is_zero(published):
            continue
        if published > merged_time:
            candidates.append((published, release))
    if not candidates:
        return None

    _, release = min(candidates, key=lambda pair: pair[0])
    name = _get(release, "name") or _get(release, "tag_name") or ""

    created_at = ""
    created = _parse_rfc3339(_get(release, "created_at"))
    if created is not None and not _is_zero(created):
        created_at = _format_utc(created)

    return ReleaseInfo(name=name, created_at=created_at)


def find_release_for_merged_pr(
    pr: dict, releases: Optional[Iterable[dict]]
) -> tuple[Optional[str], Optional[str]]:
    """Return the release name and creation time, or (None, None)."""
    info = find_release_info_for_merged_pr(pr, releases)
    if info is None:
        return None, None
    return info.name, info.created_at


def count_commits_after_first_review(
    commits: Iterable[dict], timeline: Iterable[dict]
) -> int:
    """Count commits authored after the first review request."""
    request_time = _first_review_request_time(timeline)
    if request_time is None:
        return 0
    return sum(1 for commit in commits if _commit_time(commit) > request_time)


def count_change_requests(reviews: Iterable[dict]) -> int:
    """Count reviews that requested changes."""
    return sum(1 for r in reviews if _get(r, "state") == "CHANGES_REQUESTED")


def is_bot(username: str) -> bool:
    """Return True for GitHub App accounts such as "dependabot[bot]"."""
    return "[bot]" in username


def find_valid_jira_issue(pattern: Pattern[str], text: str) -> str:
    """Return the first match that is not a CVE identifier, upper-cased, or ""."""
    for match in pattern.finditer(text):
        issue = match.group(0).upper()
        if not issue.startswith("CVE-"):
            return issue
    return ""


def extract_jira_issue(pr: dict) -> str:
    """Find a Jira key in the title, body or branch; else "BOT" or "UNKNOWN"."""
    issue = find_valid_jira_issue(JIRA_PATTERN, pr.get("title") or "")
    if issue:
        return issue

    body = pr.get("body")
    if body:
        issue = find_valid_jira_issue(JIRA_PATTERN, body)
        if issue:
            return issue

    branch = (_get(pr, "head", "ref") or "").upper()
    issue = find_valid_jira_issue(JIRA_PATTERN, branch)
    if issue:
        return issue

    if is_bot(_user_login(pr)):
        return "BOT"
    return "UNKNOWN"


def calculate_pr_metrics(
    pr: dict,
    reviews: Iterable[dict],
    comments: Iterable[dict],
    timeline: Iterable[dict],
    timestamps: Timestamps,
) -> PRMetrics:
    """Derive review-process metrics from the collected timestamps and reviews."""
    reviews = list(reviews)
    metrics = PRMetrics()

    created = _parse_rfc3339(timestamps.created_at)
    request = _parse_rfc3339(timestamps.first_review_request)

    if created is not None and request is not None and request > created:
        hours = _hours_between(created, request)
        metrics.draft_time_hours = hours
        metrics.time_to_first_review_request_hours = hours

    if request is not None:
        activity = _parse_rfc3339(timestamps.first_comment)
        approval = _parse_rfc3339(timestamps.first_approval)
        if approval is not None and (activity is None or approval < activity):
            activity = approval
        if activity is not None and activity > request:
            metrics.time_to_first_review_hours = _hours_between(request, activity)

        if timestamps.merged_at is not None:
            resolution = _parse_rfc3339(timestamps.merged_at)
        elif timestamps.closed_at is not None:
            resolution = _parse_rfc3339(timestamps.closed_at)
        else:
            resolution = None
        if resolution is not None and resolution > request:
            metrics.review_cycle_time_hours = _hours_between(request, resolution)

    blocking = sum(1 for r in reviews if _get(r, "state") == "CHANGES_REQUESTED")
    non_blocking = sum(
        1 for r in reviews if _get(r, "state") in ("COMMENTED", "APPROVED")
    )
    if non_blocking > 0:
        metrics.blocking_non_blocking_ratio = blocking / non_blocking

    actual_reviewers = {_user_login(r) for r in reviews}
    requested = count_all_requested_reviewers(pr, reviews)
    if requested > 0:
        metrics.reviewer_participation_ratio = len(actual_reviewers) / requested

    return metrics