"""Fetch a pull request from GitHub and assemble its full report."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pullmetrics.analysis import (
    calculate_pr_metrics,
    calculate_pr_size,
    count_all_requested_reviewers,
    count_change_requests,
    count_commits_after_first_review,
    count_total_comments,
    extract_jira_issue,
    find_release_for_merged_pr,
    get_approvers,
    get_commenter_usernames,
    get_commenters,
    get_pr_state,
    get_timestamps,
    is_bot,
)
from pullmetrics.client import GitHubClient
from pullmetrics.types import Config, PRDetails, PRTimestamps


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class Analyzer:
    """Analyses GitHub pull requests using a GitHub client."""

    def __init__(self, config: Config, client: Optional[Any] = None) -> None:
        if not config.github_token:
            raise ValueError("GitHub token is required")
        self._client = (
            client if client is not None else GitHubClient(config.github_token)
        )

    def analyze_pr(self, org: str, repo: str, pr_number: int) -> PRDetails:
        """Fetch everything about one pull request and build its report.

        Errors from the client propagate unchanged.
        """
        client = self._client
        pr = client.get_pull_request(org, repo, pr_number)
        reviews = client.list_reviews(org, repo, pr_number)
        comments = client.list_issue_comments(org, repo, pr_number)
        review_comments = client.list_review_comments(org, repo, pr_number)
        timeline = client.list_timeline(org, repo, pr_number)
        files = client.list_files(org, repo, pr_number)
        commits = client.list_commits(org, repo, pr_number)
        releases = client.list_releases(org, repo) if pr.get("merged") else []

        author = (pr.get("user") or {}).get("login") or ""
        approvers = get_approvers(reviews)
        commenters = get_commenters(comments, review_comments, author)
        timestamps = get_timestamps(
            pr, reviews, comments, review_comments, timeline, commits
        )
        size = calculate_pr_size(files)
        release_name, release_created_at = find_release_for_merged_pr(pr, releases)

        report_timestamps = PRTimestamps(
            first_commit=timestamps.first_commit,
            created_at=timestamps.created_at,
            first_review_request=timestamps.first_review_request,
            first_comment=timestamps.first_comment,
            first_approval=timestamps.first_approval,
            second_approval=timestamps.second_approval,
            merged_at=timestamps.merged_at,
            closed_at=timestamps.closed_at,
            release_created_at=release_created_at or None,
        )

        return PRDetails(
            organization_name=org,
            repository_name=repo,
            pr_number=pr_number,
            pr_title=pr.get("title") or "",
            pr_web_url=pr.get("html_url") or "",
            pr_node_id=pr.get("node_id") or "",
            author_username=author,
            approver_usernames=approvers,
            commenter_usernames=get_commenter_usernames(commenters),
            state=get_pr_state(pr),
            num_comments=count_total_comments(comments, review_comments),
            num_commenters=len(commenters),
            num_approvers=len(approvers),
            num_requested_reviewers=count_all_requested_reviewers(pr, reviews),
            change_requests_count=count_change_requests(reviews),
            lines_changed=size.lines_changed,
            files_changed=size.files_changed,
            commits_after_first_review=count_commits_after_first_review(
                commits, timeline
            ),
            jira_issue=extract_jira_issue(pr),
            is_bot=is_bot(author),
            metrics=calculate_pr_metrics(pr, reviews, comments, timeline, timestamps),
            release_name=release_name,
            timestamps=report_timestamps,
            generated_at=_utc_now(),
        )