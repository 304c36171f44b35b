"""A small GitHub REST client covering the endpoints the analysis needs."""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import requests

DEFAULT_BASE_URL = "https://api.github.com"
PER_PAGE = 100
_TIMEOUT = 30.0


class GitHubError(Exception):
    """Raised when a GitHub request fails."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _error_detail(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason or response.text


class GitHubClient:
    """Fetches pull-request data from the GitHub REST API, following pagination."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session if session is not None else requests.Session()
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
        }

    def _url(self, *parts: object) -> str:
        return "/".join(
            [self._base_url, *(quote(str(part), safe="") for part in parts)]
        )

    def _request(
        self, url: str, params: Optional[dict[str, Any]], what: str
    ) -> tuple[requests.Response, Any]:
        try:
            response = self._session.get(
                url, params=params, headers=self._headers, timeout=_TIMEOUT
            )
        except requests.RequestException as exc:
            raise GitHubError(f"failed to fetch {what}: {exc}") from exc
        if not response.ok:
            raise GitHubError(
                f"failed to fetch {what}: GET {response.url}: "
                f"{response.status_code} {_error_detail(response)}",
                response.status_code,
            )
        try:
            return response, response.json()
        except ValueError as exc:
            raise GitHubError(
                f"failed to fetch {what}: invalid JSON response", response.status_code
            ) from exc

    def _get_object(self, what: str, *parts: object) -> dict[str, Any]:
        _, body = self._request(self._url(*parts), None, what)
        if not isinstance(body, dict):
            raise GitHubError(f"failed to fetch {what}: unexpected response body")
        return body

    def _get_all(self, what: str, *parts: object) -> list[dict[str, Any]]:
        url: Optional[str] = self._url(*parts)
        params: Optional[dict[str, Any]] = {"per_page": PER_PAGE}
        items: list[dict[str, Any]] = []
        while url:
            response, page = self._request(url, params, what)
            if not isinstance(page, list):
                raise GitHubError(f"failed to fetch {what}: unexpected response body")
            items.extend(page)
            url = response.links.get("next", {}).get("url")
            params = None  # the next link already carries its query
        return items

    def get_pull_request(self, owner: str, repo: str, number: int) -> dict[str, Any]:
        """Return the pull request itself."""
        return self._get_object("PR", "repos", owner, repo, "pulls", number)

    def list_reviews(self, owner: str, repo: str, number: int) -> list[dict[str, Any]]:
        """Return every review submitted on the pull request."""
        return self._get_all("reviews", "repos", owner, repo, "pulls", number, "reviews")

    def list_issue_comments(
        self, owner: str, repo: str, number: int
    ) -> list[dict[str, Any]]:
        """Return every conversation comment on the pull request."""
        return self._get_all(
            "comments", "repos", owner, repo, "issues", number, "comments"
        )

    def list_review_comments(
        self, owner: str, repo: str, number: int
    ) -> list[dict[str, Any]]:
        """Return every inline review comment on the pull request."""
        return self._get_all(
            "review comments", "repos", owner, repo, "pulls", number, "comments"
        )

    def list_timeline(self, owner: str, repo: str, number: int) -> list[dict[str, Any]]:
        """Return the issue timeline events of the pull request."""
        return self._get_all(
            "timeline", "repos", owner, repo, "issues", number, "timeline"
        )

    def list_files(self, owner: str, repo: str, number: int) -> list[dict[str, Any]]:
        """Return the files changed by the pull request."""
        return self._get_all("PR files", "repos", owner, repo, "pulls", number, "files")

    def list_commits(self, owner: str, repo: str, number: int) -> list[dict[str, Any]]:
        """Return the commits of the pull request."""
        return self._get_all(
            "PR commits", "repos", owner, repo, "pulls", number, "commits"
        )

    def list_releases(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """Return every release of the repository."""
        return self._get_all("releases", "repos", owner, repo, "releases")