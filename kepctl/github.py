"""
GitHub REST API client for kepctl.

Finds KEPs that only exist in open pull requests against the
enhancements repository ("in-flight" KEPs).

Supports:
- Pagination
- Rate limit handling
- Retries on connection errors
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Iterator

import requests

from . import __version__
from .config import GitHubConfig
from .keps import KEPS_DIR, KEP_METADATA_FILE, KEPParseError, Proposal, parse_kep

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
DEFAULT_PER_PAGE = 100
MAX_RETRIES = 3
RETRY_DELAY = 1.0


@dataclass
class GitHubPR:
    """Parsed GitHub PR data."""
    number: int
    state: str
    title: str
    author: str | None
    labels: list[str]
    updated_at: str | None
    html_url: str


@dataclass
class GitHubFile:
    """Parsed GitHub file change data."""
    path: str
    status: str  # added, removed, modified, renamed
    raw_url: str | None


class GitHubAPIError(Exception):
    """Error from GitHub API."""
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(GitHubAPIError):
    """Rate limit exceeded."""
    def __init__(self, reset_time: int | None = None):
        super().__init__("GitHub API rate limit exceeded", 403)
        self.reset_time = reset_time


def sig_label(sig: str) -> str:
    """Map a SIG directory name to its PR label: sig-node -> sig/node."""
    return "sig/" + sig.removeprefix("sig-")


class GitHubClient:
    """GitHub REST API client with pagination and rate limit handling."""

    def __init__(self, token: str | None = None, config: GitHubConfig | None = None):
        self.token = token
        self.config = config or GitHubConfig()
        self.session = requests.Session()

        if self.token:
            self.session.headers["Authorization"] = f"token {self.token}"

        self.session.headers["Accept"] = "application/vnd.github.v3+json"
        self.session.headers["User-Agent"] = f"kepctl/{__version__}"

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Send a request with retry and rate limit handling."""
        for attempt in range(MAX_RETRIES):
            try:
                response = self.session.request(method, url, **kwargs)
            except requests.RequestException as e:
                if attempt < MAX_RETRIES - 1:
                    logger.debug("Request to %s failed (%s), retrying", url, e)
                    time.sleep(RETRY_DELAY * (attempt + 1))
                    continue
                raise GitHubAPIError(f"Request failed: {e}") from e

            # Check rate limit
            if response.status_code == 403:
                remaining = response.headers.get("X-RateLimit-Remaining")
                if remaining == "0":
                    reset_time = int(response.headers.get("X-RateLimit-Reset", 0))
                    raise RateLimitError(reset_time)

            # Check for errors
            if response.status_code >= 400:
                raise GitHubAPIError(
                    f"GitHub API error: {response.status_code} - {response.text}",
                    response.status_code
                )

            return response

        raise GitHubAPIError("Max retries exceeded")

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> requests.Response:
        """Make an API request against GITHUB_API_BASE."""
        return self._send(method, f"{GITHUB_API_BASE}{endpoint}", params=params, **kwargs)

    def _paginate(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        max_pages: int | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Iterate through paginated API results."""
        params = params or {}
        params.setdefault("per_page", DEFAULT_PER_PAGE)
        page = 1

        while True:
            if max_pages and page > max_pages:
                break

            params["page"] = page
            response = self._request("GET", endpoint, params=params)
            try:
                items = response.json()
            except ValueError as e:
                raise GitHubAPIError(f"Invalid JSON from {endpoint}: {e}", response.status_code) from e

            if not isinstance(items, list):
                raise GitHubAPIError(f"Unexpected response from {endpoint}: expected a list")

            if not items:
                break

            for item in items:
                yield item

            # Check if there are more pages
            if len(items) < params["per_page"]:
                break

            page += 1

    def list_pulls(
        self,
        repo: str,
        state: str = "open",
        sort: str = "updated",
        direction: str = "desc",
    ) -> list[GitHubPR]:
        """
        List pull requests for a repository.

        Args:
            repo: Full repository name (owner/repo)
            state: PR state filter (open, closed, all)
            sort: Sort field (created, updated, popularity, long-running)
            direction: Sort direction (asc, desc)

        Returns:
            List of GitHubPR objects
        """
        params = {"state": state, "sort": sort, "direction": direction}
        return [self._parse_pr(item) for item in self._paginate(f"/repos/{repo}/pulls", params)]

    def get_pull_files(self, repo: str, number: int) -> list[GitHubFile]:
        """Get files changed in a pull request."""
        endpoint = f"/repos/{repo}/pulls/{number}/files"

        files = []
        for item in self._paginate(endpoint):
            files.append(GitHubFile(
                path=item.get("filename", ""),
                status=item.get("status", "modified"),
                raw_url=item.get("raw_url"),
            ))

        return files

    def get_raw_content(self, url: str) -> str:
        """Download a file's raw content (e.g. GitHubFile.raw_url)."""
        return self._send("GET", url).text

    def _parse_pr(self, data: dict[str, Any]) -> GitHubPR:
        """Parse raw PR data into GitHubPR object."""
        user = data.get("user", {})
        labels = data.get("labels", [])

        return GitHubPR(
            number=data.get("number", 0),
            state=data.get("state", ""),
            title=data.get("title", ""),
            author=user.get("login") if user else None,
            labels=[label.get("name", "") for label in labels if label.get("name")],
            updated_at=data.get("updated_at"),
            html_url=data.get("html_url", ""),
        )

    def find_kep_pull_requests(self, sig: str) -> list[Proposal]:
        """
        Find KEPs for a SIG in open pull requests.

        A PR qualifies when it carries both the KEP label and the SIG's
        label. Every kep.yaml it touches under keps/<sig>/ is parsed;
        each becomes a Proposal linked to the PR.

        Raises:
            GitHubAPIError: if listing PRs, listing files or downloading fails
        """
        repo = self.config.full_name
        wanted = {self.config.label, sig_label(sig)}
        prefix = f"{KEPS_DIR}/{sig}/"

        proposals = []
        for pr in self.list_pulls(repo, state="open"):
            if not wanted.issubset(pr.labels):
                continue

            for f in self.get_pull_files(repo, pr.number):
                if f.status == "removed" or not f.raw_url:
                    continue
                if not f.path.startswith(prefix) or not f.path.endswith(KEP_METADATA_FILE):
                    continue

                content = self.get_raw_content(f.raw_url)
                try:
                    kep = parse_kep(content, filename=f.path)
                except KEPParseError as e:
                    logger.warning("Skipping %s in PR #%d: %s", f.path, pr.number, e)
                    continue

                kep.name = f.path[len(prefix):].split("/")[0]
                kep.pr_number = str(pr.number)
                kep.link = pr.html_url
                if not kep.owning_sig:
                    kep.owning_sig = sig
                proposals.append(kep)

        logger.debug("Found %d in-flight KEPs for %s", len(proposals), sig)
        return proposals
