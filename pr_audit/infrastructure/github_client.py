"""GitHub REST API client for pull request search and detail lookups."""

import logging
import os
from datetime import datetime
from typing import List, Optional, Dict, Any
from urllib.parse import urlparse

import requests

from pr_audit.domain.errors import AuditError, NoPullRequestsFound

logger = logging.getLogger(__name__)


class RateLimitExceeded(AuditError):
    """Raised when GitHub API rate limit is exceeded."""

    default_message = "GitHub rate limit hit. Try again in a bit."


class InvalidUsername(AuditError):
    """Raised when GitHub rejects the search query (HTTP 422)."""

    default_message = "GitHub username looks invalid."


class GitHubFetchError(AuditError):
    """Raised for any other failed request."""

    default_message = "Could not fetch PRs from GitHub."


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a GitHub ISO-8601 timestamp, keeping None as None."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def repository_from_url(repository_url: str) -> str:
    """
    Turn ``https://api.github.com/repos/owner/name`` into ``owner/name``.

    Falls back to the raw string when the URL has fewer than two path parts
    after ``/repos/``.
    """
    parts = [part for part in urlparse(repository_url).path.split("/") if part]
    if parts and parts[0] == "repos":
        parts = parts[1:]
    if len(parts) >= 2:
        return f"{parts[0]}/{parts[1]}"
    return repository_url


class GitHubSearchClient:
    """Client for the GitHub issue search and pull request endpoints."""

    # One page only; anything past per_page is never seen.
    # Unauthenticated search allows 10 requests per minute, 30 with a token.

    API_BASE_URL = "https://api.github.com"
    SEARCH_PATH = "/search/issues"
    ALLOWED_PAGE_SIZES = (30, 100)
    DEFAULT_TIMEOUT_SECONDS = 30

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = API_BASE_URL,
        per_page: int = 100,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize GitHub search client.

        Args:
            token: GitHub personal access token. If None, uses GITHUB_TOKEN env var.
            base_url: REST API root
            per_page: Search page size (30 or 100)
            timeout: Per-request timeout in seconds
        """
        if per_page not in self.ALLOWED_PAGE_SIZES:
            raise ValueError(f"per_page must be one of {self.ALLOWED_PAGE_SIZES}, got {per_page}")

        if token is None:
            token = os.getenv("GITHUB_TOKEN")

        self.token = token
        self.base_url = base_url.rstrip("/")
        self.per_page = per_page
        self.timeout = timeout
        self.headers = {
            "Accept": "application/vnd.github+json",
        }

        # Add authorization header if token is available
        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Execute a GET request and map failures to audit errors.

        Args:
            url: Absolute URL to fetch
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            RateLimitExceeded: On HTTP 403
            InvalidUsername: On HTTP 422
            GitHubFetchError: On any other non-2xx status or transport error
        """
        try:
            response = requests.get(url, params=params, headers=self.headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(f"Request to {url} failed: {e}")
            raise GitHubFetchError() from e

        if response.status_code == 403:
            remaining = response.headers.get("X-RateLimit-Remaining")
            logger.warning(f"GitHub returned 403 for {url} (rate limit remaining: {remaining})")
            raise RateLimitExceeded()
        if response.status_code == 422:
            logger.warning(f"GitHub rejected query for {url}: {response.text}")
            raise InvalidUsername()
        if not 200 <= response.status_code < 300:
            logger.warning(f"GitHub returned {response.status_code} for {url}")
            raise GitHubFetchError()

        try:
            return response.json()
        except ValueError as e:
            raise GitHubFetchError() from e

    @staticmethod
    def build_search_query(author: str, org: Optional[str] = None) -> str:
        """Compose the search string for an author's merged public PRs."""
        terms = [f"author:{author}"]
        if org:
            terms.append(f"org:{org}")
        terms.extend(["type:pr", "is:public", "is:merged"])
        return " ".join(terms)

    def search_pull_requests(self, author: str, org: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Fetch candidate pull requests for an author.

        Args:
            author: GitHub username
            org: Optional organization to restrict the search to

        Returns:
            Search items in most-recently-updated order, limited to real pull
            requests (and to the organization's repositories when scoped)

        Raises:
            NoPullRequestsFound: If no item survives filtering
        """
        params = {
            "q": self.build_search_query(author, org),
            "sort": "updated",
            "order": "desc",
            "per_page": self.per_page,
        }
        data = self._get(f"{self.base_url}{self.SEARCH_PATH}", params=params)
        items = data.get("items") or []

        repo_marker = f"/repos/{org.lower()}/" if org else None
        candidates = []
        for item in items:
            if not (item.get("pull_request") or {}).get("url"):
                continue
            if repo_marker and repo_marker not in item.get("repository_url", "").lower():
                continue
            candidates.append(item)

        logger.info(
            f"Search for '{author}' returned {len(items)} items, {len(candidates)} candidate PRs"
        )
        if not candidates:
            raise NoPullRequestsFound.for_scope(org)
        return candidates

    def get_pull_request(self, api_url: str) -> Dict[str, Any]:
        """
        Fetch detailed metadata (additions, deletions, merge time) for one PR.

        Args:
            api_url: The ``pull_request.url`` of a search item
        """
        return self._get(api_url)
