#!/usr/bin/env python3
"""GitHub REST API client for tags and releases.

Thin wrapper over a ``requests`` session with transient-failure retries. Every
failure is raised as a typed error carrying a ``code`` so callers can decide
whether to degrade or abort.
"""

import logging
from typing import Dict, List, Any, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from configs.config import Config

# Set up logging
logger = logging.getLogger(__name__)


class GithubApiError(Exception):
    """Raised when GitHub API operations fail."""
    def __init__(self, message: str, code: str = "HTTP_ERROR") -> None:
        super().__init__(message)
        self.code = code


class GithubAuthError(GithubApiError):
    """Raised when GitHub API authentication fails."""
    def __init__(self, message: str) -> None:
        super().__init__(message, code="UNAUTHORIZED")


class GithubNotFoundError(GithubApiError):
    """Raised when the requested GitHub resource does not exist."""
    def __init__(self, message: str) -> None:
        super().__init__(message, code="NOT_FOUND")


class GithubClient:
    """Client for the subset of the GitHub REST API used for release inference."""

    def __init__(
        self,
        token: Optional[str] = None,
        timeout_s: Optional[int] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize GitHub client.

        Args:
            token: GitHub token (defaults to Config.GITHUB_TOKEN); anonymous access if unset
            timeout_s: Request timeout in seconds (defaults to Config.HTTP_TIMEOUT_S)
            base_url: API root (defaults to Config.GITHUB_API_URL)
            session: Pre-built session, mainly for tests
        """
        github_config = Config.get_github_config()
        self.token = token or github_config["token"]
        self.timeout_s = timeout_s or github_config["timeout_s"]
        self.base_url = (base_url or github_config["base_url"]).rstrip("/")

        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': '2022-11-28',
            'User-Agent': github_config["user_agent"],
        })
        if self.token:
            self.session.headers['Authorization'] = f'Bearer {self.token}'
        else:
            logger.info("No GitHub token configured, using anonymous access")

        if session is None:
            # Configure retries for transient failures
            retry_strategy = Retry(
                total=github_config["retry_total"],
                status_forcelist=[429, 500, 502, 503, 504],
                backoff_factor=1,
                allowed_methods=["HEAD", "GET", "OPTIONS"]
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            self.session.mount("https://", adapter)
            self.session.mount("http://", adapter)

        logger.debug(f"GitHub client initialized for {self.base_url}")

    def list_tags_page(self, owner: str, repo: str, page: int, per_page: int = 100) -> List[Dict[str, Any]]:
        """Fetch one page of repository tags.

        Args:
            owner: Repository owner (user or organization)
            repo: Repository name
            page: 1-based page number
            per_page: Page size, GitHub caps it at 100

        Returns:
            List of tag dictionaries (empty once past the last page)

        Raises:
            GithubApiError: If the request fails
        """
        url = f"{self.base_url}/repos/{owner}/{repo}/tags"
        logger.debug(f"Fetching tags page {page}: {owner}/{repo}")
        data = self._get_json(url, f"tags of {owner}/{repo}", params={'page': page, 'per_page': per_page})
        if not isinstance(data, list):
            raise GithubApiError(f"Unexpected tags payload for {owner}/{repo}", code="INVALID_JSON")
        return data

    def get_release_by_tag(self, owner: str, repo: str, tag: str) -> Dict[str, Any]:
        """Fetch the published release (or prerelease) for an exact tag.

        Raises:
            GithubNotFoundError: If no release exists for the tag
            GithubApiError: If the request fails
        """
        url = f"{self.base_url}/repos/{owner}/{repo}/releases/tags/{quote(tag, safe='')}"
        logger.debug(f"Fetching release for tag {tag}: {owner}/{repo}")
        data = self._get_json(url, f"release {tag} of {owner}/{repo}")
        if not isinstance(data, dict):
            raise GithubApiError(f"Unexpected release payload for {owner}/{repo}@{tag}", code="INVALID_JSON")
        return data

    def _get_json(self, url: str, what: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout_s)
        except requests.Timeout as e:
            raise GithubApiError(f"Timeout while fetching {what}: {e}", code="TIMEOUT") from e
        except requests.RequestException as e:
            raise GithubApiError(f"Failed to fetch {what}: {e}", code="NETWORK") from e

        status = response.status_code
        if status == 401:
            raise GithubAuthError("Invalid GitHub token or insufficient permissions")
        elif status == 403 and response.headers.get("X-RateLimit-Remaining") == "0":
            raise GithubApiError(f"GitHub API rate limit exceeded while fetching {what}", code="RATE_LIMIT")
        elif status == 403:
            raise GithubAuthError(f"Access to {what} is forbidden")
        elif status == 404:
            raise GithubNotFoundError(f"{what} not found")
        elif status != 200:
            raise GithubApiError(f"GitHub API error: HTTP {status}")

        try:
            return response.json()
        except ValueError as e:
            raise GithubApiError(f"Invalid JSON for {what}: {e}", code="INVALID_JSON") from e

    def close(self) -> None:
        """Close the GitHub client session."""
        if self.session:
            self.session.close()
            logger.debug("GitHub client session closed")

    def __enter__(self) -> "GithubClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
