#!/usr/bin/env python3
"""Tag and release lookups that degrade to "no data" instead of failing.

Release inference only needs best-effort history: a listing cut short by an
error still yields a usable (if less complete) answer, and a missing release
page only means a missing URL. Neither operation here raises.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from .github_client import GithubClient, GithubApiError, GithubNotFoundError
from .metrics import Timer, incr
from .release_info_models import TagInfo, TagListing
from configs.config import Config

# Set up logging
logger = logging.getLogger(__name__)

# GitHub rejects per_page values above this
GITHUB_MAX_PAGE_SIZE = 100


class ReleaseSource:
    """Best-effort access to a repository's tags and published releases."""

    def __init__(self, client: Optional[GithubClient] = None):
        """Initialize the release source.

        Args:
            client: Optional GithubClient instance. If None, creates one lazily.
        """
        self._client = client

    @property
    def client(self) -> GithubClient:
        if self._client is None:
            self._client = GithubClient()
        return self._client

    def list_tags(
        self,
        owner: str,
        repo: str,
        page_size: Optional[int] = None,
        max_tags: Optional[int] = None,
    ) -> TagListing:
        """List up to ``max_tags`` tags, page by page.

        Stops on the first empty page, once ``max_tags`` tags are held, or on
        the first fetch error; in the last case the tags gathered so far are
        returned with ``truncated`` set.
        """
        tags_config = Config.get_tags_config()
        page_size = page_size or tags_config["page_size"]
        max_tags = max_tags if max_tags is not None else tags_config["max_tags"]
        per_page = max(1, min(page_size, GITHUB_MAX_PAGE_SIZE))

        tags = []
        page = 1
        try:
            with Timer("github.tags.list", repo=f"{owner}/{repo}"):
                while len(tags) < max_tags:
                    data = self.client.list_tags_page(owner, repo, page, per_page)
                    if not data:
                        logger.debug(f"stopping because we got no results for page {page}")
                        break
                    tags.extend(TagInfo.model_validate(item) for item in data)
                    page += 1
                else:
                    logger.debug(f"stopping because we hit the max number of tags. max: {max_tags} got: {len(tags)}")
        except (GithubApiError, ValidationError) as e:
            logger.info(f"stopping because an error occurred. error: {e}")
            incr("tags.truncated", repo=f"{owner}/{repo}", code=getattr(e, "code", "INVALID_PAYLOAD"))
            listing = TagListing(tags=tags[:max_tags], truncated=True, error=str(e))
        else:
            listing = TagListing(tags=tags[:max_tags])

        incr("tags.fetched", value=len(listing.tags), repo=f"{owner}/{repo}")
        logger.info(f"Fetched {len(listing.tags)} tags for {owner}/{repo}")
        return listing

    def get_release_url(self, owner: str, repo: str, tag: Optional[str]) -> Optional[str]:
        """Return the web URL of the release published for ``tag``, or None."""
        if tag is None:
            return None
        try:
            data = self.client.get_release_by_tag(owner, repo, tag)
        except GithubNotFoundError:
            logger.debug(f"no (pre)release published for tag {tag}")
            incr("release_url.miss", repo=f"{owner}/{repo}", tag=tag, code="NOT_FOUND")
            return None
        except GithubApiError as e:
            logger.debug(f"error occurred while fetching the (pre)release for tag {tag} error: {e}")
            incr("release_url.miss", repo=f"{owner}/{repo}", tag=tag, code=e.code)
            return None
        url = data.get("html_url")
        return url if isinstance(url, str) and url else None

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
