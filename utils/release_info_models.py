#!/usr/bin/env python3
"""Pydantic models for release inference input and output.

``ReleaseInfo`` is the structure emitted by the agent; it is frozen so that
inference and URL resolution always produce new values instead of patching
shared state.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _FrozenModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class TagInfo(BaseModel):
    """A tag as listed by the GitHub tags API."""

    name: str = Field(..., description="Tag name")

    model_config = {"extra": "ignore"}


class TagListing(BaseModel):
    """Tags fetched for a repository, possibly cut short by a fetch error."""

    tags: List[TagInfo] = Field(default_factory=list, description="Fetched tags in API order")
    truncated: bool = Field(False, description="True when listing stopped because of an error")
    error: Optional[str] = Field(None, description="Error that stopped the listing, if any")

    @property
    def names(self) -> List[str]:
        return [tag.name for tag in self.tags]


class CurrentInfo(_FrozenModel):
    """Latest release and the latest prerelease on its major.minor branch."""

    release: Optional[str] = Field(None, description="Highest-precedence release tag")
    release_url: Optional[str] = Field(None, description="Web URL of the release")
    prerelease: Optional[str] = Field(None, description="Latest prerelease on the release branch")
    prerelease_url: Optional[str] = Field(None, description="Web URL of the prerelease")

    @model_validator(mode="after")
    def _urls_need_tags(self) -> "CurrentInfo":
        if self.release_url is not None and self.release is None:
            raise ValueError("release_url set without release")
        if self.prerelease_url is not None and self.prerelease is None:
            raise ValueError("prerelease_url set without prerelease")
        return self


class UpcomingInfo(_FrozenModel):
    """An upcoming prerelease and whether the release it leads to is a minor bump."""

    prerelease: Optional[str] = Field(None, description="Upcoming prerelease tag")
    prerelease_url: Optional[str] = Field(None, description="Web URL of the prerelease")
    release_is_minor: bool = Field(False, description="True for a minor bump, False for a major one")

    @model_validator(mode="after")
    def _slot_is_whole(self) -> "UpcomingInfo":
        if self.prerelease is None and (self.prerelease_url is not None or self.release_is_minor):
            raise ValueError("empty upcoming slot cannot carry a url or release_is_minor")
        return self


class ReleaseInfo(_FrozenModel):
    """Release progression summary for a repository."""

    current: CurrentInfo = Field(default_factory=CurrentInfo)
    next: UpcomingInfo = Field(default_factory=UpcomingInfo)
    next_next: UpcomingInfo = Field(default_factory=UpcomingInfo)

    def tags(self) -> List[Optional[str]]:
        """Slot tags in lookup order: release, prerelease, next, next-next."""
        return [
            self.current.release,
            self.current.prerelease,
            self.next.prerelease,
            self.next_next.prerelease,
        ]

    def with_urls(
        self,
        *,
        release_url: Optional[str] = None,
        prerelease_url: Optional[str] = None,
        next_prerelease_url: Optional[str] = None,
        next_next_prerelease_url: Optional[str] = None,
    ) -> "ReleaseInfo":
        """Return a copy with the web URLs filled in.

        URLs for empty slots are dropped rather than rejected so callers can
        pass lookup results through unchanged.
        """
        def _keep(tag: Optional[str], url: Optional[str]) -> Optional[str]:
            return url if tag is not None else None

        return ReleaseInfo(
            current=CurrentInfo(
                release=self.current.release,
                release_url=_keep(self.current.release, release_url),
                prerelease=self.current.prerelease,
                prerelease_url=_keep(self.current.prerelease, prerelease_url),
            ),
            next=UpcomingInfo(
                prerelease=self.next.prerelease,
                prerelease_url=_keep(self.next.prerelease, next_prerelease_url),
                release_is_minor=self.next.release_is_minor,
            ),
            next_next=UpcomingInfo(
                prerelease=self.next_next.prerelease,
                prerelease_url=_keep(self.next_next.prerelease, next_next_prerelease_url),
                release_is_minor=self.next_next.release_is_minor,
            ),
        )


class InferenceStop(str, Enum):
    """Where inference stopped; states only ever advance in declaration order."""
    NO_VALID_TAGS = "no_valid_tags"
    NO_RELEASES = "no_releases"
    NO_PRERELEASES = "no_prereleases"
    NO_BRANCH_PRERELEASE = "no_branch_prerelease"
    NO_NEXT_CANDIDATE = "no_next_candidate"
    NO_NEXT_RELEASE = "no_next_release"
    NO_NEXT_NEXT_CANDIDATE = "no_next_next_candidate"
    COMPLETE = "complete"


class InferenceResult(BaseModel):
    """Inferred release info together with the checkpoint that ended inference."""

    info: ReleaseInfo
    stop: InferenceStop

    model_config = {"frozen": True}
