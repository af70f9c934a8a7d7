#!/usr/bin/env python3
"""Release inference over a repository's semantic-version tags.

Given raw tag names, work out the current release, the latest prerelease on
its branch, and the next two prereleases beyond it, assuming a single
alpha -> beta -> rc -> release progression. Every missing piece of history is
an early, successful stop: the partially filled result is returned as is.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import semver

from .release_info_models import (
    CurrentInfo, InferenceResult, InferenceStop, ReleaseInfo, UpcomingInfo
)
from .semver_tags import is_prerelease, parse_tag

logger = logging.getLogger(__name__)

ParsedTag = Tuple[str, semver.Version]


def infer(tags: Sequence[str]) -> ReleaseInfo:
    """Infer the release progression for ``tags`` (without URLs)."""
    return infer_with_reason(tags).info


def infer_with_reason(tags: Sequence[str]) -> InferenceResult:
    """Infer the release progression and report where inference stopped.

    Args:
        tags: Tag names in any order; duplicates and non-semver names are allowed

    Returns:
        InferenceResult with the ReleaseInfo and the terminal InferenceStop
    """
    parsed = _sorted_valid_tags(tags)
    if not parsed:
        return _stop(InferenceStop.NO_VALID_TAGS, "we did not find any valid semantic version tags")

    releases = [p for p in parsed if not is_prerelease(p[1])]
    prereleases = [p for p in parsed if is_prerelease(p[1])]

    if not releases:
        current = CurrentInfo(prerelease=prereleases[0][0] if prereleases else None)
        return _stop(InferenceStop.NO_RELEASES, "there are no releases", current=current)

    current_tag, current_version = releases[0]
    current = CurrentInfo(release=current_tag)
    if not prereleases:
        return _stop(InferenceStop.NO_PRERELEASES, "there are no prereleases", current=current)

    branch_prereleases = [
        p for p in prereleases
        if p[1].major == current_version.major and p[1].minor == current_version.minor
    ]
    if not branch_prereleases:
        return _stop(
            InferenceStop.NO_BRANCH_PRERELEASE,
            "there are no prereleases with the same major and minor version as the latest release",
            current=current,
        )
    current = CurrentInfo(release=current_tag, prerelease=branch_prereleases[0][0])

    after_current = [p for p in prereleases if p[1] > current_version]
    if not after_current:
        return _stop(
            InferenceStop.NO_NEXT_CANDIDATE, "there are no prereleases after current version", current=current
        )

    next_info = _upcoming(current_version, after_current)
    if next_info is None:
        return _stop(
            InferenceStop.NO_NEXT_RELEASE, "next release is neither minor nor major", current=current
        )

    next_version = parse_tag(next_info.prerelease)
    anchor = semver.Version(next_version.major, next_version.minor, next_version.patch)
    next_next_info = _upcoming(anchor, after_current)
    if next_next_info is None:
        return _stop(
            InferenceStop.NO_NEXT_NEXT_CANDIDATE,
            "there are no prereleases after next version",
            current=current,
            next_info=next_info,
        )

    logger.debug(f"Inference complete: next={next_info.prerelease} next_next={next_next_info.prerelease}")
    return InferenceResult(
        info=ReleaseInfo(current=current, next=next_info, next_next=next_next_info),
        stop=InferenceStop.COMPLETE,
    )


def _sorted_valid_tags(tags: Sequence[str]) -> List[ParsedTag]:
    """Parse ``tags``, drop non-semver ones, and sort highest precedence first.

    The sort is stable, so equal versions keep their input order.
    """
    parsed: List[ParsedTag] = []
    for tag in tags:
        version = parse_tag(tag)
        if version is not None:
            parsed.append((tag, version))
    logger.debug(f"{len(parsed)} of {len(tags)} tags are valid semantic versions")
    return sorted(parsed, key=lambda p: p[1], reverse=True)


def _upcoming(anchor: semver.Version, candidates: List[ParsedTag]) -> Optional[UpcomingInfo]:
    """Pick the prerelease for the release after ``anchor``, preferring a minor bump."""
    next_minor = anchor.bump_minor().minor
    next_major = anchor.bump_major().major
    minor_candidates = [
        p for p in candidates if p[1].major == anchor.major and p[1].minor == next_minor
    ]
    major_candidates = [p for p in candidates if p[1].major == next_major]
    if minor_candidates:
        return UpcomingInfo(prerelease=minor_candidates[0][0], release_is_minor=True)
    if major_candidates:
        return UpcomingInfo(prerelease=major_candidates[0][0], release_is_minor=False)
    return None


def _stop(
    stop: InferenceStop,
    reason: str,
    *,
    current: Optional[CurrentInfo] = None,
    next_info: Optional[UpcomingInfo] = None,
) -> InferenceResult:
    logger.info(f"stopping because {reason}")
    info = ReleaseInfo(
        current=current or CurrentInfo(),
        next=next_info or UpcomingInfo(),
    )
    return InferenceResult(info=info, stop=stop)
