#!/usr/bin/env python3
"""Semantic-version helpers for repository tags.

Tags conventionally carry a leading ``v`` (``v1.2.3-rc.0``); it is stripped
before handing the string to :mod:`semver`, which only accepts bare versions.
"""

from __future__ import annotations

from typing import Optional

import semver

# Longest version string accepted, longer tags are treated as invalid
MAX_TAG_LENGTH = 256


def parse_tag(tag: Optional[str]) -> Optional[semver.Version]:
    """Parse a tag into a :class:`semver.Version`, or None if it is not semver."""
    if not tag or len(tag) > MAX_TAG_LENGTH:
        return None
    raw = tag.strip()
    if raw.startswith("v"):
        raw = raw[1:]
    try:
        return semver.Version.parse(raw)
    except (ValueError, TypeError):
        return None


def is_valid_tag(tag: Optional[str]) -> bool:
    return parse_tag(tag) is not None


def is_prerelease(version: semver.Version) -> bool:
    return version.prerelease is not None


def get_major_minor_patch(tag: str) -> str:
    """Return ``"MAJOR.MINOR.PATCH"`` of a tag, or an empty string if it is not semver.

    >>> get_major_minor_patch("v0.1.0-rc.3")
    '0.1.0'
    >>> get_major_minor_patch("release-0.1")
    ''
    """
    version = parse_tag(tag)
    if version is None:
        return ""
    return f"{version.major}.{version.minor}.{version.patch}"
