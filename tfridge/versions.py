"""
Semantic version parsing and ordering helpers.
"""

from __future__ import annotations

from typing import Iterable, Optional

import semver


def semver_key(value: str) -> Optional[semver.Version]:
    """Parse a semantic version for ordering, or return None if it is not one.

    Accepts an optional ``v`` prefix and missing minor/patch parts, which
    are treated as zero. Build metadata does not affect ordering.
    """
    if not isinstance(value, str):
        return None
    try:
        return semver.Version.parse(
            value.strip().removeprefix("v"), optional_minor_and_patch=True
        )
    except (ValueError, TypeError):
        return None


def is_valid_semver(value: str) -> bool:
    return semver_key(value) is not None


def latest_version(values: Iterable[str]) -> Optional[str]:
    """Return the highest valid version from ``values``.

    Invalid entries are skipped. Returns None when nothing valid remains.
    """
    best: Optional[str] = None
    best_key: Optional[semver.Version] = None
    for value in values:
        key = semver_key(value)
        if key is None:
            continue
        if best_key is None or key > best_key:
            best, best_key = value, key
    return best


def compare_versions(left: str, right: str) -> Optional[int]:
    """Compare two versions, returning -1, 0 or 1 (None if either is invalid)."""
    left_key = semver_key(left)
    right_key = semver_key(right)
    if left_key is None or right_key is None:
        return None
    return left_key.compare(right_key)
