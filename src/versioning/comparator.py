"""Truncated prefix version comparison and LATEST pinning.

The final segment of a version is a build counter that the project manifest
abstracts away with the ``LATEST`` token, so it never takes part in the
comparison and is replaced when a version gets pinned.
"""

import re
from typing import List, Optional

from constants import Constants
from .models import VersionString

_LEADING_INT_RE = re.compile(r"\s*([+-]?[0-9]+)", re.ASCII)


def _segment(parts: List[str], index: int) -> Optional[int]:
    """Return the leading ASCII integer of parts[index], or None when absent/unparsable.

    Trailing characters are ignored, so ``2beta`` reads as 2 and ``1_0`` as 1.
    """
    if index >= len(parts):
        return None
    match = _LEADING_INT_RE.match(parts[index])
    return int(match.group(1)) if match else None


def is_newer(current: VersionString, candidate: VersionString) -> bool:
    """Return True when candidate is newer than current under the prefix rule.

    Segments 0 .. len(current) - 2 are compared pairwise; the first index at
    which the candidate segment is greater decides. A lower candidate segment
    does not end the scan. Segments that are missing or not integers never
    count as greater, so single-segment versions are never newer.

    Args:
        current: Version currently pinned in the manifest.
        candidate: Version reported by the distribution service.

    Returns:
        bool: True if the manifest entry should be updated.
    """
    current_parts = current.split(".")
    candidate_parts = candidate.split(".")
    for index in range(len(current_parts) - 1):
        cur = _segment(current_parts, index)
        cand = _segment(candidate_parts, index)
        if cur is None or cand is None:
            continue
        if cand > cur:
            return True
    return False


def pin_latest(version: VersionString) -> VersionString:
    """Replace everything after the last dot with the LATEST token.

    ``3.4.2`` becomes ``3.4.LATEST``; a version without a dot becomes ``LATEST``.
    """
    return version[: version.rfind(".") + 1] + Constants.LATEST_TOKEN
