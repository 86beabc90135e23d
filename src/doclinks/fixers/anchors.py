"""Anchor suggestion for links pointing at headings that do not exist."""

from __future__ import annotations

from collections.abc import Iterable
from difflib import SequenceMatcher

DEFAULT_SIMILARITY_THRESHOLD = 0.6


def anchor_similarity(broken: str, candidate: str) -> float:
    """Score how close a candidate anchor is to a broken one (0-1)."""
    return SequenceMatcher(None, broken.lower(), candidate.lower()).ratio()


def get_possible_matches(
    anchor: str,
    all_anchors: Iterable[str],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    limit: int | None = None,
) -> list[str]:
    """Rank the valid anchors that could replace a broken one.

    Candidates scoring below the threshold are dropped. The rest are
    sorted best-first; equal scores keep the order of ``all_anchors``.

    Args:
        anchor: The anchor that could not be found.
        all_anchors: Every anchor the target document defines.
        threshold: Minimum similarity for a candidate to be kept.
        limit: Maximum number of candidates to return.

    Returns:
        Candidate anchors, best first. May be empty.
    """
    scored: list[tuple[float, str]] = []
    seen: set[str] = set()
    for candidate in all_anchors:
        if candidate in seen:
            continue
        seen.add(candidate)

        score = anchor_similarity(anchor, candidate)
        if score >= threshold:
            scored.append((score, candidate))

    scored.sort(key=lambda item: item[0], reverse=True)
    matches = [candidate for _, candidate in scored]
    return matches if limit is None else matches[:limit]
