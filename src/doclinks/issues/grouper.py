"""Grouping of raw per-file issues into per-kind logical issues."""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence

from doclinks.issues.base import BaseIssue, GroupedIssues, Location, Stack
from doclinks.issues.loader import RawIssue


def _add_positions(stack: Stack, positions: Sequence[tuple[int, int]]) -> None:
    """Merge positions into a stack, keeping lines and columns sorted."""
    by_line: dict[int, set[int]] = {loc.line: set(loc.columns) for loc in stack.locations}
    for line, column in positions:
        by_line.setdefault(line, set()).add(column)

    stack.locations = [
        Location(line=line, columns=sorted(columns))
        for line, columns in sorted(by_line.items())
    ]


def group_issues(raw: Mapping[str, Sequence[RawIssue]]) -> GroupedIssues:
    """Group raw issues by kind, merging repeated logical issues.

    Issues of the same kind with the same identifying field (``from`` for
    redirects, ``reference`` otherwise) are merged into one issue whose
    stack holds one entry per file it occurs in. The first-seen payload
    wins. Raw issues without positions contribute no stack entry.

    Args:
        raw: Mapping of filepath to the raw issues detected in that file.

    Returns:
        Mapping of kind to issues, both in first-seen order.
    """
    grouped: GroupedIssues = {}
    by_key: dict[tuple[str, str], BaseIssue] = {}
    stacks: dict[tuple[str, str], dict[str, Stack]] = {}

    for filepath, raw_issues in raw.items():
        for raw_issue in raw_issues:
            issue_type = raw_issue.issue.type
            merge_key = (issue_type, raw_issue.issue.key)

            issue = by_key.get(merge_key)
            if issue is None:
                issue = copy.deepcopy(raw_issue.issue)
                issue.stack = []
                by_key[merge_key] = issue
                stacks[merge_key] = {}
                grouped.setdefault(issue_type, []).append(issue)

            if not raw_issue.positions:
                continue

            file_stacks = stacks[merge_key]
            stack = file_stacks.get(filepath)
            if stack is None:
                stack = Stack(filepath=filepath)
                file_stacks[filepath] = stack
                issue.stack.append(stack)
            _add_positions(stack, raw_issue.positions)

    return grouped


def count_issues(grouped: GroupedIssues) -> int:
    """Count logical issues across all kinds."""
    return sum(len(issues) for issues in grouped.values())


def count_occurrences(grouped: GroupedIssues) -> int:
    """Count pending stack entries across all issues."""
    return sum(len(issue.stack) for issues in grouped.values() for issue in issues)
