"""Fix planners for each fixable link issue kind."""

from __future__ import annotations

from doclinks.fixers.anchors import get_possible_matches
from doclinks.fixers.base import BasePlanner, FixPlan, decode_link, split_link
from doclinks.issues.base import (
    BaseIssue,
    DisallowExtensionIssue,
    EmptyAnchorIssue,
    MissingAnchorIssue,
    RedirectedIssue,
    UnhandledIssueTypeError,
    WrongExtensionIssue,
)


def _plan_or_none(search: str, replacement: str) -> FixPlan | None:
    # Empty and no-op substitutions are planning gaps
    if not search or search == replacement:
        return None
    return FixPlan(search=search, replacement=replacement)


class RedirectedPlanner(BasePlanner):
    """Replaces a redirecting URL with its final destination."""

    issue_type = "redirected"

    def plan(self, issue: BaseIssue) -> FixPlan | None:
        if not isinstance(issue, RedirectedIssue):
            raise UnhandledIssueTypeError(issue.type, where=type(self).__name__)
        return _plan_or_none(issue.from_url, issue.to_url)


class MissingAnchorPlanner(BasePlanner):
    """Points a broken anchor at the closest anchor the target defines.

    The replacement keeps the (decoded) document part of the link and
    swaps the anchor for the best candidate from the anchor matcher.
    Without a candidate above the similarity threshold there is no plan.
    """

    issue_type = "missing_anchor"

    def plan(self, issue: BaseIssue) -> FixPlan | None:
        if not isinstance(issue, MissingAnchorIssue):
            raise UnhandledIssueTypeError(issue.type, where=type(self).__name__)

        candidates = get_possible_matches(
            issue.anchor,
            issue.all_anchors,
            threshold=self.config.similarity_threshold,
            limit=1,
        )
        if not candidates:
            return None

        root, _ = split_link(decode_link(issue.reference))
        return _plan_or_none(issue.reference, f"{root}#{candidates[0]}")


class EmptyAnchorPlanner(BasePlanner):
    """Drops the bare trailing ``#`` from a link."""

    issue_type = "empty_anchor"

    def plan(self, issue: BaseIssue) -> FixPlan | None:
        if not isinstance(issue, EmptyAnchorIssue):
            raise UnhandledIssueTypeError(issue.type, where=type(self).__name__)
        if not issue.reference.endswith("#"):
            return None
        return _plan_or_none(issue.reference, issue.reference[:-1])


class WrongExtensionPlanner(BasePlanner):
    """Swaps the extension used in a link for the one the file really has."""

    issue_type = "wrong_extension"

    def plan(self, issue: BaseIssue) -> FixPlan | None:
        if not isinstance(issue, WrongExtensionIssue):
            raise UnhandledIssueTypeError(issue.type, where=type(self).__name__)

        root, _ = split_link(issue.reference)
        if not issue.actual or not root.endswith(issue.actual):
            return None
        return _plan_or_none(root, root[: -len(issue.actual)] + issue.expected)


class DisallowExtensionPlanner(BasePlanner):
    """Strips an extension that clean URLs must not carry."""

    issue_type = "disallow_extension"

    def plan(self, issue: BaseIssue) -> FixPlan | None:
        if not isinstance(issue, DisallowExtensionIssue):
            raise UnhandledIssueTypeError(issue.type, where=type(self).__name__)

        extension = issue.extension.lstrip(".")
        suffix = f".{extension}"
        root, _ = split_link(issue.reference)
        if not extension or not root.endswith(suffix) or root == suffix:
            return None
        return _plan_or_none(root, root[: -len(suffix)])
