"""Base classes for doclinks fix planners.

A planner turns one fixable issue into the literal text substitution
that corrects it in every file it occurs in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from urllib.parse import unquote

from doclinks.config import DoclinksConfig
from doclinks.issues.base import BaseIssue


@dataclass(frozen=True)
class FixPlan:
    """A literal substitution that fixes one issue.

    Attributes:
        search: Exact text to look for in the source files.
        replacement: Text that replaces every occurrence of ``search``.
    """

    search: str
    replacement: str


def split_link(reference: str) -> tuple[str, str | None]:
    """Split a link into its document root and anchor.

    Returns:
        Tuple of (root, anchor). The anchor is None when the link has no
        ``#`` and an empty string when it ends with a bare ``#``.
    """
    root, sep, anchor = reference.partition("#")
    return root, (anchor if sep else None)


def decode_link(reference: str) -> str:
    """Percent-decode a link for display or comparison."""
    return unquote(reference)


class BasePlanner(ABC):
    """Abstract base class for all fix planners.

    Each planner handles exactly one fixable issue kind.

    Attributes:
        config: Active configuration (similarity threshold etc.).
    """

    # The issue kind this planner handles (must be set by subclasses)
    issue_type: str = ""

    def __init__(self, config: DoclinksConfig | None = None) -> None:
        self.config = config or DoclinksConfig()

    @abstractmethod
    def plan(self, issue: BaseIssue) -> FixPlan | None:
        """Compute the substitution that fixes the issue.

        Planners must be pure: no I/O and no mutation of the issue.

        Args:
            issue: An issue of this planner's kind.

        Returns:
            The substitution, or None when no safe correction exists.
        """
