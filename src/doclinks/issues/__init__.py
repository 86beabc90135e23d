"""Issue model for documentation link problems.

Provides the closed issue taxonomy, loading of crawler reports, and
grouping of per-file issues into per-kind logical issues.
"""

from __future__ import annotations

from doclinks.issues.base import (
    FIXABLE_ISSUE_TYPES,
    ISSUE_TYPES,
    BaseIssue,
    DisallowExtensionIssue,
    DoclinksError,
    EmptyAnchorIssue,
    EmptyDomIssue,
    GroupedIssues,
    InaccessibleIssue,
    Issue,
    LinkedFileNotFoundIssue,
    LocalAltAvailableIssue,
    Location,
    MissingAnchorIssue,
    NoResponseIssue,
    NotOkResponseIssue,
    RedirectedIssue,
    Stack,
    UnhandledIssueTypeError,
    UnknownLinkFormatIssue,
    WrongExtensionIssue,
    is_fixable,
    issue_class_for,
)
from doclinks.issues.grouper import count_issues, count_occurrences, group_issues
from doclinks.issues.loader import (
    IssueReportError,
    RawIssue,
    issues_from_dict,
    load_issue_report,
)

__all__ = [
    # Taxonomy
    "FIXABLE_ISSUE_TYPES",
    "ISSUE_TYPES",
    "BaseIssue",
    "GroupedIssues",
    "Issue",
    "Location",
    "Stack",
    "is_fixable",
    "issue_class_for",
    # Variants
    "DisallowExtensionIssue",
    "EmptyAnchorIssue",
    "EmptyDomIssue",
    "InaccessibleIssue",
    "LinkedFileNotFoundIssue",
    "LocalAltAvailableIssue",
    "MissingAnchorIssue",
    "NoResponseIssue",
    "NotOkResponseIssue",
    "RedirectedIssue",
    "UnknownLinkFormatIssue",
    "WrongExtensionIssue",
    # Errors
    "DoclinksError",
    "IssueReportError",
    "UnhandledIssueTypeError",
    # Loading and grouping
    "RawIssue",
    "count_issues",
    "count_occurrences",
    "group_issues",
    "issues_from_dict",
    "load_issue_report",
]
