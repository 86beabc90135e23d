"""Issue taxonomy for the doclinks link auditor.

Defines the closed set of link issue kinds, their payloads, and the
physical occurrence records (stacks) attached to each issue.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Literal, Union

IssueType = Literal[
    "unknown_link_format",
    "empty_dom",
    "not_ok_response",
    "no_response",
    "inaccessible",
    "local_alt_available",
    "linked_file_not_found",
    "redirected",
    "missing_anchor",
    "empty_anchor",
    "wrong_extension",
    "disallow_extension",
]

# Kinds the fix engine knows how to correct mechanically
FIXABLE_ISSUE_TYPES: tuple[str, ...] = (
    "redirected",
    "missing_anchor",
    "empty_anchor",
    "wrong_extension",
    "disallow_extension",
)


class DoclinksError(Exception):
    """Base class for doclinks errors."""


class UnhandledIssueTypeError(DoclinksError):
    """Raised when an issue kind outside the taxonomy reaches a handler."""

    def __init__(self, issue_type: str, where: str = "taxonomy") -> None:
        self.issue_type = issue_type
        self.where = where
        super().__init__(f"Unhandled issue type '{issue_type}' in {where}")


@dataclass
class Location:
    """A line in a file and the columns on it where an issue occurs.

    Attributes:
        line: 1-based line number.
        columns: 1-based columns, one per occurrence on the line.
    """

    line: int
    columns: list[int] = field(default_factory=list)


@dataclass
class Stack:
    """Every occurrence of one logical issue within a single file.

    Attributes:
        filepath: Path of the file, relative to the scanned root.
        locations: Lines (with columns) where the issue occurs.
    """

    filepath: str
    locations: list[Location] = field(default_factory=list)


class BaseIssue:
    """Behaviour shared by every issue variant.

    Variants are dataclasses declaring their own payload fields and a
    ``stack`` list. The discriminating ``type`` is a class attribute.
    """

    type: ClassVar[str] = ""
    stack: list[Stack]

    @property
    def key(self) -> str:
        """Primary identifying field used for merging and propagation."""
        return self.reference  # type: ignore[attr-defined, no-any-return]

    @key.setter
    def key(self, value: str) -> None:
        self.reference = value  # type: ignore[attr-defined]

    def filepaths(self) -> set[str]:
        """Return the distinct files this issue occurs in."""
        return {entry.filepath for entry in self.stack}


@dataclass
class UnknownLinkFormatIssue(BaseIssue):
    type: ClassVar[str] = "unknown_link_format"

    reference: str
    stack: list[Stack] = field(default_factory=list)


@dataclass
class EmptyDomIssue(BaseIssue):
    type: ClassVar[str] = "empty_dom"

    reference: str
    stack: list[Stack] = field(default_factory=list)


@dataclass
class NotOkResponseIssue(BaseIssue):
    type: ClassVar[str] = "not_ok_response"

    reference: str
    status: int
    stack: list[Stack] = field(default_factory=list)


@dataclass
class NoResponseIssue(BaseIssue):
    type: ClassVar[str] = "no_response"

    reference: str
    stack: list[Stack] = field(default_factory=list)


@dataclass
class InaccessibleIssue(BaseIssue):
    type: ClassVar[str] = "inaccessible"

    reference: str
    reason: str
    stack: list[Stack] = field(default_factory=list)


@dataclass
class LocalAltAvailableIssue(BaseIssue):
    type: ClassVar[str] = "local_alt_available"

    reference: str
    reason: str
    stack: list[Stack] = field(default_factory=list)


@dataclass
class LinkedFileNotFoundIssue(BaseIssue):
    """A relative link whose target file does not exist.

    Attributes:
        reference: The link as written in the source.
        filepath: Resolved path the crawler looked for.
    """

    type: ClassVar[str] = "linked_file_not_found"

    reference: str
    filepath: str
    stack: list[Stack] = field(default_factory=list)


@dataclass
class RedirectedIssue(BaseIssue):
    """A remote link that answers with a redirect.

    Attributes:
        from_url: The URL written in the documentation.
        to_url: The final URL after following redirects.
    """

    type: ClassVar[str] = "redirected"

    from_url: str
    to_url: str
    stack: list[Stack] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.from_url

    @key.setter
    def key(self, value: str) -> None:
        self.from_url = value


@dataclass
class MissingAnchorIssue(BaseIssue):
    """A link to an anchor that the target document does not define.

    Attributes:
        reference: The full link, including the ``#anchor`` part.
        anchor: The anchor that could not be found.
        all_anchors: Every anchor the target document defines, in
            document order.
    """

    type: ClassVar[str] = "missing_anchor"

    reference: str
    anchor: str
    all_anchors: tuple[str, ...] = ()
    stack: list[Stack] = field(default_factory=list)


@dataclass
class EmptyAnchorIssue(BaseIssue):
    type: ClassVar[str] = "empty_anchor"

    reference: str
    stack: list[Stack] = field(default_factory=list)


@dataclass
class WrongExtensionIssue(BaseIssue):
    """A local link using the wrong file extension.

    Attributes:
        reference: The link as written.
        actual: Extension used in the link, with its dot (e.g. ".htm").
        expected: Extension the target actually has (e.g. ".html").
    """

    type: ClassVar[str] = "wrong_extension"

    reference: str
    actual: str
    expected: str
    stack: list[Stack] = field(default_factory=list)


@dataclass
class DisallowExtensionIssue(BaseIssue):
    """A local link carrying an extension that clean URLs must omit.

    Attributes:
        reference: The link as written.
        extension: The disallowed extension, without its dot.
    """

    type: ClassVar[str] = "disallow_extension"

    reference: str
    extension: str
    stack: list[Stack] = field(default_factory=list)


Issue = Union[
    UnknownLinkFormatIssue,
    EmptyDomIssue,
    NotOkResponseIssue,
    NoResponseIssue,
    InaccessibleIssue,
    LocalAltAvailableIssue,
    LinkedFileNotFoundIssue,
    RedirectedIssue,
    MissingAnchorIssue,
    EmptyAnchorIssue,
    WrongExtensionIssue,
    DisallowExtensionIssue,
]

ISSUE_CLASSES: dict[str, type[BaseIssue]] = {
    cls.type: cls
    for cls in (
        UnknownLinkFormatIssue,
        EmptyDomIssue,
        NotOkResponseIssue,
        NoResponseIssue,
        InaccessibleIssue,
        LocalAltAvailableIssue,
        LinkedFileNotFoundIssue,
        RedirectedIssue,
        MissingAnchorIssue,
        EmptyAnchorIssue,
        WrongExtensionIssue,
        DisallowExtensionIssue,
    )
}

ISSUE_TYPES: tuple[str, ...] = tuple(ISSUE_CLASSES)

# Kind -> ordered issues of that kind, in first-seen order
GroupedIssues = dict[str, list[BaseIssue]]


def is_fixable(issue_type: str) -> bool:
    """Check whether issues of the given kind can be fixed automatically.

    Args:
        issue_type: The issue kind.

    Returns:
        True if the kind is on the fixable allow-list.

    Raises:
        UnhandledIssueTypeError: If the kind is not part of the taxonomy.
    """
    if issue_type not in ISSUE_CLASSES:
        raise UnhandledIssueTypeError(issue_type)
    return issue_type in FIXABLE_ISSUE_TYPES


def issue_class_for(issue_type: str) -> type[BaseIssue]:
    """Look up the dataclass implementing an issue kind.

    Raises:
        UnhandledIssueTypeError: If the kind is not part of the taxonomy.
    """
    try:
        return ISSUE_CLASSES[issue_type]
    except KeyError:
        raise UnhandledIssueTypeError(issue_type) from None
