"""Loading raw issue reports produced by the link crawler.

The crawler writes a JSON object mapping each scanned file to the issues
found in it. Every raw issue carries its kind, its payload (using the
crawler's wire names) and the positions where it occurs:

    {
      "docs/a.md": [
        {"type": "redirected", "from": "http://old", "to": "http://new",
         "positions": [[3, 10]]}
      ]
    }
"""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from doclinks.issues.base import (
    BaseIssue,
    DoclinksError,
    UnhandledIssueTypeError,
    issue_class_for,
)


class IssueReportError(DoclinksError):
    """Raised when an issue report cannot be parsed."""


@dataclass
class RawIssue:
    """One issue as detected in a single file, before grouping.

    Attributes:
        issue: The issue payload. Its stack is empty.
        positions: (line, column) pairs where the issue occurs.
    """

    issue: BaseIssue
    positions: list[tuple[int, int]] = field(default_factory=list)


RawIssues = dict[str, list[RawIssue]]

# Wire name -> dataclass field name, per kind
_PAYLOAD_FIELDS: dict[str, dict[str, str]] = {
    "unknown_link_format": {"reference": "reference"},
    "empty_dom": {"reference": "reference"},
    "not_ok_response": {"reference": "reference", "status": "status"},
    "no_response": {"reference": "reference"},
    "inaccessible": {"reference": "reference", "reason": "reason"},
    "local_alt_available": {"reference": "reference", "reason": "reason"},
    "linked_file_not_found": {"reference": "reference", "filepath": "filepath"},
    "redirected": {"from": "from_url", "to": "to_url"},
    "missing_anchor": {
        "reference": "reference",
        "anchor": "anchor",
        "allAnchors": "all_anchors",
    },
    "empty_anchor": {"reference": "reference"},
    "wrong_extension": {
        "reference": "reference",
        "actual": "actual",
        "expected": "expected",
    },
    "disallow_extension": {"reference": "reference", "extension": "extension"},
}


def _check_field(field_name: str, wire_name: str, value: Any, where: str) -> Any:
    """Check one payload value against the type its field expects."""
    if field_name == "status":
        if isinstance(value, bool) or not isinstance(value, int):
            raise IssueReportError(f"{where}: '{wire_name}' must be an integer, got {value!r}")
        return value
    if field_name == "all_anchors":
        if not isinstance(value, list) or not all(isinstance(a, str) for a in value):
            raise IssueReportError(f"{where}: '{wire_name}' must be a list of strings, got {value!r}")
        return tuple(value)
    if not isinstance(value, str):
        raise IssueReportError(f"{where}: '{wire_name}' must be a string, got {value!r}")
    return value


def _is_position(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def _parse_positions(raw: Any, where: str) -> list[tuple[int, int]]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise IssueReportError(f"{where}: 'positions' must be a list")

    positions: list[tuple[int, int]] = []
    for item in raw:
        if isinstance(item, Mapping):
            line, column = item.get("line"), item.get("column")
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            line, column = item
        else:
            raise IssueReportError(f"{where}: invalid position {item!r}")
        if not _is_position(line) or not _is_position(column):
            raise IssueReportError(f"{where}: positions must be positive integers, got {item!r}")
        positions.append((line, column))
    return positions


def parse_raw_issue(data: Mapping[str, Any], where: str = "issue") -> RawIssue:
    """Build a RawIssue from its JSON representation.

    Args:
        data: Decoded JSON object for one issue.
        where: Context used in error messages.

    Returns:
        The parsed raw issue.

    Raises:
        IssueReportError: If the kind is unknown, or a payload key is
            missing or has the wrong type.
    """
    if not isinstance(data, Mapping):
        raise IssueReportError(f"{where}: expected an issue object, got {data!r}")

    issue_type = data.get("type")
    if not isinstance(issue_type, str):
        raise IssueReportError(f"{where}: missing issue 'type'")

    try:
        issue_class = issue_class_for(issue_type)
    except UnhandledIssueTypeError as e:
        raise IssueReportError(f"{where}: {e}") from e

    kwargs: dict[str, Any] = {}
    for wire_name, field_name in _PAYLOAD_FIELDS[issue_type].items():
        if wire_name not in data:
            raise IssueReportError(f"{where}: '{issue_type}' issue is missing '{wire_name}'")
        kwargs[field_name] = _check_field(field_name, wire_name, data[wire_name], where)

    issue = issue_class(**kwargs)  # type: ignore[call-arg]

    return RawIssue(issue=issue, positions=_parse_positions(data.get("positions"), where))


def issues_from_dict(data: Mapping[str, Any]) -> RawIssues:
    """Parse a decoded issue report.

    Args:
        data: Mapping of filepath to the list of raw issue objects.

    Returns:
        Mapping of filepath to parsed raw issues, in report order.

    Raises:
        IssueReportError: If the report is malformed.
    """
    if not isinstance(data, Mapping):
        raise IssueReportError("Issue report must be a JSON object keyed by filepath")

    result: RawIssues = {}
    for filepath, items in data.items():
        if not isinstance(items, list):
            raise IssueReportError(f"{filepath}: expected a list of issues")
        result[filepath] = [
            parse_raw_issue(item, where=f"{filepath}[{index}]")
            for index, item in enumerate(items)
        ]
    return result


def load_issue_report(path: str | Path) -> RawIssues:
    """Load an issue report from a JSON file, or stdin when path is "-".

    Raises:
        IssueReportError: If the file is not valid JSON or is malformed.
        OSError: If the file cannot be read.
    """
    if str(path) == "-":
        text = sys.stdin.read()
    else:
        text = Path(path).read_text(encoding="utf-8")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise IssueReportError(f"Invalid JSON in issue report: {e}") from e

    return issues_from_dict(data)
