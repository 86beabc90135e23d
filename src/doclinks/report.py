"""Report rendering for link issues that remain after checking or fixing.

Renders issues grouped by kind with rich markup, and builds the JSON
document emitted by ``--json``.
"""

from __future__ import annotations

import dataclasses
import posixpath
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from doclinks.config import DoclinksConfig
from doclinks.fixers.anchors import get_possible_matches
from doclinks.fixers.base import decode_link, split_link
from doclinks.fixers.engine import FixSummary
from doclinks.issues.base import (
    BaseIssue,
    DisallowExtensionIssue,
    EmptyAnchorIssue,
    EmptyDomIssue,
    GroupedIssues,
    InaccessibleIssue,
    LinkedFileNotFoundIssue,
    LocalAltAvailableIssue,
    MissingAnchorIssue,
    NoResponseIssue,
    NotOkResponseIssue,
    RedirectedIssue,
    Stack,
    UnhandledIssueTypeError,
    UnknownLinkFormatIssue,
    WrongExtensionIssue,
)
from doclinks.issues.grouper import count_issues

ISSUE_TITLES: dict[str, str] = {
    "unknown_link_format": "Unknown link format",
    "empty_dom": "Empty page",
    "not_ok_response": "Non-OK response",
    "no_response": "No response",
    "inaccessible": "Inaccessible link",
    "local_alt_available": "Local alternative available",
    "linked_file_not_found": "Linked file not found",
    "redirected": "Redirected link",
    "missing_anchor": "Missing anchor",
    "empty_anchor": "Empty anchor",
    "wrong_extension": "Wrong extension",
    "disallow_extension": "Disallowed extension",
}

ISSUE_DESCRIPTIONS: dict[str, str] = {
    "unknown_link_format": "These links could not be classified as local or remote links.",
    "empty_dom": "These pages returned no parsable document.",
    "not_ok_response": "These remote links answered with a non-2xx status code.",
    "no_response": "These remote links did not answer at all.",
    "inaccessible": "These links point to resources that cannot be accessed.",
    "local_alt_available": "These remote links point to pages that also exist in this documentation.",
    "linked_file_not_found": "These local links point to files that do not exist.",
    "redirected": "These links redirect somewhere else and should point to the final URL.",
    "missing_anchor": "These links point to anchors the target document does not define.",
    "empty_anchor": "These links end with an empty '#' anchor.",
    "wrong_extension": "These links use a different extension than the linked file.",
    "disallow_extension": "These links must not carry a file extension.",
}


def indent_text(text: str, level: int) -> str:
    """Indent every line of text by two spaces per level."""
    prefix = "  " * level
    return "\n".join(prefix + line for line in text.splitlines())


def _anchor_suffix(anchor: str | None) -> str:
    return f"[dim]#{escape(anchor)}[/dim]" if anchor else ""


def _render_wrong_extension(issue: WrongExtensionIssue, _: DoclinksConfig) -> str:
    root, anchor = split_link(decode_link(issue.reference))
    base = root[: -len(issue.actual)] if issue.actual and root.endswith(issue.actual) else root
    return (
        f"{escape(base)}[bold][strike red]{escape(issue.actual)}[/strike red]"
        f"[green]{escape(issue.expected)}[/green][/bold]{_anchor_suffix(anchor)}"
    )


def _render_disallow_extension(issue: DisallowExtensionIssue, _: DoclinksConfig) -> str:
    root, anchor = split_link(decode_link(issue.reference))
    base, ext = posixpath.splitext(root)
    return (
        f"{escape(base)}[bold strike red]{escape(ext or '.' + issue.extension)}"
        f"[/bold strike red]{_anchor_suffix(anchor)}"
    )


def _render_missing_anchor(issue: MissingAnchorIssue, config: DoclinksConfig) -> str:
    root, _ = split_link(decode_link(issue.reference))
    text = f"[underline]{escape(root)}[/underline][bold red]#{escape(issue.anchor)}[/bold red]"

    possible = get_possible_matches(
        issue.anchor,
        issue.all_anchors,
        threshold=config.similarity_threshold,
        limit=config.max_suggestions,
    )
    if possible:
        label = "possible fixes" if len(possible) > 1 else "possible fix"
        text += f"\n[yellow]{label}[/yellow]: " + "[dim], [/dim]".join(
            escape(match) for match in possible
        )
    return text


def _render_reference(color: str) -> Callable[[Any, DoclinksConfig], str]:
    def render(issue: Any, _: DoclinksConfig) -> str:
        return f"[underline {color}]{escape(decode_link(issue.reference))}[/underline {color}]"

    return render


def _render_with_reason(issue: Any, _: DoclinksConfig) -> str:
    return f"[cyan]{escape(decode_link(issue.reference))}[/cyan]\n{escape(issue.reason)}"


_RENDERERS: dict[type[BaseIssue], Callable[[Any, DoclinksConfig], str]] = {
    UnknownLinkFormatIssue: _render_reference("red"),
    EmptyDomIssue: _render_reference("red"),
    NotOkResponseIssue: lambda issue, _: (
        f"\\[[red]{issue.status}[/red]] [underline]{escape(decode_link(issue.reference))}[/underline]"
    ),
    NoResponseIssue: lambda issue, _: (
        f"[underline]{escape(decode_link(issue.reference))}[/underline]"
    ),
    InaccessibleIssue: _render_with_reason,
    LocalAltAvailableIssue: _render_with_reason,
    LinkedFileNotFoundIssue: lambda issue, _: (
        f"[dim red]{escape(decode_link(issue.reference))}[/dim red] "
        f"([yellow]path[/yellow]: {escape(issue.filepath)})"
    ),
    RedirectedIssue: lambda issue, _: (
        f"[underline yellow]{escape(decode_link(issue.from_url))}[/underline yellow] --> "
        f"[underline green]{escape(decode_link(issue.to_url))}[/underline green]"
    ),
    MissingAnchorIssue: _render_missing_anchor,
    EmptyAnchorIssue: lambda issue, _: (
        f"[underline]{escape(decode_link(issue.reference.removesuffix('#')))}[/underline]"
        "[bold red]#[/bold red]"
    ),
    WrongExtensionIssue: _render_wrong_extension,
    DisallowExtensionIssue: _render_disallow_extension,
}


def render_issue_details(issue: BaseIssue, config: DoclinksConfig | None = None) -> str:
    """Render the human-readable details of one issue as rich markup.

    Links are percent-decoded for display; the issue itself is not modified.

    Raises:
        UnhandledIssueTypeError: If the issue kind has no renderer.
    """
    renderer = _RENDERERS.get(type(issue))
    if renderer is None:
        raise UnhandledIssueTypeError(issue.type, where="report formatter")
    return renderer(issue, config or DoclinksConfig())


def render_stack_trace(stacks: Sequence[Stack], root: Path) -> str:
    """Render one ``at path:line:column`` line per occurrence."""
    lines: list[str] = []
    for stack in stacks:
        path = escape(str((root / stack.filepath).resolve()))
        for location in stack.locations:
            for column in location.columns:
                lines.append(
                    f"at [cyan]{path}[/cyan]:[yellow]{location.line}[/yellow]:[yellow]{column}[/yellow]"
                )
    return "\n".join(lines)


def print_report(
    console: Console,
    grouped: GroupedIssues,
    root: Path,
    config: DoclinksConfig | None = None,
) -> None:
    """Print every remaining issue grouped by kind, with occurrence traces."""
    for issue_type, issues in grouped.items():
        if issue_type not in ISSUE_TITLES:
            raise UnhandledIssueTypeError(issue_type, where="report formatter")

        console.print(f"\n[bold]{ISSUE_TITLES[issue_type]}[/bold] ({len(issues)})")
        console.print(ISSUE_DESCRIPTIONS[issue_type])

        for issue in issues:
            console.print("\n" + indent_text(render_issue_details(issue, config), 1))
            trace = render_stack_trace(issue.stack, root)
            if trace:
                console.print("\n" + indent_text(trace, 4))
        console.print()


def print_fix_summary(console: Console, summary: FixSummary, initial_total: int) -> None:
    """Print per-kind fix results and the totals of a fix pass."""
    for issue_type, resolved in summary.resolved_by_type.items():
        console.print(
            f"[green]fixed[/green] {resolved} {ISSUE_TITLES.get(issue_type, issue_type)} issue(s)"
        )
    console.print(
        f"[green]done[/green] resolved {summary.issues_resolved} of {initial_total} issues "
        f"completely and fixed problems in {summary.occurrences_fixed} places "
        f"across {len(summary.files_modified)} file(s)."
    )
    if summary.planning_gaps:
        console.print(
            f"[yellow]note:[/yellow] {summary.planning_gaps} fixable issue(s) had no safe correction"
        )
    if summary.protected_skips:
        console.print(
            f"[yellow]note:[/yellow] {summary.protected_skips} occurrence(s) in protected "
            "files were left unchanged"
        )


def _issue_to_dict(issue: BaseIssue) -> dict[str, Any]:
    data: dict[str, Any] = {"type": issue.type}
    data.update(dataclasses.asdict(issue))  # type: ignore[call-overload]
    if "all_anchors" in data:
        data["all_anchors"] = list(data["all_anchors"])
    return data


def report_to_dict(
    grouped: GroupedIssues,
    initial_total: int,
    summary: FixSummary | None = None,
) -> dict[str, Any]:
    """Build the JSON report for the remaining issues.

    Args:
        grouped: The grouped issue model (not modified).
        initial_total: Issue count right after grouping.
        summary: Result of the fix pass, if one ran.

    Returns:
        JSON-serializable report dictionary.
    """
    remaining = count_issues(grouped)
    result: dict[str, Any] = {
        "success": remaining == 0,
        "initial_issues": initial_total,
        "remaining_issues": remaining,
        "counts": {issue_type: len(issues) for issue_type, issues in grouped.items()},
        "issues": {
            issue_type: [_issue_to_dict(issue) for issue in issues]
            for issue_type, issues in grouped.items()
        },
    }
    if summary is not None:
        result["fix"] = dataclasses.asdict(summary)
    return result
