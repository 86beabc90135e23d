"""doclinks CLI Tool - Main entry point."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from doclinks import __version__
from doclinks.cli_utils import (
    EXIT_SUCCESS,
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    ensure_path_exists,
    issues_option,
    json_option,
    protected_prefix_option,
    resolve_path,
    similarity_threshold_option,
    wire_config,
)
from doclinks.config import DoclinksConfig
from doclinks.fixers.engine import FixEngine, FixIOError, FixSummary, plan_fixes
from doclinks.issues.base import GroupedIssues, UnhandledIssueTypeError
from doclinks.issues.grouper import count_issues, group_issues
from doclinks.issues.loader import IssueReportError, load_issue_report
from doclinks.report import (
    ISSUE_TITLES,
    print_fix_summary,
    print_report,
    report_to_dict,
)

app = typer.Typer(
    name="doclinks",
    help="doclinks - Audit documentation links and fix the broken ones in place.",
    add_completion=False,
)

# Rich consoles for output
console = Console()
err_console = Console(stderr=True)


# -----------------------------------------------------------------------------
# Output Helpers
# -----------------------------------------------------------------------------


def _output_success(message: str, quiet: bool = False) -> None:
    """Print a success message."""
    if not quiet:
        console.print(f"[green]Success:[/green] {message}")


def _output_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[red]Error:[/red] {message}")


def _output_warning(message: str, quiet: bool = False) -> None:
    """Print a warning message."""
    if not quiet:
        err_console.print(f"[yellow]Warning:[/yellow] {message}")


def _output_info(message: str, quiet: bool = False) -> None:
    """Print an info message."""
    if not quiet:
        console.print(message)


def _exit_error(message: str, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Print error and exit."""
    _output_error(message)
    raise typer.Exit(code=exit_code)


def _load_grouped(issues_path: str) -> GroupedIssues:
    """Load the crawler report and group it, exiting on bad input."""
    try:
        return group_issues(load_issue_report(issues_path))
    except IssueReportError as e:
        _exit_error(f"Invalid issue report: {escape(str(e))}")
    except OSError as e:
        _exit_error(f"Could not read issue report: {escape(str(e))}")


def _resolve_root(root: str | None) -> Path:
    return ensure_path_exists(
        resolve_path(root or "."), "Documentation root", must_be_dir=True
    )


# -----------------------------------------------------------------------------
# Version and Main Callbacks
# -----------------------------------------------------------------------------


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"doclinks version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """doclinks - Audit documentation links and fix the broken ones in place."""
    pass


# -----------------------------------------------------------------------------
# Check Command
# -----------------------------------------------------------------------------


@app.command()
def check(
    root: str | None = typer.Argument(
        None,
        help="Documentation root the issue filepaths are relative to. Defaults to current directory.",
    ),
    issues: str = issues_option(),
    fix: bool = typer.Option(
        False,
        "--fix",
        help="Rewrite files to fix every issue that can be fixed automatically.",
    ),
    protected_prefix: str | None = protected_prefix_option(),
    similarity_threshold: float | None = similarity_threshold_option(),
    json_output: bool = json_option(),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Minimal output for CI.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show detailed output.",
    ),
) -> None:
    """Report link issues and optionally fix them.

    Reads the issue report produced by the link crawler, groups every
    occurrence of the same problem together, and prints what remains.

    With --fix, rewrites links in place until no further fix applies.
    Files under the protected prefix (generated API reference) are never
    rewritten; their issues are only reported.

    Exit codes:
      0 - No issues remain
      1 - Issues remain, or the input was invalid
      2 - A file could not be read or written while fixing
    """
    root_path = _resolve_root(root)
    config = wire_config(
        protected_prefix=protected_prefix,
        similarity_threshold=similarity_threshold,
        start_dir=root_path,
    )
    grouped = _load_grouped(issues)
    initial = count_issues(grouped)

    if initial == 0:
        if json_output:
            console.print_json(json.dumps(report_to_dict(grouped, initial)))
        else:
            _output_success("Found no issues with links in the documentation!", quiet)
        raise typer.Exit(code=EXIT_SUCCESS)

    human = not json_output
    if human and fix:
        _output_warning(
            "--fix was specified. This will rewrite every link issue that can be fixed.",
            quiet,
        )
    if human:
        _output_info(f"\n[bold red]Found {initial} issues across the documentation:[/bold red]", quiet)

    summary: FixSummary | None = None
    if fix:
        summary = _run_fixes(root_path, grouped, config, show_progress=human and not quiet)
        if human and not quiet:
            print_fix_summary(console, summary, initial)
            if verbose:
                for filepath in summary.files_modified:
                    console.print(f"  [dim]Modified: {escape(filepath)}[/dim]")

    remaining = count_issues(grouped)

    try:
        if json_output:
            console.print_json(json.dumps(report_to_dict(grouped, initial, summary)))
        elif not quiet:
            print_report(console, grouped, root_path, config)
    except UnhandledIssueTypeError as e:
        _exit_error(str(e), exit_code=EXIT_SYSTEM_ERROR)

    if remaining == 0:
        if human:
            _output_success("All link issues were resolved.", quiet)
        raise typer.Exit(code=EXIT_SUCCESS)

    if human:
        console.print(f"Checking completed and found [bold]{remaining}[/bold] issues.")
        if summary is not None:
            console.print(f"Fixed issues in [bold]{summary.occurrences_fixed}[/bold] places.")
    raise typer.Exit(code=EXIT_USER_ERROR)


def _run_fixes(
    root: Path,
    grouped: GroupedIssues,
    config: DoclinksConfig,
    *,
    show_progress: bool,
) -> FixSummary:
    """Run the fix engine, mapping fatal errors to exit codes."""
    try:
        if not show_progress:
            return FixEngine(root, grouped, config).run()
        with console.status("fixing issues...") as status:
            return FixEngine(root, grouped, config, on_progress=status.update).run()
    except FixIOError as e:
        _exit_error(escape(str(e)), exit_code=EXIT_SYSTEM_ERROR)
    except UnhandledIssueTypeError as e:
        _exit_error(str(e), exit_code=EXIT_SYSTEM_ERROR)


# -----------------------------------------------------------------------------
# Plan Command
# -----------------------------------------------------------------------------


@app.command()
def plan(
    root: str | None = typer.Argument(
        None,
        help="Documentation root the issue filepaths are relative to. Defaults to current directory.",
    ),
    issues: str = issues_option(),
    protected_prefix: str | None = protected_prefix_option(),
    similarity_threshold: float | None = similarity_threshold_option(),
    json_output: bool = json_option(),
) -> None:
    """Show the substitutions --fix would make, without changing files."""
    root_path = _resolve_root(root)
    config = wire_config(
        protected_prefix=protected_prefix,
        similarity_threshold=similarity_threshold,
        start_dir=root_path,
    )
    grouped = _load_grouped(issues)

    try:
        planned = plan_fixes(grouped, config)
    except UnhandledIssueTypeError as e:
        _exit_error(str(e), exit_code=EXIT_SYSTEM_ERROR)

    entries: list[dict[str, Any]] = []
    for issue, fix_plan in planned:
        files = [entry.filepath for entry in issue.stack]
        entries.append({
            "type": issue.type,
            "key": issue.key,
            "search": fix_plan.search if fix_plan else None,
            "replacement": fix_plan.replacement if fix_plan else None,
            "files": [f for f in files if not config.is_protected(f)],
            "protected_files": [f for f in files if config.is_protected(f)],
        })

    if json_output:
        console.print_json(json.dumps({"fixes": entries}))
        return

    if not entries:
        _output_success("No fixable issues found.")
        return

    console.print("[bold]Would apply the following fixes:[/bold]")
    for entry in entries:
        title = ISSUE_TITLES[entry["type"]]
        if entry["search"] is None:
            console.print(f"  [yellow]NO FIX[/yellow] {title}: {escape(entry['key'])}")
            continue
        console.print(
            f"  [cyan]WOULD FIX[/cyan] {title}: "
            f"{escape(entry['search'])} -> {escape(entry['replacement'])}"
        )
        for filepath in entry["files"]:
            console.print(f"    [dim]{escape(filepath)}[/dim]")
        for filepath in entry["protected_files"]:
            console.print(f"    [dim]{escape(filepath)} (protected, skipped)[/dim]")
