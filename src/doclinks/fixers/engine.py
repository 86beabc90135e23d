"""Iterative fix engine for grouped link issues.

The engine applies planned substitutions to documentation files in
rounds. Each round visits every fixable issue once; rounds repeat until
one of them fixes nothing. The grouped issue model is mutated in place:
resolved issues are removed and empty kind buckets are deleted, so what
remains afterwards is exactly what still has to be reported.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from doclinks.config import DoclinksConfig
from doclinks.fixers.base import FixPlan
from doclinks.fixers.registry import PlannerRegistry, get_global_registry
from doclinks.issues.base import BaseIssue, DoclinksError, GroupedIssues, is_fixable

ProgressCallback = Callable[[str], None]


class FixIOError(DoclinksError):
    """Raised when a documentation file cannot be read or written."""

    def __init__(self, filepath: Path, cause: Exception) -> None:
        self.filepath = filepath
        self.cause = cause
        super().__init__(f"Failed to rewrite {filepath}: {cause}")


@dataclass
class FixSummary:
    """Outcome of a fix pass, accumulated across all rounds.

    Attributes:
        rounds: Number of rounds run, including the final one that fixed nothing.
        occurrences_fixed: Stack entries (file occurrences) rewritten.
        issues_resolved: Issues whose every occurrence was fixed.
        files_modified: Root-relative paths whose content changed, sorted.
        planning_gaps: Fixable issues left without a safe correction.
        protected_skips: Occurrences left alone under the protected prefix.
        resolved_by_type: Issue kind -> issues resolved of that kind.
    """

    rounds: int = 0
    occurrences_fixed: int = 0
    issues_resolved: int = 0
    files_modified: list[str] = field(default_factory=list)
    planning_gaps: int = 0
    protected_skips: int = 0
    resolved_by_type: dict[str, int] = field(default_factory=dict)


class FixEngine:
    """Applies fixes for every fixable issue in a grouped model.

    The engine is the only writer of the documentation tree while it
    runs. Callers must not run two engines over one tree at once.

    Attributes:
        root: Directory the issue filepaths are relative to.
        grouped: The grouped issue model, mutated in place.
        config: Active configuration.
    """

    def __init__(
        self,
        root: Path,
        grouped: GroupedIssues,
        config: DoclinksConfig | None = None,
        registry: PlannerRegistry | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.root = root
        self.grouped = grouped
        self.config = config or DoclinksConfig()
        self.registry = registry or get_global_registry()
        self._on_progress = on_progress

        # ids of issues whose plan was executed; their leftovers are protected
        self._applied: set[int] = set()
        # ids of issues whose latest planning attempt produced nothing
        self._gaps: set[int] = set()
        self._modified: set[str] = set()

    def run(self) -> FixSummary:
        """Run rounds until one of them fixes nothing.

        Returns:
            FixSummary with totals accumulated across all rounds.

        Raises:
            FixIOError: If a file cannot be read or written.
            UnhandledIssueTypeError: If a fixable kind has no planner.
        """
        summary = FixSummary()

        while True:
            summary.rounds += 1
            self._progress(f"fixing: round {summary.rounds}")
            fixed = self._run_round(summary)
            summary.occurrences_fixed += fixed
            if fixed == 0:
                break

        summary.files_modified = sorted(self._modified)
        summary.planning_gaps = len(self._gaps)
        # Leftovers of applied fixes are exactly their protected entries
        summary.protected_skips = sum(
            len(issue.stack)
            for issues in self.grouped.values()
            for issue in issues
            if id(issue) in self._applied
        )
        return summary

    def _run_round(self, summary: FixSummary) -> int:
        fixed_this_round = 0

        for issue_type in list(self.grouped):
            if not is_fixable(issue_type):
                continue

            bucket = self.grouped[issue_type]
            total = len(bucket)
            self._progress(f"fixing {issue_type} issues ({total})...")

            for index, issue in enumerate(list(bucket), start=1):
                if not issue.stack or id(issue) in self._applied:
                    continue

                plan = self.registry.plan(issue, self.config)
                if plan is None:
                    self._gaps.add(id(issue))
                    self._progress(f"({index}/{total}) skipped: no fix available")
                    continue
                self._gaps.discard(id(issue))

                pending = len(issue.stack)
                touched = self._apply(issue, plan, index, total)
                fixed_this_round += pending - len(issue.stack)

                if issue.stack:
                    self._applied.add(id(issue))
                else:
                    bucket[:] = [other for other in bucket if other is not issue]
                    summary.issues_resolved += 1
                    summary.resolved_by_type[issue_type] = (
                        summary.resolved_by_type.get(issue_type, 0) + 1
                    )
                    self._progress(f"({index}/{total}) fixed")

                if touched:
                    self._progress("updating references...")
                    self._propagate(issue, plan, touched)

            if not bucket:
                del self.grouped[issue_type]

        return fixed_this_round

    def _apply(self, issue: BaseIssue, plan: FixPlan, index: int, total: int) -> set[str]:
        """Rewrite every unprotected file the issue occurs in.

        Returns:
            The filepaths that were rewritten for this issue.
        """
        touched: set[str] = set()
        remaining = []

        for entry in issue.stack:
            if self.config.is_protected(entry.filepath):
                remaining.append(entry)
                continue
            self._rewrite(entry.filepath, plan)
            touched.add(entry.filepath)
            self._progress(f"({index}/{total}): {entry.filepath}")

        issue.stack = remaining
        return touched

    def _rewrite(self, filepath: str, plan: FixPlan) -> None:
        path = self.root / filepath
        try:
            # newline="" keeps line endings byte-for-byte
            with open(path, encoding=self.config.encoding, newline="") as f:
                content = f.read()
            updated = content.replace(plan.search, plan.replacement)
            if updated != content:
                with open(path, "w", encoding=self.config.encoding, newline="") as f:
                    f.write(updated)
                self._modified.add(filepath)
        except (OSError, UnicodeError) as e:
            raise FixIOError(path, e) from e

    def _propagate(self, source: BaseIssue, plan: FixPlan, touched: set[str]) -> None:
        """Carry a substitution into other issues living only in rewritten files.

        Issues with any occurrence in a file that was not rewritten for
        this plan keep their identifying field unchanged.
        """
        for issue_type, issues in self.grouped.items():
            if not is_fixable(issue_type):
                continue
            for other in issues:
                if other is source or not other.stack:
                    continue
                if not other.filepaths() <= touched:
                    continue
                if plan.search in other.key:
                    other.key = other.key.replace(plan.search, plan.replacement, 1)

    def _progress(self, message: str) -> None:
        if self._on_progress is not None:
            self._on_progress(message)


def fix_issues(
    root: Path,
    grouped: GroupedIssues,
    config: DoclinksConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> FixSummary:
    """Fix every fixable issue in the grouped model, in place."""
    return FixEngine(root, grouped, config, on_progress=on_progress).run()


def plan_fixes(
    grouped: GroupedIssues,
    config: DoclinksConfig | None = None,
    registry: PlannerRegistry | None = None,
) -> list[tuple[BaseIssue, FixPlan | None]]:
    """Plan fixes without touching the filesystem.

    Args:
        grouped: The grouped issue model (not modified).
        config: Active configuration.
        registry: Planner registry. Defaults to the global one.

    Returns:
        (issue, plan) pairs for every fixable issue with occurrences, in
        grouped order. The plan is None when no safe correction exists.
    """
    registry = registry or get_global_registry()
    planned: list[tuple[BaseIssue, FixPlan | None]] = []
    for issue_type, issues in grouped.items():
        if not is_fixable(issue_type):
            continue
        for issue in issues:
            if issue.stack:
                planned.append((issue, registry.plan(issue, config)))
    return planned
