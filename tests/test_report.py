"""Tests for issue report rendering."""

from __future__ import annotations

import dataclasses
import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from doclinks.fixers import FixSummary
from doclinks.issues import (
    ISSUE_TYPES,
    BaseIssue,
    DisallowExtensionIssue,
    EmptyAnchorIssue,
    Location,
    MissingAnchorIssue,
    NotOkResponseIssue,
    RawIssue,
    RedirectedIssue,
    Stack,
    UnhandledIssueTypeError,
    WrongExtensionIssue,
    group_issues,
    issue_class_for,
)
from doclinks.report import (
    ISSUE_DESCRIPTIONS,
    ISSUE_TITLES,
    indent_text,
    print_fix_summary,
    print_report,
    render_issue_details,
    render_stack_trace,
    report_to_dict,
)


def _console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None)


def _output(console: Console) -> str:
    file = console.file
    assert isinstance(file, io.StringIO)
    return file.getvalue()


class TestTitles:
    """Tests for per-kind titles and descriptions."""

    def test_every_kind_has_title_and_description(self) -> None:
        """Test no kind is missing its report heading."""
        assert set(ISSUE_TITLES) == set(ISSUE_TYPES)
        assert set(ISSUE_DESCRIPTIONS) == set(ISSUE_TYPES)


class TestRenderIssueDetails:
    """Tests for render_issue_details."""

    def test_redirect(self) -> None:
        """Test redirects show source and destination."""
        text = render_issue_details(RedirectedIssue(from_url="http://old", to_url="http://new"))
        assert "http://old" in text
        assert "-->" in text
        assert "http://new" in text

    def test_not_ok_response_shows_status(self) -> None:
        """Test the status code is shown with escaped brackets."""
        text = render_issue_details(NotOkResponseIssue(reference="http://gone", status=404))
        assert text.startswith("\\[[red]404[/red]]")
        assert "http://gone" in text

    def test_missing_anchor_suggestions(self) -> None:
        """Test close anchors are offered as possible fixes."""
        issue = MissingAnchorIssue(
            reference="guide.md#instalation",
            anchor="instalation",
            all_anchors=("installation", "install", "faq"),
        )
        text = render_issue_details(issue)
        assert "possible fixes" in text
        assert "installation" in text
        assert "faq" not in text

    def test_missing_anchor_single_suggestion(self) -> None:
        """Test a single candidate uses the singular label."""
        issue = MissingAnchorIssue(
            reference="guide.md#instalation",
            anchor="instalation",
            all_anchors=("installation",),
        )
        assert "possible fix[/yellow]" in render_issue_details(issue)

    def test_missing_anchor_without_suggestions(self) -> None:
        """Test no label is shown when nothing is close enough."""
        issue = MissingAnchorIssue(reference="guide.md#zzz", anchor="zzz", all_anchors=("intro",))
        assert "possible" not in render_issue_details(issue)

    def test_wrong_extension(self) -> None:
        """Test the actual extension is struck and the expected one shown."""
        issue = WrongExtensionIssue(reference="page.htm#top", actual=".htm", expected=".html")
        text = render_issue_details(issue)
        assert text.startswith("page[bold][strike red].htm[/strike red][green].html[/green]")
        assert "#top" in text

    def test_disallow_extension(self) -> None:
        """Test the forbidden extension is struck."""
        text = render_issue_details(DisallowExtensionIssue(reference="docs/page.md", extension="md"))
        assert text.startswith("docs/page[bold strike red].md")

    def test_empty_anchor(self) -> None:
        """Test the dangling delimiter is highlighted."""
        text = render_issue_details(EmptyAnchorIssue(reference="guide.md#"))
        assert text == "[underline]guide.md[/underline][bold red]#[/bold red]"

    def test_links_are_decoded_for_display(self) -> None:
        """Test percent-encoded links are shown decoded."""
        text = render_issue_details(NotOkResponseIssue(reference="http://x/my%20page", status=500))
        assert "http://x/my page" in text

    def test_markup_in_links_is_escaped(self) -> None:
        """Test brackets in links do not become rich markup."""
        text = render_issue_details(EmptyAnchorIssue(reference="[red]x#"))
        assert "\\[red]x" in text

    @pytest.mark.parametrize("issue_type", ISSUE_TYPES)
    def test_every_kind_renders(self, issue_type: str) -> None:
        """Test each kind has a renderer."""
        cls = issue_class_for(issue_type)
        kwargs: dict[str, object] = {
            "from_url": "http://a",
            "to_url": "http://b",
            "reference": "a.md#x",
            "anchor": "x",
            "status": 500,
            "reason": "blocked",
            "filepath": "a.md",
            "actual": ".md",
            "expected": ".mdx",
            "extension": "md",
        }
        field_names = {f.name for f in dataclasses.fields(cls)} - {"stack"}
        issue = cls(**{k: v for k, v in kwargs.items() if k in field_names})
        assert render_issue_details(issue)

    def test_unknown_issue_class_fails(self) -> None:
        """Test an issue class without a renderer fails loudly."""

        class StrangeIssue(BaseIssue):
            type = "strange"  # type: ignore[assignment]
            reference = "x"
            stack: list[Stack] = []

        with pytest.raises(UnhandledIssueTypeError, match="report formatter"):
            render_issue_details(StrangeIssue())


class TestRenderStackTrace:
    """Tests for render_stack_trace."""

    def test_one_line_per_column(self, tmp_path: Path) -> None:
        """Test every position gets its own trace line."""
        stacks = [Stack("a.md", [Location(3, [1, 9])]), Stack("b.md", [Location(7, [2])])]
        lines = render_stack_trace(stacks, tmp_path).splitlines()
        assert len(lines) == 3
        assert lines[0].startswith("at [cyan]")
        assert str((tmp_path / "a.md").resolve()) in lines[0]
        assert lines[0].endswith(":[yellow]3[/yellow]:[yellow]1[/yellow]")
        assert lines[2].endswith(":[yellow]7[/yellow]:[yellow]2[/yellow]")

    def test_empty(self, tmp_path: Path) -> None:
        assert render_stack_trace([], tmp_path) == ""


class TestIndentText:
    """Tests for indent_text."""

    def test_indents_every_line(self) -> None:
        assert indent_text("a\nb", 2) == "    a\n    b"


# -----------------------------------------------------------------------------
# Console Report Tests
# -----------------------------------------------------------------------------


class TestPrintReport:
    """Tests for print_report."""

    def test_groups_by_kind(self, tmp_path: Path) -> None:
        """Test kinds are printed with title, count and occurrences."""
        grouped = group_issues({
            "a.md": [
                RawIssue(RedirectedIssue(from_url="http://old", to_url="http://new"), [(2, 5)]),
                RawIssue(EmptyAnchorIssue(reference="b.md#"), [(4, 1)]),
            ],
        })
        console = _console()

        print_report(console, grouped, tmp_path)

        output = _output(console)
        assert "Redirected link (1)" in output
        assert "Empty anchor (1)" in output
        assert ISSUE_DESCRIPTIONS["redirected"] in output
        assert "http://old --> http://new" in output
        assert f"at {(tmp_path / 'a.md').resolve()}:2:5" in output
        assert output.index("Redirected link") < output.index("Empty anchor")

    def test_unknown_kind_fails(self, tmp_path: Path) -> None:
        """Test a bucket for an unknown kind fails loudly."""
        with pytest.raises(UnhandledIssueTypeError):
            print_report(_console(), {"strange": []}, tmp_path)


class TestPrintFixSummary:
    """Tests for print_fix_summary."""

    def test_totals(self) -> None:
        """Test per-kind counts and totals are printed."""
        summary = FixSummary(
            rounds=2,
            occurrences_fixed=3,
            issues_resolved=2,
            files_modified=["a.md", "b.md"],
            resolved_by_type={"redirected": 2},
        )
        console = _console()

        print_fix_summary(console, summary, initial_total=4)

        output = _output(console)
        assert "fixed 2 Redirected link issue(s)" in output
        assert "resolved 2 of 4 issues completely and fixed problems in 3 places across 2 file(s)." in output
        assert "note:" not in output

    def test_notes(self) -> None:
        """Test planning gaps and protected skips are called out."""
        console = _console()

        print_fix_summary(console, FixSummary(planning_gaps=1, protected_skips=2), initial_total=3)

        output = _output(console)
        assert "1 fixable issue(s) had no safe correction" in output
        assert "2 occurrence(s) in protected files were left unchanged" in output


# -----------------------------------------------------------------------------
# JSON Report Tests
# -----------------------------------------------------------------------------


class TestReportToDict:
    """Tests for report_to_dict."""

    def test_structure(self) -> None:
        """Test the JSON report lists remaining issues with their payloads."""
        grouped = group_issues({
            "a.md": [
                RawIssue(
                    MissingAnchorIssue(reference="g.md#x", anchor="x", all_anchors=("y",)),
                    [(1, 2)],
                ),
            ],
        })

        data = report_to_dict(grouped, initial_total=3)

        assert data["success"] is False
        assert data["initial_issues"] == 3
        assert data["remaining_issues"] == 1
        assert data["counts"] == {"missing_anchor": 1}
        issue = data["issues"]["missing_anchor"][0]
        assert issue["type"] == "missing_anchor"
        assert issue["all_anchors"] == ["y"]
        assert issue["stack"] == [{"filepath": "a.md", "locations": [{"line": 1, "columns": [2]}]}]
        assert "fix" not in data
        json.dumps(data)

    def test_with_summary(self) -> None:
        """Test the fix summary is included after a fix pass."""
        data = report_to_dict({}, initial_total=1, summary=FixSummary(rounds=2, occurrences_fixed=1))
        assert data["success"] is True
        assert data["fix"]["rounds"] == 2
        assert data["fix"]["occurrences_fixed"] == 1
