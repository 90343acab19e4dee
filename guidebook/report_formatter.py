"""Formatting lint reports for terminals and machines."""

import io

from rich.console import Console
from rich.markup import escape

from guidebook.domain.report import ExitCode, Issue, LintReport

SECTIONS = {
    "Structure Validation": {"structure"},
    "Link Validation": {
        "broken-link",
        "broken-anchor",
        "bad-link-format",
        "unresolved-wikilink",
        "external-link",
    },
    "Content Validation": {"code-language", "duplicate-heading"},
    "Metadata Validation": {"frontmatter", "placeholder"},
}


def _format_issue(issue: Issue) -> str:
    label = "[red]ERROR[/red]" if issue.severity == "error" else "[yellow]WARNING[/yellow]"
    location = f"line {issue.line}: " if issue.line else ""
    line = f"    {label}: {location}{escape(issue.message)}"
    if issue.suggestion:
        line += f" [dim](did you mean: {escape(issue.suggestion)})[/dim]"
    return line


def _format_section(title: str, issues: list[Issue]) -> list[str]:
    lines = [f"[bold]{title}:[/bold]"]

    by_file: dict[str, list[Issue]] = {}
    for issue in issues:
        by_file.setdefault(issue.file, []).append(issue)

    for file, file_issues in by_file.items():
        failed = any(issue.severity == "error" for issue in file_issues)
        status = "[red]✗[/red]" if failed else "[yellow]![/yellow]"
        lines.append(f"  {status} {escape(file or '(knowledge base)')}")
        lines.extend(_format_issue(issue) for issue in file_issues)

    lines.append("")
    return lines


def print_report(report: LintReport, console: Console) -> None:
    """Print a lint report as colored terminal output."""
    lines = ["[bold]Knowledge Base Lint Report[/bold]", f"[dim]{'=' * 60}[/dim]", ""]

    if report.failure:
        lines.append(f"[red]{escape(report.failure)}[/red]")
        lines.append("")

    for title, rules in SECTIONS.items():
        section_issues = [issue for issue in report.issues if issue.rule in rules]
        if section_issues:
            lines.extend(_format_section(title, section_issues))

    other_rules = set().union(*SECTIONS.values())
    other_issues = [issue for issue in report.issues if issue.rule not in other_rules]
    if other_issues:
        lines.extend(_format_section("Other", other_issues))

    lines.append(f"[dim]{'=' * 60}[/dim]")
    lines.append("[bold]Summary:[/bold]")
    lines.append(f"  Files:    {report.files_checked}")
    errors, warnings = report.total_errors, report.total_warnings
    lines.append(f"  Errors:   [{'red' if errors else 'green'}]{errors}[/]")
    lines.append(f"  Warnings: [{'yellow' if warnings else 'green'}]{warnings}[/]")
    for kind, count in report.fixes.items():
        lines.append(f"  Fixed ({kind.replace('_', ' ')}): {count}")
    lines.append("")

    if report.exit_code == ExitCode.SUCCESS:
        lines.append("[green]✓ Validation passed[/green]")
    else:
        lines.append("[red]✗ Validation failed[/red]")

    for line in lines:
        console.print(line, highlight=False, emoji=False)


def format_report(report: LintReport) -> str:
    """Format a lint report as plain text."""
    console = Console(file=io.StringIO(), width=200, color_system=None, record=True)
    print_report(report, console)
    return console.export_text()


def report_to_json(report: LintReport) -> str:
    return report.model_dump_json(indent=2)
