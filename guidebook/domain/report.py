"""Lint report domain models."""

from enum import IntEnum
from typing import Literal

from pydantic import BaseModel, computed_field


class ExitCode(IntEnum):
    SUCCESS = 0
    ERRORS_FOUND = 1
    VALIDATION_FAILED = 2


class Issue(BaseModel):
    """A single finding of a lint rule.

    Attributes:
        rule: Name of the rule that produced the issue (e.g. "broken-link")
        severity: "error" fails the run, "warning" is reported only
        file: Path relative to the knowledge base root, "" for KB-level issues
        line: 1-based line number, 0 when not tied to a line
        message: Human readable description
        suggestion: Optional replacement the author probably meant
    """

    rule: str
    severity: Literal["error", "warning"]
    file: str = ""
    line: int = 0
    message: str
    suggestion: str | None = None


class Replacement(BaseModel):
    """A pending rewrite of a link target inside a document."""

    start: int
    end: int
    line: int
    old_href: str
    new_href: str
    kind: Literal["patched", "normalized_rel", "normalized_full"]


class LintReport(BaseModel):
    """Aggregated result of a knowledge base lint run."""

    root: str
    files_checked: int = 0
    issues: list[Issue] = []
    fixes: dict[str, int] = {}
    failure: str | None = None  # set when the run itself could not complete

    @computed_field
    @property
    def total_errors(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @computed_field
    @property
    def total_warnings(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "warning")

    @property
    def has_errors(self) -> bool:
        return self.total_errors > 0

    @computed_field
    @property
    def exit_code(self) -> ExitCode:
        if self.failure:
            return ExitCode.VALIDATION_FAILED
        return ExitCode.ERRORS_FOUND if self.has_errors else ExitCode.SUCCESS
