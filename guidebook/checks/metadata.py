"""Frontmatter and placeholder checks for skill and adoption files."""

from pathlib import PurePosixPath

from guidebook.domain.document import GuidelineDocument
from guidebook.domain.report import Issue
from guidebook.loading.content_extractor import ContentExtractor

from .base import CheckContext

REQUIRED_FRONTMATTER_FIELDS = ("name", "description")
RECOMMENDED_FRONTMATTER_FIELDS = ("version", "author")


class FrontmatterCheck:
    """Skill files need a frontmatter block with the required fields.

    Malformed frontmatter is an error in skill files and a warning elsewhere.
    """

    rule = "frontmatter"

    def run(self, document: GuidelineDocument, context: CheckContext) -> list[Issue]:
        file_name = PurePosixPath(document.relative_path).name
        is_skill_file = file_name == context.settings.skill_file_name

        if document.frontmatter_error:
            severity = "error" if is_skill_file else "warning"
            return [self._issue(document, severity, document.frontmatter_error)]

        if not is_skill_file:
            return []

        if not document.frontmatter:
            return [self._issue(document, "error", "Missing frontmatter section")]

        issues = []
        for field in REQUIRED_FRONTMATTER_FIELDS:
            if not document.frontmatter.get(field):
                issues.append(
                    self._issue(document, "error", f"Missing required frontmatter field: {field}")
                )
        for field in RECOMMENDED_FRONTMATTER_FIELDS:
            if not document.frontmatter.get(field):
                issues.append(
                    self._issue(
                        document, "warning", f"Missing recommended frontmatter field: {field}"
                    )
                )
        return issues

    def _issue(self, document: GuidelineDocument, severity: str, message: str) -> Issue:
        return Issue(
            rule=self.rule, severity=severity, file=document.relative_path, line=1, message=message
        )


class PlaceholderCheck:
    """Adoption files must not keep [placeholder] markers from their templates."""

    rule = "placeholder"

    def run(self, document: GuidelineDocument, context: CheckContext) -> list[Issue]:
        folders = PurePosixPath(document.relative_path).parts[:-1]
        if not any(folder in context.settings.adoption_dirs for folder in folders):
            return []

        lines = ContentExtractor.extract_placeholders(document.content)
        if not lines:
            return []

        return [
            Issue(
                rule=self.rule,
                severity="warning",
                file=document.relative_path,
                line=lines[0],
                message=f"Contains {len(lines)} unpopulated placeholder(s)",
            )
        ]
