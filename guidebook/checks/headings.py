"""Headings must be unique within a document so their anchors are stable."""

from guidebook.domain.document import GuidelineDocument
from guidebook.domain.report import Issue
from guidebook.loading.content_extractor import ContentExtractor

from .base import CheckContext


class DuplicateHeadingCheck:
    """Flags repeated headings and headings whose anchor a repeated heading already took.

    "## Setup" twice makes the second one "#setup-1", so a later "## Setup 1"
    no longer owns the anchor its text suggests.
    """

    rule = "duplicate-heading"

    def run(
        self, document: GuidelineDocument, context: CheckContext  # noqa: ARG002
    ) -> list[Issue]:
        first_seen: dict[str, int] = {}
        suffixed_anchors: dict[str, int] = {}
        issues = []

        for heading in document.headings:
            slug = ContentExtractor.slugify(heading.text)
            if slug in first_seen:
                message = (
                    f"Duplicate heading '{heading.text}' "
                    f"(first defined on line {first_seen[slug]})"
                )
            elif slug in suffixed_anchors:
                message = (
                    f"Heading '{heading.text}' collides with anchor '#{slug}' "
                    f"of the repeated heading on line {suffixed_anchors[slug]}"
                )
            else:
                first_seen[slug] = heading.line
                continue

            if heading.anchor != slug:
                suffixed_anchors[heading.anchor] = heading.line
            issues.append(
                Issue(
                    rule=self.rule,
                    severity="error",
                    file=document.relative_path,
                    line=heading.line,
                    message=message,
                )
            )

        return issues
