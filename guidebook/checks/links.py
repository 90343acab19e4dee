"""Checks for internal cross-references."""

import re
from pathlib import Path

from guidebook.domain.document import GuidelineDocument
from guidebook.domain.links import CrossReference
from guidebook.domain.report import Issue
from guidebook.loading.content_extractor import ContentExtractor

from .base import CheckContext

BAD_LINK_FORMAT_PATTERN = re.compile(r":[^\s:]+\.md:")


def is_excluded(href: str, exclusion_list: list[str]) -> bool:
    normalized = href[2:] if href.startswith("./") else href
    return any(
        href.startswith(prefix) or normalized.startswith(prefix) for prefix in exclusion_list
    )


def has_anchor(document: GuidelineDocument, anchor: str) -> bool:
    anchors = document.anchors
    return anchor in anchors or anchor.lower() in anchors


class BrokenLinkCheck:
    """Relative links must point at existing files, and anchors at existing headings."""

    rule = "broken-link"

    def run(self, document: GuidelineDocument, context: CheckContext) -> list[Issue]:
        issues = []
        for link in document.links:
            if link.kind == "wikilink" or link.is_external or link.is_ignored_scheme:
                continue
            if is_excluded(link.href, context.settings.exclusion_list):
                continue
            if BAD_LINK_FORMAT_PATTERN.fullmatch(link.href):
                continue

            issue = self._check_link(document, link, context)
            if issue is not None:
                issues.append(issue)
        return issues

    def _check_link(
        self, document: GuidelineDocument, link: CrossReference, context: CheckContext
    ) -> Issue | None:
        source = Path(document.path)

        if link.is_anchor_only:
            if link.anchor and not has_anchor(document, link.anchor):
                return self._broken_anchor(document, link, "this document")
            return None

        target = context.link_resolver.resolve_link_path(source, link.path_part)
        if target is None:
            return Issue(
                rule=self.rule,
                severity="error",
                file=document.relative_path,
                line=link.line,
                message=f"Broken internal link: {link.href}",
                suggestion=self._suggest(source, link, context),
            )

        if link.anchor and link.kind != "image":
            target_document = context.document_at(target)
            if target_document is not None and not has_anchor(target_document, link.anchor):
                return self._broken_anchor(document, link, target_document.relative_path)

        return None

    @staticmethod
    def _suggest(source: Path, link: CrossReference, context: CheckContext) -> str | None:
        resolver = context.link_resolver
        suggestion = resolver.find_path_variant(source, link.path_part) or resolver.suggest(
            source, link.path_part, context.known_files
        )
        if suggestion and link.anchor:
            suggestion = f"{suggestion}#{link.anchor}"
        return suggestion

    def _broken_anchor(
        self, document: GuidelineDocument, link: CrossReference, target: str
    ) -> Issue:
        return Issue(
            rule="broken-anchor",
            severity="error",
            file=document.relative_path,
            line=link.line,
            message=f"Broken anchor: {link.href} (no heading #{link.anchor} in {target})",
        )


class BadLinkFormatCheck:
    """References written as ":path/file.md:" are not links."""

    rule = "bad-link-format"

    def run(
        self, document: GuidelineDocument, context: CheckContext  # noqa: ARG002
    ) -> list[Issue]:
        issues = []
        prose = ContentExtractor.prose_only(document.content)
        for idx, line in enumerate(prose.split("\n"), start=1):
            for match in BAD_LINK_FORMAT_PATTERN.finditer(line):
                issues.append(
                    Issue(
                        rule=self.rule,
                        severity="error",
                        file=document.relative_path,
                        line=idx,
                        message=f"Bad link format: {match.group(0)}",
                    )
                )
        return issues


class WikilinkCheck:
    """[[wikilinks]] must name an existing document or asset."""

    rule = "unresolved-wikilink"

    def run(self, document: GuidelineDocument, context: CheckContext) -> list[Issue]:
        issues = []
        for link in document.links:
            if link.kind != "wikilink":
                continue

            name = link.path_part.strip()
            if Path(name).suffix and Path(name).suffix != ".md":
                if Path(name).name in context.file_names:
                    continue
            elif context.reference_resolver.resolve(name):
                continue

            issues.append(
                Issue(
                    rule=self.rule,
                    severity="warning",
                    file=document.relative_path,
                    line=link.line,
                    message=f"Unresolved wikilink: [[{link.href}]]",
                )
            )
        return issues
