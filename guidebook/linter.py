"""Orchestration service for linting a complete knowledge base."""

from pathlib import Path

import httpx
from loguru import logger

from guidebook.checks import Check, CheckContext, KnowledgeBaseCheck, StructureCheck, default_checks
from guidebook.config import Settings
from guidebook.domain.document import GuidelineDocument
from guidebook.domain.report import Issue, LintReport
from guidebook.linking.fixer import LinkFixer
from guidebook.linking.resolver import ReferenceResolver
from guidebook.loading.loader import KnowledgeBaseLoader
from guidebook.loading.path_resolver import LinkResolver

LINK_ERROR_TYPES = {
    "broken-link": "LINK TARGET NOT FOUND",
    "broken-anchor": "LINK ANCHOR NOT FOUND",
    "bad-link-format": "BAD LINK FORMAT",
}


class KnowledgeBaseLinter:
    """Orchestrates loading, optional fixing and every lint rule over a knowledge base."""

    def __init__(
        self,
        *,
        settings: Settings,
        http_client: httpx.Client | None = None,
        checks: list[Check] | None = None,
        kb_checks: list[KnowledgeBaseCheck] | None = None,
    ):
        """Initialize the linter with required services.

        Args:
            settings: Settings providing rule configuration
            http_client: Client for external link checks, created in strict mode if omitted
            checks: Per-document checks, defaults to every built-in rule
            kb_checks: Knowledge base level checks, defaults to the structure check
        """
        self.settings = settings
        self.http_client = http_client
        self.checks = checks if checks is not None else default_checks()
        self.kb_checks = kb_checks if kb_checks is not None else [StructureCheck()]
        self.loader = KnowledgeBaseLoader(excluded_dirs=settings.excluded_dirs)

    def lint(self, root: Path, fix: bool = False) -> LintReport:
        """Lint every markdown document below root.

        Args:
            root: Knowledge base root directory
            fix: Rewrite fixable links on disk before checking

        Returns:
            LintReport with sorted issues
        """
        root = Path(root)
        report = LintReport(root=str(root))

        try:
            documents = self.loader.load(root)
        except FileNotFoundError as e:
            logger.error(str(e))
            report.failure = str(e)
            return report

        link_resolver = LinkResolver(base_path=root)

        if fix:
            documents, report.fixes = self._fix_documents(documents, root, link_resolver)

        http_client = self.http_client if self.settings.strict else None
        owns_client = http_client is None and self.settings.strict
        if owns_client:
            http_client = httpx.Client(timeout=self.settings.external_link_timeout)

        try:
            issues = self._run_checks(documents, root, link_resolver, http_client)
        finally:
            if owns_client:
                http_client.close()

        report.issues = sorted(issues, key=lambda issue: (issue.file, issue.line, issue.rule))
        report.files_checked = len(documents)

        logger.info("Lint complete:")
        logger.info(f"  - Files checked: {report.files_checked}")
        logger.info(f"  - Errors: {report.total_errors}")
        logger.info(f"  - Warnings: {report.total_warnings}")

        if self.settings.errors_path:
            self.write_errors_file(report, Path(self.settings.errors_path), documents)

        return report

    def _run_checks(
        self,
        documents: list[GuidelineDocument],
        root: Path,
        link_resolver: LinkResolver,
        http_client: httpx.Client | None,
    ) -> list[Issue]:
        context = CheckContext(
            root=root.resolve(),
            documents=documents,
            settings=self.settings,
            link_resolver=link_resolver,
            reference_resolver=ReferenceResolver.from_documents(documents),
            http_client=http_client,
        )

        issues: list[Issue] = []
        for kb_check in self.kb_checks:
            issues.extend(kb_check.run(context))

        for document in documents:
            logger.debug(f"Checking {document.relative_path}")
            for check in self.checks:
                issues.extend(check.run(document, context))
        return issues

    def _fix_documents(
        self, documents: list[GuidelineDocument], root: Path, link_resolver: LinkResolver
    ) -> tuple[list[GuidelineDocument], dict[str, int]]:
        """Apply link fixes on disk and reload the documents that changed."""
        fixer = LinkFixer(link_resolver, exclusion_list=self.settings.exclusion_list)
        counts = {"patched": 0, "normalized_rel": 0, "normalized_full": 0}
        fixed_documents = []

        for document in documents:
            replacements = fixer.plan(document)
            if not replacements:
                fixed_documents.append(document)
                continue

            file = Path(document.path)
            file.write_text(fixer.apply(document.content, replacements), encoding="utf-8")
            for replacement in replacements:
                counts[replacement.kind] += 1
            logger.info(f"Fixed {len(replacements)} links in {document.relative_path}")

            reloaded = self.loader.load_file(file, root.resolve())
            fixed_documents.append(reloaded if reloaded is not None else document)

        return fixed_documents, counts

    @staticmethod
    def write_errors_file(
        report: LintReport, errors_path: Path, documents: list[GuidelineDocument]
    ) -> None:
        """Write link errors one per line, or remove a stale errors file.

        Lines look like "[LINK TARGET NOT FOUND] guidelines/api.md:12: see [x](y.md)".
        """
        lines_by_file = {d.relative_path: d.content.splitlines() for d in documents}
        entries = []
        for issue in report.issues:
            if issue.rule not in LINK_ERROR_TYPES:
                continue
            source_lines = lines_by_file.get(issue.file, [])
            source_line = (
                source_lines[issue.line - 1] if 0 < issue.line <= len(source_lines) else ""
            )
            entries.append(
                f"[{LINK_ERROR_TYPES[issue.rule]}] {issue.file}:{issue.line}: {source_line.strip()}"
            )

        if entries:
            errors_path.parent.mkdir(parents=True, exist_ok=True)
            errors_path.write_text("\n".join(entries) + "\n", encoding="utf-8")
            logger.info(f"All link errors have been written to: {errors_path}")
        elif errors_path.exists():
            errors_path.unlink()
            logger.info(f"Removed stale errors file: {errors_path}")
