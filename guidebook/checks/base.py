"""Shared interfaces for knowledge base lint checks."""

import os
from pathlib import Path
from typing import Protocol

import httpx

from guidebook.config import Settings
from guidebook.domain.document import GuidelineDocument
from guidebook.domain.report import Issue
from guidebook.linking.resolver import ReferenceResolver
from guidebook.loading.path_resolver import LinkResolver


class CheckContext:
    """Everything a check may need besides the document under inspection."""

    def __init__(
        self,
        *,
        root: Path,
        documents: list[GuidelineDocument],
        settings: Settings,
        link_resolver: LinkResolver,
        reference_resolver: ReferenceResolver | None = None,
        http_client: httpx.Client | None = None,
    ):
        self.root = Path(root)
        self.settings = settings
        self.link_resolver = link_resolver
        self.reference_resolver = reference_resolver or ReferenceResolver.from_documents(documents)
        self.http_client = http_client
        self.documents_by_path = {os.path.normpath(d.path): d for d in documents}
        self.external_results: dict[str, bool] = {}
        self._file_names: set[str] | None = None

    @property
    def known_files(self) -> list[Path]:
        return [Path(path) for path in self.documents_by_path]

    @property
    def file_names(self) -> set[str]:
        """Names of every file in the knowledge base, for asset wikilinks."""
        if self._file_names is None:
            self._file_names = {path.name for path in self.root.rglob("*") if path.is_file()}
        return self._file_names

    def document_at(self, path: Path) -> GuidelineDocument | None:
        return self.documents_by_path.get(os.path.normpath(path))


class Check(Protocol):
    """A rule applied to each guideline document."""

    rule: str

    def run(self, document: GuidelineDocument, context: CheckContext) -> list[Issue]:
        """Return the issues found in the document."""
        ...


class KnowledgeBaseCheck(Protocol):
    """A rule applied once to the knowledge base as a whole."""

    rule: str

    def run(self, context: CheckContext) -> list[Issue]:
        """Return the issues found in the knowledge base."""
        ...
